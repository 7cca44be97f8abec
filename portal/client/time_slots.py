from __future__ import annotations

import asyncio
import logging
from typing import Callable

from portal.client.booking_api import BookingApiClient
from portal.client.calendar import FetchState, error_message, is_retryable
from portal.client.retry import RetryPolicy, Sleep
from portal.domain.entities.booking import TimeSlot


NO_AVAILABILITY_MESSAGE = "No availability for this date. Please select another date."


class TimeSlotSelector:
    def __init__(
        self,
        api: BookingApiClient,
        date: str,
        *,
        retry_policy: RetryPolicy | None = None,
        on_time_selected: Callable[[str], None] | None = None,
        on_error: Callable[[str], None] | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._api = api
        self._retry = retry_policy or RetryPolicy()
        self._on_time_selected = on_time_selected
        self._on_error = on_error
        self._sleep = sleep
        self._logger = logging.getLogger(__name__)

        self.date = date
        self.slots: list[TimeSlot] = []
        self.selected_time: str | None = None
        self.fetch_state = FetchState.IDLE
        self.error: str | None = None

    @property
    def empty_message(self) -> str | None:
        if self.fetch_state is FetchState.READY and not self.slots:
            return NO_AVAILABILITY_MESSAGE
        return None

    async def load(self) -> None:
        self.fetch_state = FetchState.LOADING
        self.error = None
        try:
            self.slots = await self._retry.run(
                lambda: self._api.get_availability_times(self.date),
                should_retry=is_retryable,
                sleep=self._sleep,
            )
        except Exception as e:
            self.slots = []
            self.fetch_state = FetchState.ERROR
            self.error = error_message(e, "Failed to fetch available times")
            self._logger.warning("Availability times unavailable", extra={"date": self.date, "error": self.error})
            if self._on_error:
                self._on_error(self.error)
            return
        self.fetch_state = FetchState.READY

    async def try_again(self) -> None:
        await self.load()

    def select(self, datetime: str) -> bool:
        if datetime not in {slot.datetime for slot in self.slots}:
            return False
        self.selected_time = datetime
        if self._on_time_selected:
            self._on_time_selected(datetime)
        return True

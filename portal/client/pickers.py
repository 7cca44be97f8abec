from __future__ import annotations

import asyncio
import logging
from datetime import date, timedelta
from typing import Callable

from portal.client.booking_api import BookingApiClient
from portal.client.calendar import CalendarWidget, first_of_month
from portal.client.retry import RetryPolicy, Sleep
from portal.client.time_slots import TimeSlotSelector


LAUNCH_MIN_GAP = timedelta(days=7)


class DateTimePicker:
    """Calendar plus the time slots of whichever date is currently selected."""

    def __init__(
        self,
        api: BookingApiClient,
        *,
        retry_policy: RetryPolicy | None = None,
        min_date: date | None = None,
        today: date | None = None,
        on_datetime_selected: Callable[[str], None] | None = None,
        on_error: Callable[[str], None] | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._api = api
        self._retry = retry_policy
        self._on_datetime_selected = on_datetime_selected
        self._on_error = on_error
        self._sleep = sleep

        self.calendar = CalendarWidget(
            api,
            retry_policy=retry_policy,
            min_date=min_date,
            today=today,
            on_error=on_error,
            sleep=sleep,
        )
        self.time_slots: TimeSlotSelector | None = None

    @property
    def selected_date(self) -> date | None:
        return self.calendar.selected_date

    @property
    def selected_datetime(self) -> str | None:
        if self.time_slots is None:
            return None
        return self.time_slots.selected_time

    @property
    def is_complete(self) -> bool:
        return self.selected_date is not None and self.selected_datetime is not None

    async def start(self) -> None:
        await self.calendar.load()

    async def select_date(self, day: date | str) -> bool:
        if not self.calendar.select_date(day):
            return False
        self.time_slots = TimeSlotSelector(
            self._api,
            self.calendar.selected_date.isoformat(),
            retry_policy=self._retry,
            on_time_selected=self._on_datetime_selected,
            on_error=self._on_error,
            sleep=self._sleep,
        )
        await self.time_slots.load()
        return True

    def select_time(self, datetime: str) -> bool:
        if self.time_slots is None:
            return False
        return self.time_slots.select(datetime)

    def set_min_date(self, min_date: date | None) -> bool:
        """Move the lower bound; drops the date and time if they fall before it."""
        cleared = self.calendar.set_min_date(min_date)
        if cleared:
            self.time_slots = None
        return cleared

    def reset(self) -> None:
        self.calendar.clear_selection()
        self.time_slots = None


class DualMeetingPicker:
    """Design meeting and launch meeting, with launch at least a week after design.

    The launch picker is created once the design meeting has a date and a time.
    Changing the design date afterwards re-derives the launch lower bound and
    drops a launch selection that no longer satisfies it.
    """

    def __init__(
        self,
        api: BookingApiClient,
        *,
        retry_policy: RetryPolicy | None = None,
        today: date | None = None,
        on_dates_selected: Callable[[str, str], None] | None = None,
        on_error: Callable[[str], None] | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._api = api
        self._retry = retry_policy
        self._today = today
        self._on_dates_selected = on_dates_selected
        self._on_error = on_error
        self._sleep = sleep
        self._logger = logging.getLogger(__name__)

        self.design = DateTimePicker(
            api,
            retry_policy=retry_policy,
            today=today,
            on_error=on_error,
            sleep=sleep,
        )
        self.launch: DateTimePicker | None = None

    @property
    def launch_min_date(self) -> date | None:
        if self.design.selected_date is None:
            return None
        return self.design.selected_date + LAUNCH_MIN_GAP

    @property
    def launch_enabled(self) -> bool:
        return self.launch is not None and self.design.is_complete

    @property
    def design_datetime(self) -> str | None:
        return self.design.selected_datetime

    @property
    def launch_datetime(self) -> str | None:
        if self.launch is None:
            return None
        return self.launch.selected_datetime

    async def start(self) -> None:
        await self.design.start()

    async def select_design_date(self, day: date | str) -> bool:
        if not await self.design.select_date(day):
            return False
        if self.launch is not None and await self._bound_launch():
            self._logger.info(
                "Cleared launch selection",
                extra={"date": self.design.selected_date.isoformat(), "reason": "launch before minimum gap"},
            )
        return True

    async def select_design_time(self, datetime: str) -> bool:
        if not self.design.select_time(datetime):
            return False
        if self.launch is None:
            min_date = self.launch_min_date
            self.launch = DateTimePicker(
                self._api,
                retry_policy=self._retry,
                min_date=min_date,
                today=self._today,
                on_error=self._on_error,
                sleep=self._sleep,
            )
            if min_date and first_of_month(min_date) > self.launch.calendar.view_month:
                self.launch.calendar.view_month = first_of_month(min_date)
            await self.launch.start()
        else:
            await self._bound_launch()
        self._notify_if_complete()
        return True

    async def select_launch_date(self, day: date | str) -> bool:
        if not self.launch_enabled:
            return False
        return await self.launch.select_date(day)

    def select_launch_time(self, datetime: str) -> bool:
        if not self.launch_enabled or not self.launch.select_time(datetime):
            return False
        self._notify_if_complete()
        return True

    def reset(self) -> None:
        self.design.reset()
        self.launch = None

    async def _bound_launch(self) -> bool:
        """Re-derive the launch lower bound; True when the launch selection was dropped."""
        min_date = self.launch_min_date
        cleared = self.launch.set_min_date(min_date)
        # The launch calendar never shows a month that is entirely before its bound.
        if min_date and first_of_month(min_date) > self.launch.calendar.view_month:
            self.launch.calendar.view_month = first_of_month(min_date)
            await self.launch.calendar.load()
        return cleared

    def _notify_if_complete(self) -> None:
        design, launch = self.design_datetime, self.launch_datetime
        if design and launch and self._on_dates_selected:
            self._on_dates_selected(design, launch)

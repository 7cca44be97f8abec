from __future__ import annotations

import asyncio
import calendar as _calendar
import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Callable

from portal.client.booking_api import BookingApiClient, BookingApiError
from portal.client.retry import RetryPolicy, Sleep


WEEKDAY_HEADERS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


class FetchState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    ERROR = "error"
    READY = "ready"


@dataclass(frozen=True)
class CalendarCell:
    day: date
    available: bool
    selectable: bool
    selected: bool
    is_today: bool


def first_of_month(day: date) -> date:
    return day.replace(day=1)


def add_months(month: date, count: int) -> date:
    index = month.year * 12 + (month.month - 1) + count
    return date(index // 12, index % 12 + 1, 1)


def month_days(month: date) -> list[date]:
    _, last = _calendar.monthrange(month.year, month.month)
    return [date(month.year, month.month, d) for d in range(1, last + 1)]


def leading_blanks(month: date) -> int:
    """Placeholder cells before day 1 in a Sunday-first week (0 = Sunday)."""
    return (first_of_month(month).weekday() + 1) % 7


def month_grid(month: date) -> list[date | None]:
    month = first_of_month(month)
    return [None] * leading_blanks(month) + month_days(month)


def error_message(error: Exception, fallback: str) -> str:
    if isinstance(error, BookingApiError):
        return error.message or fallback
    return str(error) or fallback


def is_retryable(error: Exception) -> bool:
    if isinstance(error, BookingApiError):
        return error.retryable
    return True


class CalendarWidget:
    """Month calendar that shows provider availability and tracks one selected date.

    A date is selectable only inside the displayed month, when the provider
    listed it, and not before ``min_date``. Month fetches are numbered so only
    the most recently requested month may update the widget.
    """

    def __init__(
        self,
        api: BookingApiClient,
        *,
        retry_policy: RetryPolicy | None = None,
        min_date: date | None = None,
        today: date | None = None,
        on_date_selected: Callable[[str], None] | None = None,
        on_error: Callable[[str], None] | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._api = api
        self._retry = retry_policy or RetryPolicy()
        self._today = today or date.today()
        self._on_date_selected = on_date_selected
        self._on_error = on_error
        self._sleep = sleep
        self._sequence = 0
        self._logger = logging.getLogger(__name__)

        self.min_date = min_date
        self.view_month = first_of_month(self._today)
        self.selected_date: date | None = None
        self.available_dates: set[str] = set()
        self.fetch_state = FetchState.IDLE
        self.error: str | None = None

    @property
    def month_key(self) -> str:
        return self.view_month.strftime("%Y-%m")

    async def load(self) -> None:
        self._sequence += 1
        sequence = self._sequence
        month_key = self.month_key
        self.fetch_state = FetchState.LOADING
        self.error = None

        try:
            dates = await self._retry.run(
                lambda: self._api.get_availability_dates(month_key),
                should_retry=is_retryable,
                sleep=self._sleep,
            )
        except Exception as e:
            if sequence != self._sequence:
                return
            self.fetch_state = FetchState.ERROR
            self.error = error_message(e, "Failed to fetch available dates")
            self.available_dates = set()
            self._logger.warning("Availability dates unavailable", extra={"month": month_key, "error": self.error})
            if self._on_error:
                self._on_error(self.error)
            return

        if sequence != self._sequence:
            self._logger.debug("Dropped stale availability response", extra={"month": month_key})
            return
        self.available_dates = {d.date for d in dates if d.available}
        self.fetch_state = FetchState.READY

    async def next_month(self) -> None:
        self.view_month = add_months(self.view_month, 1)
        await self.load()

    async def previous_month(self) -> None:
        self.view_month = add_months(self.view_month, -1)
        await self.load()

    async def try_again(self) -> None:
        await self.load()

    def is_selectable(self, day: date) -> bool:
        if first_of_month(day) != self.view_month:
            return False
        if day.isoformat() not in self.available_dates:
            return False
        if self.min_date is not None and day < self.min_date:
            return False
        return True

    def grid(self) -> list[CalendarCell | None]:
        cells: list[CalendarCell | None] = []
        for day in month_grid(self.view_month):
            if day is None:
                cells.append(None)
                continue
            cells.append(
                CalendarCell(
                    day=day,
                    available=day.isoformat() in self.available_dates,
                    selectable=self.is_selectable(day),
                    selected=day == self.selected_date,
                    is_today=day == self._today,
                )
            )
        return cells

    def select_date(self, day: date | str) -> bool:
        if isinstance(day, str):
            day = date.fromisoformat(day)
        if not self.is_selectable(day):
            return False
        self.selected_date = day
        if self._on_date_selected:
            self._on_date_selected(day.isoformat())
        return True

    def set_min_date(self, min_date: date | None) -> bool:
        """Apply a new lower bound. Returns True if the selected date was cleared."""
        self.min_date = min_date
        if self.selected_date and min_date and self.selected_date < min_date:
            self.selected_date = None
            return True
        return False

    def clear_selection(self) -> None:
        self.selected_date = None

"""Tests for the availability calendar and time slot selector."""

from __future__ import annotations

import asyncio
from datetime import date

import pytest

from portal.client.booking_api import BookingApiError
from portal.client.calendar import CalendarWidget, FetchState, add_months, leading_blanks, month_grid
from portal.client.retry import NO_RETRY
from portal.client.time_slots import NO_AVAILABILITY_MESSAGE, TimeSlotSelector
from portal.domain.entities.booking import AvailabilityDate, TimeSlot


def _dates(*values: str) -> list[AvailabilityDate]:
    return [AvailabilityDate(v) for v in values]


def test_grid_padding_starts_on_sunday():
    # March 2024 starts on a Friday, September 2024 on a Sunday.
    assert leading_blanks(date(2024, 3, 1)) == 5
    assert leading_blanks(date(2024, 9, 1)) == 0

    grid = month_grid(date(2024, 3, 15))
    assert grid[:5] == [None] * 5
    assert grid[5] == date(2024, 3, 1)
    assert grid[-1] == date(2024, 3, 31)
    assert len(grid) == 5 + 31


def test_add_months_crosses_years():
    assert add_months(date(2024, 12, 1), 1) == date(2025, 1, 1)
    assert add_months(date(2024, 1, 1), -1) == date(2023, 12, 1)


@pytest.mark.asyncio
async def test_load_and_select(scripted_api, sleep):
    scripted_api.dates["2024-03"] = [_dates("2024-03-05", "2024-03-06")]
    picked = []
    widget = CalendarWidget(scripted_api, today=date(2024, 3, 1), on_date_selected=picked.append, sleep=sleep)

    await widget.load()

    assert widget.fetch_state is FetchState.READY
    assert widget.is_selectable(date(2024, 3, 5))
    assert not widget.is_selectable(date(2024, 3, 7))
    assert widget.select_date("2024-03-07") is False
    assert widget.select_date("2024-03-05") is True
    assert widget.selected_date == date(2024, 3, 5)
    assert picked == ["2024-03-05"]

    cells = [cell for cell in widget.grid() if cell is not None]
    assert [c.day.day for c in cells if c.selectable] == [5, 6]
    assert [c.day.day for c in cells if c.selected] == [5]
    assert [c.day.day for c in cells if c.is_today] == [1]


@pytest.mark.asyncio
async def test_min_date_blocks_earlier_days(scripted_api, sleep):
    scripted_api.dates["2024-03"] = [_dates("2024-03-05", "2024-03-20")]
    widget = CalendarWidget(scripted_api, today=date(2024, 3, 1), min_date=date(2024, 3, 10), sleep=sleep)

    await widget.load()

    assert not widget.is_selectable(date(2024, 3, 5))
    assert widget.is_selectable(date(2024, 3, 20))


@pytest.mark.asyncio
async def test_month_navigation(scripted_api, sleep):
    scripted_api.dates["2024-04"] = [_dates("2024-04-02")]
    widget = CalendarWidget(scripted_api, today=date(2024, 3, 1), sleep=sleep)

    await widget.next_month()
    assert widget.month_key == "2024-04"
    assert widget.is_selectable(date(2024, 4, 2))

    await widget.previous_month()
    assert widget.month_key == "2024-03"
    assert scripted_api.calls == [("dates", "2024-04"), ("dates", "2024-03")]


@pytest.mark.asyncio
async def test_error_reported_only_after_retries_exhausted(scripted_api, sleep):
    scripted_api.dates["2024-03"] = [BookingApiError("Service unavailable", 503)]
    errors = []
    widget = CalendarWidget(
        scripted_api,
        today=date(2024, 3, 1),
        on_error=lambda message: errors.append((message, len(scripted_api.calls))),
        sleep=sleep,
    )

    await widget.load()

    assert errors == [("Service unavailable", 4)]
    assert sleep.delays == [1.0, 2.0, 4.0]
    assert widget.fetch_state is FetchState.ERROR
    assert widget.error == "Service unavailable"


@pytest.mark.asyncio
async def test_configuration_error_is_not_retried(scripted_api, sleep):
    scripted_api.dates["2024-03"] = [
        BookingApiError("Acuity configuration incomplete", 500, "Server configuration error")
    ]
    widget = CalendarWidget(scripted_api, today=date(2024, 3, 1), sleep=sleep)

    await widget.load()

    assert len(scripted_api.calls) == 1
    assert widget.fetch_state is FetchState.ERROR


@pytest.mark.asyncio
async def test_try_again_after_failure(scripted_api, sleep):
    scripted_api.dates["2024-03"] = [BookingApiError("Bad request", 400), _dates("2024-03-05")]
    widget = CalendarWidget(scripted_api, today=date(2024, 3, 1), sleep=sleep)

    await widget.load()
    assert widget.fetch_state is FetchState.ERROR

    await widget.try_again()
    assert widget.fetch_state is FetchState.READY
    assert widget.error is None
    assert widget.is_selectable(date(2024, 3, 5))


class GatedApi:
    def __init__(self, results: dict[str, list[AvailabilityDate]]) -> None:
        self.results = results
        self.gates = {month: asyncio.Event() for month in results}

    async def get_availability_dates(self, month: str) -> list[AvailabilityDate]:
        await self.gates[month].wait()
        return self.results[month]


@pytest.mark.asyncio
async def test_stale_month_response_is_dropped():
    api = GatedApi({"2024-03": _dates("2024-03-05"), "2024-04": _dates("2024-04-02")})
    widget = CalendarWidget(api, today=date(2024, 3, 1), retry_policy=NO_RETRY)

    march = asyncio.create_task(widget.load())
    await asyncio.sleep(0)
    april = asyncio.create_task(widget.next_month())
    await asyncio.sleep(0)

    api.gates["2024-04"].set()
    await april
    api.gates["2024-03"].set()
    await march

    assert widget.month_key == "2024-04"
    assert widget.available_dates == {"2024-04-02"}
    assert widget.fetch_state is FetchState.READY


@pytest.mark.asyncio
async def test_time_slots_empty_day(scripted_api, sleep):
    scripted_api.times["2024-03-05"] = [[]]
    selector = TimeSlotSelector(scripted_api, "2024-03-05", sleep=sleep)

    await selector.load()

    assert selector.fetch_state is FetchState.READY
    assert selector.empty_message == NO_AVAILABILITY_MESSAGE


@pytest.mark.asyncio
async def test_time_slot_selection(scripted_api, sleep):
    scripted_api.times["2024-03-05"] = [[TimeSlot("2024-03-05T09:00:00-06:00")]]
    chosen = []
    selector = TimeSlotSelector(scripted_api, "2024-03-05", on_time_selected=chosen.append, sleep=sleep)

    await selector.load()

    assert selector.empty_message is None
    assert selector.select("2024-03-05T11:00:00-06:00") is False
    assert selector.select("2024-03-05T09:00:00-06:00") is True
    assert chosen == ["2024-03-05T09:00:00-06:00"]


@pytest.mark.asyncio
async def test_time_slot_failure_after_retries(scripted_api, sleep):
    scripted_api.times["2024-03-05"] = [BookingApiError("Gateway timeout", 504)]
    errors = []
    selector = TimeSlotSelector(scripted_api, "2024-03-05", on_error=errors.append, sleep=sleep)

    await selector.load()

    assert errors == ["Gateway timeout"]
    assert len(scripted_api.calls) == 4
    assert selector.fetch_state is FetchState.ERROR

from __future__ import annotations

import logging
import re
from datetime import date, datetime, time, timedelta
from typing import Any
from zoneinfo import ZoneInfo

from portal.application.exceptions import RelayError
from portal.application.ports.scheduling import SchedulingRelayPort


_APPOINTMENT_PATH = re.compile(r"^/appointments/(\d+)$")


class MockAcuityRelay(SchedulingRelayPort):
    """In-process stand-in for Acuity used for local development.

    Weekdays from tomorrow onward are open on the hour between ``start_hour``
    and ``end_hour``; a booked slot disappears from the times listing and a
    second booking for it fails with 422 like the real provider.
    """

    def __init__(
        self,
        appointment_type_id: int = 1,
        calendar_id: int = 1,
        timezone: str = "America/Chicago",
        start_hour: int = 9,
        end_hour: int = 17,
        today: date | None = None,
    ) -> None:
        self._appointment_type_id = appointment_type_id
        self._calendar_id = calendar_id
        self._tz = ZoneInfo(timezone)
        self._start_hour = start_hour
        self._end_hour = end_hour
        self._today = today
        self._appointments: dict[int, dict[str, Any]] = {}
        self._next_id = 1000
        self._logger = logging.getLogger(__name__)

    async def request(
        self,
        endpoint: str,
        *,
        method: str = "GET",
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> Any:
        method = method.upper()
        params = params or {}

        if endpoint == "/me" and method == "GET":
            return {"id": 0, "email": "mock@acuity.local", "timezone": str(self._tz)}
        if endpoint == "/appointment-types" and method == "GET":
            return [
                {
                    "id": self._appointment_type_id,
                    "name": "Website Consultation",
                    "duration": 30,
                    "price": "0.00",
                    "description": "Kick-off call to plan your new website.",
                    "type": "service",
                }
            ]
        if endpoint == "/availability/dates" and method == "GET":
            return [{"date": d.isoformat()} for d in self._open_dates(str(params.get("month", "")))]
        if endpoint == "/availability/times" and method == "GET":
            return [{"time": slot, "slotsAvailable": 1} for slot in self._open_times(str(params.get("date", "")))]
        if endpoint == "/appointments" and method == "POST":
            return self._create(body or {})

        match = _APPOINTMENT_PATH.match(endpoint)
        if match and method == "GET":
            appointment = self._appointments.get(int(match.group(1)))
            if appointment is None:
                raise RelayError(404, "Appointment not found")
            return dict(appointment)

        raise RelayError(404, f"Unknown endpoint {method} {endpoint}")

    async def validate_credentials(self) -> bool:
        return True

    def _current_day(self) -> date:
        return self._today or datetime.now(self._tz).date()

    def _open_dates(self, month: str) -> list[date]:
        try:
            first = datetime.strptime(month, "%Y-%m").date()
        except ValueError:
            raise RelayError(400, "Invalid month") from None
        dates: list[date] = []
        day = first
        while day.month == first.month:
            if day > self._current_day() and day.weekday() < 5 and self._open_times(day.isoformat()):
                dates.append(day)
            day += timedelta(days=1)
        return dates

    def _open_times(self, day_str: str) -> list[str]:
        try:
            day = date.fromisoformat(day_str)
        except ValueError:
            raise RelayError(400, "Invalid date") from None
        if day <= self._current_day() or day.weekday() >= 5:
            return []
        booked = {a["datetime"] for a in self._appointments.values()}
        slots = []
        for hour in range(self._start_hour, self._end_hour):
            slot = datetime.combine(day, time(hour=hour), tzinfo=self._tz).isoformat()
            if slot not in booked:
                slots.append(slot)
        return slots

    def _create(self, body: dict[str, Any]) -> dict[str, Any]:
        requested = str(body.get("datetime", ""))
        try:
            start = datetime.fromisoformat(requested.replace("Z", "+00:00"))
        except ValueError:
            raise RelayError(400, "Invalid datetime") from None
        if start.tzinfo is None:
            start = start.replace(tzinfo=self._tz)
        slot = start.astimezone(self._tz).isoformat()
        if slot not in self._open_times(start.astimezone(self._tz).date().isoformat()):
            raise RelayError(
                422,
                "The time slot you selected is not available. Please select another time.",
            )

        appointment_id = self._next_id
        self._next_id += 1
        appointment = {
            "id": appointment_id,
            "datetime": slot,
            "firstName": body.get("firstName", ""),
            "lastName": body.get("lastName", ""),
            "email": body.get("email", ""),
            "phone": body.get("phone", ""),
            "timezone": body.get("timezone", str(self._tz)),
            "notes": body.get("notes", ""),
            "appointmentTypeID": body.get("appointmentTypeID", self._appointment_type_id),
            "calendarID": body.get("calendarID", self._calendar_id),
            "appointmentTypeName": "Website Consultation",
            "status": "scheduled",
        }
        self._appointments[appointment_id] = appointment
        self._logger.info(
            "Mock appointment created",
            extra={"appointment_id": appointment_id, "date": slot},
        )
        return dict(appointment)

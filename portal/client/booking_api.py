from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from portal.client.api_log import ApiLog
from portal.domain.entities.booking import (
    AppointmentDetails,
    AppointmentType,
    AvailabilityDate,
    BookingConfirmation,
    TimeSlot,
)


CONFIGURATION_ERROR_LABEL = "Server configuration error"


class BookingApiError(Exception):
    def __init__(self, message: str, status_code: int | None = None, error: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error = error

    @property
    def retryable(self) -> bool:
        if self.status_code is None:
            return True
        if self.error == CONFIGURATION_ERROR_LABEL:
            return False
        return self.status_code in (408, 429) or self.status_code >= 500


class BookingApiClient:
    """Async client for the booking endpoints; every call is recorded in the ApiLog."""

    def __init__(
        self,
        base_url: str,
        api_log: ApiLog | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = 15.0,
    ) -> None:
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self._api_log = api_log or ApiLog()
        self._logger = logging.getLogger(__name__)

    @property
    def api_log(self) -> ApiLog:
        return self._api_log

    async def get_appointment_type_details(self) -> AppointmentType:
        data = await self._call("GET", "/api/booking/appointment-type-details", fallback="Failed to fetch appointment type")
        return AppointmentType(
            id=int(data["id"]),
            name=str(data.get("name", "")),
            duration=int(data.get("duration") or 0),
            price=data.get("price"),
            description=data.get("description"),
        )

    async def get_availability_dates(self, month: str) -> list[AvailabilityDate]:
        data = await self._call(
            "GET",
            "/api/booking/availability/dates",
            params={"month": month},
            fallback="Failed to fetch available dates",
        )
        return [
            AvailabilityDate(date=str(item["date"]), available=bool(item.get("available", True)))
            for item in data.get("dates", [])
        ]

    async def get_availability_times(self, date: str) -> list[TimeSlot]:
        data = await self._call(
            "GET",
            "/api/booking/availability/times",
            params={"date": date},
            fallback="Failed to fetch available times",
        )
        return [TimeSlot(datetime=str(item["datetime"])) for item in data.get("times", [])]

    async def create_appointment(self, booking: dict[str, Any]) -> BookingConfirmation:
        data = await self._call(
            "POST",
            "/api/booking/appointments",
            json=booking,
            fallback="Failed to create appointment",
        )
        return BookingConfirmation(
            appointment_id=int(data["appointmentId"]),
            datetime=str(data.get("datetime", "")),
            first_name=str(data.get("firstName", "")),
            last_name=str(data.get("lastName", "")),
            email=str(data.get("email", "")),
            phone=str(data.get("phone", "")),
            message=str(data.get("message", "")),
        )

    async def get_appointment(self, appointment_id: int | str) -> AppointmentDetails:
        data = await self._call(
            "GET",
            f"/api/booking/appointments/{appointment_id}",
            fallback="Failed to fetch appointment",
        )
        return AppointmentDetails(
            id=int(data["id"]),
            datetime=str(data.get("datetime", "")),
            first_name=str(data.get("firstName", "")),
            last_name=str(data.get("lastName", "")),
            email=str(data.get("email", "")),
            phone=str(data.get("phone", "")),
            timezone=data.get("timezone"),
            appointment_type_name=data.get("appointmentTypeName"),
            status=data.get("status"),
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _call(
        self,
        method: str,
        path: str,
        *,
        fallback: str,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        url = path
        if params:
            url = f"{path}?{httpx.QueryParams(params)}"
        log_id = self._api_log.log_request(method, url, json)
        started = time.perf_counter()

        try:
            response = await self._client.request(method, path, params=params, json=json)
        except httpx.HTTPError as e:
            message = str(e) or fallback
            self._api_log.log_error(log_id, message, _elapsed_ms(started))
            raise BookingApiError(message) from e

        try:
            data = response.json() if response.content else {}
        except ValueError:
            data = {}
        self._api_log.log_response(
            log_id,
            response.status_code,
            response.reason_phrase,
            data,
            _elapsed_ms(started),
        )

        if not response.is_success:
            body = data if isinstance(data, dict) else {}
            message = body.get("message") or fallback
            self._logger.debug("Booking API error", extra={"endpoint": path, "status_code": response.status_code})
            raise BookingApiError(str(message), response.status_code, body.get("error"))

        if not isinstance(data, dict):
            raise BookingApiError(fallback, response.status_code)
        return data


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 1)

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError as SchemaError

from portal.application.dto.booking_request import (
    APPOINTMENT_ID_PATTERN,
    DATE_PATTERN,
    MONTH_PATTERN,
    BookingRequest,
    first_error_message,
)
from portal.application.exceptions import (
    AuthError,
    ConfigurationError,
    ConflictError,
    NotFoundError,
    PortalError,
    RelayError,
    UpstreamError,
    ValidationError,
)
from portal.application.ports.scheduling import SchedulingRelayPort
from portal.application.utils.provider_shapes import normalize_dates, normalize_times
from portal.core.config import Settings
from portal.domain.entities.booking import (
    AppointmentDetails,
    AppointmentType,
    AvailabilityDate,
    BookingConfirmation,
    TimeSlot,
)


CONFIRMATION_MESSAGE = (
    "Your appointment has been scheduled successfully. "
    "A confirmation email will be sent to you shortly."
)
SLOT_TAKEN_MESSAGE = "The selected time slot is no longer available. Please select another time."
AUTH_FAILED_MESSAGE = "Unable to authenticate with Acuity API"


class BookingService:
    def __init__(self, relay: SchedulingRelayPort, config: Settings) -> None:
        self._relay = relay
        self._config = config
        self._logger = logging.getLogger(__name__)

    async def get_appointment_type_details(self) -> AppointmentType:
        type_id = self._require_int("ACUITY_APPOINTMENT_TYPE_ID", "Appointment type not configured")

        try:
            payload = await self._relay.request("/appointment-types")
        except RelayError as e:
            raise self._translate(e, "Failed to fetch appointment type") from e

        if not isinstance(payload, list):
            raise UpstreamError("Unexpected appointment types response", error="Failed to fetch appointment type")

        for item in payload:
            if isinstance(item, dict) and _as_int(item.get("id")) == type_id:
                return AppointmentType(
                    id=type_id,
                    name=str(item.get("name") or ""),
                    duration=_as_int(item.get("duration")) or 0,
                    price=None if item.get("price") is None else str(item.get("price")),
                    description=item.get("description"),
                )

        raise NotFoundError(
            f"Appointment type {type_id} not found in Acuity",
            error="Appointment type not found",
        )

    async def get_availability_dates(self, month: str | None) -> list[AvailabilityDate]:
        if not month or not MONTH_PATTERN.match(month):
            raise ValidationError("Month must be YYYY-MM format")
        params = self._availability_params()
        params["month"] = month

        try:
            payload = await self._relay.request("/availability/dates", params=params)
        except RelayError as e:
            raise self._translate(e, "Failed to fetch available dates", bad_request="Invalid request") from e

        dates = normalize_dates(payload)
        self._logger.debug("Availability dates fetched", extra={"month": month, "reason": f"{len(dates)} dates"})
        return dates

    async def get_availability_times(self, date: str | None) -> list[TimeSlot]:
        if not date or not DATE_PATTERN.match(date):
            raise ValidationError("Date must be YYYY-MM-DD format")
        params = self._availability_params()
        params["date"] = date

        try:
            payload = await self._relay.request("/availability/times", params=params)
        except RelayError as e:
            raise self._translate(e, "Failed to fetch available times", bad_request="Invalid request") from e

        return normalize_times(payload)

    async def create_appointment(self, payload: Any) -> BookingConfirmation:
        try:
            booking = BookingRequest.model_validate(payload if isinstance(payload, dict) else {})
        except SchemaError as e:
            raise ValidationError(first_error_message(e), error="Invalid booking request") from e

        type_id = self._require_int("ACUITY_APPOINTMENT_TYPE_ID", "Acuity configuration incomplete")
        calendar_id = self._require_int("ACUITY_CALENDAR_ID", "Acuity configuration incomplete")

        body: dict[str, Any] = {
            "datetime": booking.datetime,
            "appointmentTypeID": type_id,
            "calendarID": calendar_id,
            "firstName": booking.first_name,
            "lastName": booking.last_name,
            "email": booking.email,
            "phone": booking.phone,
            "timezone": booking.timezone,
        }
        if booking.notes:
            body["notes"] = booking.notes

        # Never retried: a repeated POST could double-book.
        try:
            appointment = await self._relay.request("/appointments", method="POST", body=body)
        except RelayError as e:
            raise self._translate(
                e,
                "Failed to create appointment",
                bad_request="Invalid booking request",
                conflict=True,
            ) from e

        if not isinstance(appointment, dict):
            raise UpstreamError("Unexpected appointment response", error="Failed to create appointment")

        self._logger.info("Appointment created", extra={"appointment_id": appointment.get("id")})
        return BookingConfirmation(
            appointment_id=_as_int(appointment.get("id")) or 0,
            datetime=str(appointment.get("datetime") or booking.datetime),
            first_name=str(appointment.get("firstName") or booking.first_name),
            last_name=str(appointment.get("lastName") or booking.last_name),
            email=str(appointment.get("email") or booking.email),
            phone=str(appointment.get("phone") or booking.phone),
            message=CONFIRMATION_MESSAGE,
        )

    async def get_appointment_details(self, appointment_id: str) -> AppointmentDetails:
        if not appointment_id or not APPOINTMENT_ID_PATTERN.match(appointment_id):
            raise ValidationError("Appointment ID must be a number")

        try:
            appointment = await self._relay.request(f"/appointments/{appointment_id}")
        except RelayError as e:
            if e.status_code == 404:
                raise NotFoundError(
                    "The requested appointment could not be found",
                    error="Appointment not found",
                ) from e
            raise self._translate(e, "Failed to fetch appointment") from e

        if not isinstance(appointment, dict):
            raise UpstreamError("Unexpected appointment response", error="Failed to fetch appointment")

        return AppointmentDetails(
            id=_as_int(appointment.get("id")) or int(appointment_id),
            datetime=str(appointment.get("datetime") or ""),
            first_name=str(appointment.get("firstName") or ""),
            last_name=str(appointment.get("lastName") or ""),
            email=str(appointment.get("email") or ""),
            phone=str(appointment.get("phone") or ""),
            timezone=appointment.get("timezone"),
            appointment_type_name=appointment.get("appointmentTypeName"),
            status=appointment.get("status"),
        )

    async def check_availability(self, query: dict[str, Any] | None = None) -> dict[str, Any]:
        """Diagnostic round trip: verify credentials, optionally sample availability."""
        query = query or {}
        month = query.get("month")
        date = query.get("date")
        if month is not None and not (isinstance(month, str) and MONTH_PATTERN.match(month)):
            raise ValidationError("Month must be YYYY-MM format")
        if date is not None and not (isinstance(date, str) and DATE_PATTERN.match(date)):
            raise ValidationError("Date must be YYYY-MM-DD format")

        try:
            account = await self._relay.request("/me")
        except RelayError as e:
            raise self._translate(e, "Availability check failed") from e

        result: dict[str, Any] = {
            "authenticated": True,
            "account": _account_summary(account),
            "missingSettings": self._config.missing_booking_settings(),
        }
        if date:
            result["times"] = [slot.datetime for slot in await self.get_availability_times(date)]
        elif month:
            result["dates"] = [d.date for d in await self.get_availability_dates(month)]
        return result

    def _availability_params(self) -> dict[str, Any]:
        type_id = self._config.ACUITY_APPOINTMENT_TYPE_ID
        timezone = self._config.ACUITY_TIMEZONE
        calendar_id = self._config.ACUITY_CALENDAR_ID
        if not type_id or not timezone or not calendar_id:
            raise ConfigurationError("Acuity configuration incomplete")
        return {
            "appointmentTypeID": type_id,
            "timezone": timezone,
            "calendarID": calendar_id,
        }

    def _require_int(self, name: str, message: str) -> int:
        raw = getattr(self._config, name)
        if not raw:
            raise ConfigurationError(message)
        value = _as_int(raw)
        if value is None:
            raise ConfigurationError(f"{name} must be numeric")
        return value

    def _translate(
        self,
        error: RelayError,
        failure: str,
        *,
        bad_request: str | None = None,
        conflict: bool = False,
    ) -> PortalError:
        self._logger.warning(
            failure,
            extra={"status_code": error.status_code, "error": error.message},
        )
        if error.status_code == 401:
            return AuthError(AUTH_FAILED_MESSAGE)
        if bad_request and error.status_code == 400:
            return ValidationError(error.message or "Invalid request", error=bad_request)
        if conflict and error.status_code == 422:
            return ConflictError(error.message or SLOT_TAKEN_MESSAGE)
        return UpstreamError(
            error.message or "An error occurred",
            error=failure,
            status_code=error.status_code or 500,
        )


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def _account_summary(account: Any) -> dict[str, Any]:
    if not isinstance(account, dict):
        return {}
    return {key: account[key] for key in ("id", "email", "name", "timezone") if key in account}

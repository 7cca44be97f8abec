from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from pydantic import ValidationError
from pydantic.alias_generators import to_camel

from portal.application.dto.booking_request import ContactDetails
from portal.client.booking_api import BookingApiClient, BookingApiError
from portal.core.config import settings
from portal.domain.entities.booking import BookingConfirmation


MISSING_SELECTION_MESSAGE = "Please select a date and time before submitting"
SUBMIT_FAILED_MESSAGE = "Failed to complete booking"

CONTACT_FIELDS = ("first_name", "last_name", "email", "phone", "notes")
_FIELD_BY_ALIAS = {to_camel(name): name for name in CONTACT_FIELDS}


class Step(str, Enum):
    SELECT = "select"
    FORM = "form"
    CONFIRM = "confirm"


@dataclass
class ContactForm:
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    notes: str = ""
    errors: dict[str, str] = field(default_factory=dict)

    def validate(self) -> ContactDetails | None:
        """Check the fields against the server's contact rules; fills ``errors`` per field."""
        self.errors = {}
        try:
            return ContactDetails(
                first_name=self.first_name,
                last_name=self.last_name,
                email=self.email,
                phone=self.phone,
                notes=self.notes or None,
            )
        except ValidationError as e:
            for detail in e.errors():
                loc = str(detail["loc"][0]) if detail.get("loc") else ""
                name = _FIELD_BY_ALIAS.get(loc, loc)
                self.errors.setdefault(name, str(detail.get("msg", "")))
            return None

    def clear(self) -> None:
        self.first_name = ""
        self.last_name = ""
        self.email = ""
        self.phone = ""
        self.notes = ""
        self.errors = {}


class BookingSubmissionFlow:
    """Three-step booking: pick a slot, fill the contact form, see the confirmation.

    Submission is a single attempt; a failure keeps the form populated and
    shows the server's message as-is. In the two-meeting variant only the
    design meeting is booked; the launch slot is kept on ``launch_datetime``.
    """

    def __init__(
        self,
        api: BookingApiClient,
        *,
        timezone: str | None = None,
        on_close: Callable[[], None] | None = None,
    ) -> None:
        self._api = api
        self._timezone = timezone or settings.BOOKING_TIMEZONE
        self._on_close = on_close
        self._logger = logging.getLogger(__name__)

        self.form = ContactForm()
        self.step = Step.SELECT
        self.selected_datetime: str | None = None
        self.launch_datetime: str | None = None
        self.confirmation: BookingConfirmation | None = None
        self.error: str | None = None
        self.pending = False

    @property
    def can_go_back(self) -> bool:
        return self.step is Step.FORM and self.selected_datetime is not None

    def choose_datetime(self, datetime: str) -> None:
        self.selected_datetime = datetime
        self.step = Step.FORM
        self.error = None

    def choose_meetings(self, design_datetime: str, launch_datetime: str) -> None:
        self.choose_datetime(design_datetime)
        self.launch_datetime = launch_datetime

    def show_error(self, message: str) -> None:
        self.error = message

    def validate(self) -> bool:
        return self.form.validate() is not None

    async def submit(self) -> BookingConfirmation | None:
        if self.pending:
            return None
        if not self.selected_datetime:
            self.error = MISSING_SELECTION_MESSAGE
            return None
        details = self.form.validate()
        if details is None:
            return None

        self.pending = True
        self.error = None
        try:
            confirmation = await self._api.create_appointment(self._booking_payload(details))
        except BookingApiError as e:
            self.error = e.message or SUBMIT_FAILED_MESSAGE
            self._logger.warning("Booking failed", extra={"status_code": e.status_code, "error": self.error})
            return None
        finally:
            self.pending = False

        self.confirmation = confirmation
        self.step = Step.CONFIRM
        self._logger.info("Booking confirmed", extra={"appointment_id": confirmation.appointment_id})
        return confirmation

    def go_back(self) -> bool:
        if not self.can_go_back:
            return False
        self.step = Step.SELECT
        self.selected_datetime = None
        self.launch_datetime = None
        self.error = None
        return True

    def schedule_another(self) -> None:
        self.step = Step.SELECT
        self.selected_datetime = None
        self.launch_datetime = None
        self.confirmation = None
        self.error = None
        self.pending = False
        self.form.clear()

    def close(self) -> None:
        if self._on_close:
            self._on_close()

    def _booking_payload(self, details: ContactDetails) -> dict[str, Any]:
        payload = details.model_dump(by_alias=True, exclude_none=True)
        payload["datetime"] = self.selected_datetime
        payload["timezone"] = self._timezone
        return payload

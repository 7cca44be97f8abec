from __future__ import annotations

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel
from pydantic.networks import validate_email
from pydantic_core import PydanticCustomError


PHONE_PATTERN = re.compile(r"^\d{10,}$")
MONTH_PATTERN = re.compile(r"^\d{4}-\d{2}$")
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
APPOINTMENT_ID_PATTERN = re.compile(r"^\d+$")
_ISO_DATETIME = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}(:\d{2}(\.\d+)?)?(Z|[+-]\d{2}:?\d{2})?$"
)
_FRACTION = re.compile(r"\.(\d+)")


class ContactDetails(BaseModel):
    """Contact fields shared by the booking form and the appointment endpoint."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        validate_default=True,
    )

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    notes: str | None = None

    @field_validator("first_name")
    @classmethod
    def _first_name_required(cls, value: str) -> str:
        if not value:
            raise PydanticCustomError("first_name_required", "First name is required")
        return value

    @field_validator("last_name")
    @classmethod
    def _last_name_required(cls, value: str) -> str:
        if not value:
            raise PydanticCustomError("last_name_required", "Last name is required")
        return value

    @field_validator("email")
    @classmethod
    def _email_format(cls, value: str) -> str:
        try:
            _, normalized = validate_email(value)
        except PydanticCustomError:
            raise PydanticCustomError("email_format", "Invalid email address") from None
        return normalized

    @field_validator("phone")
    @classmethod
    def _phone_digits(cls, value: str) -> str:
        if not PHONE_PATTERN.match(value):
            raise PydanticCustomError("phone_format", "Phone must be at least 10 digits")
        return value


class BookingRequest(ContactDetails):
    datetime: str = ""
    timezone: str = ""

    @field_validator("datetime")
    @classmethod
    def _iso_datetime(cls, value: str) -> str:
        if not is_iso_datetime(value):
            raise PydanticCustomError("datetime_format", "Invalid datetime format")
        return value

    @field_validator("timezone")
    @classmethod
    def _timezone_required(cls, value: str) -> str:
        if not value:
            raise PydanticCustomError("timezone_required", "Timezone is required")
        return value


def is_iso_datetime(value: str) -> bool:
    if not _ISO_DATETIME.match(value or ""):
        return False
    normalized = value.replace("Z", "+00:00")
    if re.search(r"[+-]\d{4}$", normalized):
        normalized = f"{normalized[:-2]}:{normalized[-2:]}"
    # Python 3.10 only parses fractions of exactly 3 or 6 digits.
    normalized = _FRACTION.sub(lambda m: "." + m.group(1).ljust(6, "0")[:6], normalized)
    try:
        datetime.fromisoformat(normalized)
    except ValueError:
        return False
    return True


def first_error_message(exc: Exception, default: str = "Invalid request data") -> str:
    errors = getattr(exc, "errors", None)
    if callable(errors):
        details = errors()
        if details:
            return str(details[0].get("msg") or default)
    return default

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AppointmentType:
    id: int
    name: str
    duration: int  # minutes
    price: str | None = None
    description: str | None = None


@dataclass(frozen=True)
class AvailabilityDate:
    date: str  # YYYY-MM-DD
    available: bool = True


@dataclass(frozen=True)
class TimeSlot:
    datetime: str  # ISO 8601 with offset


@dataclass(frozen=True)
class BookingConfirmation:
    appointment_id: int
    datetime: str
    first_name: str
    last_name: str
    email: str
    phone: str
    message: str


@dataclass(frozen=True)
class AppointmentDetails:
    id: int
    datetime: str
    first_name: str
    last_name: str
    email: str
    phone: str
    timezone: str | None = None
    appointment_type_name: str | None = None
    status: str | None = None

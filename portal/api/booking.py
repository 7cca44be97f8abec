from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, Query, Request

from portal.api.schemas import (
    AppointmentDetailsSchema,
    AppointmentTypeSchema,
    AvailabilityDatesSchema,
    AvailabilityTimesSchema,
    BookingConfirmationSchema,
)
from portal.application.exceptions import ValidationError
from portal.application.use_cases.booking import BookingService
from portal.wiring.dependencies import get_booking_service


router = APIRouter(prefix="/api/booking")
logger = logging.getLogger(__name__)


@router.get("/appointment-type-details", response_model=AppointmentTypeSchema)
async def appointment_type_details(
    service: BookingService = Depends(get_booking_service),
) -> AppointmentTypeSchema:
    return AppointmentTypeSchema.from_entity(await service.get_appointment_type_details())


@router.get("/availability/dates", response_model=AvailabilityDatesSchema)
async def availability_dates(
    month: str | None = Query(None),
    service: BookingService = Depends(get_booking_service),
) -> AvailabilityDatesSchema:
    return AvailabilityDatesSchema.from_entities(await service.get_availability_dates(month))


@router.get("/availability/times", response_model=AvailabilityTimesSchema)
async def availability_times(
    date: str | None = Query(None),
    service: BookingService = Depends(get_booking_service),
) -> AvailabilityTimesSchema:
    return AvailabilityTimesSchema.from_entities(await service.get_availability_times(date))


@router.post("/appointments", response_model=BookingConfirmationSchema, status_code=201)
async def create_appointment(
    request: Request,
    service: BookingService = Depends(get_booking_service),
) -> BookingConfirmationSchema:
    payload = await _json_body(request, error="Invalid booking request")
    confirmation = await service.create_appointment(payload)
    return BookingConfirmationSchema.from_entity(confirmation)


@router.get("/appointments/{appointment_id}", response_model=AppointmentDetailsSchema)
async def appointment_details(
    appointment_id: str,
    service: BookingService = Depends(get_booking_service),
) -> AppointmentDetailsSchema:
    return AppointmentDetailsSchema.from_entity(await service.get_appointment_details(appointment_id))


@router.post("/check-availability")
async def check_availability(
    request: Request,
    service: BookingService = Depends(get_booking_service),
) -> dict[str, Any]:
    payload = await _json_body(request, error="Invalid request")
    return await service.check_availability(payload if isinstance(payload, dict) else {})


async def _json_body(request: Request, error: str) -> Any:
    body = await request.body()
    if not body:
        return {}
    try:
        return json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        logger.warning("Rejected non-JSON request body", extra={"endpoint": request.url.path})
        raise ValidationError("Invalid request data", error=error) from None

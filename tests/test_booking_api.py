"""Tests for the /api/booking endpoints."""

from __future__ import annotations

import pytest

from conftest import make_settings, valid_booking
from portal.application.exceptions import ConfigurationError, RelayError
from portal.application.use_cases.booking import BookingService
from portal.main import app
from portal.wiring.dependencies import get_booking_service


class TestAvailabilityDates:
    def test_dates_from_string_list(self, client, relay):
        """Provider returns bare dates; every one is reported available."""
        relay.responses["/availability/dates"] = ["2024-03-05", "2024-03-06"]

        response = client.get("/api/booking/availability/dates", params={"month": "2024-03"})

        assert response.status_code == 200
        assert response.json() == {
            "dates": [
                {"date": "2024-03-05", "available": True},
                {"date": "2024-03-06", "available": True},
            ]
        }

    def test_provider_params(self, client, relay):
        relay.responses["/availability/dates"] = []

        client.get("/api/booking/availability/dates", params={"month": "2024-03"})

        assert relay.calls == [
            {
                "endpoint": "/availability/dates",
                "method": "GET",
                "params": {
                    "appointmentTypeID": "42",
                    "timezone": "America/Chicago",
                    "calendarID": "7",
                    "month": "2024-03",
                },
                "body": None,
            }
        ]

    def test_duplicates_removed(self, client, relay):
        relay.responses["/availability/dates"] = {
            "dates": [{"date": "2024-03-05"}, {"date": "2024-03-05"}, {"date": "2024-03-07"}]
        }

        response = client.get("/api/booking/availability/dates", params={"month": "2024-03"})

        dates = [d["date"] for d in response.json()["dates"]]
        assert dates == ["2024-03-05", "2024-03-07"]

    @pytest.mark.parametrize("month", ["2024-1", "abcd-ef", "2024/03", ""])
    def test_malformed_month_never_reaches_provider(self, client, relay, month):
        response = client.get("/api/booking/availability/dates", params={"month": month})

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid request", "message": "Month must be YYYY-MM format"}
        assert relay.calls == []

    def test_missing_month(self, client, relay):
        response = client.get("/api/booking/availability/dates")

        assert response.status_code == 400
        assert relay.calls == []

    def test_incomplete_configuration(self, client, relay):
        app.dependency_overrides[get_booking_service] = lambda: BookingService(
            relay, make_settings(ACUITY_CALENDAR_ID=None)
        )

        response = client.get("/api/booking/availability/dates", params={"month": "2024-03"})

        assert response.status_code == 500
        assert response.json() == {
            "error": "Server configuration error",
            "message": "Acuity configuration incomplete",
        }
        assert relay.calls == []

    def test_missing_credentials_surface_as_configuration_error(self, client, relay):
        relay.responses["/availability/dates"] = ConfigurationError(
            "Acuity credentials not configured. Set ACUITY_USER_ID and ACUITY_API_KEY."
        )

        response = client.get("/api/booking/availability/dates", params={"month": "2024-03"})

        assert response.status_code == 500
        assert response.json()["error"] == "Server configuration error"


class TestAvailabilityTimes:
    def test_empty_day(self, client, relay):
        relay.responses["/availability/times"] = []

        response = client.get("/api/booking/availability/times", params={"date": "2024-03-05"})

        assert response.status_code == 200
        assert response.json() == {"times": []}

    def test_time_objects(self, client, relay):
        relay.responses["/availability/times"] = [
            {"time": "2024-03-05T09:00:00-0600", "slotsAvailable": 1},
            {"time": "2024-03-05T10:00:00-0600", "slotsAvailable": 1},
        ]

        response = client.get("/api/booking/availability/times", params={"date": "2024-03-05"})

        assert response.json() == {
            "times": [
                {"datetime": "2024-03-05T09:00:00-0600"},
                {"datetime": "2024-03-05T10:00:00-0600"},
            ]
        }
        assert relay.calls[0]["params"]["date"] == "2024-03-05"

    @pytest.mark.parametrize("date", ["2024-3-5", "tomorrow", "2024-03"])
    def test_malformed_date(self, client, relay, date):
        response = client.get("/api/booking/availability/times", params={"date": date})

        assert response.status_code == 400
        assert response.json()["message"] == "Date must be YYYY-MM-DD format"
        assert relay.calls == []

    def test_provider_failure_keeps_status(self, client, relay):
        relay.responses["/availability/times"] = RelayError(503, "Service Unavailable")

        response = client.get("/api/booking/availability/times", params={"date": "2024-03-05"})

        assert response.status_code == 503
        assert response.json() == {"error": "Failed to fetch available times", "message": "Service Unavailable"}


class TestCreateAppointment:
    def test_created(self, client, relay):
        relay.responses["/appointments"] = {
            "id": 987,
            "datetime": "2024-03-05T10:00:00-0600",
            "firstName": "Ada",
            "lastName": "Lovelace",
            "email": "ada@example.com",
            "phone": "5551234567",
        }

        response = client.post("/api/booking/appointments", json=valid_booking())

        assert response.status_code == 201
        data = response.json()
        assert data["appointmentId"] == 987
        assert data["datetime"] == "2024-03-05T10:00:00-0600"
        assert data["message"] == (
            "Your appointment has been scheduled successfully. "
            "A confirmation email will be sent to you shortly."
        )

    def test_provider_body(self, client, relay):
        relay.responses["/appointments"] = {"id": 1}

        client.post("/api/booking/appointments", json=valid_booking(notes="Bring mockups"))

        call = relay.calls[0]
        assert call["method"] == "POST"
        assert call["body"] == {
            "datetime": "2024-03-05T10:00:00-06:00",
            "appointmentTypeID": 42,
            "calendarID": 7,
            "firstName": "Ada",
            "lastName": "Lovelace",
            "email": "ada@example.com",
            "phone": "5551234567",
            "timezone": "America/Chicago",
            "notes": "Bring mockups",
        }

    def test_empty_notes_not_sent(self, client, relay):
        relay.responses["/appointments"] = {"id": 1}

        client.post("/api/booking/appointments", json=valid_booking(notes=""))

        assert "notes" not in relay.calls[0]["body"]

    @pytest.mark.parametrize("phone", ["555-1234", "555123456", "(555) 123-4567", ""])
    def test_bad_phone_rejected_before_provider(self, client, relay, phone):
        response = client.post("/api/booking/appointments", json=valid_booking(phone=phone))

        assert response.status_code == 400
        assert response.json() == {
            "error": "Invalid booking request",
            "message": "Phone must be at least 10 digits",
        }
        assert relay.calls == []

    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"firstName": ""}, "First name is required"),
            ({"lastName": "  "}, "Last name is required"),
            ({"email": "not-an-email"}, "Invalid email address"),
            ({"datetime": "next tuesday"}, "Invalid datetime format"),
            ({"timezone": ""}, "Timezone is required"),
        ],
    )
    def test_schema_errors(self, client, relay, overrides, message):
        response = client.post("/api/booking/appointments", json=valid_booking(**overrides))

        assert response.status_code == 400
        assert response.json()["message"] == message
        assert relay.calls == []

    @pytest.mark.parametrize(
        "value",
        ["2024-03-05T16:00:00.5Z", "2024-03-05T16:00:00.12Z", "2024-03-05T16:00:00.1234567-0600"],
    )
    def test_fractional_seconds_accepted(self, client, relay, value):
        relay.responses["/appointments"] = {"id": 1}

        response = client.post("/api/booking/appointments", json=valid_booking(datetime=value))

        assert response.status_code == 201
        assert relay.calls[0]["body"]["datetime"] == value

    def test_non_json_body(self, client, relay):
        response = client.post(
            "/api/booking/appointments",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid booking request", "message": "Invalid request data"}
        assert relay.calls == []

    def test_slot_taken(self, client, relay):
        relay.responses["/appointments"] = RelayError(
            422, "The time slot you selected is not available."
        )

        response = client.post("/api/booking/appointments", json=valid_booking())

        assert response.status_code == 422
        assert response.json() == {
            "error": "Time slot unavailable",
            "message": "The time slot you selected is not available.",
        }
        assert len(relay.calls) == 1

    def test_provider_rejects_credentials(self, client, relay):
        relay.responses["/appointments"] = RelayError(401, "Unauthorized")

        response = client.post("/api/booking/appointments", json=valid_booking())

        assert response.status_code == 401
        assert response.json() == {
            "error": "Authentication failed",
            "message": "Unable to authenticate with Acuity API",
        }

    def test_provider_bad_request(self, client, relay):
        relay.responses["/appointments"] = RelayError(400, "datetime is in the past")

        response = client.post("/api/booking/appointments", json=valid_booking())

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid booking request", "message": "datetime is in the past"}

    def test_missing_calendar_id(self, client, relay):
        app.dependency_overrides[get_booking_service] = lambda: BookingService(
            relay, make_settings(ACUITY_CALENDAR_ID=None)
        )

        response = client.post("/api/booking/appointments", json=valid_booking())

        assert response.status_code == 500
        assert response.json()["error"] == "Server configuration error"
        assert relay.calls == []


class TestAppointmentDetails:
    def test_found(self, client, relay):
        relay.responses["/appointments/55"] = {
            "id": 55,
            "datetime": "2024-03-05T10:00:00-0600",
            "firstName": "Ada",
            "lastName": "Lovelace",
            "email": "ada@example.com",
            "phone": "5551234567",
            "timezone": "America/Chicago",
            "appointmentTypeName": "Website Consultation",
            "status": "scheduled",
        }

        response = client.get("/api/booking/appointments/55")

        assert response.status_code == 200
        assert response.json()["appointmentTypeName"] == "Website Consultation"

    def test_non_numeric_id(self, client, relay):
        response = client.get("/api/booking/appointments/abc")

        assert response.status_code == 400
        assert response.json()["message"] == "Appointment ID must be a number"
        assert relay.calls == []

    def test_not_found(self, client, relay):
        relay.responses["/appointments/56"] = RelayError(404, "Not Found")

        response = client.get("/api/booking/appointments/56")

        assert response.status_code == 404
        assert response.json()["error"] == "Appointment not found"


class TestAppointmentType:
    def test_match(self, client, relay):
        relay.responses["/appointment-types"] = [
            {"id": 41, "name": "Other", "duration": 15},
            {"id": 42, "name": "Website Consultation", "duration": 30, "price": "0.00"},
        ]

        response = client.get("/api/booking/appointment-type-details")

        assert response.status_code == 200
        assert response.json() == {
            "id": 42,
            "name": "Website Consultation",
            "duration": 30,
            "price": "0.00",
            "description": None,
        }

    def test_no_match(self, client, relay):
        relay.responses["/appointment-types"] = [{"id": 41, "name": "Other", "duration": 15}]

        response = client.get("/api/booking/appointment-type-details")

        assert response.status_code == 404
        assert response.json()["error"] == "Appointment type not found"

    def test_unset_type(self, client, relay):
        app.dependency_overrides[get_booking_service] = lambda: BookingService(
            relay, make_settings(ACUITY_APPOINTMENT_TYPE_ID=None)
        )

        response = client.get("/api/booking/appointment-type-details")

        assert response.status_code == 500
        assert response.json()["message"] == "Appointment type not configured"


class TestCheckAvailability:
    def test_credentials_only(self, client, relay):
        relay.responses["/me"] = {"id": 1, "email": "owner@example.com", "plan": "pro"}

        response = client.post("/api/booking/check-availability")

        assert response.status_code == 200
        assert response.json() == {
            "authenticated": True,
            "account": {"id": 1, "email": "owner@example.com"},
            "missingSettings": [],
        }

    def test_with_date(self, client, relay):
        relay.responses["/me"] = {"id": 1}
        relay.responses["/availability/times"] = ["2024-03-05T09:00:00-0600"]

        response = client.post("/api/booking/check-availability", json={"date": "2024-03-05"})

        assert response.json()["times"] == ["2024-03-05T09:00:00-0600"]
        assert [c["endpoint"] for c in relay.calls] == ["/me", "/availability/times"]

    def test_malformed_month_rejected(self, client, relay):
        response = client.post("/api/booking/check-availability", json={"month": "March"})

        assert response.status_code == 400
        assert relay.calls == []


class TestUnexpectedErrors:
    def test_generic_500(self, client, relay):
        relay.responses["/availability/dates"] = RuntimeError("boom")

        response = client.get("/api/booking/availability/dates", params={"month": "2024-03"})

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error", "message": "An unexpected error occurred"}

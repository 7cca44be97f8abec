"""Shared test fixtures and fakes."""

from __future__ import annotations

from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient

from portal.application.ports.scheduling import SchedulingRelayPort
from portal.application.use_cases.account import AccountUseCase
from portal.application.use_cases.booking import BookingService
from portal.application.use_cases.projects import ProjectsUseCase
from portal.client.api_log import ApiLog
from portal.client.booking_api import BookingApiClient
from portal.core.config import Settings
from portal.infrastructure.store.memory_store import MemoryRecordStore
from portal.main import app
from portal.wiring.dependencies import (
    get_account_use_case,
    get_booking_service,
    get_projects_use_case,
)


class FakeRelay(SchedulingRelayPort):
    """Records every call; answers from ``responses`` keyed by endpoint."""

    def __init__(self, responses: dict[str, Any] | None = None) -> None:
        self.calls: list[dict[str, Any]] = []
        self.responses: dict[str, Any] = dict(responses or {})

    async def request(
        self,
        endpoint: str,
        *,
        method: str = "GET",
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> Any:
        self.calls.append({"endpoint": endpoint, "method": method, "params": params, "body": body})
        result = self.responses.get(endpoint)
        if isinstance(result, Exception):
            raise result
        return result

    async def validate_credentials(self) -> bool:
        return True


def make_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "ACUITY_USER_ID": "12345",
        "ACUITY_API_KEY": "secret-key",
        "ACUITY_APPOINTMENT_TYPE_ID": "42",
        "ACUITY_CALENDAR_ID": "7",
        "ACUITY_TIMEZONE": "America/Chicago",
        "ACUITY_BASE_URL": "https://acuity.test/api/v1",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def valid_booking(**overrides: Any) -> dict[str, Any]:
    payload = {
        "datetime": "2024-03-05T10:00:00-06:00",
        "firstName": "Ada",
        "lastName": "Lovelace",
        "email": "ada@example.com",
        "phone": "5551234567",
        "timezone": "America/Chicago",
    }
    payload.update(overrides)
    return payload


class ScriptedBookingApi:
    """Stand-in for BookingApiClient driven by queued results per method."""

    def __init__(self) -> None:
        self.dates: dict[str, list[Any]] = {}
        self.times: dict[str, list[Any]] = {}
        self.calls: list[tuple[str, Any]] = []
        self.created: list[dict[str, Any]] = []
        self.create_result: Any = None

    async def get_availability_dates(self, month: str):
        self.calls.append(("dates", month))
        return self._next(self.dates, month)

    async def get_availability_times(self, date: str):
        self.calls.append(("times", date))
        return self._next(self.times, date)

    async def create_appointment(self, booking: dict[str, Any]):
        self.calls.append(("create", booking))
        self.created.append(booking)
        if isinstance(self.create_result, Exception):
            raise self.create_result
        return self.create_result

    @staticmethod
    def _next(script: dict[str, list[Any]], key: str):
        queue = script.get(key)
        if not queue:
            return []
        result = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(result, Exception):
            raise result
        return result


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def relay() -> FakeRelay:
    return FakeRelay()


@pytest.fixture
def booking_settings() -> Settings:
    return make_settings()


@pytest.fixture
def store() -> MemoryRecordStore:
    return MemoryRecordStore()


@pytest.fixture
def client(relay, booking_settings, store):
    app.dependency_overrides[get_booking_service] = lambda: BookingService(relay, booking_settings)
    app.dependency_overrides[get_projects_use_case] = lambda: ProjectsUseCase(store)
    app.dependency_overrides[get_account_use_case] = lambda: AccountUseCase(store)
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def scripted_api() -> ScriptedBookingApi:
    return ScriptedBookingApi()


def mock_client(handler, base_url: str = "http://portal.test") -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=base_url)


@pytest.fixture
def api_log() -> ApiLog:
    return ApiLog(clock=lambda: 1_700_000_000.0)


def booking_api(handler, api_log: ApiLog | None = None) -> BookingApiClient:
    return BookingApiClient("http://portal.test", api_log=api_log, client=mock_client(handler))

from __future__ import annotations

import logging
from typing import Any

import httpx

from portal.application.exceptions import ConfigurationError, RelayError
from portal.application.ports.scheduling import SchedulingRelayPort
from portal.core.config import Settings, settings as default_settings


_BODY_METHODS = {"POST", "PUT"}


class AcuityRelay(SchedulingRelayPort):
    """Authenticated pass-through to the Acuity Scheduling REST API."""

    def __init__(
        self,
        config: Settings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config or default_settings
        self._client = client or httpx.AsyncClient(timeout=self._config.ACUITY_TIMEOUT_SECONDS)
        self._logger = logging.getLogger(__name__)

    async def request(
        self,
        endpoint: str,
        *,
        method: str = "GET",
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> Any:
        # Credentials are read per call so a fixed .env takes effect without a restart.
        user_id = self._config.ACUITY_USER_ID
        api_key = self._config.ACUITY_API_KEY
        if not user_id or not api_key:
            raise ConfigurationError(
                "Acuity credentials not configured. Set ACUITY_USER_ID and ACUITY_API_KEY."
            )

        method = method.upper()
        url = f"{self._config.ACUITY_BASE_URL.rstrip('/')}{endpoint}"
        query = {key: _stringify(value) for key, value in (params or {}).items()}
        json_body = body if body is not None and method in _BODY_METHODS else None

        try:
            response = await self._client.request(
                method,
                url,
                params=query,
                json=json_body,
                auth=httpx.BasicAuth(user_id, api_key),
                headers={"Content-Type": "application/json"},
            )
        except httpx.HTTPError as e:
            message = str(e) or "Failed to connect to Acuity Scheduling API"
            self._logger.error(
                "Acuity transport failure",
                extra={"endpoint": endpoint, "error": message},
            )
            raise RelayError(500, message) from e

        if response.is_success:
            return _decode_json(response)

        data = _decode_json(response)
        if not isinstance(data, dict):
            data = {"error": f"HTTP {response.status_code}: {response.reason_phrase}"}

        message = (
            _non_empty(data.get("message"))
            or _non_empty(data.get("error"))
            or f"Acuity API error: {response.status_code} {response.reason_phrase}"
        )
        self._logger.error(
            "Acuity API error",
            extra={"endpoint": endpoint, "status_code": response.status_code, "error": message},
        )
        raise RelayError(response.status_code, message, data)

    async def validate_credentials(self) -> bool:
        try:
            await self.request("/me")
        except (RelayError, ConfigurationError) as e:
            self._logger.warning(
                "Acuity credential validation failed",
                extra={"status_code": getattr(e, "status_code", None), "error": str(e)},
            )
            return False
        self._logger.info("Acuity credentials validated")
        return True

    async def aclose(self) -> None:
        await self._client.aclose()


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _non_empty(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _decode_json(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class SchedulingRelayPort(ABC):
    @abstractmethod
    async def request(
        self,
        endpoint: str,
        *,
        method: str = "GET",
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> Any:
        """Forward an authenticated request to the scheduling provider.

        Returns the decoded JSON payload. Raises RelayError on any provider or
        transport failure and ConfigurationError when credentials are missing.
        """
        raise NotImplementedError

    @abstractmethod
    async def validate_credentials(self) -> bool:
        """Call the provider with the configured credentials."""
        raise NotImplementedError

    async def aclose(self) -> None:
        return None

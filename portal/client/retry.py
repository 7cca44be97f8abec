from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar


T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff for idempotent reads.

    ``max_retries`` counts retries after the first attempt, so the default makes
    four attempts with delays of 1s, 2s and 4s between them.
    """

    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0

    def delay_for(self, attempt: int) -> float:
        return min(self.base_delay * (2**attempt), self.max_delay)

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        *,
        should_retry: Callable[[Exception], bool] = lambda e: True,
        sleep: Sleep = asyncio.sleep,
    ) -> T:
        attempt = 0
        while True:
            try:
                return await operation()
            except Exception as e:
                if attempt >= self.max_retries or not should_retry(e):
                    raise
                delay = self.delay_for(attempt)
                logging.getLogger(__name__).info(
                    "Retrying after failure",
                    extra={"reason": f"attempt {attempt + 1} in {delay:.1f}s", "error": str(e)},
                )
                await sleep(delay)
                attempt += 1


NO_RETRY = RetryPolicy(max_retries=0)

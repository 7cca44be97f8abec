from __future__ import annotations

import logging
import secrets
import time
from dataclasses import replace
from typing import Any, Callable

from portal.domain.entities.api_log import ApiLogEntry


LogListener = Callable[[tuple[ApiLogEntry, ...]], None]


class ApiLog:
    """Observable record of outbound client requests, for the debug panel.

    Entries are appended on dispatch and completed exactly once. Ids that are
    unknown (cleared) or already completed are ignored, so late responses never
    raise. Listeners get a snapshot of the whole log after every change.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._entries: list[ApiLogEntry] = []
        self._listeners: list[LogListener] = []
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    @property
    def entries(self) -> tuple[ApiLogEntry, ...]:
        return self._snapshot()

    def subscribe(self, listener: LogListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def log_request(self, method: str, url: str, body: Any = None) -> str:
        now_ms = self._clock() * 1000
        entry_id = f"{int(now_ms)}-{secrets.token_hex(4)}"
        self._entries.append(
            ApiLogEntry(
                id=entry_id,
                timestamp=now_ms,
                method=method.upper(),
                url=url,
                request_body=body,
            )
        )
        self._notify()
        return entry_id

    def log_response(
        self,
        entry_id: str,
        status: int,
        status_text: str,
        body: Any = None,
        duration: float | None = None,
    ) -> None:
        entry = self._pending(entry_id)
        if entry is None:
            return
        entry.status = status
        entry.status_text = status_text
        entry.response_body = body
        entry.duration = duration
        entry.completed = True
        self._notify()

    def log_error(self, entry_id: str, message: str, duration: float | None = None) -> None:
        entry = self._pending(entry_id)
        if entry is None:
            return
        entry.error = message
        entry.duration = duration
        entry.completed = True
        self._notify()

    def clear_logs(self) -> None:
        self._entries = []
        self._notify()

    def _pending(self, entry_id: str) -> ApiLogEntry | None:
        for entry in self._entries:
            if entry.id == entry_id:
                return None if entry.completed else entry
        return None

    def _snapshot(self) -> tuple[ApiLogEntry, ...]:
        return tuple(replace(entry) for entry in self._entries)

    def _notify(self) -> None:
        snapshot = self._snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                self._logger.exception("API log listener failed")

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class ApiLogEntry:
    id: str
    timestamp: float  # epoch milliseconds
    method: str
    url: str
    request_body: Any = None
    status: int | None = None
    status_text: str | None = None
    response_body: Any = None
    error: str | None = None
    duration: float | None = None  # milliseconds
    completed: bool = False

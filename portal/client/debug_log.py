from __future__ import annotations

import json
import re
from datetime import datetime
from typing import Any, Iterable

from portal.domain.entities.api_log import ApiLogEntry


EMPTY_LOG_MESSAGE = "No API calls yet. Try selecting a date or time."

_API_PREFIX = re.compile(r"^.*/api/")


def short_url(url: str) -> str:
    return _API_PREFIX.sub("", url)


def entry_status(entry: ApiLogEntry) -> str:
    if not entry.completed:
        return "..."
    if entry.error:
        return "ERROR"
    return str(entry.status)


def render_entry(entry: ApiLogEntry, *, details: bool = False) -> str:
    line = f"{entry.method:<6} {short_url(entry.url)}  {entry_status(entry)}"
    if entry.completed and entry.duration:
        line += f"  {entry.duration:g}ms"
    if not details:
        return line

    lines = [line]
    if entry.request_body:
        lines.append("  Request body:")
        lines.append(_indent(_pretty(entry.request_body)))
    if entry.response_body:
        lines.append("  Response body:")
        lines.append(_indent(_pretty(entry.response_body)))
    if entry.error:
        lines.append(f"  Error: {entry.error}")
    lines.append(f"  At {datetime.fromtimestamp(entry.timestamp / 1000).strftime('%H:%M:%S')}")
    return "\n".join(lines)


def render_log(entries: Iterable[ApiLogEntry], *, details: bool = False) -> str:
    """Plain-text view of the API log, oldest call first."""
    entries = list(entries)
    header = f"API Debug Log ({len(entries)})"
    if not entries:
        return f"{header}\n{EMPTY_LOG_MESSAGE}"
    return "\n".join([header] + [render_entry(entry, details=details) for entry in entries])


def _pretty(value: Any) -> str:
    return json.dumps(value, indent=2, default=str)


def _indent(text: str) -> str:
    return "\n".join(f"    {line}" for line in text.splitlines())

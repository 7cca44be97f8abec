"""
Decoding of Acuity availability payloads.

The provider is inconsistent about list responses: a bare array of strings, an
array of objects, or an object wrapping either. Every payload is classified into
exactly one ``PayloadShape`` first and each arm normalizes to the canonical
entity, so consumers only ever see ``AvailabilityDate`` / ``TimeSlot`` lists.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from portal.application.exceptions import UpstreamError
from portal.domain.entities.booking import AvailabilityDate, TimeSlot


WRAPPER_KEYS = ("dates", "times", "availability", "data", "items", "results")


class PayloadShape(str, Enum):
    EMPTY = "empty"
    STRING_LIST = "string_list"
    OBJECT_LIST = "object_list"
    MIXED_LIST = "mixed_list"


@dataclass(frozen=True)
class DecodedPayload:
    shape: PayloadShape
    items: tuple[Any, ...]
    wrapped: bool = False


def decode_list_payload(payload: Any) -> DecodedPayload:
    wrapped = False
    if isinstance(payload, dict):
        inner = _unwrap(payload)
        if inner is None:
            raise UpstreamError("Unexpected availability response from scheduling provider")
        payload = inner
        wrapped = True

    if payload is None:
        return DecodedPayload(PayloadShape.EMPTY, (), wrapped)
    if not isinstance(payload, list):
        raise UpstreamError("Unexpected availability response from scheduling provider")
    if not payload:
        return DecodedPayload(PayloadShape.EMPTY, (), wrapped)

    items = tuple(payload)
    if all(isinstance(item, str) for item in items):
        return DecodedPayload(PayloadShape.STRING_LIST, items, wrapped)
    if all(isinstance(item, dict) for item in items):
        return DecodedPayload(PayloadShape.OBJECT_LIST, items, wrapped)
    return DecodedPayload(PayloadShape.MIXED_LIST, items, wrapped)


def normalize_dates(payload: Any) -> list[AvailabilityDate]:
    """Every date the provider lists is available; absence means unavailable."""
    values = _extract(decode_list_payload(payload), ("date",))
    return [AvailabilityDate(date=value, available=True) for value in values]


def normalize_times(payload: Any) -> list[TimeSlot]:
    values = _extract(decode_list_payload(payload), ("datetime", "time"))
    return [TimeSlot(datetime=value) for value in values]


def _unwrap(payload: dict[str, Any]) -> list[Any] | None:
    for key in WRAPPER_KEYS:
        if key in payload:
            value = payload[key]
            if value is None:
                return []
            if isinstance(value, list):
                return value
    return None


def _extract(decoded: DecodedPayload, keys: tuple[str, ...]) -> list[str]:
    if decoded.shape is PayloadShape.EMPTY:
        return []
    if decoded.shape is PayloadShape.STRING_LIST:
        return _dedupe(decoded.items, _as_string)
    if decoded.shape is PayloadShape.OBJECT_LIST:
        return _dedupe(decoded.items, lambda item: _from_object(item, keys))
    if decoded.shape is PayloadShape.MIXED_LIST:
        return _dedupe(
            decoded.items,
            lambda item: _from_object(item, keys) if isinstance(item, dict) else _as_string(item),
        )
    raise UpstreamError(f"Unhandled payload shape: {decoded.shape}")


def _as_string(item: Any) -> str | None:
    if isinstance(item, str) and item.strip():
        return item.strip()
    return None


def _from_object(item: dict[str, Any], keys: tuple[str, ...]) -> str | None:
    for key in keys:
        value = _as_string(item.get(key))
        if value:
            return value
    return None


def _dedupe(items: tuple[Any, ...], pick: Callable[[Any], str | None]) -> list[str]:
    seen: set[str] = set()
    values: list[str] = []
    for item in items:
        value = pick(item)
        if value is None or value in seen:
            continue
        seen.add(value)
        values.append(value)
    return values

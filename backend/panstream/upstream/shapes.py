"""
Best-effort extraction of list payloads from inconsistently wrapped upstream JSON.

The catalog endpoints return either a bare list or a list tucked under one of a handful
of wrapper keys, sometimes one level further down under ``data``/``result``. Anything
else is treated as "no items" rather than an error.
"""

from __future__ import annotations

from typing import Any, List, Optional

SEQUENCE_KEYS = ("data", "list", "result", "items", "rows", "books", "chapters", "chapterList")
NESTED_KEYS = ("data", "result")


def _find_list(payload: dict) -> Optional[List[Any]]:
    for key in SEQUENCE_KEYS:
        value = payload.get(key)
        if isinstance(value, list):
            return value
    return None


def coerce_to_sequence(raw: Any) -> List[Any]:
    """Return the list carried by ``raw``, searching at most two levels deep."""
    if isinstance(raw, list):
        return raw
    if not isinstance(raw, dict):
        return []

    found = _find_list(raw)
    if found is not None:
        return found

    for key in NESTED_KEYS:
        inner = raw.get(key)
        if isinstance(inner, dict):
            found = _find_list(inner)
            if found is not None:
                return found
    return []


def unwrap_single(raw: Any) -> Optional[Any]:
    """Pull the single object out of a detail payload (bare, one-element list, or wrapped)."""
    if isinstance(raw, list):
        return raw[0] if raw else None
    if not isinstance(raw, dict):
        return None
    if "bookId" in raw:
        return raw
    for key in NESTED_KEYS:
        inner = raw.get(key)
        if isinstance(inner, dict):
            return inner
        if isinstance(inner, list):
            return inner[0] if inner else None
    return raw

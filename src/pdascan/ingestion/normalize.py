"""Normalization helpers.

Centralizes defensive handling of extras values and ordered name tables.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any


def safe_str(value: Any) -> str | None:
    """Return *value* when it is a non-empty string, else ``None``."""
    if isinstance(value, str) and value:
        return value
    return None


def dedupe_ordered(*groups: Iterable[str]) -> tuple[str, ...]:
    """Concatenate *groups*, dropping blanks and repeats but keeping first occurrence."""
    seen: set[str] = set()
    ordered: list[str] = []
    for group in groups:
        for item in group:
            name = item.strip()
            if not name or name in seen:
                continue
            seen.add(name)
            ordered.append(name)
    return tuple(ordered)


def describe_value(value: Any) -> str:
    """Render one extras value for the diagnostics map; ``None`` becomes ``"null"``."""
    return "null" if value is None else str(value)


def describe_extras(fields: Mapping[str, Any]) -> str:
    """Render extras as ``key=value, `` pairs for the diagnostics map."""
    return "".join(f"{key}={describe_value(value)}, " for key, value in fields.items())

"""Redaction for scan extras in debug logs.

Device-management tools sometimes push credentials through the same
broadcast extras as decoded barcodes, and decoded blobs can be long.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

_SENSITIVE_KEYS: frozenset[str] = frozenset({"password", "pin", "token", "secret", "apikey"})


def redact_for_log(value: Any, *, max_string: int = 256) -> Any:
    """Mask sensitive extras and clip long strings; other values pass through."""
    if isinstance(value, str):
        return value if len(value) <= max_string else f"{value[:max_string]}…<truncated>"
    if isinstance(value, Mapping):
        return {
            str(k): "<redacted>" if str(k).lower() in _SENSITIVE_KEYS else redact_for_log(v, max_string=max_string)
            for k, v in value.items()
        }
    return value

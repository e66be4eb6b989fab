"""Candidate-key payload resolution.

The vendor contract for which extra carries the barcode is undocumented,
so resolution probes an ordered list of candidate keys.  Adding keys here
only papers over the gap; the authoritative fix is vendor documentation.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from pdascan._constants import COMMON_DATA_KEYS, COMMON_SCANNER_ACTIONS
from pdascan.ingestion.normalize import dedupe_ordered, safe_str
from pdascan.models.scan import ScanEvent


@dataclass(frozen=True)
class ResolvedPayload:
    """The winning candidate for one event."""

    value: str
    key: str


def build_candidate_keys(extra: Iterable[str] = ()) -> tuple[str, ...]:
    """Built-in data keys, most authoritative first, then *extra* at lowest priority."""
    return dedupe_ordered(COMMON_DATA_KEYS, extra)


def build_action_filter(extra: Iterable[str] = ()) -> tuple[str, ...]:
    """Built-in broadcast actions followed by *extra*."""
    return dedupe_ordered(COMMON_SCANNER_ACTIONS, extra)


def resolve_payload(event: ScanEvent, candidates: Sequence[str]) -> ResolvedPayload | None:
    """Return the first non-empty string value among *candidates*, in order.

    Keys not in *candidates* are never considered, however payload-like
    their value looks.
    """
    fields = event.fields
    for key in candidates:
        value = safe_str(fields.get(key))
        if value is not None:
            return ResolvedPayload(value=value, key=key)
    return None

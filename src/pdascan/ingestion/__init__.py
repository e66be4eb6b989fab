"""Ingestion layer.

Turns raw source notifications into resolved scan payloads.
"""

from pdascan.ingestion.resolver import (
    ResolvedPayload,
    build_action_filter,
    build_candidate_keys,
    resolve_payload,
)

__all__ = [
    "ResolvedPayload",
    "build_action_filter",
    "build_candidate_keys",
    "resolve_payload",
]

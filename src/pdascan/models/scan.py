"""Scan notification models."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, Field, field_validator

from pdascan.models._base import ScanBaseModel


class ScanEvent(ScanBaseModel):
    """One notification from an event source.

    ``tag`` is the broadcast action; ``fields`` are its extras.  Only
    string values are kept: anything else (byte arrays, numbers, nested
    objects) is stored as ``None`` so it can never be mistaken for a
    payload, while the original value stays visible in ``raw``.
    """

    tag: str = Field(default="", validation_alias=AliasChoices("tag", "action"))
    """Broadcast action; empty when the source delivered none."""

    fields: dict[str, str | None] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("fields", "extras"),
    )
    """Extras keyed by name."""

    @field_validator("tag", mode="before")
    @classmethod
    def _coerce_tag(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value)

    @field_validator("fields", mode="before")
    @classmethod
    def _keep_string_values(cls, value: Any) -> dict[str, str | None]:
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ValueError("fields must be a mapping")
        return {str(k): (v if isinstance(v, str) else None) for k, v in value.items()}

    @property
    def delivered_fields(self) -> dict[str, Any]:
        """Extras as the source delivered them, non-string values included."""
        for key in ("fields", "extras"):
            value = self.raw.get(key)
            if isinstance(value, dict):
                return {str(k): v for k, v in value.items()}
        return dict(self.fields)

"""Items delivered on the scan stream."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class StreamEventKind(StrEnum):
    DATA = "data"
    ERROR = "error"


class StreamEvent(BaseModel):
    """A data or error item pushed through an :class:`~pdascan.channels.events.EventSink`."""

    model_config = ConfigDict(frozen=True)

    kind: StreamEventKind
    payload: str | None = None
    code: str | None = None
    message: str | None = None
    details: Any = None
    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @model_validator(mode="after")
    def _check_shape(self) -> StreamEvent:
        if self.kind == StreamEventKind.DATA and self.payload is None:
            raise ValueError("data events require a payload")
        if self.kind == StreamEventKind.ERROR and not self.code:
            raise ValueError("error events require a code")
        return self

    @property
    def is_error(self) -> bool:
        return self.kind == StreamEventKind.ERROR

    @classmethod
    def data(cls, payload: str) -> StreamEvent:
        return cls(kind=StreamEventKind.DATA, payload=payload)

    @classmethod
    def error(cls, code: str, message: str | None = None, details: Any = None) -> StreamEvent:
        return cls(kind=StreamEventKind.ERROR, code=code, message=message, details=details)

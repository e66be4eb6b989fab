"""Custom exception hierarchy for pdascan."""

from __future__ import annotations

from typing import Any


class ScanError(Exception):
    """Base exception for all pdascan errors."""


class ScanConfigError(ScanError):
    """Invalid or missing configuration."""


class SourceError(ScanError):
    """Event source failure (connect, publish, broadcast)."""


class SourceRegistrationError(SourceError):
    """A receiver could not be registered with (or removed from) a source."""


class SinkError(ScanError):
    """The streaming sink rejected a push."""


class SinkClosedError(SinkError):
    """Push attempted on a stream whose subscriber has cancelled."""


class ReaderError(ScanError):
    """The vendor reader service rejected a configuration call."""


class DebugChannelError(ScanError):
    """A debug-channel call failed.

    Mirrors the ``(code, message, details)`` triple used by
    request/response platform channels so hosts can branch on ``code``.
    """

    def __init__(
        self,
        message: str,
        *,
        code: str = "",
        details: Any = None,
    ) -> None:
        self.code = code
        self.details = details
        super().__init__(message)


class MethodNotImplementedError(DebugChannelError):
    """The debug channel has no handler for the requested method."""

    def __init__(self, method: str) -> None:
        self.method = method
        super().__init__(f"Method not implemented: {method}", code="NOT_IMPLEMENTED")

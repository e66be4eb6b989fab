"""Pydantic models for scan notifications, reader settings and stream items."""

from pdascan.models.reader import KeyboardEmulationType, ReaderOutputConfiguration
from pdascan.models.scan import ScanEvent
from pdascan.models.stream import StreamEvent, StreamEventKind

__all__ = [
    "KeyboardEmulationType",
    "ReaderOutputConfiguration",
    "ScanEvent",
    "StreamEvent",
    "StreamEventKind",
]

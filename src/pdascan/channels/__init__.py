"""Host-facing channels: the scan stream and the debug channel."""

from pdascan.channels.debug import DebugChannel, HostListener, MethodCallHandler
from pdascan.channels.events import EventSink, ScanChannel, ScanStream, StreamHandler

__all__ = [
    "DebugChannel",
    "EventSink",
    "HostListener",
    "MethodCallHandler",
    "ScanChannel",
    "ScanStream",
    "StreamHandler",
]

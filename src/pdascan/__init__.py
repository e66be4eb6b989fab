"""pdascan - Async relay for PDA barcode-scan broadcasts."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pdascan")
except PackageNotFoundError:
    __version__ = "0+local"
from pdascan.bridge import ScannerBridge
from pdascan.channels import DebugChannel, EventSink, ScanChannel, ScanStream, StreamHandler
from pdascan.config import MqttSourceConfig, ScannerConfig
from pdascan.exceptions import (
    DebugChannelError,
    MethodNotImplementedError,
    ReaderError,
    ScanConfigError,
    ScanError,
    SinkClosedError,
    SinkError,
    SourceError,
    SourceRegistrationError,
)
from pdascan.ingestion import ResolvedPayload, resolve_payload
from pdascan.models import (
    KeyboardEmulationType,
    ReaderOutputConfiguration,
    ScanEvent,
    StreamEvent,
    StreamEventKind,
)
from pdascan.reader import InMemoryReaderManager, ReaderManager
from pdascan.relay import RelayState, ScanRelay
from pdascan.sources import LocalBroadcastSource, MqttScanSource, ScanSource
from pdascan.state import DebugState

__all__ = [
    "__version__",
    "DebugChannel",
    "DebugChannelError",
    "DebugState",
    "EventSink",
    "InMemoryReaderManager",
    "KeyboardEmulationType",
    "LocalBroadcastSource",
    "MethodNotImplementedError",
    "MqttScanSource",
    "MqttSourceConfig",
    "ReaderError",
    "ReaderManager",
    "ReaderOutputConfiguration",
    "RelayState",
    "ResolvedPayload",
    "ScanChannel",
    "ScanConfigError",
    "ScanError",
    "ScanEvent",
    "ScanRelay",
    "ScanSource",
    "ScanStream",
    "ScannerBridge",
    "ScannerConfig",
    "SinkClosedError",
    "SinkError",
    "SourceError",
    "SourceRegistrationError",
    "StreamEvent",
    "StreamEventKind",
    "StreamHandler",
    "resolve_payload",
]

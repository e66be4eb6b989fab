"""Scan relay: source broadcasts in, resolved payloads out.

Owns:
- registering/unregistering the broadcast receiver while a host listens
- hopping source-thread deliveries onto the event loop
- resolving each event's payload against the candidate keys
- forwarding to the active sink, with the debug channel as duplicate
  and fallback path
- keeping the diagnostics map current
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from enum import StrEnum
from typing import Any

from pdascan._constants import (
    ACTION_PASS_TO_APP,
    ACTION_SERVICE_CONNECTED,
    ERROR_SCAN,
    HOST_DIRECT_DATA_RECEIVED,
    KEY_DECODER_DATA,
    NO_DATA_MESSAGE,
    READER_SERVICE_PACKAGE,
    SELF_TEST_PAYLOAD,
    SIMULATED_PAYLOAD_PREFIX,
)
from pdascan._redact import redact_for_log
from pdascan.channels.debug import DebugChannel
from pdascan.channels.events import EventSink
from pdascan.config import ScannerConfig
from pdascan.exceptions import DebugChannelError
from pdascan.ingestion.normalize import describe_extras, describe_value
from pdascan.ingestion.resolver import build_action_filter, build_candidate_keys, resolve_payload
from pdascan.models.scan import ScanEvent
from pdascan.reader import ReaderManager
from pdascan.sources.base import ScanSource
from pdascan.state.debug import DebugState

_logger = logging.getLogger(__name__)


def _now_ms() -> int:
    """Current epoch timestamp in milliseconds."""
    return int(time.time() * 1000)


class RelayState(StrEnum):
    IDLE = "idle"
    LISTENING = "listening"


class ScanRelay:
    """Forwards scanner broadcasts to a single streaming sink.

    Sources call :meth:`receive` on their own thread; everything else
    (``start``, ``stop``, ``on_event``, ``simulate``) runs on the event
    loop thread, which is what serializes access to the sink and the
    diagnostics map.

    The relay is a :class:`~pdascan.channels.events.StreamHandler`, so a
    :class:`~pdascan.channels.events.ScanChannel` drives ``start``/``stop``
    through ``on_listen``/``on_cancel``.
    """

    def __init__(
        self,
        *,
        config: ScannerConfig,
        source: ScanSource,
        debug_state: DebugState,
        debug_channel: DebugChannel,
        loop: asyncio.AbstractEventLoop,
        reader: ReaderManager | None = None,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self._config = config
        self._source = source
        self._debug = debug_state
        self._debug_channel = debug_channel
        self._loop = loop
        self._reader = reader
        self._clock = clock
        self._actions = build_action_filter(config.extra_actions)
        self._candidate_keys = build_candidate_keys(config.extra_data_keys)
        self._sink: EventSink | None = None
        self._registered = False
        self._sequence = 0

    @property
    def state(self) -> RelayState:
        return RelayState.LISTENING if self._sink is not None else RelayState.IDLE

    # ------------------------------------------------------------------
    # StreamHandler
    # ------------------------------------------------------------------

    def on_listen(self, arguments: Any, sink: EventSink) -> None:
        _logger.debug("Host is now listening for scan events")
        self.start(sink)

    def on_cancel(self, arguments: Any) -> None:
        _logger.debug("Host stopped listening")
        self.stop()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, sink: EventSink) -> bool:
        """Register for broadcasts and make *sink* the active sink.

        Returns ``False`` (relay stays idle) when the source refuses the
        registration.
        """
        if self._registered:
            _logger.debug("Scan receiver already registered; replacing sink")
            self._sink = sink
            self._debug.update_many({"receiverStatus": "Already Registered", "eventChannelStatus": "Connected"})
            return True

        self._debug.update("scanReceiverCreation", "Creating new receiver")
        try:
            self._source.register_receiver(self.receive, self._actions)
        except Exception as exc:
            _logger.warning("Scan receiver registration failed: %s", exc, exc_info=True)
            self._debug.update_many(
                {
                    "lastError": f"Receiver registration error: {exc}",
                    "receiverStatus": "Error",
                    "eventChannelStatus": "Error",
                    "relayState": RelayState.IDLE.value,
                }
            )
            return False

        self._registered = True
        self._sink = sink
        self._debug.update_many(
            {
                "registeredActions": ", ".join(self._actions),
                "receiverStatus": "Registered",
                "eventChannelStatus": "Connected",
                "relayState": RelayState.LISTENING.value,
            }
        )
        _logger.debug("Scan receiver registered for %d actions", len(self._actions))

        if self._config.self_test_on_register:
            self._send_test_broadcast(SELF_TEST_PAYLOAD)
        return True

    def stop(self) -> None:
        """Unregister, end the active sink's stream and drop it.

        Safe to call repeatedly.
        """
        if not self._registered and self._sink is None:
            _logger.debug("Scan relay already idle, nothing to unregister")
            return

        sink = self._sink
        self._sink = None
        if self._registered:
            self._registered = False
            try:
                self._source.unregister_receiver(self.receive)
            except Exception as exc:
                _logger.warning("Scan receiver unregistration failed: %s", exc, exc_info=True)
                self._debug.update("lastError", f"Unregister error: {exc}")
        self._debug.update_many(
            {
                "receiverStatus": "Unregistered",
                "eventChannelStatus": "Disconnected",
                "relayState": RelayState.IDLE.value,
            }
        )
        _logger.debug("Scan receiver unregistered")

        if sink is not None:
            try:
                sink.end_of_stream()
            except Exception:
                _logger.debug("EventSink rejected end of stream", exc_info=True)

    # ------------------------------------------------------------------
    # Event handling
    # ------------------------------------------------------------------

    def receive(self, event: ScanEvent) -> None:
        """Source-thread entry point: hand *event* to the loop thread."""
        try:
            self._loop.call_soon_threadsafe(self.on_event, event)
        except RuntimeError:
            _logger.debug("Event loop closed; dropping broadcast action=%s", event.tag)

    def on_event(self, event: ScanEvent) -> None:
        action = event.tag or "null"
        _logger.debug("Broadcast received action=%s extras=%s", action, redact_for_log(event.fields))

        received: dict[str, Any] = {
            "lastReceivedAction": action,
            "lastReceivedTime": self._clock(),
        }
        extras = event.delivered_fields
        for key, value in extras.items():
            received[f"lastExtra_{key}"] = describe_value(value)
        received["lastExtras"] = describe_extras(extras)
        self._debug.update_many(received)

        if event.tag == ACTION_SERVICE_CONNECTED:
            self._configure_reader()
            return

        if event.tag == ACTION_PASS_TO_APP:
            label = "Expected Action"
            self._debug.update("lastEvent", "Scan Data Received (Expected Action)")
        else:
            label = "Unknown Action"
            self._debug.update("lastEvent", "Received Intent (Unknown Action)")

        resolved = resolve_payload(event, self._candidate_keys)
        if resolved is None:
            self._report_unresolved()
            return
        self._forward(resolved.value, f"{label} (Key: {resolved.key})")

    def _configure_reader(self) -> None:
        self._debug.update("lastEvent", "ReaderService Connected")
        reader = self._reader
        if not self._config.configure_reader_on_connect or reader is None:
            self._debug.update("readerConfig", "Skipped")
            return
        try:
            applied = reader.disable_keyboard_emulation()
        except Exception as exc:
            _logger.warning("Reader configuration failed: %s", exc, exc_info=True)
            self._debug.update("lastError", f"Reader config error: {exc}")
            return
        self._debug.update("readerConfig", f"Keyboard Emulation: {applied.enable_keyboard_emulation.name.title()}")
        _logger.debug("Reader configuration updated")

    def _report_unresolved(self) -> None:
        _logger.warning(NO_DATA_MESSAGE)
        self._debug.update("lastError", NO_DATA_MESSAGE)
        sink = self._sink
        if sink is None or not self._config.report_unresolved_to_sink:
            return
        try:
            sink.error(ERROR_SCAN, NO_DATA_MESSAGE)
        except Exception:
            _logger.debug("EventSink rejected unresolved-scan error", exc_info=True)

    def _forward(self, payload: str, source_label: str) -> None:
        self._sequence += 1
        sequence = self._sequence
        self._debug.update_many(
            {
                "lastBarcodeData": payload,
                "barcodeSource": source_label,
                "lastScanSequence": sequence,
            }
        )
        _logger.debug("Forwarding scan sequence=%d from %s", sequence, source_label)

        sink = self._sink
        if sink is None:
            _logger.warning("No active sink; scan sequence=%d not streamed", sequence)
            self._debug.update_many(
                {
                    "lastError": "EventSink is null",
                    "dataSentToSink": "false",
                    "eventSinkStatus": "Null",
                }
            )
            self._send_to_debug_channel(payload, sequence, delivered=False, status="true (fallback)")
            return

        try:
            sink.success(payload)
        except Exception as exc:
            _logger.warning("EventSink push failed: %s", exc, exc_info=True)
            self._debug.update_many(
                {
                    "lastError": f"EventSink error: {exc}",
                    "dataSentToSink": "error",
                    "eventSinkException": repr(exc),
                }
            )
            self._send_to_debug_channel(payload, sequence, delivered=False, status="true (after EventSink failure)")
            return

        self._debug.update_many({"dataSentToSink": "true", "eventSinkStatus": "Active and used"})
        if self._config.duplicate_to_debug_channel:
            self._send_to_debug_channel(payload, sequence, delivered=True, status="true")

    def _send_to_debug_channel(self, payload: str, sequence: int, *, delivered: bool, status: str) -> None:
        message = {"data": payload, "sequence": sequence, "delivered": delivered}
        try:
            sent = self._debug_channel.invoke_host(HOST_DIRECT_DATA_RECEIVED, message)
        except DebugChannelError as exc:
            _logger.warning("Debug channel delivery failed: %s", exc)
            self._debug.update("methodChannelDataSent", "error")
            return
        self._debug.update("methodChannelDataSent", status if sent else "false (no host listener)")

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def simulate(self, payload: str | None = None) -> bool:
        """Inject a synthetic scan.

        While listening the event is handled immediately, so the sink
        receives exactly *payload*.  While idle it is broadcast through
        the source, where no receiver is registered, so only the
        diagnostics map changes.
        """
        data = payload if payload is not None else f"{SIMULATED_PAYLOAD_PREFIX}{self._clock()}"
        _logger.debug("Simulating scan with data=%s", redact_for_log(data))
        self._debug.update("simulatedScan", data)

        if self._sink is not None:
            self.on_event(ScanEvent(tag=ACTION_PASS_TO_APP, fields={KEY_DECODER_DATA: data}))
            return True
        _logger.debug("No active sink; broadcasting simulated scan instead")
        return self._send_test_broadcast(data)

    def _send_test_broadcast(self, data: str) -> bool:
        try:
            self._source.send_broadcast(ScanEvent(tag=ACTION_PASS_TO_APP, fields={KEY_DECODER_DATA: data}))
        except Exception as exc:
            _logger.warning("Test broadcast failed: %s", exc, exc_info=True)
            self._debug.update("lastError", f"Test intent error: {exc}")
            return False
        self._debug.update_many({"testIntentSent": "true", "testIntentData": data})
        return True

    def known_tags(self) -> dict[str, Any]:
        return {
            "registeredAction": ACTION_PASS_TO_APP,
            "registeredDataKey": KEY_DECODER_DATA,
            "readerServicePackage": READER_SERVICE_PACKAGE,
            "registeredActions": list(self._actions),
            "candidateKeys": list(self._candidate_keys),
        }

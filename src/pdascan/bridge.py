"""High-level async composition root for the scan relay."""

from __future__ import annotations

import asyncio
import logging
import platform
import sys
from collections.abc import Callable
from typing import Any

from pdascan._constants import (
    ERROR_INTENT,
    ERROR_SCAN,
    HOST_DEBUG_INFO_UPDATED,
    METHOD_GET_DEBUG_INFO,
    METHOD_LIST_INTENTS,
    METHOD_LIST_KNOWN_TAGS,
    METHOD_SIMULATE_SCAN,
)
from pdascan.channels.debug import DebugChannel, HostListener
from pdascan.channels.events import ScanChannel, ScanStream
from pdascan.config import ScannerConfig
from pdascan.exceptions import DebugChannelError, MethodNotImplementedError, ScanError
from pdascan.reader import InMemoryReaderManager, ReaderManager
from pdascan.relay import ScanRelay
from pdascan.sources.base import ScanSource
from pdascan.sources.local import LocalBroadcastSource
from pdascan.state.debug import DebugState

_logger = logging.getLogger(__name__)


class ScannerBridge:
    """Owns one relay, its diagnostics and both host channels.

    Usage::

        async with ScannerBridge(config, source=source) as bridge:
            async with bridge.listen() as stream:
                async for item in stream:
                    ...

    There is no shared instance: construct one bridge per host and pass
    it to whatever needs it.
    """

    def __init__(
        self,
        config: ScannerConfig | None = None,
        *,
        source: ScanSource | None = None,
        reader_factory: Callable[[], ReaderManager] | None = None,
        on_host_call: HostListener | None = None,
    ) -> None:
        self._config = config or ScannerConfig()
        self._source = source if source is not None else LocalBroadcastSource()
        self._reader_factory = reader_factory or InMemoryReaderManager
        self._debug_state = DebugState()
        self._debug_channel = DebugChannel(self._config.debug_channel)
        self._scan_channel = ScanChannel(self._config.scan_channel)
        self._debug_channel.set_host_listener(on_host_call)
        self._debug_channel.set_method_call_handler(self._on_method_call)
        if self._config.notify_debug_updates:
            self._debug_state.set_listener(self._on_debug_update)
        self._relay: ScanRelay | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> ScannerBridge:
        loop = asyncio.get_running_loop()
        reader = self._init_reader()
        relay = ScanRelay(
            config=self._config,
            source=self._source,
            debug_state=self._debug_state,
            debug_channel=self._debug_channel,
            loop=loop,
            reader=reader,
        )
        self._relay = relay
        self._scan_channel.set_stream_handler(relay)
        self._debug_state.update_many(
            {
                "hostPlatform": platform.platform(),
                "pythonVersion": sys.version.split()[0],
            }
        )

        try:
            await loop.run_in_executor(None, self._source.start)
        except ScanError as exc:
            _logger.warning("Event source start failed: %s", exc, exc_info=True)
            self._debug_state.update_many({"sourceStatus": "Error", "lastError": f"Source start error: {exc}"})
        else:
            self._debug_state.update("sourceStatus", "Running")
        return self

    async def __aexit__(self, *exc: Any) -> None:
        active = self._scan_channel.active
        if active is not None:
            active.cancel()
        if self._relay is not None:
            self._relay.stop()
        self._scan_channel.set_stream_handler(None)
        self._relay = None
        try:
            await asyncio.get_running_loop().run_in_executor(None, self._source.stop)
        except Exception:
            _logger.debug("Event source stop failed", exc_info=True)
        self._debug_state.update("sourceStatus", "Stopped")

    def _init_reader(self) -> ReaderManager | None:
        try:
            reader = self._reader_factory()
        except Exception as exc:
            _logger.warning("Reader manager initialization failed: %s", exc, exc_info=True)
            self._debug_state.update("readerManagerStatus", f"Error: {exc}")
            return None
        self._debug_state.update("readerManagerStatus", "Initialized")
        return reader

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def config(self) -> ScannerConfig:
        return self._config

    @property
    def source(self) -> ScanSource:
        return self._source

    @property
    def debug_state(self) -> DebugState:
        return self._debug_state

    @property
    def debug_channel(self) -> DebugChannel:
        return self._debug_channel

    @property
    def scan_channel(self) -> ScanChannel:
        return self._scan_channel

    @property
    def relay(self) -> ScanRelay:
        if self._relay is None:
            raise ScanError("ScannerBridge is not started; use 'async with'")
        return self._relay

    # ------------------------------------------------------------------
    # Host API
    # ------------------------------------------------------------------

    def listen(self, arguments: Any = None) -> ScanStream:
        """Start (or restart) the single scan subscription."""
        return self._scan_channel.listen(arguments)

    async def get_debug_info(self) -> dict[str, Any]:
        return await self._debug_channel.invoke(METHOD_GET_DEBUG_INFO)

    async def list_known_tags(self) -> dict[str, Any]:
        return await self._debug_channel.invoke(METHOD_LIST_KNOWN_TAGS)

    async def simulate_scan(self, data: str | None = None) -> bool:
        return await self._debug_channel.invoke(METHOD_SIMULATE_SCAN, {"data": data})

    # ------------------------------------------------------------------
    # Debug channel plumbing
    # ------------------------------------------------------------------

    async def _on_method_call(self, method: str, arguments: dict[str, Any]) -> Any:
        if method == METHOD_GET_DEBUG_INFO:
            return self._debug_state.snapshot()

        if method in (METHOD_LIST_INTENTS, METHOD_LIST_KNOWN_TAGS):
            try:
                return self.relay.known_tags()
            except Exception as exc:
                _logger.warning("Error listing intents: %s", exc)
                raise DebugChannelError(str(exc), code=ERROR_INTENT) from exc

        if method == METHOD_SIMULATE_SCAN:
            data = arguments.get("data")
            if data is not None and not isinstance(data, str):
                raise DebugChannelError("data must be a string", code=ERROR_SCAN, details=data)
            try:
                return self.relay.simulate(data)
            except Exception as exc:
                _logger.warning("Error simulating scan: %s", exc)
                raise DebugChannelError(str(exc), code=ERROR_SCAN) from exc

        raise MethodNotImplementedError(method)

    def _on_debug_update(self, snapshot: dict[str, Any]) -> None:
        self._debug_channel.invoke_host(HOST_DEBUG_INFO_UPDATED, snapshot)

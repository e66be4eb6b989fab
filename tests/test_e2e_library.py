from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

import pytest

from pdascan import ScannerBridge, ScannerConfig
from pdascan._constants import (
    ACTION_PASS_TO_APP,
    ACTION_SERVICE_CONNECTED,
    HOST_DEBUG_INFO_UPDATED,
    HOST_DIRECT_DATA_RECEIVED,
    KEY_DECODER_DATA,
)
from pdascan.config import MqttSourceConfig
from pdascan.exceptions import DebugChannelError, MethodNotImplementedError, SourceError
from pdascan.models.reader import KeyboardEmulationType
from pdascan.models.scan import ScanEvent
from pdascan.reader import InMemoryReaderManager
from pdascan.relay import RelayState
from pdascan.sources.local import LocalBroadcastSource
from pdascan.sources.mqtt import MqttScanSource


@dataclass
class HostRecorder:
    calls: list[tuple[str, Any]] = field(default_factory=list)

    def __call__(self, method: str, arguments: Any) -> None:
        self.calls.append((method, arguments))

    def methods(self, name: str) -> list[Any]:
        return [args for method, args in self.calls if method == name]


class _UnavailableSource(LocalBroadcastSource):
    def start(self) -> None:
        raise SourceError("scanner service not installed")


async def _next(stream: Any) -> Any:
    return await asyncio.wait_for(anext(stream), timeout=2.0)


async def _collect(stream: Any) -> list[Any]:
    return [item async for item in stream]


@pytest.mark.asyncio
async def test_vendor_broadcast_reaches_stream_and_debug_channel() -> None:
    source = LocalBroadcastSource()
    host = HostRecorder()

    async with ScannerBridge(ScannerConfig(), source=source, on_host_call=host) as bridge:
        async with bridge.listen() as stream:
            assert bridge.relay.state == RelayState.LISTENING
            source.send_broadcast(ScanEvent(tag=ACTION_PASS_TO_APP, fields={KEY_DECODER_DATA: "4006381333931"}))

            item = await _next(stream)

        assert item.payload == "4006381333931"
        assert host.methods(HOST_DIRECT_DATA_RECEIVED) == [
            {"data": "4006381333931", "sequence": 1, "delivered": True}
        ]
        assert host.methods(HOST_DEBUG_INFO_UPDATED)
        assert bridge.relay.state == RelayState.IDLE

    assert not source.is_running


@pytest.mark.asyncio
async def test_speculative_action_and_key_are_resolved() -> None:
    source = LocalBroadcastSource()

    async with ScannerBridge(source=source) as bridge:
        async with bridge.listen() as stream:
            source.send_broadcast(
                ScanEvent(
                    tag="com.symbol.datawedge.api.ACTION",
                    fields={"noise": "ignored", "barcode_data": "LOW", "SCAN_RESULT": "HIGH"},
                )
            )

            item = await _next(stream)

    assert item.payload == "HIGH"


@pytest.mark.asyncio
async def test_simulate_scan_round_trip_through_debug_channel() -> None:
    source = LocalBroadcastSource()

    async with ScannerBridge(source=source) as bridge:
        async with bridge.listen() as stream:
            assert await bridge.simulate_scan("X123") is True
            item = await _next(stream)

        info = await bridge.get_debug_info()

    assert item.payload == "X123"
    assert info["simulatedScan"] == "X123"
    assert info["lastBarcodeData"] == "X123"


@pytest.mark.asyncio
async def test_simulate_scan_without_listener_only_updates_diagnostics() -> None:
    source = LocalBroadcastSource()
    host = HostRecorder()

    async with ScannerBridge(source=source, on_host_call=host) as bridge:
        assert await bridge.simulate_scan() is True
        source.wait_idle()
        await asyncio.sleep(0)
        info = await bridge.get_debug_info()

    assert info["simulatedScan"].startswith("TEST_BARCODE_")
    assert info["testIntentSent"] == "true"
    assert "lastBarcodeData" not in info
    assert host.methods(HOST_DIRECT_DATA_RECEIVED) == []


@pytest.mark.asyncio
async def test_service_connected_configures_reader() -> None:
    source = LocalBroadcastSource()
    reader = InMemoryReaderManager()

    async with ScannerBridge(source=source, reader_factory=lambda: reader) as bridge:
        async with bridge.listen():
            source.send_broadcast(ScanEvent(tag=ACTION_SERVICE_CONNECTED))
            source.wait_idle()
            await asyncio.sleep(0)

        info = await bridge.get_debug_info()

    assert reader.get_output_configuration().enable_keyboard_emulation == KeyboardEmulationType.NONE
    assert info["readerManagerStatus"] == "Initialized"
    assert info["readerConfig"] == "Keyboard Emulation: None"


@pytest.mark.asyncio
async def test_list_known_tags() -> None:
    async with ScannerBridge() as bridge:
        tags = await bridge.list_known_tags()
        legacy = await bridge.debug_channel.invoke("listAvailableIntents")

    assert tags["registeredAction"] == ACTION_PASS_TO_APP
    assert tags["registeredDataKey"] == KEY_DECODER_DATA
    assert legacy == tags


@pytest.mark.asyncio
async def test_unknown_debug_method_not_implemented() -> None:
    async with ScannerBridge() as bridge:
        with pytest.raises(MethodNotImplementedError):
            await bridge.debug_channel.invoke("reboot")


@pytest.mark.asyncio
async def test_simulate_scan_rejects_non_string_data() -> None:
    async with ScannerBridge() as bridge:
        with pytest.raises(DebugChannelError) as exc_info:
            await bridge.debug_channel.invoke("simulateScan", {"data": 123})

    assert exc_info.value.code == "SCAN_ERROR"


@pytest.mark.asyncio
async def test_source_start_failure_is_recorded_not_raised() -> None:
    async with ScannerBridge(source=_UnavailableSource()) as bridge:
        info = await bridge.get_debug_info()

        assert await bridge.simulate_scan("X") is False

    assert info["sourceStatus"] == "Error"
    assert info["lastError"] == "Source start error: scanner service not installed"


@pytest.mark.asyncio
async def test_reader_factory_failure_is_recorded() -> None:
    def _factory() -> InMemoryReaderManager:
        raise RuntimeError("SDK missing")

    async with ScannerBridge(reader_factory=_factory) as bridge:
        info = await bridge.get_debug_info()

    assert info["readerManagerStatus"] == "Error: SDK missing"


@pytest.mark.asyncio
async def test_new_listener_replaces_previous_one() -> None:
    source = LocalBroadcastSource()

    async with ScannerBridge(source=source) as bridge:
        first = bridge.listen()
        second = bridge.listen()
        source.send_broadcast(ScanEvent(tag=ACTION_PASS_TO_APP, fields={KEY_DECODER_DATA: "ONLY-SECOND"}))

        item = await _next(second)
        second.cancel()

    assert first.is_closed
    assert item.payload == "ONLY-SECOND"
    assert first.drain() == []


@pytest.mark.asyncio
async def test_direct_relay_stop_terminates_consumer() -> None:
    source = LocalBroadcastSource()

    async with ScannerBridge(source=source) as bridge:
        stream = bridge.listen()

        bridge.relay.stop()
        items = await asyncio.wait_for(_collect(stream), timeout=2.0)

        assert items == []
        assert stream.is_closed
        assert bridge.scan_channel.active is None
        assert bridge.relay.state == RelayState.IDLE
        assert not source.has_receivers()

        again = bridge.listen()
        assert bridge.relay.state == RelayState.LISTENING
        again.cancel()


@pytest.mark.asyncio
async def test_unusable_mqtt_port_is_recorded_not_raised() -> None:
    source = MqttScanSource(MqttSourceConfig(port=0))

    async with ScannerBridge(source=source) as bridge:
        info = await bridge.get_debug_info()

        assert bridge.relay.state == RelayState.IDLE

    assert info["sourceStatus"] == "Error"
    assert info["lastError"].startswith("Source start error: MQTT connect to localhost:0 failed")
    assert not source.is_running

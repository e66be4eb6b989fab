"""MQTT gateway source: parsing and threaded paho-mqtt runtime."""

from __future__ import annotations

import json
import logging
from typing import Any, cast

import paho.mqtt.client as mqtt
from pydantic import ValidationError

from pdascan.config import MqttSourceConfig
from pdascan.exceptions import SourceError
from pdascan.models.scan import ScanEvent
from pdascan.sources.base import ScanSource


def decode_broadcast_payload(payload: bytes) -> ScanEvent:
    """Parse a gateway message into a :class:`ScanEvent`.

    The gateway publishes ``{"action": ..., "extras": {...}}``;
    ``tag``/``fields`` are accepted as aliases.
    """
    try:
        parsed = json.loads(payload.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise SourceError(f"Broadcast payload is not valid JSON: {exc}") from exc
    if not isinstance(parsed, dict):
        raise SourceError("Broadcast payload decoded to non-object JSON")
    try:
        return ScanEvent.model_validate(parsed)
    except ValidationError as exc:
        raise SourceError(f"Broadcast payload has an invalid shape: {exc}") from exc


def encode_broadcast_payload(event: ScanEvent) -> bytes:
    return json.dumps({"action": event.tag, "extras": event.fields}).encode("utf-8")


class MqttScanSource(ScanSource):
    """Threaded paho-mqtt source that dispatches gateway broadcasts to receivers."""

    def __init__(
        self,
        config: MqttSourceConfig,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(logger=logger)
        self._config = config
        self._client: mqtt.Client | None = None
        self._running = False

    @property
    def is_running(self) -> bool:
        """Whether the MQTT network loop is active."""
        return self._running

    def start(self) -> None:
        """Connect and subscribe to the configured broadcast topic."""
        self.stop()
        config = self._config
        self._logger.debug(
            "MQTT source start requested host=%s port=%s topic=%s client_id=%s",
            config.host,
            config.port,
            config.topic,
            config.client_id,
        )

        client = mqtt.Client(
            callback_api_version=cast(Any, mqtt).CallbackAPIVersion.VERSION2,
            client_id=config.client_id,
            protocol=mqtt.MQTTv5,
        )
        client.enable_logger(self._logger)
        if config.username:
            client.username_pw_set(config.username, config.password)
        if config.tls:
            client.tls_set()

        def on_connect(
            c: mqtt.Client,
            _userdata: Any,
            _flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            if reason_code.value != 0:
                self._logger.warning("MQTT connect failed: %s", reason_code)
                return
            self._logger.debug("MQTT connected, subscribing topic=%s", config.topic)
            c.subscribe(config.topic, qos=0)

        def on_message(_c: mqtt.Client, _userdata: Any, msg: mqtt.MQTTMessage) -> None:
            try:
                event = decode_broadcast_payload(msg.payload)
            except SourceError:
                self._logger.debug("MQTT broadcast parse failure topic=%s", msg.topic, exc_info=True)
                return
            matched = self._dispatch(event)
            self._logger.debug("MQTT broadcast action=%s receivers=%d", event.tag, matched)

        def on_disconnect(
            _client: mqtt.Client,
            _userdata: Any,
            _disconnect_flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            if self._running:
                self._logger.debug("MQTT disconnected: %s", reason_code)

        client.on_connect = on_connect
        client.on_message = on_message
        client.on_disconnect = on_disconnect

        try:
            client.connect(config.host, config.port, keepalive=config.keepalive)
        except (OSError, ValueError) as exc:
            # paho raises ValueError for an unusable host or port.
            raise SourceError(f"MQTT connect to {config.host}:{config.port} failed: {exc}") from exc
        client.loop_start()

        self._client = client
        self._running = True
        self._logger.debug("MQTT network loop started")

    def stop(self) -> None:
        """Stop and disconnect current MQTT client if running."""
        client = self._client
        self._client = None
        was_running = self._running
        self._running = False

        if client is None:
            return
        try:
            if was_running:
                self._logger.debug("MQTT disconnect requested")
                client.disconnect()
        finally:
            client.loop_stop()
            self._logger.debug("MQTT network loop stopped")

    def send_broadcast(self, event: ScanEvent) -> None:
        client = self._client
        if client is None or not self._running:
            raise SourceError("MQTT source is not running")
        info = client.publish(self._config.topic, encode_broadcast_payload(event), qos=0)
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            raise SourceError(f"MQTT publish failed rc={info.rc}")

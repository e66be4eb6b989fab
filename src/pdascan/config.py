"""Relay configuration for pdascan."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pdascan._constants import DEBUG_CHANNEL, SCAN_CHANNEL
from pdascan.exceptions import ScanConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_list(value: str | None) -> tuple[str, ...] | None:
    if value is None:
        return None
    return tuple(item.strip() for item in value.split(",") if item.strip())


def _env_int(name: str, value: str) -> int:
    try:
        return int(value)
    except ValueError as exc:
        raise ScanConfigError(f"{name} must be an integer, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class MqttSourceConfig:
    """Connection settings for :class:`~pdascan.sources.mqtt.MqttScanSource`.

    The gateway republishes every decoder broadcast as a JSON object on
    ``topic``; self-test broadcasts are published back to the same topic.
    """

    host: str = "localhost"
    port: int = 1883
    topic: str = "pdascan/broadcast"
    client_id: str = "pdascan"
    username: str | None = None
    password: str | None = None
    keepalive: int = 60
    tls: bool = False


@dataclasses.dataclass(frozen=True)
class ScannerConfig:
    """Relay configuration.

    Parameters
    ----------
    scan_channel : str
        Name of the streaming scan channel.
    debug_channel : str
        Name of the request/response diagnostics channel.
    extra_actions : tuple of str
        Additional broadcast actions to listen for, after the built-in table.
    extra_data_keys : tuple of str
        Additional payload keys to probe, at the lowest priority.
    configure_reader_on_connect : bool
        Switch the reader's keyboard emulation off when the reader
        service announces it is connected.
    self_test_on_register : bool
        Broadcast a ``TEST_BARCODE_123`` event right after the receiver
        is registered, to verify the broadcast path end to end.
    duplicate_to_debug_channel : bool
        Also deliver every forwarded scan through the debug channel
        (``directDataReceived``).  Fallback delivery when the stream is
        absent or failing happens regardless.
    report_unresolved_to_sink : bool
        Send a ``SCAN_ERROR`` to the stream when an event carries no
        recognisable payload.  Otherwise this is only a diagnostics entry.
    notify_debug_updates : bool
        Push the debug snapshot to the host (``debugInfoUpdated``) after
        every diagnostics write.
    mqtt : MqttSourceConfig
        Settings for the MQTT gateway source.
    """

    scan_channel: str = SCAN_CHANNEL
    debug_channel: str = DEBUG_CHANNEL
    extra_actions: tuple[str, ...] = ()
    extra_data_keys: tuple[str, ...] = ()
    configure_reader_on_connect: bool = True
    self_test_on_register: bool = False
    duplicate_to_debug_channel: bool = True
    report_unresolved_to_sink: bool = False
    notify_debug_updates: bool = True
    mqtt: MqttSourceConfig = dataclasses.field(default_factory=MqttSourceConfig)

    @classmethod
    def from_env(cls, **overrides: Any) -> ScannerConfig:
        """Create configuration from ``PDASCAN_*`` environment variables.

        Explicit keyword arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        ScannerConfig
            Populated configuration.

        Raises
        ------
        ScanConfigError
            If a numeric variable cannot be parsed.
        """
        env = os.environ

        mqtt_kwargs: dict[str, Any] = {}
        _ENV_MQTT_MAP = {
            "PDASCAN_MQTT_HOST": "host",
            "PDASCAN_MQTT_TOPIC": "topic",
            "PDASCAN_MQTT_CLIENT_ID": "client_id",
            "PDASCAN_MQTT_USERNAME": "username",
            "PDASCAN_MQTT_PASSWORD": "password",
        }
        for env_key, field_name in _ENV_MQTT_MAP.items():
            val = env.get(env_key)
            if val is not None:
                mqtt_kwargs[field_name] = val

        for env_key, field_name in (("PDASCAN_MQTT_PORT", "port"), ("PDASCAN_MQTT_KEEPALIVE", "keepalive")):
            val = env.get(env_key)
            if val is not None:
                mqtt_kwargs[field_name] = _env_int(env_key, val)

        tls_env = env.get("PDASCAN_MQTT_TLS")
        if tls_env is not None:
            mqtt_kwargs["tls"] = _env_bool(tls_env, False)

        # Allow overriding MQTT fields via a nested dict
        mqtt_overrides = overrides.pop("mqtt", None)
        if isinstance(mqtt_overrides, dict):
            mqtt_kwargs.update(mqtt_overrides)
        elif isinstance(mqtt_overrides, MqttSourceConfig):
            mqtt_kwargs = dataclasses.asdict(mqtt_overrides)

        config_kwargs: dict[str, Any] = {"mqtt": MqttSourceConfig(**mqtt_kwargs)}

        for env_key, field_name in (
            ("PDASCAN_SCAN_CHANNEL", "scan_channel"),
            ("PDASCAN_DEBUG_CHANNEL", "debug_channel"),
        ):
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        for env_key, field_name in (
            ("PDASCAN_EXTRA_ACTIONS", "extra_actions"),
            ("PDASCAN_EXTRA_DATA_KEYS", "extra_data_keys"),
        ):
            items = _env_list(env.get(env_key))
            if items is not None:
                config_kwargs[field_name] = items

        _ENV_FLAG_MAP = {
            "PDASCAN_CONFIGURE_READER": "configure_reader_on_connect",
            "PDASCAN_SELF_TEST": "self_test_on_register",
            "PDASCAN_DUPLICATE_TO_DEBUG": "duplicate_to_debug_channel",
            "PDASCAN_REPORT_UNRESOLVED": "report_unresolved_to_sink",
            "PDASCAN_NOTIFY_DEBUG_UPDATES": "notify_debug_updates",
        }
        for env_key, field_name in _ENV_FLAG_MAP.items():
            if field_name in overrides:
                continue
            default = getattr(cls, field_name)
            config_kwargs[field_name] = _env_bool(env.get(env_key), default)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)

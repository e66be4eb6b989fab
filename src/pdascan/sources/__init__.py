"""Event sources.

Adapters that receive scanner broadcasts (in-process bus, MQTT gateway)
and deliver them as :class:`~pdascan.models.scan.ScanEvent` to registered
receivers on the source's own thread.
"""

from pdascan.sources.base import BroadcastReceiver, ScanSource
from pdascan.sources.local import LocalBroadcastSource
from pdascan.sources.mqtt import MqttScanSource

__all__ = [
    "BroadcastReceiver",
    "LocalBroadcastSource",
    "MqttScanSource",
    "ScanSource",
]

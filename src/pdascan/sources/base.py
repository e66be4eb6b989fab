"""Receiver registry shared by all event sources."""

from __future__ import annotations

import abc
import logging
import threading
from collections.abc import Callable, Iterable

from pdascan.exceptions import SourceRegistrationError
from pdascan.models.scan import ScanEvent

BroadcastReceiver = Callable[[ScanEvent], None]


class ScanSource(abc.ABC):
    """Base class for scanner event sources.

    Receivers are registered with an action filter and are called on the
    source's delivery thread for every event whose tag is in the filter.
    Receivers must not block; the relay only hops onto its event loop.
    """

    def __init__(self, *, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger(__name__)
        self._lock = threading.Lock()
        self._receivers: dict[BroadcastReceiver, frozenset[str]] = {}

    @property
    @abc.abstractmethod
    def is_running(self) -> bool:
        """Whether the source is currently able to deliver events."""

    @abc.abstractmethod
    def start(self) -> None:
        """Begin delivering events.  May block (network connect)."""

    @abc.abstractmethod
    def stop(self) -> None:
        """Stop delivering events.  Safe to call when not running."""

    @abc.abstractmethod
    def send_broadcast(self, event: ScanEvent) -> None:
        """Publish *event* as if the scanner service had sent it."""

    def register_receiver(self, receiver: BroadcastReceiver, actions: Iterable[str]) -> None:
        action_set = frozenset(actions)
        if not action_set:
            raise SourceRegistrationError("Receiver must listen for at least one action")
        with self._lock:
            self._receivers[receiver] = action_set
        self._logger.debug("Receiver registered actions=%d", len(action_set))

    def unregister_receiver(self, receiver: BroadcastReceiver) -> None:
        with self._lock:
            if self._receivers.pop(receiver, None) is None:
                raise SourceRegistrationError("Receiver not registered")
        self._logger.debug("Receiver unregistered")

    def has_receivers(self) -> bool:
        with self._lock:
            return bool(self._receivers)

    def _dispatch(self, event: ScanEvent) -> int:
        """Deliver *event* to every matching receiver; return how many matched."""
        with self._lock:
            targets = [r for r, actions in self._receivers.items() if event.tag in actions]
        for receiver in targets:
            try:
                receiver(event)
            except Exception:
                self._logger.debug("Receiver failed for action=%s", event.tag, exc_info=True)
        return len(targets)

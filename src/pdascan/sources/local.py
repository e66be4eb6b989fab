"""In-process broadcast bus."""

from __future__ import annotations

import logging
import queue
import threading

from pdascan.exceptions import SourceError
from pdascan.models.scan import ScanEvent
from pdascan.sources.base import ScanSource

_STOP = object()


class LocalBroadcastSource(ScanSource):
    """Thread-backed broadcast bus that stands in for the platform broadcast mechanism.

    ``send_broadcast`` only enqueues; a dedicated delivery thread hands
    each event to the matching receivers, so receivers always run off
    the caller's thread.
    """

    def __init__(self, *, logger: logging.Logger | None = None) -> None:
        super().__init__(logger=logger)
        self._queue: queue.Queue[object] = queue.Queue()
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            return
        thread = threading.Thread(target=self._run, name="pdascan-broadcast", daemon=True)
        self._thread = thread
        thread.start()
        self._logger.debug("Broadcast bus started")

    def stop(self) -> None:
        thread = self._thread
        self._thread = None
        if thread is None:
            return
        self._queue.put(_STOP)
        thread.join()
        self._logger.debug("Broadcast bus stopped")

    def send_broadcast(self, event: ScanEvent) -> None:
        if not self.is_running:
            raise SourceError("Broadcast bus is not running")
        self._queue.put(event)

    def wait_idle(self) -> None:
        """Block until every broadcast sent so far has been delivered."""
        self._queue.join()

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                if isinstance(item, ScanEvent):
                    matched = self._dispatch(item)
                    self._logger.debug("Broadcast delivered action=%s receivers=%d", item.tag, matched)
            finally:
                self._queue.task_done()

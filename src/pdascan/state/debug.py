"""Latest-write-wins diagnostics store."""

from __future__ import annotations

import copy
import logging
import time
from collections.abc import Callable, Mapping
from typing import Any

_logger = logging.getLogger(__name__)

LAST_UPDATED_KEY = "lastUpdated"


def _now_ms() -> int:
    """Current epoch timestamp in milliseconds."""
    return int(time.time() * 1000)


class DebugState:
    """In-memory diagnostics map.

    Every write stamps ``lastUpdated`` (epoch milliseconds) and, when a
    listener is attached, hands it a snapshot.  Listener failures are
    logged and never propagate into the writer.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], int] = _now_ms,
        on_update: Callable[[dict[str, Any]], None] | None = None,
    ) -> None:
        self._clock = clock
        self._on_update = on_update
        self._values: dict[str, Any] = {}

    def set_listener(self, on_update: Callable[[dict[str, Any]], None] | None) -> None:
        self._on_update = on_update

    def update(self, key: str, value: Any) -> None:
        self._values[key] = value
        self._values[LAST_UPDATED_KEY] = self._clock()
        self._notify()

    def update_many(self, values: Mapping[str, Any]) -> None:
        """Apply several writes with a single ``lastUpdated`` stamp and notification."""
        if not values:
            return
        self._values.update(values)
        self._values[LAST_UPDATED_KEY] = self._clock()
        self._notify()

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def snapshot(self) -> dict[str, Any]:
        return copy.deepcopy(self._values)

    def _notify(self) -> None:
        listener = self._on_update
        if listener is None:
            return
        try:
            listener(self.snapshot())
        except Exception:
            _logger.debug("debug state listener failed", exc_info=True)

"""Single-subscriber scan stream.

:class:`ScanChannel` is the endpoint a host listens on.  Each
:meth:`ScanChannel.listen` returns a :class:`ScanStream`, which is both
the :class:`EventSink` the producer pushes into and the async iterator
the consumer reads from.  Only one stream is live per channel; listening
again cancels the previous one first.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol

from pdascan.exceptions import SinkClosedError
from pdascan.models.stream import StreamEvent

_logger = logging.getLogger(__name__)


class EventSink(Protocol):
    def success(self, payload: str) -> None: ...

    def error(self, code: str, message: str | None = None, details: Any = None) -> None: ...

    def end_of_stream(self) -> None: ...


class StreamHandler(Protocol):
    def on_listen(self, arguments: Any, sink: EventSink) -> None: ...

    def on_cancel(self, arguments: Any) -> None: ...


class ScanStream:
    """One subscription on a :class:`ScanChannel`.

    Pushes never block: items go onto an unbounded :class:`asyncio.Queue`.
    Pushing after :meth:`cancel` or :meth:`end_of_stream` raises
    :class:`~pdascan.exceptions.SinkClosedError`.

    Usage::

        async with channel.listen() as stream:
            async for item in stream:
                ...
    """

    def __init__(self, channel: ScanChannel, arguments: Any = None) -> None:
        self._channel = channel
        self.arguments = arguments
        self._queue: asyncio.Queue[StreamEvent | None] = asyncio.Queue()
        self._closed = False

    @property
    def is_closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Producer side (EventSink)
    # ------------------------------------------------------------------

    def success(self, payload: str) -> None:
        self._push(StreamEvent.data(payload))

    def error(self, code: str, message: str | None = None, details: Any = None) -> None:
        self._push(StreamEvent.error(code, message, details))

    def end_of_stream(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(None)
        self._channel._detach(self)

    def _push(self, item: StreamEvent) -> None:
        if self._closed:
            raise SinkClosedError(f"Stream on {self._channel.name} is closed")
        self._queue.put_nowait(item)

    # ------------------------------------------------------------------
    # Consumer side
    # ------------------------------------------------------------------

    def cancel(self) -> None:
        """Stop receiving.  Idempotent."""
        if not self._closed:
            self._closed = True
            # Wake any consumer blocked in __anext__.
            self._queue.put_nowait(None)
        self._channel._release(self)

    def drain(self) -> list[StreamEvent]:
        """Return every item already queued without waiting."""
        items: list[StreamEvent] = []
        while not self._queue.empty():
            item = self._queue.get_nowait()
            if item is not None:
                items.append(item)
        return items

    def __aiter__(self) -> ScanStream:
        return self

    async def __anext__(self) -> StreamEvent:
        if self._closed and self._queue.empty():
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is None:
            raise StopAsyncIteration
        return item

    async def __aenter__(self) -> ScanStream:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        self.cancel()


class ScanChannel:
    """Named streaming endpoint with at most one live subscription."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._handler: StreamHandler | None = None
        self._active: ScanStream | None = None

    @property
    def active(self) -> ScanStream | None:
        return self._active

    def set_stream_handler(self, handler: StreamHandler | None) -> None:
        self._handler = handler

    def listen(self, arguments: Any = None) -> ScanStream:
        previous = self._active
        if previous is not None:
            _logger.debug("%s: new listener replaces the active one", self.name)
            previous.cancel()

        stream = ScanStream(self, arguments)
        self._active = stream
        handler = self._handler
        if handler is None:
            _logger.debug("%s: no stream handler set, stream stays empty", self.name)
        else:
            handler.on_listen(arguments, stream)
        return stream

    def _detach(self, stream: ScanStream) -> None:
        # Producer ended the stream; the handler already knows.
        if self._active is stream:
            self._active = None

    def _release(self, stream: ScanStream) -> None:
        if self._active is not stream:
            return
        self._active = None
        handler = self._handler
        if handler is not None:
            handler.on_cancel(stream.arguments)

"""Request/response diagnostics channel."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from pdascan.exceptions import DebugChannelError, MethodNotImplementedError

_logger = logging.getLogger(__name__)

MethodCallHandler = Callable[[str, dict[str, Any]], Awaitable[Any] | Any]
HostListener = Callable[[str, Any], None]

HOST_ERROR = "HOST_ERROR"


class DebugChannel:
    """Two-way diagnostics channel.

    Inbound: the host calls :meth:`invoke`, which is routed to the method
    call handler.  Outbound: the library calls :meth:`invoke_host`, which
    is routed to the host listener, if one is attached.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._handler: MethodCallHandler | None = None
        self._host_listener: HostListener | None = None

    def set_method_call_handler(self, handler: MethodCallHandler | None) -> None:
        self._handler = handler

    def set_host_listener(self, listener: HostListener | None) -> None:
        self._host_listener = listener

    async def invoke(self, method: str, arguments: dict[str, Any] | None = None) -> Any:
        """Call *method* on the library side and return its result.

        Raises
        ------
        MethodNotImplementedError
            When no handler is set or the handler does not know *method*.
        DebugChannelError
            When the handler reports a failure.
        """
        handler = self._handler
        if handler is None:
            raise MethodNotImplementedError(method)
        result = handler(method, dict(arguments or {}))
        if inspect.isawaitable(result):
            result = await result
        return result

    def invoke_host(self, method: str, arguments: Any = None) -> bool:
        """Deliver *method* to the host listener.

        Returns ``False`` when no listener is attached.  A listener
        failure is raised as :class:`DebugChannelError` with code
        ``HOST_ERROR``.
        """
        listener = self._host_listener
        if listener is None:
            return False
        try:
            listener(method, arguments)
        except Exception as exc:
            raise DebugChannelError(str(exc), code=HOST_ERROR, details=method) from exc
        return True

# pkghost/host/ipc.py
from __future__ import annotations
import inspect
import logging
from collections.abc import Callable
from typing import Any, Protocol

logger = logging.getLogger(__name__)

__all__ = ["MessageTransport", "MessageBus", "MessageDispatcher"]



Handler = Callable[..., Any]



class MessageTransport(Protocol):
    def on(self, name: str, handler: Handler) -> None: ...
    def off(self, name: str, handler: Handler) -> None: ...



class MessageBus:
    """
    In-process message transport. Message names are "owner:message" strings.

    - send(): fire-and-forget to every handler, failures are logged
    - request(): first handler answers, failures propagate to the caller
    """
    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = {}

    def on(self, name: str, handler: Handler) -> None:
        if not isinstance(name, str) or not name:
            raise ValueError("Message name must be a non-empty string")
        if not callable(handler):
            raise TypeError(f"Handler for '{name}' must be callable")
        self._handlers.setdefault(name, []).append(handler)

    def off(self, name: str, handler: Handler) -> None:
        handlers = self._handlers.get(name)
        if not handlers:
            return
        try:
            handlers.remove(handler)
        except ValueError:
            return
        if not handlers:
            del self._handlers[name]

    def handlers(self, name: str) -> list[Handler]:
        return list(self._handlers.get(name, ()))

    def names(self) -> list[str]:
        return sorted(self._handlers)

    async def send(self, name: str, *args: Any) -> int:
        """Returns how many handlers were invoked."""
        handlers = self.handlers(name)
        for handler in handlers:
            try:
                res = handler(*args)
                if inspect.isawaitable(res):
                    await res
            except Exception:
                logger.exception("Message handler for '%s' failed", name)
        return len(handlers)

    async def request(self, name: str, *args: Any) -> Any:
        handlers = self._handlers.get(name)
        if not handlers:
            raise LookupError(f"No handler registered for message '{name}'")
        res = handlers[0](*args)
        if inspect.isawaitable(res):
            return await res
        return res



class MessageDispatcher:
    """
    Owns the subscriptions one package made on a transport so they can be
    dropped together.
    """
    def __init__(self, transport: MessageTransport) -> None:
        self._transport = transport
        self._subscriptions: list[tuple[str, Handler]] = []

    def on(self, name: str, handler: Handler) -> None:
        self._transport.on(name, handler)
        self._subscriptions.append((name, handler))

    def clear(self) -> None:
        while self._subscriptions:
            name, handler = self._subscriptions.pop()
            self._transport.off(name, handler)

    @property
    def names(self) -> list[str]:
        return [name for name, _handler in self._subscriptions]

    def __len__(self) -> int:
        return len(self._subscriptions)

# pkghost/host/broadcast.py
from __future__ import annotations
import asyncio
import inspect
import logging
from collections.abc import Callable
from typing import Any, Protocol

from pkghost.core.ids import uuidv7

logger = logging.getLogger(__name__)

__all__ = ["Broadcaster", "WindowBroadcaster"]



WindowSink = Callable[[dict[str, Any]], Any]



class Broadcaster(Protocol):
    async def notifyAllWindows(self, event: str, payload: Any) -> None: ...



class WindowBroadcaster:
    """
    Fan-out of host notifications to every registered window.

    Each window receives its own envelope:
      - id: UUIDv7 shared by all copies of one notification
      - event: e.g. "package:loaded"
      - payload: event payload
    """
    def __init__(self) -> None:
        self._windows: dict[str, WindowSink] = {}

    def addWindow(self, windowId: str, sink: WindowSink) -> None:
        if not windowId or not isinstance(windowId, str):
            raise ValueError("Window id must be a non-empty string")
        self._windows[windowId] = sink

    def removeWindow(self, windowId: str) -> None:
        self._windows.pop(windowId, None)

    def windowIds(self) -> list[str]:
        return list(self._windows)

    async def notifyAllWindows(self, event: str, payload: Any) -> None:
        envelope = {"id": uuidv7(), "event": event, "payload": payload}
        tasks = [self._sendOne(windowId, sink, envelope) for windowId, sink in list(self._windows.items())]
        if tasks:
            await asyncio.gather(*tasks)

    async def _sendOne(self, windowId: str, sink: WindowSink, envelope: dict[str, Any]) -> None:
        try:
            res = sink(dict(envelope))
            if inspect.isawaitable(res):
                await res
        except Exception:
            # Never crash on broadcast of a single window
            logger.debug("notifyAllWindows failed for windowId=%r event=%r", windowId, envelope["event"], exc_info=True)

"""
Delivery channel for ``msg:preview`` notifications.

Consumers either register callbacks::

    channel = EventChannel()

    @channel.on("msg:preview")
    async def push(event: PreviewEvent): ...

or pull from a queue::

    queue = channel.subscribe()
    event = await queue.get()

Each completed preview is emitted once. There is no "done" event; a message
may receive zero or more previews.
"""

from __future__ import annotations

import asyncio
import inspect
from collections import defaultdict
from typing import Any, Awaitable, Callable, DefaultDict, List, Union

from .model import PREVIEW_EVENT, PreviewEvent

import logging
logger = logging.getLogger(__name__)

Listener = Callable[[PreviewEvent], Union[None, Awaitable[None]]]


class EventChannel:
    def __init__(self) -> None:
        self._listeners: DefaultDict[str, List[Listener]] = defaultdict(list)
        self._queues: List[asyncio.Queue[PreviewEvent]] = []

    # ---------- callbacks -------------------------------------------- #

    def on(self, name: str = PREVIEW_EVENT, callback: Listener | None = None) -> Any:
        """Register ``callback`` for ``name``; usable as a decorator."""
        if callback is None:
            def decorator(fn: Listener) -> Listener:
                self._listeners[name].append(fn)
                return fn

            return decorator
        self._listeners[name].append(callback)
        return callback

    def once(self, name: str, callback: Listener) -> Listener:
        """Register ``callback`` for the next ``name`` event only."""

        def wrapper(event: PreviewEvent):
            self.off(name, wrapper)
            return callback(event)

        self._listeners[name].append(wrapper)
        return wrapper

    def off(self, name: str, callback: Listener) -> None:
        listeners = self._listeners.get(name, [])
        if callback in listeners:
            listeners.remove(callback)

    # ---------- queues ----------------------------------------------- #

    def subscribe(self, maxsize: int = 0) -> asyncio.Queue[PreviewEvent]:
        queue: asyncio.Queue[PreviewEvent] = asyncio.Queue(maxsize=maxsize)
        self._queues.append(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue[PreviewEvent]) -> None:
        if queue in self._queues:
            self._queues.remove(queue)

    # ---------- emission --------------------------------------------- #

    async def emit(self, event: PreviewEvent) -> None:
        """
        Fan ``event`` out to queues and listeners.

        A failing listener is logged and skipped; it never reaches the
        pipeline that produced the preview. Full queues drop the event.
        """
        for queue in list(self._queues):
            try:
                queue.put_nowait(event)
            except asyncio.QueueFull:
                logger.warning("Subscriber queue full; dropping %s for %s", event.name, event.message_id)

        for callback in list(self._listeners.get(event.name, ())):
            try:
                result = callback(event)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Listener for %s failed", event.name)


__all__ = ["EventChannel", "Listener"]

"""Event dispatcher - routes parsed lines to handlers by event type.

There is no persistence or queueing: a dispatch call runs every handler for
the line's event type and returns when all of them have finished.
"""

import asyncio
import inspect
from typing import Awaitable, Callable, Dict, List, Union

from ..logger import logger
from ..parsing.types import EventType
from .base import ParsedLine

# Handlers may be sync (run in a worker thread) or async
EventHandler = Union[
    Callable[[ParsedLine], None], Callable[[ParsedLine], Awaitable[None]]
]


class EventDispatcher:
    """Dispatches parsed lines to registered handlers."""

    def __init__(self):
        self._handlers: Dict[EventType, List[EventHandler]] = {
            event_type: [] for event_type in EventType
        }

    def on(self, event_type: EventType, handler: EventHandler) -> None:
        self._handlers[event_type].append(handler)

    def on_chat(self, handler: EventHandler) -> None:
        self.on(EventType.CHAT, handler)

    def on_join(self, handler: EventHandler) -> None:
        self.on(EventType.JOIN, handler)

    def on_leave(self, handler: EventHandler) -> None:
        self.on(EventType.LEAVE, handler)

    def on_advancement(self, handler: EventHandler) -> None:
        self.on(EventType.ADVANCEMENT, handler)

    def on_death(self, handler: EventHandler) -> None:
        self.on(EventType.DEATH, handler)

    def on_generic(self, handler: EventHandler) -> None:
        self.on(EventType.GENERIC, handler)

    def on_unknown(self, handler: EventHandler) -> None:
        self.on(EventType.UNKNOWN, handler)

    def on_player_event(self, handler: EventHandler) -> None:
        """Register for every event the webhook relay renders."""
        for event_type in (
            EventType.CHAT,
            EventType.JOIN,
            EventType.LEAVE,
            EventType.ADVANCEMENT,
            EventType.DEATH,
        ):
            self.on(event_type, handler)

    async def dispatch(self, parsed: ParsedLine) -> None:
        """Run all handlers registered for the line's event type.

        A failing handler is logged and does not affect the others.
        """
        handlers = self._handlers.get(parsed.event_type, [])
        if not handlers:
            return

        tasks = []
        for handler in handlers:
            if inspect.iscoroutinefunction(handler):
                tasks.append(asyncio.create_task(handler(parsed)))
            else:
                tasks.append(asyncio.create_task(asyncio.to_thread(handler, parsed)))

        results = await asyncio.gather(*tasks, return_exceptions=True)
        for handler, result in zip(handlers, results):
            if isinstance(result, Exception):
                logger.error(
                    f"Handler {getattr(handler, '__name__', handler)!r} failed for "
                    f"{parsed.event_type.value} event: {result}",
                    exc_info=result,
                )

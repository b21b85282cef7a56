from __future__ import annotations

import asyncio
import inspect
from typing import Any, Callable, Dict, List, Optional

from lcrealtime.shared.log import get_logger

logger = get_logger(__name__)

Handler = Callable[..., Any]
Notifier = Callable[[], None]


def _noop() -> None:
    pass


class EventEmitter:
    """
    Local event emitter (on/once/off/emit).

    Handlers may be plain callables or coroutine functions. After each
    delivered event the ``notify`` hook runs once, so a reactive UI can
    refresh; for coroutine handlers it runs when the handler task finishes.
    """

    def __init__(self, notify: Optional[Notifier] = None) -> None:
        self._handlers: Dict[str, List[Handler]] = {}
        self._once: Dict[str, List[Handler]] = {}
        self._notify: Notifier = notify or _noop
        self._tasks: set = set()

    def on(self, event: str, handler: Handler) -> Handler:
        self._handlers.setdefault(event, []).append(handler)
        return handler

    def once(self, event: str, handler: Handler) -> Handler:
        self._handlers.setdefault(event, []).append(handler)
        self._once.setdefault(event, []).append(handler)
        return handler

    def off(self, event: Optional[str] = None, handler: Optional[Handler] = None) -> None:
        """Remove one handler, every handler of an event, or everything"""
        if event is None:
            self._handlers.clear()
            self._once.clear()
            return
        if handler is None:
            self._handlers.pop(event, None)
            self._once.pop(event, None)
            return
        for table in (self._handlers, self._once):
            handlers = table.get(event, [])
            if handler in handlers:
                handlers.remove(handler)

    def listeners(self, event: str) -> List[Handler]:
        return list(self._handlers.get(event, []))

    def emit(self, event: str, *args: Any) -> bool:
        """Deliver to every handler; returns False when nobody listens"""
        handlers = self.listeners(event)
        pending = []
        for handler in handlers:
            once = self._once.get(event, [])
            if handler in once:
                once.remove(handler)
                self.off(event, handler)
            try:
                result = handler(*args)
            except Exception as e:
                logger.error("Handler for %r failed: %s", event, e)
                continue
            if inspect.isawaitable(result):
                pending.append(result)

        if pending:
            task = asyncio.ensure_future(self._await_handlers(event, pending))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
        else:
            self._notify()
        return bool(handlers)

    async def _await_handlers(self, event: str, pending: List[Any]) -> None:
        results = await asyncio.gather(*pending, return_exceptions=True)
        for result in results:
            if isinstance(result, Exception):
                logger.error("Handler for %r failed: %s", event, result)
        self._notify()

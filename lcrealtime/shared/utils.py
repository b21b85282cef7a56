from __future__ import annotations
import asyncio
import time
from typing import Any, Callable, Optional


def now_ms() -> int:
    return int(time.time() * 1000)


def settle(future: asyncio.Future, value: Any = None) -> bool:
    """
    Resolve ``future`` with ``value`` unless it already settled.

    Transport callbacks are expected to fire once; a second call is ignored
    so every deferred value resolves exactly once.
    """
    if future.done():
        return False
    future.set_result(value)
    return True


def invoke_callback(callback: Optional[Callable[..., Any]], *args: Any) -> None:
    """Call a legacy-style callback if one was supplied."""
    if callable(callback):
        callback(*args)

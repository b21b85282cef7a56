import asyncio
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


async def spin(times: int = 5) -> None:
    """Let scheduled callbacks and tasks run"""
    for _ in range(times):
        await asyncio.sleep(0)


async def wait_for(predicate: Callable[[], bool], timeout: float = 1.0) -> bool:
    loop = asyncio.get_running_loop()
    end = loop.time() + timeout
    while loop.time() < end:
        if predicate():
            return True
        await asyncio.sleep(0.01)
    return predicate()


class DummyRawConversation:
    """Records every transport call; tests fire the callbacks by hand"""

    def __init__(self, conv_id: str = "551a2847e4b04d688ee00bb6", name: str = "general",
                 attr: Optional[Dict[str, Any]] = None) -> None:
        self.id = conv_id
        self.name = name
        self.attr = attr if attr is not None else {"topic": "python"}
        self.receivers: List[Callable[[Any], None]] = []
        self.list_callbacks: List[Callable[[List[str]], None]] = []
        self.log_calls: List[Tuple[Dict[str, Any], Callable[[List[Any]], None]]] = []
        self.join_callbacks: List[Callable[..., None]] = []
        self.sent: List[Tuple[str, Dict[str, Any], Callable[..., None]]] = []

    def receive(self, on_message):
        self.receivers.append(on_message)

    def list(self, on_result):
        self.list_callbacks.append(on_result)

    def log(self, options, on_result):
        self.log_calls.append((options, on_result))

    def join(self, on_done):
        self.join_callbacks.append(on_done)

    def send(self, content, options, on_done):
        self.sent.append((content, options, on_done))

    def push(self, raw_message: Any) -> None:
        for on_message in self.receivers:
            on_message(raw_message)


class DummyConnection:
    def __init__(self) -> None:
        self.room_calls: List[Tuple[Any, Callable[[Any], None]]] = []
        self.handlers: Dict[str, List[Callable[..., None]]] = {}
        self.once_handlers: Dict[str, List[Callable[..., None]]] = {}
        self.off_calls: List[tuple] = []
        self.emitted: List[tuple] = []
        self.closed = False

    def room(self, options, on_result):
        self.room_calls.append((options, on_result))

    def close(self):
        self.closed = True

    def on(self, event, handler):
        self.handlers.setdefault(event, []).append(handler)

    def once(self, event, handler):
        self.once_handlers.setdefault(event, []).append(handler)

    def off(self, *args):
        self.off_calls.append(args)

    def emit(self, *args):
        self.emitted.append(args)

    def fire(self, event: str, data: Any) -> None:
        for handler in self.handlers.get(event, []):
            handler(data)
        for handler in self.once_handlers.pop(event, []):
            handler(data)


class DummyTransport:
    def __init__(self) -> None:
        self.connect_calls: List[Tuple[Dict[str, Any], Callable[[Any], None]]] = []
        self.connections: List[DummyConnection] = []

    def connect(self, options, on_result):
        self.connect_calls.append((options, on_result))
        connection = DummyConnection()
        self.connections.append(connection)
        return connection


@pytest.fixture
def transport() -> DummyTransport:
    return DummyTransport()


@pytest.fixture
def raw_conversation() -> DummyRawConversation:
    return DummyRawConversation()

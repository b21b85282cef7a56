"""
In-process loopback transport.

Implements the transport boundary in memory so sessions can be paired
without a server: every connection attached to the same ``LoopbackHub``
sees the same rooms, and a payload sent into a room is handed to the
receive handlers of every other joined connection. Callbacks are scheduled
on the running event loop, never invoked inline, like a network transport.

    hub = LoopbackHub()
    hub.create_room("lobby", members=["alice"])
    alice = Realtime(LoopbackTransport(hub))
    await alice.connect({"clientId": "alice"})
"""

from __future__ import annotations

import asyncio
import itertools
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from lcrealtime.core.Events import EventEmitter
from lcrealtime.core.Transport import RawConversation, Transport, TransportConnection
from lcrealtime.shared.log import get_logger
from lcrealtime.shared.utils import now_ms

logger = get_logger(__name__)

_ids = itertools.count(1)


def _later(callback: Callable[..., Any], *args: Any) -> None:
    asyncio.get_running_loop().call_soon(callback, *args)


@dataclass
class LoopbackRoom:
    id: str
    name: Optional[str] = None
    attr: Dict[str, Any] = field(default_factory=dict)
    members: List[str] = field(default_factory=list)
    history: List[Dict[str, Any]] = field(default_factory=list)
    handles: List["LoopbackConversation"] = field(default_factory=list)

    def deliver(self, sender: "LoopbackConversation", record: Dict[str, Any]) -> int:
        delivered = 0
        for handle in list(self.handles):
            if handle is sender or handle.client_id == sender.client_id:
                continue
            if handle.client_id not in self.members or handle.connection.closed:
                continue
            for on_message in list(handle.receivers):
                _later(on_message, record["content"])
            delivered += 1
        return delivered


class LoopbackHub:
    """Shared room table for every LoopbackTransport attached to it"""

    def __init__(self) -> None:
        self.rooms: Dict[str, LoopbackRoom] = {}

    def create_room(
        self,
        name: Optional[str] = None,
        *,
        room_id: Optional[str] = None,
        attr: Optional[Dict[str, Any]] = None,
        members: Optional[List[str]] = None,
    ) -> LoopbackRoom:
        room_id = room_id or f"room-{next(_ids)}"
        room = LoopbackRoom(id=room_id, name=name, attr=dict(attr or {}), members=list(members or []))
        self.rooms[room_id] = room
        logger.debug("Created loopback room %s (%s)", room_id, name)
        return room

    def find(self, options: Any) -> Optional[LoopbackRoom]:
        """Look a room up by id (str or {"id": ...}) or by {"name": ...}"""
        if isinstance(options, str):
            return self.rooms.get(options)
        if isinstance(options, dict):
            if "id" in options:
                return self.rooms.get(options["id"])
            if "name" in options:
                for room in self.rooms.values():
                    if room.name == options["name"]:
                        return room
        return None


class LoopbackConversation(RawConversation):
    def __init__(self, room: LoopbackRoom, connection: "LoopbackConnection") -> None:
        self.room = room
        self.connection = connection
        self.client_id = connection.client_id
        self.id = room.id
        self.name = room.name
        self.attr = dict(room.attr)
        self.receivers: List[Callable[[Any], None]] = []
        room.handles.append(self)

    def receive(self, on_message: Callable[[Any], None]) -> None:
        self.receivers.append(on_message)

    def list(self, on_result: Callable[[List[str]], None]) -> None:
        _later(on_result, list(self.room.members))

    def log(self, options: Dict[str, Any], on_result: Callable[[List[Any]], None]) -> None:
        history = [record["content"] for record in self.room.history]
        limit = options.get("limit")
        if isinstance(limit, int) and limit >= 0:
            history = history[-limit:] if limit else []
        _later(on_result, history)

    def join(self, on_done: Callable[..., None]) -> None:
        if self.client_id not in self.room.members:
            self.room.members.append(self.client_id)
        _later(on_done)

    def send(self, content: str, options: Dict[str, Any], on_done: Callable[..., None]) -> None:
        record = {"content": content, "from": self.client_id, "timestamp": now_ms()}
        if not options.get("transient"):
            self.room.history.append(record)
        delivered = self.room.deliver(self, record)
        if options.get("r") and delivered:
            _later(self.connection.emit, "receipt", {"cid": self.room.id, "timestamp": record["timestamp"]})
        _later(on_done)


class LoopbackConnection(TransportConnection):
    def __init__(self, hub: LoopbackHub, client_id: str) -> None:
        self.hub = hub
        self.client_id = client_id
        self.closed = False
        self._events = EventEmitter()

    def room(self, options: Any, on_result: Callable[[Optional[RawConversation]], None]) -> None:
        room = self.hub.find(options)
        _later(on_result, LoopbackConversation(room, self) if room else None)

    def close(self) -> None:
        self.closed = True
        _later(self.emit, "close", {"clientId": self.client_id})

    def on(self, event: str, handler: Callable[..., None]) -> None:
        self._events.on(event, handler)

    def once(self, event: str, handler: Callable[..., None]) -> None:
        self._events.once(event, handler)

    def off(self, *args: Any) -> None:
        self._events.off(*args)

    def emit(self, *args: Any) -> None:
        self._events.emit(*args)


class LoopbackTransport(Transport):
    def __init__(self, hub: LoopbackHub) -> None:
        self.hub = hub
        self.connect_calls = 0

    def connect(self, options: Dict[str, Any], on_result: Callable[[Any], None]) -> LoopbackConnection:
        self.connect_calls += 1
        client_id = options.get("clientId") or options.get("peerId") or f"client-{next(_ids)}"
        connection = LoopbackConnection(self.hub, client_id)
        data = {"clientId": client_id, "appId": options.get("appId")}

        def opened() -> None:
            on_result(data)
            connection.emit("open", data)

        _later(opened)
        return connection

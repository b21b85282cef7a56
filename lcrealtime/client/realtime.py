from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, Optional

from lcrealtime.core.ConnectionGate import ConnectionGate, GateState
from lcrealtime.core.Conversation import Conversation
from lcrealtime.core.Events import Notifier
from lcrealtime.core.MessageParser import MessageParser
from lcrealtime.core.Transport import Transport
from lcrealtime.shared.config import RealtimeConfig
from lcrealtime.shared.errors import ConversationNotFoundError
from lcrealtime.shared.log import get_logger
from lcrealtime.shared.utils import invoke_callback, settle

logger = get_logger(__name__)


def _noop() -> None:
    pass


class Realtime:
    """
    Promise-style session over a callback-based realtime transport.

    Holds one connection attempt at a time (see ConnectionGate) and hands
    out hydrated Conversation objects. Every event delivered through
    ``on``/``once`` and every decoded conversation message triggers
    ``notify()`` after the application handler ran, so a reactive UI can
    refresh.

    Usage:
        rt = Realtime(transport, notify=ui.refresh)
        await rt.connect({"appId": "...", "clientId": "alice"})
        room = await rt.room("551a2847e4b04d688ee00bb6")
        room.on("message", show)
        await room.send(TextMessage("hello"))
    """

    def __init__(
        self,
        transport: Transport,
        notify: Optional[Notifier] = None,
        parser: Optional[MessageParser] = None,
        config: Optional[RealtimeConfig] = None,
    ) -> None:
        self.config = config or RealtimeConfig()
        self.notify: Notifier = notify or _noop
        self.parser = parser if parser is not None else MessageParser.with_builtins()
        self._gate = ConnectionGate(transport, reconnect_policy=self.config.reconnect_policy)

    @property
    def state(self) -> GateState:
        return self._gate.state

    @property
    def connection(self):
        return self._gate.connection

    async def connect(
        self,
        options: Optional[Dict[str, Any]] = None,
        callback: Optional[Callable[[Any], Any]] = None,
    ) -> Any:
        """Connect once; resolves with the transport's connect result"""
        if options is None:
            options = self.config.connect_options()
        data = await self._gate.connect(options)
        invoke_callback(callback, data)
        self.notify()
        return data

    async def close(self) -> None:
        """Close the connection; in-flight conversation hydration is not cancelled"""
        await self._gate.wait()
        self._gate.connection.close()
        logger.info("Closed")

    def _notifying(self, callback: Optional[Callable[..., Any]]) -> Callable[..., None]:
        def deliver(*args: Any) -> None:
            try:
                invoke_callback(callback, *args)
            finally:
                self.notify()
        return deliver

    def on(self, event: str, callback: Optional[Callable[..., Any]] = None) -> None:
        self._gate.require_connection().on(event, self._notifying(callback))

    def once(self, event: str, callback: Optional[Callable[..., Any]] = None) -> None:
        self._gate.require_connection().once(event, self._notifying(callback))

    def off(self, *args: Any) -> None:
        self._gate.require_connection().off(*args)

    def emit(self, *args: Any) -> None:
        self._gate.require_connection().emit(*args)

    async def room(self, options: Any, callback: Optional[Callable[[Conversation], Any]] = None) -> Conversation:
        """Look up a conversation and return it once its members are loaded"""
        await self._gate.wait()

        future = asyncio.get_running_loop().create_future()
        self._gate.connection.room(options, lambda raw: settle(future, raw))
        raw = await future
        if not raw:
            logger.warning("Conversation lookup failed for %r", options)
            raise ConversationNotFoundError(options)

        conversation = await Conversation.create(raw, self.parser, self.notify)
        invoke_callback(callback, conversation)
        self.notify()
        return conversation

    async def conv(self, options: Any, callback: Optional[Callable[[Conversation], Any]] = None) -> Conversation:
        return await self.room(options, callback)

    def assign(self, variant: Any) -> Any:
        """Register a message variant; it takes priority over earlier ones"""
        return self.parser.register(variant)

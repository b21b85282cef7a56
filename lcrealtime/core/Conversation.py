from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional

from lcrealtime.core.Events import EventEmitter, Notifier
from lcrealtime.core.MessageParser import MessageParser
from lcrealtime.core.Messages import Message
from lcrealtime.core.Transport import RawConversation
from lcrealtime.shared.log import get_logger, log_event
from lcrealtime.shared.utils import invoke_callback, settle

logger = get_logger(__name__)


class Conversation(EventEmitter):
    """
    Wraps one transport conversation.

    Construction happens in two phases. The constructor copies ``id``,
    ``name`` and ``attr`` and binds the receive handler, so no inbound
    message is missed; it then starts fetching the member list. ``members``
    stays None until that fetch settles. Use ``Conversation.create`` to get
    an instance only once it is hydrated.

    Inbound raw messages are decoded through ``parser`` and emitted as
    ``"message"`` events; messages no variant accepts are dropped.

    The raw conversation is not owned: its lifetime is managed by the
    transport.
    """

    def __init__(
        self,
        raw: RawConversation,
        parser: MessageParser,
        notify: Optional[Notifier] = None,
    ) -> None:
        super().__init__(notify)
        self.raw = raw
        self.parser = parser
        self.id: str = raw.id
        self.name: Optional[str] = getattr(raw, "name", None)
        self.attr: Dict[str, Any] = getattr(raw, "attr", None)
        self.members: Optional[List[str]] = None

        self._bind_events()
        self._hydration: asyncio.Future = asyncio.ensure_future(self._hydrate())

    @classmethod
    async def create(
        cls,
        raw: RawConversation,
        parser: MessageParser,
        notify: Optional[Notifier] = None,
    ) -> "Conversation":
        conversation = cls(raw, parser, notify)
        return await conversation.ready()

    async def ready(self) -> "Conversation":
        """Wait for membership hydration"""
        await self._hydration
        return self

    @property
    def hydrated(self) -> bool:
        return self._hydration.done() and not self._hydration.cancelled() and self._hydration.exception() is None

    def _bind_events(self) -> None:
        self.raw.receive(self._on_raw_message)

    def _on_raw_message(self, raw_message: Any) -> None:
        message = self.parser.decode(raw_message)
        if message is None:
            log_event(logger, "debug", "Dropped message matching no variant", conv_id=self.id)
            return
        self.emit("message", message)

    async def _hydrate(self) -> None:
        self.members = await self._list()
        log_event(logger, "info", f"Hydrated with {len(self.members or [])} members", conv_id=self.id)

    def _list(self) -> asyncio.Future:
        future = asyncio.get_running_loop().create_future()
        self.raw.list(lambda members: settle(future, members))
        return future

    async def log(
        self,
        options: Optional[Dict[str, Any]] = None,
        callback: Optional[Callable[[List[Message]], Any]] = None,
    ) -> List[Message]:
        """History, decoded the same way as live messages (undecodable entries are omitted)"""
        if callback is None and callable(options):
            options, callback = None, options
        future = asyncio.get_running_loop().create_future()
        self.raw.log(dict(options or {}), lambda messages: settle(future, messages))
        raw_messages = await future

        messages = []
        for raw_message in raw_messages or []:
            message = self.parser.decode(raw_message)
            if message is not None:
                messages.append(message)
        if len(messages) != len(raw_messages or []):
            log_event(logger, "debug",
                      f"Omitted {len(raw_messages) - len(messages)} undecodable history entries",
                      conv_id=self.id)
        invoke_callback(callback, messages)
        return messages

    async def join(self, callback: Optional[Callable[[], Any]] = None) -> None:
        future = asyncio.get_running_loop().create_future()
        self.raw.join(lambda *_: settle(future))
        await future
        log_event(logger, "info", "Joined", conv_id=self.id)
        invoke_callback(callback)

    async def send(self, message: Any, callback: Optional[Callable[[Message], Any]] = None) -> Message:
        """Send a Message, or any other payload wrapped into a base Message"""
        if not isinstance(message, Message):
            message = Message(message)

        future = asyncio.get_running_loop().create_future()
        self.raw.send(self.parser.encode(message), message.send_options(), lambda *_: settle(future))
        await future
        log_event(logger, "debug", "Sent message", conv_id=self.id, msg_type=type(message).__name__)
        invoke_callback(callback, message)
        return message

    def destroy(self) -> None:
        """
        Placeholder. The transport offers no way to unbind the receive
        handler, so it stays bound for the lifetime of the raw conversation.
        """

    def __repr__(self) -> str:
        return f"<Conversation id={self.id!r} name={self.name!r} members={self.members!r}>"

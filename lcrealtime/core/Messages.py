"""
Message object model.

``Message`` carries opaque content; ``TypedMessage`` adds a numeric type tag
and serializes to the reserved ``_lctext``/``_lcattrs``/``_lctype`` object;
``TextMessage`` fixes the tag to ``MessageType.TEXT``.

Applications add their own typed messages by subclassing ``TypedMessage``
with a new ``message_type`` and registering ``TypedVariant(TheirClass)``.
"""

from __future__ import annotations
import json
from typing import Any, ClassVar, Dict, Mapping, Optional

from lcrealtime.core.MessageTypes import ATTRS_KEY, TEXT_KEY, TYPE_KEY, MessageType
from lcrealtime.shared.utils import now_ms


def dumps(value: Any) -> str:
    """Canonical JSON used on the wire"""
    return json.dumps(value, separators=(',', ':'), sort_keys=True, ensure_ascii=False)


def metadata_from(envelope: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Pick message metadata out of a transport envelope (``fromPeerId`` maps to ``from_``)."""
    if not envelope:
        return {}
    meta: Dict[str, Any] = {}
    sender = envelope.get("fromPeerId", envelope.get("from"))
    if sender is not None:
        meta["from_"] = sender
    if isinstance(envelope.get("timestamp"), int):
        meta["timestamp"] = envelope["timestamp"]
    if "needReceipt" in envelope:
        meta["need_receipt"] = bool(envelope["needReceipt"])
    if "transient" in envelope:
        meta["transient"] = bool(envelope["transient"])
    return meta


class Message:
    """
    Base message: opaque ``content`` plus delivery metadata.

    Serializes to the JSON encoding of ``content`` verbatim.
    """

    def __init__(
        self,
        content: Any = None,
        *,
        timestamp: Optional[int] = None,
        from_: Optional[str] = None,
        need_receipt: bool = False,
        transient: bool = False,
    ) -> None:
        self.content = content
        self.timestamp = now_ms() if timestamp is None else timestamp
        self.from_ = from_
        self.need_receipt = need_receipt
        self.transient = transient

    def to_wire(self, data: Any = None) -> Any:
        """JSON-serializable wire value (``data`` overrides the content)"""
        return self.content if data is None else data

    def to_json(self, data: Any = None) -> str:
        return dumps(self.to_wire(data))

    def send_options(self) -> Dict[str, Any]:
        """Options handed to the transport's send()"""
        return {"r": self.need_receipt, "transient": self.transient}

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.to_wire() == other.to_wire() and self.from_ == other.from_  # type: ignore[attr-defined]

    # Mutable; equality follows content, so instances are not hashable
    __hash__ = None  # type: ignore[assignment]


    def __repr__(self) -> str:
        return f"{type(self).__name__}(content={self.content!r}, from_={self.from_!r}, timestamp={self.timestamp})"

    def __str__(self) -> str:
        return self.to_json()


class TypedMessage(Message):
    """
    Message with a numeric type tag and structured payload.

    ``content`` is ``{"text": str, "attr": dict, "type": int}``; the type is
    always forced to the class's ``message_type``.
    """

    message_type: ClassVar[int] = MessageType.TYPED

    def __init__(self, content: Optional[Mapping[str, Any]] = None, **meta: Any) -> None:
        content = dict(content or {})
        content.setdefault("text", "")
        content["attr"] = dict(content.get("attr") or {})
        content["type"] = int(type(self).message_type)
        super().__init__(content, **meta)

    @property
    def text(self) -> str:
        return self.content["text"]

    @property
    def attr(self) -> Dict[str, Any]:
        return self.content["attr"]

    @property
    def type(self) -> int:
        return self.content["type"]

    def to_wire(self, data: Any = None) -> Any:
        wire = dict(data or {})
        wire.update({
            TEXT_KEY: self.content["text"],
            ATTRS_KEY: self.content["attr"],
            TYPE_KEY: self.content["type"],
        })
        return wire


class TextMessage(TypedMessage):
    """Typed message with ``MessageType.TEXT``; content is always ``{"text": ...}``."""

    message_type: ClassVar[int] = MessageType.TEXT

    def __init__(self, content: Any = "", **meta: Any) -> None:
        if isinstance(content, str):
            content = {"text": content}
        super().__init__(content, **meta)

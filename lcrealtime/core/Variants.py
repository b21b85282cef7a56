"""
Decoder/encoder descriptors for the built-in message variants.

A variant is any object exposing ``decode(payload) -> Message | None`` and
``encode(message) -> str``. ``decode`` returns None when the payload does
not belong to the variant; None is a normal outcome, not an error.
"""

from __future__ import annotations
from typing import Any, Optional, Type

from lcrealtime.core.Messages import Message, TextMessage, TypedMessage, metadata_from
from lcrealtime.core.MessageTypes import (
    ATTRS_KEY,
    LEGACY_MSG_KEY,
    LEGACY_TEXT_TYPE,
    TEXT_KEY,
    TYPE_KEY,
    claims_reserved_shape,
)


class BaseVariant:
    """Plain messages: any JSON value that does not claim a typed shape."""

    name = "Message"
    message_cls: Type[Message] = Message

    def decode(self, payload: Any) -> Optional[Message]:
        if payload is None or claims_reserved_shape(payload):
            return None
        return Message(payload)

    def encode(self, message: Message) -> str:
        return message.to_json()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class TypedVariant:
    """Typed messages whose ``_lctype`` equals ``message_cls.message_type``."""

    def __init__(self, message_cls: Type[TypedMessage] = TypedMessage) -> None:
        self.message_cls = message_cls
        self.tag = int(message_cls.message_type)
        self.name = message_cls.__name__

    def matches(self, payload: Any) -> bool:
        if not isinstance(payload, dict):
            return False
        tag = payload.get(TYPE_KEY)
        return isinstance(tag, int) and not isinstance(tag, bool) and tag == self.tag

    def decode(self, payload: Any) -> Optional[Message]:
        if not self.matches(payload):
            return None
        return self.message_cls({
            "text": payload.get(TEXT_KEY, ""),
            "attr": payload.get(ATTRS_KEY) or {},
        })

    def encode(self, message: Message) -> str:
        return message.to_json()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name} tag={self.tag}>"


class TextVariant:
    """
    Text messages: ``_lctype == -1``, or the legacy envelope
    ``{"msg": {"type": "text", ...}, "fromPeerId": ..., "timestamp": ...}``
    still produced by older transports.
    """

    name = "TextMessage"
    message_cls: Type[TextMessage] = TextMessage

    def __init__(self) -> None:
        self._typed = TypedVariant(TextMessage)
        self.tag = self._typed.tag

    def decode(self, payload: Any) -> Optional[Message]:
        message = self._typed.decode(payload)
        if message is not None:
            return message
        return self._decode_legacy(payload)

    def _decode_legacy(self, payload: Any) -> Optional[Message]:
        if not isinstance(payload, dict):
            return None
        legacy = payload.get(LEGACY_MSG_KEY)
        if not isinstance(legacy, dict) or legacy.get("type") != LEGACY_TEXT_TYPE:
            return None
        text = legacy.get("text")
        if not isinstance(text, str):
            text = legacy.get("msg", "")
        return TextMessage(
            {"text": text, "attr": legacy.get("attr") or {}},
            **metadata_from(payload),
        )

    def encode(self, message: Message) -> str:
        return message.to_json()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name} tag={self.tag}>"

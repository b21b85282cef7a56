from __future__ import annotations

import json
from typing import Any, List, Optional

from lcrealtime.core.Messages import Message
from lcrealtime.core.Variants import BaseVariant, TextVariant, TypedVariant
from lcrealtime.shared.errors import InvalidVariantError
from lcrealtime.shared.log import get_logger

logger = get_logger(__name__)


def _variant_name(variant: Any) -> str:
    return getattr(variant, "name", None) or type(variant).__name__


class MessageParser:
    """
    Ordered registry of message variants.

    The most recently registered variant is tried first, so applications can
    override built-in decoding without removing the built-ins. A variant that
    raises while decoding is skipped; a payload no variant accepts decodes to
    None and is not an error.
    """

    def __init__(self) -> None:
        self._variants: List[Any] = []

    @classmethod
    def with_builtins(cls) -> "MessageParser":
        """Registry holding Message, TypedMessage and TextMessage (TextMessage tried first)"""
        parser = cls()
        for variant in (BaseVariant(), TypedVariant(), TextVariant()):
            parser.register(variant)
        return parser

    @property
    def variants(self) -> List[Any]:
        """Variants in decode priority order"""
        return list(self._variants)

    def register(self, variant: Any) -> Any:
        if not (callable(getattr(variant, "decode", None)) and callable(getattr(variant, "encode", None))):
            raise InvalidVariantError(f"Invalid message variant: {variant!r}")
        self._variants.insert(0, variant)
        logger.debug("Registered message variant %s", _variant_name(variant))
        return variant

    assign = register

    def decode(self, payload: Any) -> Optional[Message]:
        try:
            payload = _normalize(payload)
        except (UnicodeDecodeError, RecursionError) as e:
            logger.debug("Undecodable wire payload: %s", type(e).__name__)
            return None
        for variant in self._variants:
            try:
                message = variant.decode(payload)
            except Exception as e:
                logger.debug("Variant %s failed to decode payload: %s", _variant_name(variant), e)
                continue
            if message is not None:
                return message
        return None

    def encode(self, message: Message) -> str:
        """Wire form of ``message`` from the highest-priority variant registered for its class"""
        for variant in self._variants:
            if getattr(variant, "message_cls", None) is type(message):
                return variant.encode(message)
        return message.to_json()

    def __len__(self) -> int:
        return len(self._variants)


def _normalize(payload: Any) -> Any:
    """
    Deserialize wire text; text that is not JSON stays a plain string.

    Raises UnicodeDecodeError for bytes that are not UTF-8 and RecursionError
    for JSON nested too deeply to parse.
    """
    if isinstance(payload, (bytes, bytearray)):
        payload = payload.decode("utf-8")
    if isinstance(payload, str):
        try:
            return json.loads(payload)
        except ValueError:
            return payload
    return payload

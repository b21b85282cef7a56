from __future__ import annotations

from enum import IntEnum
from typing import Any


class MessageType(IntEnum):
    """Numeric ``_lctype`` discriminators of the built-in typed messages."""

    TYPED = 0      # generic typed message
    TEXT = -1      # text message


# Reserved wire keys of typed messages
TEXT_KEY = "_lctext"
ATTRS_KEY = "_lcattrs"
TYPE_KEY = "_lctype"

# Legacy envelope shape: {"msg": {"type": "text", ...}, ...}
LEGACY_MSG_KEY = "msg"
LEGACY_TEXT_TYPE = "text"


def claims_reserved_shape(payload: Any) -> bool:
    """
    True if the payload carries a typed discriminator or a legacy envelope.

    Such payloads belong to a typed variant; the base variant must not
    swallow them when no typed variant accepts the tag.
    """
    if not isinstance(payload, dict):
        return False
    if TYPE_KEY in payload:
        return True
    legacy = payload.get(LEGACY_MSG_KEY)
    return isinstance(legacy, dict) and "type" in legacy

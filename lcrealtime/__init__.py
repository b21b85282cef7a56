"""
lcrealtime: promise-style (asyncio) session and typed message codec over a
callback-based realtime messaging transport.
"""

from lcrealtime.client.realtime import Realtime
from lcrealtime.core.ConnectionGate import ConnectionGate, GateState
from lcrealtime.core.Conversation import Conversation
from lcrealtime.core.MessageParser import MessageParser
from lcrealtime.core.Messages import Message, TextMessage, TypedMessage
from lcrealtime.core.MessageTypes import MessageType
from lcrealtime.core.Variants import BaseVariant, TextVariant, TypedVariant
from lcrealtime.shared.config import RealtimeConfig, load_config
from lcrealtime.shared.errors import (
    ConnectionInProgressError,
    ConversationNotFoundError,
    InvalidVariantError,
    NotConnectedError,
    RealtimeError,
)

__version__ = "0.1.0"

__all__ = [
    "Realtime",
    "ConnectionGate",
    "GateState",
    "Conversation",
    "MessageParser",
    "Message",
    "TypedMessage",
    "TextMessage",
    "MessageType",
    "BaseVariant",
    "TypedVariant",
    "TextVariant",
    "RealtimeConfig",
    "load_config",
    "RealtimeError",
    "NotConnectedError",
    "ConnectionInProgressError",
    "ConversationNotFoundError",
    "InvalidVariantError",
]

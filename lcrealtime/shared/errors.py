from __future__ import annotations


class RealtimeError(Exception):
    """Base class for errors raised by lcrealtime."""
    pass
class NotConnectedError(RealtimeError):
    """Raised when an operation needs a connection but connect() was never called."""
    pass
class ConnectionInProgressError(RealtimeError):
    """Raised by connect() under the "reject" policy when an attempt already exists."""
    pass
class ConversationNotFoundError(RealtimeError):
    """Raised when the transport reports no conversation for the requested id."""

    def __init__(self, options=None):
        self.options = options
        super().__init__(f"400: Conversation not exists on server ({options!r})")
class InvalidVariantError(RealtimeError, TypeError):
    """Raised when a message variant lacks a callable decode or encode."""
    pass

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Any, Dict, Optional

from lcrealtime.core.Transport import Transport, TransportConnection
from lcrealtime.shared.errors import ConnectionInProgressError, NotConnectedError
from lcrealtime.shared.log import get_logger
from lcrealtime.shared.utils import settle

logger = get_logger(__name__)


class GateState(str, Enum):
    UNCONNECTED = "unconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class ConnectionGate:
    """
    Owns the connection attempt to the transport.

    ``connect`` turns the transport's one-shot connect callback into a
    future; everything needing the connection awaits ``wait()``, which fails
    with NotConnectedError right away if connect was never called.

    What a second ``connect`` does depends on ``reconnect_policy``:
    "replace" starts a new attempt and tracks it instead of the old one,
    "reuse" hands back the tracked attempt, "reject" raises
    ConnectionInProgressError.
    """

    def __init__(self, transport: Transport, reconnect_policy: str = "replace") -> None:
        self.transport = transport
        self.reconnect_policy = reconnect_policy
        self.state = GateState.UNCONNECTED
        self.connection: Optional[TransportConnection] = None
        self._future: Optional[asyncio.Future] = None

    def connect(self, options: Dict[str, Any]) -> asyncio.Future:
        if self._future is not None:
            if self.reconnect_policy == "reuse":
                logger.debug("connect() called again; reusing tracked attempt")
                return self._future
            if self.reconnect_policy == "reject":
                raise ConnectionInProgressError(f"connect() already called (state={self.state.value})")
            logger.info("connect() called again; replacing tracked attempt")

        future = asyncio.get_running_loop().create_future()
        self._future = future
        self.state = GateState.CONNECTING

        def on_result(data: Any) -> None:
            # A replaced attempt may still call back; only the tracked one moves the state
            if self._future is future:
                self.state = GateState.CONNECTED
                logger.info("Connected")
            settle(future, data)

        logger.info("Connecting...")
        self.connection = self.transport.connect(options, on_result)
        return future

    def wait(self) -> asyncio.Future:
        """The tracked connection attempt"""
        if self._future is None:
            raise NotConnectedError("Realtime.connect() never called.")
        return self._future

    @property
    def connected(self) -> bool:
        return self.state is GateState.CONNECTED

    def require_connection(self) -> TransportConnection:
        """The transport handle, for passthrough calls that do not wait"""
        if self.connection is None:
            raise NotConnectedError("Realtime.connect() never called.")
        return self.connection

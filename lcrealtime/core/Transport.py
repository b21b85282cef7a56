"""
Boundary of the callback-based transport library.

The transport is an external collaborator; these abstract classes only
document what lcrealtime calls on it. Any object with the same methods
works, subclassing is optional.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional

ResultCallback = Callable[[Any], None]


class RawConversation(ABC):
    """Transport-level conversation handle (``id``, ``name``, ``attr``)"""

    id: str
    name: Optional[str]
    attr: Dict[str, Any]

    @abstractmethod
    def receive(self, on_message: Callable[[Any], None]) -> None:
        """Register a persistent handler fired once per inbound raw message"""
        ...

    @abstractmethod
    def list(self, on_result: Callable[[List[str]], None]) -> None:
        """One-shot membership fetch"""
        ...

    @abstractmethod
    def log(self, options: Dict[str, Any], on_result: Callable[[List[Any]], None]) -> None:
        """One-shot history fetch"""
        ...

    @abstractmethod
    def join(self, on_done: Callable[..., None]) -> None:
        ...

    @abstractmethod
    def send(self, content: str, options: Dict[str, Any], on_done: Callable[..., None]) -> None:
        ...


class TransportConnection(ABC):
    """Connection handle returned by ``Transport.connect``"""

    @abstractmethod
    def room(self, options: Any, on_result: Callable[[Optional[RawConversation]], None]) -> None:
        """Conversation lookup; ``on_result(None)`` when it does not exist"""
        ...

    @abstractmethod
    def close(self) -> None:
        ...

    @abstractmethod
    def on(self, event: str, handler: Callable[..., None]) -> None:
        ...

    @abstractmethod
    def once(self, event: str, handler: Callable[..., None]) -> None:
        ...

    @abstractmethod
    def off(self, *args: Any) -> None:
        ...

    @abstractmethod
    def emit(self, *args: Any) -> None:
        ...


class Transport(ABC):
    @abstractmethod
    def connect(self, options: Dict[str, Any], on_result: ResultCallback) -> TransportConnection:
        """Start the one-shot connect; ``on_result(data)`` fires exactly once"""
        ...

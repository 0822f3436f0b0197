"""Transport collaborator interface and the inbound event union.

The chat transport is opaque: anything that can connect, report whether it is
connected, send text to a recipient handle and push inbound events to a
handler can drive the bot.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True, slots=True)
class Connected:
    pass


@dataclass(frozen=True, slots=True)
class Disconnected:
    reason: str = ""


@dataclass(frozen=True, slots=True)
class StreamReplaced:
    """Another session took over this identity; reconnect from scratch."""


@dataclass(frozen=True, slots=True)
class Message:
    sender: str
    text: str


InboundEvent = Connected | Disconnected | StreamReplaced | Message
EventHandler = Callable[[InboundEvent], Awaitable[None]]


class Transport(Protocol):
    def set_handler(self, handler: EventHandler) -> None: ...

    async def connect(self) -> None:
        """Raise ConnectivityError when the session cannot be established."""
        ...

    def is_connected(self) -> bool: ...

    async def disconnect(self) -> None: ...

    async def send(self, recipient_id: str, text: str) -> None:
        """Raise TransportError when the message cannot be delivered."""
        ...


def canonical_recipient(handle: str) -> str:
    """Strip the authority suffix: ``"6281@s.whatsapp.net"`` -> ``"6281"``."""
    return handle.split("@", 1)[0].strip()

"""What the dispatcher needs from a transport channel."""

from typing import Any, Protocol

from pydantic_core import to_json

from sockchan.schemas.protocol import Message

from .ack import AckTable


class Channel(Protocol):
    """An established session with a remote peer.

    The transport owns the channel; the dispatcher only borrows it to send
    ack responses and to reach the channel's ack table.
    """

    ack: AckTable

    async def send(self, message: Message, payload: Any = None) -> None: ...


def dump_payload(payload: Any) -> str:
    """Encode a handler result as the JSON text of a single ack argument."""
    return to_json(payload).decode("utf-8")

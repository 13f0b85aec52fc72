from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

# Well-known event names delivered through MethodRegistry.fire_lifecycle
ON_CONNECTION = "connection"
ON_DISCONNECTION = "disconnection"
ON_ERROR = "error"


class MessageType(int, Enum):
    """Socket.io frame kinds, numbered as on the wire."""

    OPEN = 0
    CLOSE = 1
    PING = 2
    PONG = 3
    EMPTY = 4
    EMIT = 5
    ACK_REQUEST = 6
    ACK_RESPONSE = 7


class Message(BaseModel):
    """Decoded protocol message handed to the dispatcher.

    ``args`` keeps the exact JSON text received, including any
    non-standard channel wrapper in front of the payload.
    """

    type: MessageType
    method: str = ""
    args: str = ""
    ack_id: int = Field(0, ge=0, description="Ack correlation id, 0 when absent")

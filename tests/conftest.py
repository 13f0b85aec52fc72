"""Shared fixtures for dispatcher tests."""

from typing import Any

import pytest
from pydantic import BaseModel

from sockchan.schemas.protocol import Message
from sockchan.services.socketio import AckTable, Dispatcher, MethodRegistry


class Price(BaseModel):
    v: int


class Pair(BaseModel):
    a: int
    b: int


class FakeChannel:
    """Channel double that records outbound messages."""

    def __init__(self):
        self.ack = AckTable()
        self.sent: list[tuple[Message, Any]] = []

    async def send(self, message: Message, payload: Any = None) -> None:
        self.sent.append((message, payload))


class ListSink:
    """Diagnostic sink that keeps every line written to it."""

    def __init__(self):
        self.lines: list[str] = []

    def write(self, line: str) -> None:
        self.lines.append(line)


@pytest.fixture
def channel() -> FakeChannel:
    return FakeChannel()


@pytest.fixture
def sink() -> ListSink:
    return ListSink()


@pytest.fixture
def registry() -> MethodRegistry:
    return MethodRegistry()


@pytest.fixture
def dispatcher(registry: MethodRegistry, sink: ListSink) -> Dispatcher:
    return Dispatcher(registry, sink=sink)

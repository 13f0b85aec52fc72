"""Inbound message dispatcher.

Routes decoded messages of one channel to registered handlers:

- EMIT: look up the handler, strip a channel-tag wrapper from the payload,
  decode it and call the handler.
- ACK_REQUEST: call the handler and send its result back as ACK_RESPONSE.
- ACK_RESPONSE: wake the waiter armed for the ack id.
"""

import logging
from typing import Any

from pydantic import ValidationError

from sockchan.schemas.protocol import Message, MessageType

from .channel import Channel
from .diagnostics import DiagnosticSink, StderrSink, decode_error_line
from .registry import MethodRegistry
from .tags import extract_channel_tag

logger = logging.getLogger(__name__)


def _reason(error: ValidationError) -> str:
    return "; ".join(err["msg"] for err in error.errors())


class Dispatcher:
    """Dispatches inbound messages against a MethodRegistry."""

    def __init__(self, registry: MethodRegistry, sink: DiagnosticSink | None = None):
        self.registry = registry
        self._sink = sink or StderrSink()

    async def process(self, channel: Channel, message: Message) -> None:
        """Process one inbound message.

        Handler exceptions are not caught and propagate to the caller.

        Args:
            channel: The channel the message arrived on.
            message: The decoded message.
        """
        if message.type == MessageType.EMIT:
            await self._process_emit(channel, message)
        elif message.type == MessageType.ACK_REQUEST:
            await self._process_ack_request(channel, message)
        elif message.type == MessageType.ACK_RESPONSE:
            channel.ack.deliver(message.ack_id, message.args)

    async def _process_emit(self, channel: Channel, message: Message) -> None:
        caller = self.registry.find(message.method)
        if caller is None:
            logger.debug("No handler registered for %s", message.method)
            return

        if not caller.args_present:
            await caller.invoke(channel)
            return

        tag, args = extract_channel_tag(message.args)
        if tag:
            tagged = self.registry.find(message.method, tag)
            if tagged is not None:
                caller = tagged

        try:
            data = caller.decode(args)
        except ValidationError as e:
            self._sink.write(decode_error_line(_reason(e)))
            return

        logger.debug("MSG: [%s] <%s>", tag, data)

        await caller.invoke(channel, data)

    async def _process_ack_request(self, channel: Channel, message: Message) -> None:
        caller = self.registry.find(message.method)
        if caller is None:
            logger.debug("No ack handler registered for %s", message.method)
            return
        if not caller.has_output:
            logger.debug(
                "Handler for %s has no return annotation, not answering ack %s",
                message.method,
                message.ack_id,
            )
            return

        result: Any
        if caller.args_present:
            try:
                data = caller.decode(message.args)
            except ValidationError as e:
                # The peer times out waiting; no negative ack exists
                logger.debug("Dropping ack request %s: %s", message.ack_id, _reason(e))
                return
            result = await caller.invoke(channel, data)
        else:
            result = await caller.invoke(channel)

        ack = Message(type=MessageType.ACK_RESPONSE, ack_id=message.ack_id)
        await channel.send(ack, result)

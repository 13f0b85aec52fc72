"""Handler registry with channel-tag qualified keys and lifecycle hooks."""

import inspect
import logging
import threading
from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from typing import Any

from sockchan.schemas.protocol import ON_CONNECTION, ON_DISCONNECTION

from .caller import Caller, new_caller

logger = logging.getLogger(__name__)

# Type alias for built-in connection/disconnection hooks
SystemHandler = Callable[[Any], Awaitable[None] | None]


class ReadPreferringLock:
    """Readers-writer lock that lets readers in whenever no writer holds it.

    Writers wait until the reader count drops to zero. Lookups vastly
    outnumber registrations, so writer starvation is acceptable.
    """

    def __init__(self):
        self._readers = 0
        self._readers_lock = threading.Lock()
        self._writer_lock = threading.Lock()

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._readers_lock:
            self._readers += 1
            if self._readers == 1:
                self._writer_lock.acquire()
        try:
            yield
        finally:
            with self._readers_lock:
                self._readers -= 1
                if self._readers == 0:
                    self._writer_lock.release()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._writer_lock:
            yield


def _key(method: str, channel: str | None = None) -> str:
    if channel is None:
        return method
    return method + channel.lower()


class MethodRegistry:
    """Maps event names to handlers.

    A handler registered with a channel tag is stored twice: under the bare
    event name and under the event name qualified by the lowercased tag.
    Lookups with a tag try the qualified key first.
    """

    def __init__(
        self,
        on_connection: SystemHandler | None = None,
        on_disconnection: SystemHandler | None = None,
    ):
        self._callers: dict[str, Caller] = {}
        self._lock = ReadPreferringLock()
        self.on_connection = on_connection
        self.on_disconnection = on_disconnection

    def on(self, method: str, func: Callable[..., Any], channel: str | None = None) -> Caller:
        """Register a handler for an event.

        Args:
            method: Event name.
            func: Handler taking ``(channel)`` or ``(channel, data)``.
            channel: Optional channel tag; matched case-insensitively.

        Returns:
            The Caller built for ``func``.

        Raises:
            RegistrationError: If the handler's shape cannot be introspected.
        """
        caller = new_caller(func)

        keys = [_key(method)]
        if channel is not None:
            keys.append(_key(method, channel))

        with self._lock.write():
            for key in keys:
                if key in self._callers:
                    logger.warning("Overwriting existing handler for %s", key)
                self._callers[key] = caller

        logger.debug("Registered handler for %s: %r", keys, func)
        return caller

    def handler(
        self, method: str, channel: str | None = None
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Decorator form of :meth:`on`.

        Usage:
            @registry.handler("price", channel="BTC")
            def on_btc_price(ch, data: Price) -> None:
                ...
        """

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self.on(method, func, channel)
            return func

        return decorator

    def find(self, method: str, channel: str | None = None) -> Caller | None:
        """Find the handler for an event, preferring the channel-qualified one."""
        with self._lock.read():
            caller = None
            if channel is not None:
                caller = self._callers.get(_key(method, channel))
            if caller is None:
                caller = self._callers.get(method)
        return caller

    async def fire_lifecycle(self, channel: Any, event: str) -> None:
        """Run the built-in hook and any user handler for a lifecycle event.

        Args:
            channel: The channel the event happened on.
            event: One of ``connection``, ``disconnection`` or ``error``.
        """
        hook = None
        if event == ON_CONNECTION:
            hook = self.on_connection
        elif event == ON_DISCONNECTION:
            hook = self.on_disconnection

        if hook is not None:
            result = hook(channel)
            if inspect.isawaitable(result):
                await result

        caller = self.find(event)
        if caller is None:
            return

        logger.debug("Calling %s handler", event)
        await caller.invoke(channel, None)

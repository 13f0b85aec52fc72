import asyncio
import itertools
import logging
import threading
from collections.abc import Callable
from typing import Any

from sockchan.config import get_settings

logger = logging.getLogger(__name__)


class AckTimeoutError(TimeoutError):
    """Raised when no ack response arrives for an armed waiter in time."""

    def __init__(self, ack_id: int, timeout: float):
        super().__init__(f"No ack response for id {ack_id} after {timeout:.1f}s")
        self.ack_id = ack_id
        self.timeout = timeout


def _call_on_loop(waiter: asyncio.Future, func: Callable[..., Any], *args: Any) -> None:
    """Run ``func`` on the waiter's loop, directly when already on it."""
    loop = waiter.get_loop()
    try:
        running = asyncio.get_running_loop()
    except RuntimeError:
        running = None
    if running is loop:
        func(*args)
    else:
        loop.call_soon_threadsafe(func, *args)


def _resolve(waiter: asyncio.Future, data: str) -> None:
    if not waiter.done():
        waiter.set_result(data)


def _cancel(waiter: asyncio.Future) -> None:
    if not waiter.done():
        waiter.cancel()


class AckTable:
    """Pending ack waiters of one channel, keyed by ack id.

    Each waiter is an ``asyncio.Future`` resolved at most once with the raw
    JSON text of the matching ack response.
    """

    def __init__(self):
        self._waiters: dict[int, asyncio.Future[str]] = {}
        self._lock = threading.Lock()
        self._ids = itertools.count(1)

    def next_id(self) -> int:
        """Mint a new ack id for an outbound ack request."""
        with self._lock:
            return next(self._ids)

    def arm(self, ack_id: int) -> asyncio.Future[str]:
        """Create and store a waiter for ``ack_id``.

        Must be called from a running event loop; the waiter belongs to it.
        """
        waiter: asyncio.Future[str] = asyncio.get_running_loop().create_future()
        with self._lock:
            previous = self._waiters.get(ack_id)
            self._waiters[ack_id] = waiter
        if previous is not None:
            logger.warning("Ack id %s re-armed, abandoning previous waiter", ack_id)
            _call_on_loop(previous, _cancel, previous)
        return waiter

    def deliver(self, ack_id: int, data: str) -> bool:
        """Hand an ack response to its waiter.

        Returns:
            True if a live waiter took the response, False if it was dropped.
        """
        with self._lock:
            waiter = self._waiters.pop(ack_id, None)
        if waiter is None or waiter.done():
            logger.debug("Dropping ack response %s: no waiter", ack_id)
            return False

        _call_on_loop(waiter, _resolve, waiter, data)
        return True

    def abandon(self, ack_id: int) -> None:
        """Forget the waiter for ``ack_id`` so a late response is dropped."""
        with self._lock:
            waiter = self._waiters.pop(ack_id, None)
        if waiter is not None:
            _call_on_loop(waiter, _cancel, waiter)

    def abandon_all(self) -> None:
        """Abandon every pending waiter, e.g. when the channel shuts down."""
        with self._lock:
            waiters = list(self._waiters.values())
            self._waiters.clear()
        for waiter in waiters:
            _call_on_loop(waiter, _cancel, waiter)
        if waiters:
            logger.info("Abandoned %d pending ack waiters", len(waiters))

    def pending(self) -> int:
        with self._lock:
            return len(self._waiters)

    async def wait(
        self, ack_id: int, waiter: asyncio.Future[str], timeout: float | None = None
    ) -> str:
        """Wait for the ack response of an armed waiter.

        Args:
            ack_id: The id the waiter was armed under.
            waiter: The future returned by :meth:`arm`.
            timeout: Seconds to wait; defaults to ``Settings.ACK_TIMEOUT``.

        Returns:
            The raw JSON text of the ack response.

        Raises:
            AckTimeoutError: If no response arrives in time. The waiter is
                abandoned first.
        """
        if timeout is None:
            timeout = get_settings().ACK_TIMEOUT
        try:
            return await asyncio.wait_for(waiter, timeout)
        except TimeoutError as e:
            self.abandon(ack_id)
            raise AckTimeoutError(ack_id, timeout) from e

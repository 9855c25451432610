"""Single-settlement waiter backing the registry's wait helpers."""

import asyncio
from typing import Any

from .logger import logger
from .types import Unsubscriber


class EventWaiter:
    """Resolves an asyncio future exactly once.

    The waiter owns the listener subscriptions and the optional timeout
    timer. Whichever path settles first (an event firing or the timer
    elapsing) tears both down before the result is set, so the losing path
    can never settle a second time.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop or asyncio.get_running_loop()
        self._future: asyncio.Future[bool] = self._loop.create_future()
        self._unsubscribers: list[Unsubscriber] = []
        self._timer: asyncio.TimerHandle | None = None

    @property
    def done(self) -> bool:
        return self._future.done()

    def add_subscription(self, unsubscriber: Unsubscriber) -> None:
        """Track a detach function to call when the waiter settles."""
        self._unsubscribers.append(unsubscriber)

    def arm_timeout(self, max_wait_ms: float) -> None:
        """Settle with ``False`` after ``max_wait_ms``. Zero or less waits forever."""
        if max_wait_ms <= 0:
            return
        self._timer = self._loop.call_later(max_wait_ms / 1000, self._on_timeout)

    def on_event(self, *args: Any, **kwargs: Any) -> None:
        """Listener callback: the awaited event fired."""
        self.settle(True)

    def _on_timeout(self) -> None:
        self._timer = None
        if not self.done:
            logger.debug("Wait timed out, detaching listeners")
        self.settle(False)

    def settle(self, result: bool) -> None:
        if self._future.done():
            return
        self.close()
        self._future.set_result(result)

    def close(self) -> None:
        """Cancel the timer and detach every tracked listener."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        while self._unsubscribers:
            self._unsubscribers.pop()()

    async def wait(self) -> bool:
        try:
            return await self._future
        finally:
            # Covers cancellation of the awaiting task
            self.close()

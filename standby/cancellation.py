"""Caller-owned cancellation signal with an optional deadline.

The token wraps an asyncio.Event, one per event loop it is awaited on, so
every suspension point of a waiter wakes up as soon as cancel() is called,
rather than at the next loop iteration. cancel() may be called from any
thread, and one token can span several asyncio.run() calls.

Example:
    token = CancellationToken.after(300)

    task = waiter.start(token)
    ...
    token.cancel()
"""

from __future__ import annotations

import asyncio
import math
import time


class CancellationToken:
    __slots__ = ("_cancelled", "_deadline", "_event", "_loop", "_reason")

    def __init__(self, deadline: float | None = None) -> None:
        """Create a token.

        Args:
            deadline: Absolute time.monotonic() value after which the token
                counts as cancelled.
        """
        self._deadline = deadline
        self._cancelled = False
        self._reason = "cancelled"
        self._event: asyncio.Event | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    @classmethod
    def after(cls, seconds: float) -> CancellationToken:
        return cls(deadline=time.monotonic() + seconds)

    @property
    def deadline(self) -> float | None:
        return self._deadline

    @property
    def cancelled(self) -> bool:
        return self._cancelled or self.expired

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    @property
    def reason(self) -> str:
        if self._cancelled:
            return self._reason
        return "deadline exceeded" if self.expired else ""

    def remaining(self) -> float | None:
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def cancel(self, reason: str = "cancelled") -> None:
        if self._cancelled:
            return
        self._cancelled = True
        self._reason = reason

        loop, event = self._loop, self._event
        if loop is None or event is None or loop.is_closed():
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            event.set()
        else:
            loop.call_soon_threadsafe(event.set)

    def _event_for_running_loop(self) -> asyncio.Event:
        # asyncio.Event binds to the first loop that waits on it, so a token
        # reused across asyncio.run() calls needs a fresh one per loop.
        loop = asyncio.get_running_loop()
        if self._event is None or loop is not self._loop:
            event = asyncio.Event()
            if self._cancelled:
                event.set()
            self._loop, self._event = loop, event
        return self._event

    async def sleep(self, seconds: float) -> bool:
        """Sleep up to ``seconds``, waking early on cancel or deadline.

        Returns:
            True if the token is cancelled when the sleep ends.
        """
        event = self._event_for_running_loop()
        if self.cancelled:
            return True

        timeout = seconds
        remaining = self.remaining()
        if remaining is not None:
            timeout = min(timeout, remaining)

        try:
            async with asyncio.timeout(None if math.isinf(timeout) else timeout):
                await event.wait()
        except TimeoutError:
            pass
        return self.cancelled

    async def wait(self) -> None:
        """Block until the token is cancelled or its deadline passes."""
        while not await self.sleep(math.inf):
            pass

    def __repr__(self) -> str:
        state = self.reason or "active"

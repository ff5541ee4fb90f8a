"""
Time utilities: UTC now, and request deadlines with cancellation.

A Deadline is an absolute point on the monotonic clock paired with an
asyncio.Event acting as the cancellation signal. Both are shared by every
call made on behalf of one request.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Deadline:
    """Absolute expiry (``time.monotonic()`` seconds) plus a cancellation signal."""

    expires_at: float
    cancelled: asyncio.Event = field(default_factory=asyncio.Event, compare=False)

    @classmethod
    def after(cls, seconds: float, cancelled: asyncio.Event | None = None) -> Deadline:
        """
        Deadline ``seconds`` from now, optionally sharing an existing signal.

        >>> Deadline.after(5).remaining() > 4
        True
        """
        if cancelled is None:
            cancelled = asyncio.Event()
        return cls(time.monotonic() + seconds, cancelled)

    def remaining(self) -> float:
        """Seconds left before expiry, never negative."""
        return max(0.0, self.expires_at - time.monotonic())

    @property
    def expired(self) -> bool:
        return time.monotonic() >= self.expires_at

    @property
    def is_cancelled(self) -> bool:
        return self.cancelled.is_set()

    def cancel(self) -> None:
        self.cancelled.set()


async def settle_within(future: asyncio.Future, deadline: Deadline) -> bool:
    """
    Wait for ``future`` until it settles, the deadline passes, or the
    deadline's cancellation signal fires, whichever comes first.

    Returns True if the future settled. The future itself is never
    cancelled here; that is up to the caller.
    """
    watcher = asyncio.ensure_future(deadline.cancelled.wait())
    try:
        done, _ = await asyncio.wait(
            {future, watcher},
            timeout=deadline.remaining(),
            return_when=asyncio.FIRST_COMPLETED,
        )
    finally:
        watcher.cancel()
        await asyncio.gather(watcher, return_exceptions=True)
    return future in done

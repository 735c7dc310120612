"""Deadlines and cancellation for outbound network and model calls."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Awaitable, TypeVar

from gap_tailor.errors import Cancelled, TimeoutExceeded

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Deadline:
    """An absolute point in (monotonic) time after which a call is abandoned."""

    expires_at: float | None = None
    seconds: float | None = None

    @classmethod
    def after(cls, seconds: float | None) -> Deadline:
        if seconds is None:
            return cls()
        return cls(expires_at=time.monotonic() + seconds, seconds=seconds)

    @classmethod
    def never(cls) -> Deadline:
        return cls()

    def remaining(self) -> float | None:
        """Seconds left, ``None`` for no deadline, never negative."""
        if self.expires_at is None:
            return None
        return max(0.0, self.expires_at - time.monotonic())

    @property
    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0


@dataclass
class CancelToken:
    """Set once by the caller; every guarded call sharing it stops waiting."""

    _event: asyncio.Event = field(default_factory=asyncio.Event, repr=False)

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()


async def guarded(
    awaitable: Awaitable[T],
    *,
    operation: str,
    deadline: Deadline | None = None,
    cancel: CancelToken | None = None,
) -> T:
    """Await ``awaitable`` unless the deadline passes or the token is cancelled.

    Raises TimeoutExceeded or Cancelled; the underlying task is cancelled
    in both cases.
    """
    deadline = deadline or Deadline.never()
    task = asyncio.ensure_future(awaitable)

    if cancel is not None and cancel.cancelled:
        await _discard(task)
        raise Cancelled(operation)
    if deadline.expired:
        await _discard(task)
        raise TimeoutExceeded(operation, deadline.seconds)

    waiters: set[asyncio.Future] = {task}
    cancel_waiter = None
    if cancel is not None:
        cancel_waiter = asyncio.ensure_future(cancel.wait())
        waiters.add(cancel_waiter)

    try:
        done, _ = await asyncio.wait(
            waiters,
            timeout=deadline.remaining(),
            return_when=asyncio.FIRST_COMPLETED,
        )
    except asyncio.CancelledError:
        await _discard(task)
        raise
    finally:
        if cancel_waiter is not None and not cancel_waiter.done():
            await _discard(cancel_waiter)

    if task in done:
        return task.result()

    await _discard(task)
    if cancel_waiter is not None and cancel_waiter in done:
        raise Cancelled(operation)
    raise TimeoutExceeded(operation, deadline.seconds)


async def _discard(fut: asyncio.Future) -> None:
    fut.cancel()
    try:
        await fut
    except asyncio.CancelledError:
        pass
    except Exception:
        logger.debug("Abandoned call failed after it was discarded", exc_info=True)

# ============================================================================
# CANCELLATION TOKENS
# ============================================================================
# EPOCH: 1 - HEALTH AGGREGATION
# STATUS: Core - Cooperative cancellation for probes
# PURPOSE: Caller cancellation and per-check deadlines via linked tokens
# CREATED: 06 OCT 2026
# ============================================================================
"""
Cancellation Tokens

A CancellationToken is the cancellation context handed to every probe.

- The caller owns a root token and may cancel it at any time.
- The executor derives a linked child token per check. The child fires
  when its parent fires, or on its own when the per-check timeout elapses.
- A child that fired because of its own deadline reports timed_out=True,
  which is how the executor tells a timeout apart from caller cancellation.

Probes observe the token cooperatively:

    async def probe(token):
        await token.sleep(0.5)                  # cancellable delay
        body = await token.run(client.get(url)) # race any awaitable
        token.raise_if_cancelled()              # explicit checkpoint
        ...

Tokens are bound to the event loop that first waits on them. Cancel from
another thread with loop.call_soon_threadsafe(token.cancel).
"""

import asyncio
import inspect
from typing import Any, Awaitable, List, Optional, TypeVar

from healthcheckr.exceptions import (
    CheckTimeoutError,
    InvalidArgumentError,
    OperationCancelledError,
)

T = TypeVar("T")


def _consume_result(task: "asyncio.Future[Any]") -> None:
    """Retrieve the outcome of an abandoned task so asyncio does not warn."""
    if not task.cancelled():
        task.exception()


class CancellationToken:
    """
    Cooperative cancellation signal with optional deadline.

    Example:
        token = CancellationToken()
        token.cancel_after(10.0)
        report = await checker.check(token=token)
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._timed_out = False
        self._timeout: Optional[float] = None
        self._event = asyncio.Event()
        self._parent: Optional["CancellationToken"] = None
        self._children: List["CancellationToken"] = []
        self._timer: Optional[asyncio.TimerHandle] = None

    @property
    def is_cancelled(self) -> bool:
        """True once this token or any ancestor has fired."""
        return self._cancelled

    @property
    def timed_out(self) -> bool:
        """True if this token fired because its own deadline elapsed."""
        return self._timed_out

    @property
    def timeout(self) -> Optional[float]:
        """Deadline in seconds for linked tokens created with a timeout."""
        return self._timeout

    def cancel(self) -> None:
        """Cancel this token and every token linked to it."""
        self._fire(timed_out=False)

    def cancel_after(self, delay: float) -> None:
        """
        Schedule cancellation after delay seconds.

        Must be called from a running event loop. Replaces any previously
        scheduled cancellation.
        """
        if delay < 0:
            raise InvalidArgumentError("delay must be non-negative", argument="delay")
        self._cancel_timer()
        if self._cancelled:
            return
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(delay, self.cancel)

    def link(self, timeout: Optional[float] = None) -> "CancellationToken":
        """
        Create a child token.

        The child inherits this token's cancellation and, when timeout is
        given, adds its own deadline. Close the child when done so the
        parent drops its reference and the timer is released.

        Args:
            timeout: Seconds until the child fires on its own

        Returns:
            Linked child token
        """
        child = CancellationToken()
        child._parent = self
        child._timeout = timeout

        if self._cancelled:
            child._fire(timed_out=False)
            return child

        self._children.append(child)
        if timeout is not None:
            loop = asyncio.get_running_loop()
            child._timer = loop.call_later(timeout, child._expire)
        return child

    def close(self) -> None:
        """Release the deadline timer and detach from the parent."""
        self._cancel_timer()
        if self._parent is not None:
            try:
                self._parent._children.remove(self)
            except ValueError:
                pass
            self._parent = None

    def raise_if_cancelled(self) -> None:
        """
        Raise if this token has fired.

        Raises:
            CheckTimeoutError: Token fired on its own deadline
            OperationCancelledError: Token (or an ancestor) was cancelled
        """
        if not self._cancelled:
            return
        if self._timed_out:
            raise CheckTimeoutError(self._timeout or 0.0)
        raise OperationCancelledError()

    async def wait(self) -> None:
        """Block until the token fires."""
        await self._event.wait()

    async def sleep(self, delay: float) -> None:
        """Sleep for delay seconds, raising early if the token fires."""
        await self.run(asyncio.sleep(delay))

    async def run(self, awaitable: Awaitable[T]) -> T:
        """
        Await awaitable, abandoning it if the token fires first.

        The abandoned task is cancelled. Work already handed to a thread
        keeps running in that thread but its result is discarded.

        Raises:
            CheckTimeoutError / OperationCancelledError: Token fired first
        """
        if self._cancelled:
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            self.raise_if_cancelled()

        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            done, _ = await asyncio.wait(
                {task, waiter},
                return_when=asyncio.FIRST_COMPLETED,
            )
        except BaseException:
            task.cancel()
            raise
        finally:
            waiter.cancel()

        if task in done:
            return task.result()

        task.cancel()
        task.add_done_callback(_consume_result)
        self.raise_if_cancelled()
        # Unreachable: waiter only completes once the token fired
        raise OperationCancelledError()

    def _expire(self) -> None:
        self._timer = None
        self._fire(timed_out=True)

    def _fire(self, timed_out: bool) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        self._timed_out = timed_out
        self._cancel_timer()
        self._event.set()
        for child in list(self._children):
            child._fire(timed_out=False)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def __enter__(self) -> "CancellationToken":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "timed_out" if self._timed_out else (
            "cancelled" if self._cancelled else "active"
        )
        return f"<CancellationToken {state} timeout={self._timeout}>"


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "CancellationToken",
]

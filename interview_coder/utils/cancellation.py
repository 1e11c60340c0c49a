"""Per-run cancellation token threaded into every model call.

A :class:`CancellationToken` is created by the orchestrator when a run
starts and handed to the adapter inside :class:`RequestOptions`.  The
adapter wraps its SDK request in :meth:`CancellationToken.run`, which races
the request against the token: when the token fires first, the request
task is cancelled (closing the underlying HTTP stream) and
:class:`OperationCancelledError` is raised instead of a generic error.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

from interview_coder.utils.errors import OperationCancelledError

T = TypeVar("T")


class CancellationToken:
    """One-shot, idempotent cancellation signal backed by :class:`asyncio.Event`."""

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason = ""

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str:
        return self._reason

    def cancel(self, reason: str = "cancelled") -> bool:
        """Fire the token.  Returns ``False`` when it had already fired."""
        if self._event.is_set():
            return False
        self._reason = reason
        self._event.set()
        return True

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelledError(self._reason or "Operation cancelled")

    async def wait(self) -> None:
        await self._event.wait()

    async def run(self, awaitable: Awaitable[T]) -> T:
        """Await *awaitable* unless the token fires first.

        Raises
        ------
        OperationCancelledError
            If the token was already cancelled, or fires while the work is
            still pending.  Any exception the work raised while being torn
            down is chained as the cause.
        """
        if self.cancelled:
            # Close the coroutine so it never runs.
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            self.raise_if_cancelled()

        work = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            await asyncio.wait({work, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            work.cancel()
            waiter.cancel()
            raise

        if not self.cancelled:
            waiter.cancel()
            return work.result()

        work.cancel()
        await asyncio.wait({work})
        if not work.cancelled() and work.exception() is not None:
            raise OperationCancelledError(self._reason) from work.exception()
        raise OperationCancelledError(self._reason)

"""Serial gate around blocking daemon calls."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, TypeVar

T = TypeVar("T")


class SerialGate:
    """Async mutual exclusion for one shared resource.

    Each ``run`` acquires the gate, executes one blocking call in a worker
    thread, and releases the gate once that call has returned. Concurrent
    callers queue in arrival order; their calls never interleave.
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._completed = 0

    @property
    def locked(self) -> bool:
        """Whether a call currently holds the gate."""
        return self._lock.locked()

    @property
    def completed_calls(self) -> int:
        """Number of calls that have passed through the gate."""
        return self._completed

    async def run(self, func: Callable[..., T], *args: Any) -> T:
        """Run ``func(*args)`` off the event loop while holding the gate.

        A cancelled caller stops waiting, but the worker thread cannot be
        interrupted: the gate stays held until the call actually returns.
        """
        async with self._lock:
            call = asyncio.ensure_future(asyncio.to_thread(func, *args))
            try:
                return await asyncio.shield(call)
            except asyncio.CancelledError:
                await self._drain(call)
                raise
            finally:
                self._completed += 1

    @staticmethod
    async def _drain(call: asyncio.Future[Any]) -> None:
        while not call.done():
            try:
                await asyncio.wait([call])
            except asyncio.CancelledError:
                continue
        if not call.cancelled():
            call.exception()  # mark retrieved; the caller is gone

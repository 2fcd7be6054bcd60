"""Async fetch-once cell for values shared across concurrent requests.

Used for the CAPTCHA credentials and the SMTP transport:
  1. Return the stored value once a fetch has succeeded.
  2. While a fetch is in flight, every caller awaits that same attempt.
  3. A failed fetch stores nothing; its exception reaches every waiter and the
     next caller starts a fresh attempt.

The in-flight task is shielded, so a cancelled request does not cancel the
fetch other callers are waiting on. Only a fetch that completes stores a value.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class AsyncOnceCell(Generic[T]):
    def __init__(self) -> None:
        self._value: Optional[T] = None
        self._initialized = False
        self._inflight: Optional[asyncio.Task[T]] = None

    @property
    def initialized(self) -> bool:
        return self._initialized

    def get(self) -> Optional[T]:
        """Return the stored value, or None if no fetch has succeeded yet."""
        return self._value

    async def get_or_init(self, factory: Callable[[], Awaitable[T]]) -> T:
        if self._initialized:
            return self._value  # type: ignore[return-value]
        if self._inflight is None:
            task = asyncio.ensure_future(self._run(factory))
            task.add_done_callback(_retrieve_exception)
            self._inflight = task
        return await asyncio.shield(self._inflight)

    async def _run(self, factory: Callable[[], Awaitable[T]]) -> T:
        try:
            value = await factory()
        finally:
            self._inflight = None
        self._value = value
        self._initialized = True
        return value


def _retrieve_exception(task: "asyncio.Task") -> None:
    # Every waiter may have been cancelled; mark the failure as seen.
    if not task.cancelled():
        task.exception()

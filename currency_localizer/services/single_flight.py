from __future__ import annotations

"""Single-flight execution keyed by lookup key.

Concurrent callers asking for the same key share one underlying task. The
task is shielded from caller cancellation: a caller that goes away simply
detaches while the work finishes (and populates caches) for everyone else.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Dict, TypeVar

from currency_localizer.core.logging import lookup_key_ctx

logger = logging.getLogger("currency_localizer.single_flight")

T = TypeVar("T")


class SingleFlight:
    def __init__(self) -> None:
        self._pending: Dict[str, asyncio.Task] = {}

    def __contains__(self, key: str) -> bool:
        return key in self._pending

    def __len__(self) -> int:
        return len(self._pending)

    async def run(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        task = self._pending.get(key)
        if task is None:
            task = asyncio.ensure_future(self._execute(key, factory))
            self._pending[key] = task
            task.add_done_callback(lambda t, k=key: self._forget(k, t))
        else:
            logger.debug("attaching to in-flight lookup %s", key)
        return await asyncio.shield(task)

    async def _execute(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        token = lookup_key_ctx.set(key)
        try:
            return await factory()
        finally:
            lookup_key_ctx.reset(token)

    def _forget(self, key: str, task: asyncio.Task) -> None:
        if self._pending.get(key) is task:
            del self._pending[key]
        # Retrieve the exception so a task whose callers all detached does not
        # trigger "exception was never retrieved" warnings.
        if not task.cancelled():
            task.exception()

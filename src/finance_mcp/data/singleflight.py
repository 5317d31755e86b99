"""Single-flight deduplication of concurrent upstream calls."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SingleFlight:
    """
    Coalesce concurrent calls that share a key into one task.

    The first caller for a key schedules the task; later callers await the same
    task until it settles. The registry entry is dropped by a done-callback, so
    it is removed exactly once per task no matter how many callers waited.

    Every caller awaits through asyncio.shield(): a caller that is cancelled
    stops waiting but never cancels the shared fetch.
    """

    def __init__(self) -> None:
        self._in_flight: dict[str, asyncio.Task[Any]] = {}

    def in_flight(self, key: str) -> bool:
        return key in self._in_flight

    def __len__(self) -> int:
        return len(self._in_flight)

    async def run(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        """
        Run `factory()` once per key among concurrent callers.

        Args:
            key: Deduplication key
            factory: Zero-arg coroutine function producing the value

        Returns:
            The shared task's result (its exception propagates to every caller)
        """
        # No await between lookup and registration, so this is atomic on the loop
        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(factory())
            self._in_flight[key] = task
            task.add_done_callback(lambda t, k=key: self._release(k, t))
            logger.debug(f"singleflight({key}): created task")
        else:
            logger.debug(f"singleflight({key}): joining in-flight task")

        return await asyncio.shield(task)

    def _release(self, key: str, task: "asyncio.Task[Any]") -> None:
        # Only remove if the entry is still THIS task
        if self._in_flight.get(key) is task:
            del self._in_flight[key]
        # Mark the exception retrieved so an unobserved failure is not logged as lost
        if not task.cancelled():
            task.exception()

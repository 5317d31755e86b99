"""Minimum-interval gate for quota-limited providers."""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Serialize and pace calls to one provider.

    acquire() waits until `min_interval` seconds have passed since the previous
    permitted call. The whole check-wait-update sequence runs under a lock, so
    two concurrent callers can never both see the gate as open.
    """

    def __init__(
        self,
        min_interval: float,
        name: str = "provider",
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.min_interval = max(0.0, min_interval)
        self.name = name
        self._clock = clock
        self._sleep = sleep
        self._lock = asyncio.Lock()
        self._last_request: float | None = None

    @property
    def last_request(self) -> float | None:
        return self._last_request

    async def acquire(self) -> None:
        """Suspend the caller until the next call is allowed, then record it."""
        async with self._lock:
            if self._last_request is not None and self.min_interval > 0:
                wait = self.min_interval - (self._clock() - self._last_request)
                if wait > 0:
                    logger.info(f"Rate limit ({self.name}): waiting {wait:.1f}s...")
                    await self._sleep(wait)
            self._last_request = self._clock()

"""Bounded retry with a fixed pause for transient upstream failures."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from finance_mcp.errors import RETRYABLE_ERRORS

logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_retryable_error(error: BaseException) -> bool:
    """
    Check if an error is transient.

    Only "no response" network failures and provider 5xx responses are
    retried. Bad input (4xx, empty payloads) cannot succeed on a retry.
    """
    return isinstance(error, RETRYABLE_ERRORS)


async def with_retry(
    operation_name: str,
    call: Callable[[], Awaitable[T]],
    max_attempts: int = 4,
    delay: float = 2.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Execute an async call with retry logic.

    Args:
        operation_name: Name for logging (e.g., "GLOBAL_QUOTE(AAPL)")
        call: Zero-arg coroutine function performing one attempt
        max_attempts: Total attempts including the first
        delay: Fixed pause between attempts in seconds
        sleep: Awaitable sleep (injectable for tests)

    Returns:
        Result of the first successful attempt

    Raises:
        The last retryable error once attempts are exhausted, or the first
        non-retryable error immediately.
    """
    attempt = 1
    while True:
        try:
            return await call()
        except Exception as e:
            if not is_retryable_error(e):
                raise
            if attempt >= max_attempts:
                logger.warning(
                    f"{operation_name}: Failed after {attempt} attempts. Last error: {e}"
                )
                raise
            logger.warning(
                f"{operation_name}: Attempt {attempt} failed ({e}). "
                f"Retrying in {delay:.1f}s... ({max_attempts - attempt} retries left)"
            )
            await sleep(delay)
            attempt += 1

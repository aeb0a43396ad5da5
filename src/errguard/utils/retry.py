"""Retry with exponential backoff.

The policy never classifies errors itself: when retries are exhausted or the
``should_retry`` predicate declines, the last failure is re-raised as is.
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

ShouldRetry = Callable[[BaseException, int], bool]


class RetryCancelledError(Exception):
    """Raised when a retry loop is cancelled through its cancel event."""

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(f"Retry cancelled after {attempts} attempt(s)")


def _always_retry(error: BaseException, attempts: int) -> bool:
    return True


def compute_delay_ms(
    attempts: int,
    initial_delay_ms: float = 1000,
    max_delay_ms: float = 10000,
    backoff_factor: float = 2,
) -> float:
    """Delay before the next attempt, after ``attempts`` failures so far."""
    return min(initial_delay_ms * backoff_factor ** (attempts - 1), max_delay_ms)


async def _wait(delay_ms: float, cancel_event: Optional[asyncio.Event]) -> bool:
    """Sleep for ``delay_ms``. Returns False if ``cancel_event`` fired first."""
    if cancel_event is None:
        await asyncio.sleep(delay_ms / 1000)
        return True
    try:
        await asyncio.wait_for(cancel_event.wait(), timeout=delay_ms / 1000)
    except asyncio.TimeoutError:
        return True
    return False


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    *,
    max_retries: int = 3,
    initial_delay_ms: float = 1000,
    max_delay_ms: float = 10000,
    backoff_factor: float = 2,
    should_retry: Optional[ShouldRetry] = None,
    cancel_event: Optional[asyncio.Event] = None,
) -> T:
    """Run an async operation, retrying failures with exponential backoff.

    Args:
        operation: Zero-argument coroutine function to call
        max_retries: Total number of attempts before giving up
        initial_delay_ms: Delay after the first failure
        max_delay_ms: Upper bound for any single delay
        backoff_factor: Multiplier applied to the delay after each failure
        should_retry: Called with the raw error and attempt count; returning
            False stops retrying
        cancel_event: When set, aborts the pending wait and raises
            RetryCancelledError

    Returns:
        Result of the first successful call

    Raises:
        The last failure, unchanged, when retries are exhausted or declined
    """
    should_retry = should_retry or _always_retry
    attempts = 0

    while True:
        try:
            return await operation()
        except Exception as e:
            attempts += 1

            if attempts >= max_retries or not should_retry(e, attempts):
                logger.error(f"Giving up after {attempts} attempt(s): {e}")
                raise

            if cancel_event is not None and cancel_event.is_set():
                raise RetryCancelledError(attempts) from e

            delay = compute_delay_ms(attempts, initial_delay_ms, max_delay_ms, backoff_factor)
            logger.warning(
                f"Attempt {attempts}/{max_retries} failed: {e}. Retrying in {delay / 1000:.1f}s..."
            )

            if not await _wait(delay, cancel_event):
                raise RetryCancelledError(attempts) from e


def retry_with_backoff_sync(
    operation: Callable[[], T],
    *,
    max_retries: int = 3,
    initial_delay_ms: float = 1000,
    max_delay_ms: float = 10000,
    backoff_factor: float = 2,
    should_retry: Optional[ShouldRetry] = None,
    sleep: Callable[[float], Any] = time.sleep,
) -> T:
    """Blocking variant of ``retry_with_backoff``.

    Args:
        operation: Zero-argument function to call
        max_retries: Total number of attempts before giving up
        initial_delay_ms: Delay after the first failure
        max_delay_ms: Upper bound for any single delay
        backoff_factor: Multiplier applied to the delay after each failure
        should_retry: Called with the raw error and attempt count
        sleep: Sleep function taking seconds

    Returns:
        Result of the first successful call

    Raises:
        The last failure, unchanged, when retries are exhausted or declined
    """
    should_retry = should_retry or _always_retry
    attempts = 0

    while True:
        try:
            return operation()
        except Exception as e:
            attempts += 1

            if attempts >= max_retries or not should_retry(e, attempts):
                logger.error(f"Giving up after {attempts} attempt(s): {e}")
                raise

            delay = compute_delay_ms(attempts, initial_delay_ms, max_delay_ms, backoff_factor)
            logger.warning(
                f"Attempt {attempts}/{max_retries} failed: {e}. Retrying in {delay / 1000:.1f}s..."
            )
            sleep(delay / 1000)

"""
Bounded retry with exponential backoff.

The coordinator does not know what the operation does; the scraper wraps
its page runs with it.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BASE_DELAY = 1.0    # seconds
DEFAULT_MAX_DELAY = 10.0    # seconds


def backoff_delay(attempt: int, base_delay: float = DEFAULT_BASE_DELAY,
                  max_delay: float = DEFAULT_MAX_DELAY) -> float:
    """
    Delay after failed attempt number `attempt` (1-based).

    Examples (base 1s, cap 10s):
        1 -> 1.0, 2 -> 2.0, 3 -> 4.0, 5 -> 10.0
    """
    return min(base_delay * (2 ** (attempt - 1)), max_delay)


async def retry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    base_delay: float = DEFAULT_BASE_DELAY,
    max_delay: float = DEFAULT_MAX_DELAY,
    should_retry: Optional[Callable[[Exception], bool]] = None,
    sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    label: str = 'operation',
) -> T:
    """
    Run operation up to max_attempts times.

    Args:
        operation: Zero-argument callable returning a fresh awaitable per attempt
        max_attempts: Total attempts, including the first
        base_delay: Delay after the first failure, doubled after each next one
        max_delay: Upper bound for any single delay
        should_retry: Optional predicate; errors it rejects are raised at once
        sleep: Awaitable sleep function (asyncio.sleep by default)
        label: Name used in log messages

    Returns:
        The first successful result

    Raises:
        The error of the final attempt, unchanged
    """
    sleep = sleep or asyncio.sleep
    max_attempts = max(1, max_attempts)

    for attempt in range(1, max_attempts + 1):
        try:
            return await operation()
        except Exception as e:
            if attempt == max_attempts:
                raise
            if should_retry is not None and not should_retry(e):
                logger.debug(f"{label}: not retrying {type(e).__name__}: {e}")
                raise

            delay = backoff_delay(attempt, base_delay, max_delay)
            logger.warning(
                f"Attempt {attempt}/{max_attempts} of {label} failed: {e}. "
                f"Retrying in {delay:.1f}s"
            )
            await sleep(delay)

    # Unreachable: the loop either returns or raises
    raise RuntimeError(f"{label}: retry loop exited without a result")

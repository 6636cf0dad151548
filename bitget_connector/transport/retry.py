"""
Retry policy for mutating calls.

Bounded exponential backoff: the delay before attempt n+1 is
`initial_delay * 2 ** (n - 1)` seconds. Authentication and validation
failures are raised on first occurrence; any other BitgetError is
retried until attempts run out, then the last one is re-raised.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar

from ..constants import DEFAULTS
from ..errors import AuthError, BitgetError, ValidationError


logger = logging.getLogger(__name__)

T = TypeVar("T")

NON_RETRYABLE_ERRORS = (AuthError, ValidationError)


def backoff_delay(attempt: int, initial_delay: float) -> float:
    """Delay after failed attempt number `attempt` (1-based)."""
    return initial_delay * (2 ** (attempt - 1))


async def with_retry(
    call: Callable[[], Awaitable[T]],
    max_attempts: int = DEFAULTS.MAX_RETRY_ATTEMPTS,
    initial_delay: float = DEFAULTS.RETRY_DELAY_MS / 1000,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    on_retry: Optional[Callable[[int, BitgetError], Any]] = None,
) -> T:
    """
    Run `call` with bounded exponential backoff.

    `call` is re-invoked in full on every attempt, so signed requests
    get a fresh timestamp and signature each time.

    Args:
        call: Zero-arg coroutine factory
        max_attempts: Total attempts including the first
        initial_delay: Seconds to wait after the first failure
        sleep: Awaitable sleep (injectable for tests)
        on_retry: Called with (attempt, error) before each backoff

    Returns:
        Result of the first successful attempt
    """
    max_attempts = max(1, max_attempts)

    for attempt in range(1, max_attempts + 1):
        try:
            return await call()
        except NON_RETRYABLE_ERRORS:
            raise
        except BitgetError as e:
            if attempt >= max_attempts:
                logger.error(f"Giving up after {attempt} attempts: {e}")
                raise

            delay = backoff_delay(attempt, initial_delay)
            logger.warning(
                f"Request failed (attempt {attempt}/{max_attempts}): "
                f"{e}. Retrying in {delay:.1f}s..."
            )
            if on_retry is not None:
                on_retry(attempt, e)
            await sleep(delay)

"""
Bounded retry loop for JSON API calls.

Retries a failing call a fixed number of times with a linearly growing
pause between attempts. There is no jitter and no circuit breaker.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from marketsnap.api.errors import EmptyResponseError, RetryExhaustedError
from marketsnap.config.constants import DEFAULT_MAX_RETRIES, DEFAULT_RETRY_BACKOFF


logger = logging.getLogger(__name__)

T = TypeVar("T")

SleepFunc = Callable[[float], Awaitable[Any]]
RetryCallback = Callable[[str, int, BaseException], None]


def backoff_delay(attempt: int, backoff: float) -> float:
    """
    Delay to wait after a failed attempt.

    Args:
        attempt: 1-based number of the attempt that just failed.
        backoff: Base delay in seconds.

    Returns:
        ``backoff * attempt`` seconds.
    """
    return backoff * attempt


async def fetch_with_retry(
    fetch: Callable[[str], Awaitable[T]],
    url: str,
    retries: int = DEFAULT_MAX_RETRIES,
    backoff: float = DEFAULT_RETRY_BACKOFF,
    sleep: SleepFunc = asyncio.sleep,
    on_retry: RetryCallback | None = None,
) -> T:
    """
    Call ``fetch(url)`` until it returns a non-empty body.

    Args:
        fetch: Coroutine function performing a single attempt.
        url: Request URL, passed through to ``fetch``.
        retries: Total number of attempts.
        backoff: Base delay; the wait after attempt ``n`` is ``backoff * n``.
        sleep: Awaitable sleep, injectable for tests.
        on_retry: Called with (url, attempt, error) after each failed attempt.

    Returns:
        The first non-empty result.

    Raises:
        ValueError: If ``retries`` is less than 1.
        RetryExhaustedError: After ``retries`` failed attempts, chained to
            the last underlying error.
    """
    if retries < 1:
        raise ValueError("retries must be >= 1")

    last_error: BaseException | None = None

    for attempt in range(1, retries + 1):
        try:
            logger.info(f"Request {url} (attempt {attempt}/{retries})")
            result = await fetch(url)
            if result is None or (isinstance(result, (list, dict)) and not result):
                raise EmptyResponseError(f"Empty response from {url}")
            return result

        except Exception as e:
            last_error = e
            logger.warning(f"Request failed (attempt {attempt}/{retries}): {e}")
            if on_retry is not None:
                on_retry(url, attempt, e)

            if attempt < retries:
                await sleep(backoff_delay(attempt, backoff))

    raise RetryExhaustedError(url, retries) from last_error

"""Retry with exponential backoff for transient failures."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, TypeVar

import httpx

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _status_of(error: BaseException) -> Optional[int]:
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code
    for attr in ("status", "status_code"):
        value = getattr(error, attr, None)
        if isinstance(value, int):
            return value
    return None


def is_retryable(error: BaseException) -> bool:
    """Determine if an error is transient and worth retrying.

    Transport-level faults (connection refused, DNS, timeouts) and 5xx
    server responses are retryable. Client errors (4xx), validation
    failures and anything else surface immediately.
    """
    if isinstance(error, (httpx.TransportError, ConnectionError, TimeoutError)):
        return True

    # Adapter errors wrap the transport fault they were raised from
    cause = getattr(error, "cause", None)
    if isinstance(cause, (httpx.TransportError, ConnectionError, TimeoutError)):
        return True

    status = _status_of(error)
    return status is not None and 500 <= status < 600


@dataclass(frozen=True)
class RetryPolicy:
    """Retry settings. Delays are in seconds."""

    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 10.0
    should_retry: Callable[[BaseException], bool] = is_retryable

    def delay_for(self, attempt: int) -> float:
        """Delay before retrying after the given 0-indexed attempt."""
        return min(self.base_delay * (2 ** attempt), self.max_delay)


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    policy: Optional[RetryPolicy] = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> T:
    """Run operation, retrying retryable failures.

    Makes at most ``policy.max_retries + 1`` attempts. The last error is
    re-raised unchanged once retries are exhausted or the error is not
    retryable.
    """
    policy = policy or RetryPolicy()

    attempt = 0
    while True:
        try:
            return await operation()
        except Exception as e:
            if attempt >= policy.max_retries or not policy.should_retry(e):
                raise

            delay = policy.delay_for(attempt)
            logger.warning(
                "Attempt %d failed, retrying in %.2fs: %s", attempt + 1, delay, e
            )
            await sleep(delay)
            attempt += 1

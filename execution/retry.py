"""
Bounded retry with exponential backoff for live calls.
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from core.constants import DEFAULT_BACKOFF_BASE_SECONDS, DEFAULT_MAX_RETRIES
from core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """
    One initial call plus max_retries retries; before retry n the caller
    waits backoff_base_seconds * 2**(n - 1) (1s, 2s, 4s, ...).
    """
    max_retries: int = DEFAULT_MAX_RETRIES
    backoff_base_seconds: float = DEFAULT_BACKOFF_BASE_SECONDS

    @property
    def max_calls(self) -> int:
        return self.max_retries + 1

    def delay_for(self, retry: int) -> float:
        """Delay before the given retry (1-based)."""
        return self.backoff_base_seconds * 2 ** (retry - 1)


async def retry_async(
    fn: Callable[[], Awaitable[T]],
    policy: RetryPolicy = RetryPolicy(),
    operation: str = "operation",
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Await fn() until it succeeds or the policy is exhausted.

    The last exception is re-raised unchanged once every retry has failed.
    """
    attempt = 0
    while True:
        attempt += 1
        try:
            return await fn()
        except Exception as e:
            logger.warning(
                f"[RETRY] {operation} attempt {attempt}/{policy.max_calls} failed: {e}",
                extra={"context": {"operation": operation, "attempt": attempt, "error_class": type(e).__name__}},
            )
            if attempt > policy.max_retries:
                raise
            await sleep(policy.delay_for(attempt))

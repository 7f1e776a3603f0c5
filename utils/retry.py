"""Exponential backoff with jitter for calls to the LLM API."""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Authentication, bad request (e.g. unknown model) and exhausted credits
# will fail the same way on every attempt.
NON_RETRYABLE_STATUSES: frozenset[int] = frozenset({400, 401, 402})


def should_retry(exc: Exception) -> bool:
    status = getattr(exc, "status_code", None)
    return status not in NON_RETRYABLE_STATUSES


def backoff_delay(attempt: int, base_delay: float) -> float:
    """Delay before retry number *attempt* (1-based), with up to 30% jitter."""
    delay = base_delay * 2 ** (attempt - 1)
    return delay + random.random() * 0.3 * delay


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    operation: str = "operation",
    max_attempts: int = 3,
    base_delay: float = 1.0,
    retry_on: tuple[type[Exception], ...] = (Exception,),
) -> T:
    """Await ``fn()`` up to *max_attempts* times, re-raising the last error."""
    attempt = 1
    while True:
        try:
            return await fn()
        except retry_on as exc:
            if attempt >= max_attempts or not should_retry(exc):
                raise
            delay = backoff_delay(attempt, base_delay)
            logger.warning(
                "%s failed (attempt %d/%d): %s; retrying in %.1fs",
                operation, attempt, max_attempts, exc, delay,
            )
            await asyncio.sleep(delay)
            attempt += 1

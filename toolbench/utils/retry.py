"""Retry helper with exponential backoff for flaky vendor calls."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, TypeVar

import structlog

from toolbench.utils.logging import get_logger

_T = TypeVar("_T")

# Failures whose message contains one of these will not succeed on retry.
NON_RETRYABLE_MARKERS = ("safety", "blocked", "invalid")

_logger: structlog.BoundLogger = get_logger(__name__)


async def retry_with_backoff(
    fn: Callable[[], Awaitable[_T]],
    max_retries: int = 3,
    base_delay: float = 1.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> _T:
    """Call *fn* up to *max_retries* times, doubling the delay after each failure.

    The last exception is re-raised once attempts are exhausted.  Errors
    whose message mentions a safety block or invalid input are raised
    immediately.
    """
    last_error: Exception | None = None

    for attempt in range(max_retries):
        try:
            return await fn()
        except Exception as exc:
            last_error = exc
            message = str(exc).lower()
            _logger.warning("retry_attempt_failed", attempt=attempt + 1, error=str(exc))

            if any(marker in message for marker in NON_RETRYABLE_MARKERS):
                raise

            if attempt < max_retries - 1:
                delay = base_delay * (2**attempt)
                _logger.info("retry_backoff", delay_seconds=delay)
                await sleep(delay)

    if last_error is None:
        raise ValueError(f"max_retries must be at least 1, got {max_retries}")
    raise last_error

"""Per-client fixed-window rate limiting on top of ``limits``.

Each identifier (normally the client IP) gets ``limit`` requests per
``window_seconds``.  The first request opens a window; once the count
exceeds the limit, checks fail until the window resets.

Counters live in ``limits``' in-process ``MemoryStorage``, so a multi-worker
deployment gets one budget per worker.  That is acceptable for the basic
abuse protection this provides.
"""

from __future__ import annotations

from dataclasses import dataclass

from limits import RateLimitItemPerSecond
from limits.storage import MemoryStorage
from limits.strategies import FixedWindowRateLimiter
from starlette.requests import Request


@dataclass(frozen=True)
class RateLimitResult:
    success: bool
    limit: int
    remaining: int
    reset_at: float


class RateLimiter:
    """Fixed-window counter keyed by identifier.

    Parameters
    ----------
    limit:
        Maximum requests allowed per window.
    window_seconds:
        Window duration in seconds.
    """

    def __init__(self, limit: int = 30, window_seconds: int = 60) -> None:
        self._item = RateLimitItemPerSecond(limit, window_seconds)
        self._limiter = FixedWindowRateLimiter(MemoryStorage())

    @property
    def limit(self) -> int:
        return self._item.amount

    def check(self, identifier: str) -> RateLimitResult:
        """Count one request for *identifier* and report whether it is allowed."""
        allowed = self._limiter.hit(self._item, identifier)
        stats = self._limiter.get_window_stats(self._item, identifier)
        return RateLimitResult(
            success=allowed,
            limit=self.limit,
            remaining=stats.remaining if allowed else 0,
            reset_at=stats.reset_time,
        )


def get_client_ip(request: Request) -> str:
    """Extract the client IP from proxy headers.

    Prefers the first ``x-forwarded-for`` hop, then ``x-real-ip``.
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip
    return "unknown"

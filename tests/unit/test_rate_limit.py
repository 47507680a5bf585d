"""Unit tests for the fixed-window rate limiter."""

from __future__ import annotations

import time

from starlette.requests import Request

from toolbench.utils.rate_limit import RateLimiter, get_client_ip


def _request(headers: dict[str, str]) -> Request:
    raw = [(k.lower().encode(), v.encode()) for k, v in headers.items()]
    return Request({"type": "http", "headers": raw})


class TestRateLimiter:
    def test_first_request_opens_window(self) -> None:
        limiter = RateLimiter(limit=3, window_seconds=60)
        before = time.time()

        result = limiter.check("1.2.3.4")

        assert result.success is True
        assert result.limit == 3
        assert result.remaining == 2
        assert before + 59 <= result.reset_at <= time.time() + 61

    def test_blocks_after_limit(self) -> None:
        limiter = RateLimiter(limit=2, window_seconds=60)
        assert limiter.check("ip").success
        second = limiter.check("ip")
        assert second.success and second.remaining == 0
        third = limiter.check("ip")
        assert third.success is False
        assert third.remaining == 0
        assert third.limit == 2

    def test_window_resets(self) -> None:
        limiter = RateLimiter(limit=1, window_seconds=1)
        limiter.check("ip")
        assert limiter.check("ip").success is False

        time.sleep(1.2)
        assert limiter.check("ip").success is True

    def test_identifiers_are_independent(self) -> None:
        limiter = RateLimiter(limit=1, window_seconds=60)
        assert limiter.check("a").success
        assert limiter.check("b").success
        assert limiter.check("a").success is False

    def test_limiters_do_not_share_counters(self) -> None:
        first = RateLimiter(limit=1, window_seconds=60)
        second = RateLimiter(limit=1, window_seconds=60)

        assert first.check("ip").success
        assert second.check("ip").success


class TestGetClientIp:
    def test_first_forwarded_hop(self) -> None:
        assert get_client_ip(_request({"x-forwarded-for": " 10.0.0.1 , 10.0.0.2"})) == "10.0.0.1"

    def test_real_ip_fallback(self) -> None:
        assert get_client_ip(_request({"x-real-ip": "10.9.9.9"})) == "10.9.9.9"

    def test_unknown(self) -> None:
        assert get_client_ip(_request({})) == "unknown"

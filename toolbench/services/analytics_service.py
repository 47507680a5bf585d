"""Usage analytics aggregation.

# ─── HOW TRACKING WORKS ──────────────────────────────────────────────
#
# Every event lands in the DailyStats document for its UTC date:
#
#   api_call       → apiCalls[path]
#   page_view      → pageViews[path]
#   provider_call  → providerCalls[provider or path]
#
# The document is read, incremented and written back whole.  A per-date
# asyncio.Lock serialises this within one process; writers in other
# processes may still race.  Tracking never raises: analytics must not
# break the request that produced the event.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import asyncio
import re
import weakref
from datetime import date, datetime, timedelta, timezone
from typing import Callable

import structlog
from pydantic import ValidationError

from toolbench.interfaces.blob_store import IBlobStore
from toolbench.models.analytics import (
    AnalyticsEvent,
    AnalyticsReport,
    AnalyticsSummary,
    DailyStats,
    EventType,
    UsageCounter,
)
from toolbench.utils.errors import StorageError
from toolbench.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

MAX_REPORT_DAYS = 30
DEFAULT_REPORT_DAYS = 7


def blob_key_for(day: str) -> str:
    return f"analytics/{day}.json"


# Leading integer only, so "3.5" reads as 3 and "14d" as 14.
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def clamp_days(raw: str | int | None) -> int:
    """Parse a ``days`` query value into the range 1..30 (7 when unparseable)."""
    if raw is None:
        return DEFAULT_REPORT_DAYS
    if isinstance(raw, int):
        days = raw
    else:
        match = _LEADING_INT.match(raw)
        if match is None:
            return DEFAULT_REPORT_DAYS
        days = int(match.group(1))
    return max(1, min(MAX_REPORT_DAYS, days))


def _utc_today() -> date:
    return datetime.now(tz=timezone.utc).date()


class AnalyticsService:
    """Record usage events and roll them up into reports.

    Parameters
    ----------
    blob_store:
        Where daily documents live.
    today:
        Returns the current UTC date.  Injected for tests.
    """

    def __init__(self, blob_store: IBlobStore, today: Callable[[], date] = _utc_today) -> None:
        self._store = blob_store
        self._today = today
        # Held only while a write for that date is in flight.
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

    async def track_event(self, event: AnalyticsEvent) -> None:
        """Count *event* in today's stats.  Failures are logged, never raised."""
        day = self._today().isoformat()
        try:
            async with self._lock_for(day):
                stats = await self._load_day(day)
                self._apply(stats, event)
                await self._store.put_json(blob_key_for(day), stats.model_dump(by_alias=True))
        except Exception as exc:  # noqa: BLE001
            _logger.warning(
                "analytics_track_failed",
                event_type=event.type.value,
                path=event.path,
                error=str(exc),
            )

    def _lock_for(self, day: str) -> asyncio.Lock:
        lock = self._locks.get(day)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[day] = lock
        return lock

    async def get_day(self, day: str) -> DailyStats:
        """Stats for one ``YYYY-MM-DD`` day; empty when missing or unreadable."""
        return await self._load_day(day)

    async def get_analytics(self, days: int = DEFAULT_REPORT_DAYS) -> list[DailyStats]:
        """Return non-empty stats for today and the previous ``days-1`` days, newest first."""
        today = self._today()
        results: list[DailyStats] = []
        for offset in range(days):
            day = (today - timedelta(days=offset)).isoformat()
            stats = await self.get_day(day)
            if not stats.is_empty():
                results.append(stats)
        return results

    async def build_report(self, days: int = DEFAULT_REPORT_DAYS) -> AnalyticsReport:
        """Aggregate the last *days* days into one report."""
        daily = await self.get_analytics(days)

        tool_usage: dict[str, UsageCounter] = {}
        provider_usage: dict[str, UsageCounter] = {}
        users: set[str] = set()
        summary = AnalyticsSummary(days=days)

        for stats in daily:
            summary.total_api_calls += stats.total_api_calls
            summary.total_page_views += stats.total_page_views
            summary.total_provider_calls += stats.total_provider_calls
            users.update(stats.unique_users)

            _merge_into(tool_usage, stats.api_calls)
            _merge_into(tool_usage, {f"page:{path}": c for path, c in stats.page_views.items()})
            _merge_into(provider_usage, stats.provider_calls)

        summary.unique_users = len(users)
        return AnalyticsReport(
            summary=summary,
            tool_usage=tool_usage,
            provider_usage=provider_usage,
            daily_stats=daily,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _load_day(self, day: str) -> DailyStats:
        try:
            raw = await self._store.get_json(blob_key_for(day))
        except StorageError as exc:
            _logger.warning("analytics_day_unreadable", day=day, error=str(exc))
            return DailyStats(date=day)
        if not isinstance(raw, dict):
            return DailyStats(date=day)
        try:
            return DailyStats.model_validate(raw)
        except ValidationError:
            _logger.warning("analytics_day_invalid", day=day)
            return DailyStats(date=day)

    @staticmethod
    def _apply(stats: DailyStats, event: AnalyticsEvent) -> None:
        if event.type is EventType.API_CALL:
            bucket, key = stats.api_calls, event.path
            stats.total_api_calls += 1
        elif event.type is EventType.PAGE_VIEW:
            bucket, key = stats.page_views, event.path
            stats.total_page_views += 1
        else:
            bucket, key = stats.provider_calls, event.provider or event.path
            stats.total_provider_calls += 1

        bucket.setdefault(key, UsageCounter()).record(event.user)

        if event.user not in stats.unique_users:
            stats.unique_users.append(event.user)


def _merge_into(target: dict[str, UsageCounter], source: dict[str, UsageCounter]) -> None:
    for key, counter in source.items():
        merged = target.setdefault(key, UsageCounter())
        merged.total += counter.total
        for user, count in counter.users.items():
            merged.users[user] = merged.users.get(user, 0) + count

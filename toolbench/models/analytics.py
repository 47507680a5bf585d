"""Usage analytics models.

# ─── STORAGE SHAPE ───────────────────────────────────────────────────
#
# One DailyStats document per UTC calendar day, stored as JSON at
# ``analytics/{YYYY-MM-DD}.json``.  Keys are camelCase on disk and on
# the wire so existing dashboards keep reading them:
#
#   {
#     "date": "2026-02-11",
#     "apiCalls":      {"/api/v1/tools/image": {"total": 3, "users": {...}}},
#     "pageViews":     {"/tools/image": {"total": 9, "users": {...}}},
#     "providerCalls": {"replicate": {"total": 2, "users": {...}}},
#     "totalApiCalls": 3, "totalPageViews": 9, "totalProviderCalls": 2,
#     "uniqueUsers": ["a@subtropicstudios.com"]
#   }
#
# DailyStats is mutable: the analytics service increments counters in
# place and writes the whole document back.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EventType(str, Enum):
    """Kinds of usage event."""

    API_CALL = "api_call"
    PAGE_VIEW = "page_view"
    PROVIDER_CALL = "provider_call"


class AnalyticsEvent(BaseModel):
    """A single usage event.  ``provider`` is set for provider calls."""

    model_config = ConfigDict(frozen=True)

    type: EventType
    path: str
    user: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(tz=timezone.utc))
    provider: str | None = None


class UsageCounter(BaseModel):
    """Total hits for one key plus a per-user breakdown."""

    total: int = 0
    users: dict[str, int] = Field(default_factory=dict)

    def record(self, user: str) -> None:
        self.total += 1
        self.users[user] = self.users.get(user, 0) + 1


class DailyStats(BaseModel):
    """Aggregated counters for one UTC day."""

    model_config = _CAMEL

    date: str
    api_calls: dict[str, UsageCounter] = Field(default_factory=dict)
    page_views: dict[str, UsageCounter] = Field(default_factory=dict)
    provider_calls: dict[str, UsageCounter] = Field(default_factory=dict)
    total_api_calls: int = 0
    total_page_views: int = 0
    total_provider_calls: int = 0
    unique_users: list[str] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return (
            self.total_api_calls == 0
            and self.total_page_views == 0
            and self.total_provider_calls == 0
        )


class AnalyticsSummary(BaseModel):
    model_config = _CAMEL

    total_api_calls: int = 0
    total_page_views: int = 0
    total_provider_calls: int = 0
    unique_users: int = 0
    days: int = 7


class AnalyticsReport(BaseModel):
    """Multi-day roll-up returned by ``GET /api/v1/tools/analytics``."""

    model_config = _CAMEL

    summary: AnalyticsSummary
    tool_usage: dict[str, UsageCounter] = Field(default_factory=dict)
    provider_usage: dict[str, UsageCounter] = Field(default_factory=dict)
    daily_stats: list[DailyStats] = Field(default_factory=list)

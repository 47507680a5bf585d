"""toolbench domain models.

    - analytics.py -- usage events and per-day counters
    - feedback.py  -- feedback board items
"""

from __future__ import annotations

from toolbench.models.analytics import (
    AnalyticsEvent,
    AnalyticsReport,
    AnalyticsSummary,
    DailyStats,
    EventType,
    UsageCounter,
)
from toolbench.models.feedback import (
    FeedbackItem,
    FeedbackStatus,
    FeedbackType,
    utc_timestamp,
)

__all__ = [
    # analytics
    "AnalyticsEvent",
    "AnalyticsReport",
    "AnalyticsSummary",
    "DailyStats",
    "EventType",
    "UsageCounter",
    # feedback
    "FeedbackItem",
    "FeedbackStatus",
    "FeedbackType",
    "utc_timestamp",
]

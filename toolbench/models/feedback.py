"""Feedback board models.

Items are frozen; updates go through ``model_copy(update={...})`` and
always refresh ``updated_at``.  Timestamps are ISO-8601 UTC strings with
millisecond precision and a ``Z`` suffix so they sort lexically.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utc_timestamp() -> str:
    """Current UTC time, e.g. ``2026-02-11T09:30:00.123Z``."""
    now = datetime.now(tz=timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class FeedbackType(str, Enum):
    BUG = "bug"
    FEATURE = "feature"
    IMPROVEMENT = "improvement"
    OTHER = "other"


class FeedbackStatus(str, Enum):
    """Triage states an admin moves an item through."""

    NEW = "new"
    IN_PROGRESS = "in-progress"
    DONE = "done"
    DISMISSED = "dismissed"


class FeedbackItem(BaseModel):
    """A bug report or feature request submitted from a tool page."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )

    id: str = Field(default_factory=lambda: str(uuid4()))
    type: FeedbackType
    title: str
    description: str = ""
    tool: str = "General"
    submitted_by: str = "Anonymous"
    status: FeedbackStatus = FeedbackStatus.NEW
    admin_note: str = ""
    created_at: str = Field(default_factory=utc_timestamp)
    updated_at: str = Field(default_factory=utc_timestamp)

    def to_dict(self) -> dict:
        """Serialise with camelCase keys, as stored and returned."""
        return self.model_dump(by_alias=True, mode="json")

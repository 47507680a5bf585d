"""Abstract base class for feedback board persistence.

Stores bug reports and feature requests submitted from the tool pages.
Implementations may keep a single JSON list in the blob store or use a
SQLite table; callers see the same semantics either way.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from toolbench.models.feedback import FeedbackItem


class IFeedbackProvider(ABC):
    """Contract for feedback item persistence."""

    @abstractmethod
    async def list_items(self) -> list[FeedbackItem]:
        """Return every stored item, newest ``created_at`` first."""

    @abstractmethod
    async def create_item(self, item: FeedbackItem) -> FeedbackItem:
        """Persist a new *item* and return it."""

    @abstractmethod
    async def update_item(
        self,
        item_id: str,
        status: str | None = None,
        admin_note: str | None = None,
    ) -> FeedbackItem | None:
        """Update the status and/or admin note of an item.

        Only the provided fields change; ``updated_at`` is always refreshed.

        Parameters
        ----------
        item_id:
            The item's UUID.
        status:
            New triage status, or ``None`` to leave unchanged.
        admin_note:
            New admin note, or ``None`` to leave unchanged.  An empty
            string clears the note.

        Returns
        -------
        FeedbackItem or None
            The updated item, or ``None`` when *item_id* is unknown.
        """

    @abstractmethod
    async def delete_item(self, item_id: str) -> bool:
        """Delete an item.  Returns ``False`` when nothing was removed."""

    @abstractmethod
    async def initialize(self) -> None:
        """Prepare backing storage.  Called once at startup."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""

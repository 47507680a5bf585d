"""Blob-backed feedback provider.

The whole board is one JSON list stored at ``feedback-data.json``.  Every
mutation loads the list, changes it and writes the full list back.  An
asyncio lock serialises mutations within the process; concurrent writers in
other processes can still overwrite each other.
"""

from __future__ import annotations

import asyncio
from typing import Any

import structlog
from pydantic import ValidationError

from toolbench.interfaces.blob_store import IBlobStore
from toolbench.interfaces.feedback_provider import IFeedbackProvider
from toolbench.models.feedback import FeedbackItem, utc_timestamp
from toolbench.utils.errors import StorageError

logger = structlog.get_logger(logger_name=__name__)

FEEDBACK_BLOB_KEY = "feedback-data.json"


class BlobFeedbackProvider(IFeedbackProvider):
    """Feedback items as a single JSON list in the blob store."""

    def __init__(self, blob_store: IBlobStore, key: str = FEEDBACK_BLOB_KEY) -> None:
        self._store = blob_store
        self._key = key
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        logger.info("feedback_store_ready", backend=self._store.get_provider_name(), key=self._key)

    async def list_items(self) -> list[FeedbackItem]:
        items = await self._load()
        # Ties keep insertion order reversed so the latest submission wins.
        return sorted(items, key=lambda item: item.created_at)[::-1]

    async def create_item(self, item: FeedbackItem) -> FeedbackItem:
        async with self._lock:
            items = await self._load()
            items.append(item)
            await self._save(items)
        logger.info("feedback_created", id=item.id, type=item.type, tool=item.tool)
        return item

    async def update_item(
        self,
        item_id: str,
        status: str | None = None,
        admin_note: str | None = None,
    ) -> FeedbackItem | None:
        async with self._lock:
            items = await self._load()
            for index, item in enumerate(items):
                if item.id != item_id:
                    continue
                changes: dict[str, Any] = {"updated_at": utc_timestamp()}
                if status:
                    changes["status"] = status
                if admin_note is not None:
                    changes["admin_note"] = admin_note
                updated = item.model_copy(update=changes)
                items[index] = updated
                await self._save(items)
                logger.info("feedback_updated", id=item_id, status=updated.status)
                return updated
        return None

    async def delete_item(self, item_id: str) -> bool:
        async with self._lock:
            items = await self._load()
            remaining = [item for item in items if item.id != item_id]
            if len(remaining) == len(items):
                return False
            await self._save(remaining)
        logger.info("feedback_deleted", id=item_id)
        return True

    def get_provider_name(self) -> str:
        return "blob_feedback"

    # ------------------------------------------------------------------
    # Persistence helpers
    # ------------------------------------------------------------------

    async def _load(self) -> list[FeedbackItem]:
        try:
            data = await self._store.get_json(self._key)
        except StorageError as exc:
            logger.warning("feedback_load_failed", error=str(exc))
            return []
        if not isinstance(data, list):
            return []

        items: list[FeedbackItem] = []
        for raw in data:
            try:
                items.append(FeedbackItem.model_validate(raw))
            except ValidationError:
                logger.warning("feedback_item_skipped", item=raw)
        return items

    async def _save(self, items: list[FeedbackItem]) -> None:
        await self._store.put_json(self._key, [item.to_dict() for item in items])

"""Unit tests for the blob and SQLite feedback providers.

Both backends run the same scenarios so their semantics stay identical.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from toolbench.interfaces.feedback_provider import IFeedbackProvider
from toolbench.models.feedback import FeedbackItem, FeedbackStatus, FeedbackType
from toolbench.providers.blob.local_blob_store import LocalBlobStore
from toolbench.providers.feedback.blob_feedback_provider import FEEDBACK_BLOB_KEY, BlobFeedbackProvider
from toolbench.providers.feedback.sqlite_feedback_provider import SQLiteFeedbackProvider


def _item(item_id: str, created_at: str, **overrides) -> FeedbackItem:
    fields = {
        "id": item_id,
        "type": FeedbackType.BUG,
        "title": f"Bug {item_id}",
        "description": "Upscaler returns a blank image",
        "tool": "Upscaler",
        "submitted_by": "ana@subtropicstudios.com",
        "created_at": created_at,
        "updated_at": created_at,
    }
    fields.update(overrides)
    return FeedbackItem(**fields)


@pytest.fixture(params=["blob", "sqlite"])
async def provider(request, tmp_path: Path) -> IFeedbackProvider:
    if request.param == "blob":
        store: IFeedbackProvider = BlobFeedbackProvider(LocalBlobStore(tmp_path / "blobs"))
    else:
        store = SQLiteFeedbackProvider(db_path=tmp_path / "db" / "feedback.db")
    await store.initialize()
    return store


@pytest.mark.asyncio
async def test_empty_board(provider: IFeedbackProvider) -> None:
    assert await provider.list_items() == []


@pytest.mark.asyncio
async def test_create_and_list_newest_first(provider: IFeedbackProvider) -> None:
    await provider.create_item(_item("a", "2026-02-01T10:00:00.000Z"))
    await provider.create_item(_item("c", "2026-02-03T10:00:00.000Z"))
    await provider.create_item(_item("b", "2026-02-02T10:00:00.000Z"))

    items = await provider.list_items()

    assert [item.id for item in items] == ["c", "b", "a"]
    assert items[0].status == "new"
    assert items[0].tool == "Upscaler"


@pytest.mark.asyncio
async def test_update_status_and_note(provider: IFeedbackProvider) -> None:
    await provider.create_item(_item("a", "2026-02-01T10:00:00.000Z"))

    updated = await provider.update_item("a", status=FeedbackStatus.DONE.value, admin_note="fixed in v2")

    assert updated is not None
    assert updated.status == "done"
    assert updated.admin_note == "fixed in v2"
    assert updated.updated_at > updated.created_at
    assert (await provider.list_items())[0].status == "done"


@pytest.mark.asyncio
async def test_update_only_provided_fields(provider: IFeedbackProvider) -> None:
    await provider.create_item(_item("a", "2026-02-01T10:00:00.000Z", admin_note="triaged"))

    updated = await provider.update_item("a", status="in-progress")

    assert updated is not None
    assert updated.status == "in-progress"
    assert updated.admin_note == "triaged"


@pytest.mark.asyncio
async def test_empty_note_clears(provider: IFeedbackProvider) -> None:
    await provider.create_item(_item("a", "2026-02-01T10:00:00.000Z", admin_note="triaged"))
    updated = await provider.update_item("a", admin_note="")
    assert updated is not None
    assert updated.admin_note == ""
    assert updated.status == "new"


@pytest.mark.asyncio
async def test_update_unknown_returns_none(provider: IFeedbackProvider) -> None:
    assert await provider.update_item("missing", status="done") is None


@pytest.mark.asyncio
async def test_delete(provider: IFeedbackProvider) -> None:
    await provider.create_item(_item("a", "2026-02-01T10:00:00.000Z"))
    await provider.create_item(_item("b", "2026-02-02T10:00:00.000Z"))

    assert await provider.delete_item("a") is True
    assert await provider.delete_item("a") is False
    assert [item.id for item in await provider.list_items()] == ["b"]


@pytest.mark.asyncio
async def test_blob_provider_stores_camel_case(tmp_path: Path) -> None:
    blobs = LocalBlobStore(tmp_path)
    provider = BlobFeedbackProvider(blobs)
    await provider.create_item(_item("a", "2026-02-01T10:00:00.000Z"))

    stored = await blobs.get_json(FEEDBACK_BLOB_KEY)

    assert stored[0]["submittedBy"] == "ana@subtropicstudios.com"
    assert stored[0]["createdAt"] == "2026-02-01T10:00:00.000Z"
    assert stored[0]["type"] == "bug"


@pytest.mark.asyncio
async def test_blob_provider_skips_invalid_entries(tmp_path: Path) -> None:
    blobs = LocalBlobStore(tmp_path)
    await blobs.put_json(
        FEEDBACK_BLOB_KEY,
        [
            {"id": "ok", "type": "feature", "title": "Dark mode", "createdAt": "2026-01-01T00:00:00.000Z"},
            {"id": "bad", "type": "complaint"},
        ],
    )

    items = await BlobFeedbackProvider(blobs).list_items()

    assert [item.id for item in items] == ["ok"]

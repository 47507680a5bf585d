"""SQLite-backed feedback provider.

Persists feedback items to a local SQLite database at ``data/feedback.db``.
Uses ``aiosqlite`` for async I/O.  Semantics match the blob provider so the
backend can be switched with ``FEEDBACK_BACKEND=sqlite``.
"""

from __future__ import annotations

from pathlib import Path

import aiosqlite
import structlog

from toolbench.interfaces.feedback_provider import IFeedbackProvider
from toolbench.models.feedback import FeedbackItem, utc_timestamp

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/feedback.db")

_CREATE_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS feedback (
    id            TEXT PRIMARY KEY,
    type          TEXT NOT NULL,
    title         TEXT NOT NULL,
    description   TEXT NOT NULL DEFAULT '',
    tool          TEXT NOT NULL DEFAULT 'General',
    submitted_by  TEXT NOT NULL DEFAULT 'Anonymous',
    status        TEXT NOT NULL DEFAULT 'new',
    admin_note    TEXT NOT NULL DEFAULT '',
    created_at    TEXT NOT NULL,
    updated_at    TEXT NOT NULL
);
"""

_CREATE_INDICES_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_feedback_created ON feedback(created_at);",
    "CREATE INDEX IF NOT EXISTS idx_feedback_status ON feedback(status);",
]

_COLUMNS = (
    "id, type, title, description, tool, submitted_by, status, admin_note, created_at, updated_at"
)

_INSERT_SQL = f"INSERT INTO feedback ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?);"

_SELECT_ALL_SQL = f"SELECT {_COLUMNS} FROM feedback ORDER BY created_at DESC, rowid DESC;"

_SELECT_ONE_SQL = f"SELECT {_COLUMNS} FROM feedback WHERE id = ?;"


class SQLiteFeedbackProvider(IFeedbackProvider):
    """SQLite-backed feedback persistence."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    async def initialize(self) -> None:
        """Create the feedback table and indices if they don't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute(_CREATE_TABLE_SQL)
            for idx_sql in _CREATE_INDICES_SQL:
                await db.execute(idx_sql)
            await db.commit()
        logger.info("feedback_db_initialized", path=str(self._db_path))

    async def list_items(self) -> list[FeedbackItem]:
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(_SELECT_ALL_SQL)
            rows = await cursor.fetchall()
        return [FeedbackItem.model_validate(dict(r)) for r in rows]

    async def create_item(self, item: FeedbackItem) -> FeedbackItem:
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute(
                _INSERT_SQL,
                (
                    item.id,
                    item.type,
                    item.title,
                    item.description,
                    item.tool,
                    item.submitted_by,
                    item.status,
                    item.admin_note,
                    item.created_at,
                    item.updated_at,
                ),
            )
            await db.commit()
        logger.info("feedback_created", id=item.id, type=item.type, tool=item.tool)
        return item

    async def update_item(
        self,
        item_id: str,
        status: str | None = None,
        admin_note: str | None = None,
    ) -> FeedbackItem | None:
        assignments = ["updated_at = ?"]
        params: list[str] = [utc_timestamp()]
        if status:
            assignments.append("status = ?")
            params.append(status)
        if admin_note is not None:
            assignments.append("admin_note = ?")
            params.append(admin_note)
        params.append(item_id)

        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                f"UPDATE feedback SET {', '.join(assignments)} WHERE id = ?;",
                params,
            )
            if cursor.rowcount == 0:
                return None
            await db.commit()
            cursor = await db.execute(_SELECT_ONE_SQL, (item_id,))
            row = await cursor.fetchone()

        logger.info("feedback_updated", id=item_id, status=status)
        return FeedbackItem.model_validate(dict(row))

    async def delete_item(self, item_id: str) -> bool:
        async with aiosqlite.connect(str(self._db_path)) as db:
            cursor = await db.execute("DELETE FROM feedback WHERE id = ?;", (item_id,))
            await db.commit()
            removed = cursor.rowcount > 0
        if removed:
            logger.info("feedback_deleted", id=item_id)
        return removed

    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""
        return "sqlite_feedback"

"""SQLite-backed pending-notification store.

Keeps the host's pending set on disk so a desktop notifier daemon can pick
triggers up after a restart. Only title, body and instant are stored: the
engine must be able to classify rows from text alone.

Each call opens its own connection and runs in a worker thread via
``asyncio.to_thread``, so the event loop is not blocked on disk I/O.
Any ``sqlite3.Error`` surfaces as :class:`~nourish.errors.SchedulerRejected`.
"""
from __future__ import annotations

import asyncio
import logging
import sqlite3
import uuid
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from nourish.errors import SchedulerRejected
from nourish.scheduling.models import NotificationContent, PendingTrigger

logger = logging.getLogger(__name__)


# Default database path
DEFAULT_DB_PATH = Path.home() / ".local" / "share" / "nourish" / "notifications.db"


class SqliteNotificationScheduler:
    """:class:`~nourish.notify.base.NotificationScheduler` over one SQLite table."""

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = Path(db_path or DEFAULT_DB_PATH)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self) -> None:
        """Initialize SQLite database."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS pending_notifications (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    body TEXT NOT NULL,
                    trigger_at TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_trigger_at ON pending_notifications(trigger_at)
            """)
            conn.commit()

    # ── NotificationScheduler ───────────────────────────────────

    async def submit(self, content: NotificationContent, trigger_at: datetime) -> str:
        trigger_id = uuid.uuid4().hex[:12]
        try:
            await asyncio.to_thread(self._insert, trigger_id, content, trigger_at)
        except sqlite3.Error as exc:
            raise SchedulerRejected(
                f"could not store notification: {exc}",
                trigger_at=trigger_at,
                operation="submit",
            ) from exc
        return trigger_id

    async def cancel(self, trigger_id: str) -> None:
        try:
            await asyncio.to_thread(self._delete, trigger_id)
        except sqlite3.Error as exc:
            raise SchedulerRejected(
                f"could not cancel notification: {exc}",
                trigger_id=trigger_id,
                operation="cancel",
            ) from exc

    async def list_pending(self) -> List[PendingTrigger]:
        try:
            return await asyncio.to_thread(self._select_all)
        except sqlite3.Error as exc:
            raise SchedulerRejected(
                f"could not list notifications: {exc}",
                operation="list",
            ) from exc

    async def cancel_all(self) -> None:
        try:
            count = await asyncio.to_thread(self._delete_all)
        except sqlite3.Error as exc:
            raise SchedulerRejected(
                f"could not clear notifications: {exc}",
                operation="cancel_all",
            ) from exc
        logger.info("Cleared %d pending notifications", count)

    # ── Blocking helpers ────────────────────────────────────────

    def _insert(self, trigger_id: str, content: NotificationContent, trigger_at: datetime) -> None:
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                "INSERT INTO pending_notifications (id, title, body, trigger_at, created_at) "
                "VALUES (?, ?, ?, ?, ?)",
                (
                    trigger_id,
                    content.title,
                    content.body,
                    trigger_at.isoformat(),
                    datetime.now().isoformat(),
                ),
            )
            conn.commit()

    def _delete(self, trigger_id: str) -> None:
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("DELETE FROM pending_notifications WHERE id = ?", (trigger_id,))
            conn.commit()

    def _select_all(self) -> List[PendingTrigger]:
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            rows = conn.execute(
                "SELECT id, title, body, trigger_at FROM pending_notifications ORDER BY trigger_at"
            ).fetchall()
        return [
            PendingTrigger(
                id=row["id"],
                title=row["title"],
                body=row["body"],
                trigger_at=datetime.fromisoformat(row["trigger_at"]),
            )
            for row in rows
        ]

    def _delete_all(self) -> int:
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute("DELETE FROM pending_notifications")
            conn.commit()
            return cursor.rowcount

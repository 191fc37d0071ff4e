# src/todo_sync/tasks/task_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
from collections.abc import Iterable
from pathlib import Path

from .task_errors import StorageError
from .task_models import SyncState, TaskRecord

logger = logging.getLogger(__name__)

_SYNC_STATE_KEY = "sync_state"

_COLUMNS = "id, title, description, completed, owner_id, created_at"

# Binding can fail outside sqlite3.Error: lone surrogates in text, ints past 64 bits.
_STORAGE_ERRORS = (StorageError, sqlite3.Error, OSError, UnicodeError, OverflowError)


class TaskStore:
    """
    SQLite task store.

    The schema is intentionally simple and migration-safe:
    - create tables if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed

    Failure policy:
    - every sqlite, OS or parameter-binding error is caught here, logged, and turned into a no-op
      or an empty result. Nothing storage-related escapes this class.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3") -> None:
        self._db_path = Path(db_path)
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            self._ensure_schema()
        except _STORAGE_ERRORS:
            logger.exception("TaskStore schema setup failed db=%s", self._db_path)
        logger.info("TaskStore ready db=%s total=%s", self._db_path, self.count_tasks())

    @property
    def db_path(self) -> Path:
        return self._db_path

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        except sqlite3.Error as e:
            raise StorageError(f"cannot open {self._db_path}: {e}") from e
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()

            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id INTEGER PRIMARY KEY,
                    title TEXT NOT NULL DEFAULT '',
                    description TEXT NOT NULL DEFAULT '',
                    completed INTEGER NOT NULL DEFAULT 0,
                    owner_id INTEGER NOT NULL DEFAULT 1,
                    created_at REAL NOT NULL DEFAULT 0
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS sync_meta (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )

            # Migrations (safe): add missing columns.
            cur.execute("PRAGMA table_info(tasks)")
            cols = {row["name"] for row in cur.fetchall()}

            def add_col(name: str, decl: str) -> None:
                if name in cols:
                    return
                cur.execute(f"ALTER TABLE tasks ADD COLUMN {name} {decl}")
                logger.info("TaskStore migration: added column %s", name)

            add_col("title", "TEXT NOT NULL DEFAULT ''")
            add_col("description", "TEXT NOT NULL DEFAULT ''")
            add_col("completed", "INTEGER NOT NULL DEFAULT 0")
            add_col("owner_id", "INTEGER NOT NULL DEFAULT 1")
            add_col("created_at", "REAL NOT NULL DEFAULT 0")

            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_created ON tasks(created_at)")

            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> TaskRecord:
        return TaskRecord(
            id=int(row["id"]),
            title=str(row["title"] or ""),
            description=str(row["description"] or ""),
            completed=bool(row["completed"]),
            owner_id=int(row["owner_id"] or 0),
            created_at=float(row["created_at"] or 0.0),
        )

    @staticmethod
    def _task_to_params(task: TaskRecord) -> tuple[int, str, str, int, int, float]:
        return (
            int(task.id),
            task.title,
            task.description or "",
            1 if task.completed else 0,
            int(task.owner_id),
            float(task.created_at),
        )

    # ---- public API ----

    def count_tasks(self) -> int:
        try:
            conn = self._get_conn()
            try:
                (n,) = conn.execute("SELECT COUNT(*) FROM tasks").fetchone()
                return int(n)
            finally:
                conn.close()
        except _STORAGE_ERRORS:
            logger.exception("count_tasks failed")
            return 0

    def replace_all(self, records: Iterable[TaskRecord]) -> bool:
        """
        Bulk import: clear the table and insert `records` in one transaction.

        Anything not in `records` is gone afterwards. On failure the
        transaction is rolled back (previous contents survive) and False
        is returned.
        """
        records = list(records)
        try:
            params = [self._task_to_params(t) for t in records]
            conn = self._get_conn()
            try:
                conn.execute("DELETE FROM tasks")
                conn.executemany(
                    f"INSERT INTO tasks({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?)",
                    params,
                )
                conn.commit()
            except _STORAGE_ERRORS:
                conn.rollback()
                raise
            finally:
                conn.close()
        except _STORAGE_ERRORS:
            logger.exception("replace_all failed (records=%d); store left unchanged", len(records))
            return False

        logger.info("TaskStore replaced contents with %d tasks", len(params))
        return True

    def fetch_all(self) -> list[TaskRecord]:
        """All tasks, most recently created first. Empty list on failure."""
        try:
            conn = self._get_conn()
            try:
                cur = conn.execute(
                    f"SELECT {_COLUMNS} FROM tasks ORDER BY created_at DESC, id DESC"
                )
                return [self._row_to_task(r) for r in cur.fetchall()]
            finally:
                conn.close()
        except _STORAGE_ERRORS:
            logger.exception("fetch_all failed; returning empty list")
            return []

    def get(self, task_id: int) -> TaskRecord | None:
        try:
            conn = self._get_conn()
            try:
                row = conn.execute(
                    f"SELECT {_COLUMNS} FROM tasks WHERE id = ?", (int(task_id),)
                ).fetchone()
                return self._row_to_task(row) if row else None
            finally:
                conn.close()
        except _STORAGE_ERRORS:
            logger.exception("get failed task_id=%s", task_id)
            return None

    def insert(self, record: TaskRecord) -> bool:
        """
        Add one record. The caller allocates the id; a clashing id is
        rejected by the primary key and reported as a (logged) failure.
        """
        try:
            conn = self._get_conn()
            try:
                conn.execute(
                    f"INSERT INTO tasks({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?)",
                    self._task_to_params(record),
                )
                conn.commit()
            finally:
                conn.close()
        except _STORAGE_ERRORS:
            logger.exception("insert failed task_id=%s", record.id)
            return False

        logger.debug("Task added id=%s title=%r", record.id, record.title)
        return True

    def update(self, record: TaskRecord) -> bool:
        """
        Overwrite title/description/completed of the row with record.id.

        id, owner_id and created_at are never written. Returns False when
        no such row exists (or on storage failure).
        """
        try:
            conn = self._get_conn()
            try:
                cur = conn.execute(
                    """
                    UPDATE tasks
                    SET title = ?,
                        description = ?,
                        completed = ?
                    WHERE id = ?
                    """,
                    (
                        record.title,
                        record.description or "",
                        1 if record.completed else 0,
                        int(record.id),
                    ),
                )
                conn.commit()
                updated = cur.rowcount == 1
            finally:
                conn.close()
        except _STORAGE_ERRORS:
            logger.exception("update failed task_id=%s", record.id)
            return False

        if updated:
            logger.debug("Task updated id=%s completed=%s", record.id, record.completed)
        else:
            logger.debug("Task update skipped, no row id=%s", record.id)
        return updated

    def delete(self, record: TaskRecord) -> bool:
        """Remove the row with record.id. Returns False if nothing was deleted."""
        try:
            conn = self._get_conn()
            try:
                cur = conn.execute("DELETE FROM tasks WHERE id = ?", (int(record.id),))
                conn.commit()
                deleted = cur.rowcount == 1
            finally:
                conn.close()
        except _STORAGE_ERRORS:
            logger.exception("delete failed task_id=%s", record.id)
            return False

        logger.debug("Task delete id=%s deleted=%s", record.id, deleted)
        return deleted

    def max_id(self) -> int:
        try:
            conn = self._get_conn()
            try:
                (n,) = conn.execute("SELECT COALESCE(MAX(id), 0) FROM tasks").fetchone()
                return int(n)
            finally:
                conn.close()
        except _STORAGE_ERRORS:
            logger.exception("max_id failed; assuming 0")
            return 0

    # ---- sync bookkeeping ----

    def get_sync_state(self) -> SyncState:
        try:
            conn = self._get_conn()
            try:
                row = conn.execute(
                    "SELECT value FROM sync_meta WHERE key = ?", (_SYNC_STATE_KEY,)
                ).fetchone()
                return SyncState.from_db(row["value"] if row else None)
            finally:
                conn.close()
        except _STORAGE_ERRORS:
            logger.exception("get_sync_state failed")
            return SyncState.NEVER_SYNCED

    def set_sync_state(self, state: SyncState) -> None:
        try:
            conn = self._get_conn()
            try:
                conn.execute(
                    "INSERT OR REPLACE INTO sync_meta(key, value) VALUES (?, ?)",
                    (_SYNC_STATE_KEY, state.value),
                )
                conn.commit()
            finally:
                conn.close()
        except _STORAGE_ERRORS:
            logger.exception("set_sync_state failed state=%s", state.value)

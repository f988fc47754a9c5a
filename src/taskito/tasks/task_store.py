# src/taskito/tasks/task_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
import time
import uuid
from pathlib import Path
from typing import Any

from .task_models import Task, TaskKind, is_valid_date, parse_time_minutes

logger = logging.getLogger(__name__)

# Marker for "argument not given" in update_task_fields (None is a real value there).
_UNSET: Any = object()


def _validate_schedule(date: str | None, time_: str | None, reminder_minutes: int | None) -> None:
    if date is not None and not is_valid_date(date):
        raise ValueError(f"date must be YYYY-MM-DD, got {date!r}")
    if time_ is not None and parse_time_minutes(time_) is None:
        raise ValueError(f"time must be HH:MM (24h), got {time_!r}")
    if reminder_minutes is not None and int(reminder_minutes) < 0:
        raise ValueError("reminder_minutes must be >= 0")


class TaskStore:
    """
    SQLite task store; also the TaskFeed the reminder engine polls.

    The schema is intentionally simple and migration-safe:
    - create table if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        try:
            total = self.count_tasks()
        except Exception:
            total = -1
        logger.info("TaskStore ready db=%s total=%s", self._db_path, total)

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(Exception):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()

            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    details TEXT NOT NULL DEFAULT '',
                    date TEXT,
                    time TEXT,
                    reminder_minutes INTEGER,
                    completed INTEGER NOT NULL DEFAULT 0,
                    kind TEXT NOT NULL DEFAULT 'task',
                    project_id TEXT,
                    created_at REAL NOT NULL,
                    updated_at REAL NOT NULL
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

            add_col("details", "TEXT NOT NULL DEFAULT ''")
            add_col("reminder_minutes", "INTEGER")
            add_col("kind", "TEXT NOT NULL DEFAULT 'task'")
            add_col("project_id", "TEXT")

            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_date ON tasks(date, completed)")

            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        rem = row["reminder_minutes"]
        return Task(
            id=str(row["id"]),
            title=str(row["title"] or ""),
            details=str(row["details"] or ""),
            date=row["date"],
            time=row["time"],
            reminder_minutes=int(rem) if rem is not None else None,
            completed=bool(row["completed"]),
            kind=TaskKind.from_db(row["kind"]),
            project_id=row["project_id"],
            created_at=float(row["created_at"] or 0.0),
            updated_at=float(row["updated_at"] or 0.0),
        )

    # ---- public API ----

    def count_tasks(self) -> int:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT COUNT(*) FROM tasks")
            (n,) = cur.fetchone()
            return int(n)
        finally:
            conn.close()

    def add_task(
        self,
        *,
        title: str,
        details: str = "",
        date: str | None = None,
        time_: str | None = None,
        reminder_minutes: int | None = None,
        kind: TaskKind = TaskKind.TASK,
        project_id: str | None = None,
        task_id: str | None = None,
    ) -> str:
        if not title or not title.strip():
            raise ValueError("title is required")
        _validate_schedule(date, time_, reminder_minutes)

        now = time.time()
        new_id = task_id or uuid.uuid4().hex

        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO tasks(
                    id, title, details, date, time, reminder_minutes,
                    completed, kind, project_id, created_at, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, 0, ?, ?, ?, ?)
                """,
                (
                    new_id,
                    title.strip(),
                    (details or "").strip(),
                    date,
                    time_,
                    reminder_minutes,
                    TaskKind(kind).value,
                    project_id,
                    now,
                    now,
                ),
            )
            conn.commit()
            logger.debug(
                "Task added id=%s date=%s time=%s reminder=%s",
                new_id,
                date,
                time_,
                reminder_minutes,
            )
            return new_id
        finally:
            conn.close()

    def get_task(self, task_id: str) -> Task | None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT * FROM tasks WHERE id = ?", (str(task_id),))
            row = cur.fetchone()
            return self._row_to_task(row) if row else None
        finally:
            conn.close()

    def update_task_fields(
        self,
        task_id: str,
        *,
        title: str | None = None,
        details: str | None = None,
        date: str | None = _UNSET,
        time_: str | None = _UNSET,
        reminder_minutes: int | None = _UNSET,
        completed: bool | None = None,
        project_id: str | None = _UNSET,
    ) -> bool:
        """
        Update only the fields that were passed.

        date/time_/reminder_minutes/project_id accept None to clear the value.
        Returns False if the task does not exist.
        """
        _validate_schedule(
            None if date is _UNSET else date,
            None if time_ is _UNSET else time_,
            None if reminder_minutes is _UNSET else reminder_minutes,
        )

        fields: list[str] = []
        params: list[Any] = []

        if title is not None:
            if not title.strip():
                raise ValueError("title must not be empty")
            fields.append("title = ?")
            params.append(title.strip())
        if details is not None:
            fields.append("details = ?")
            params.append(details.strip())
        if date is not _UNSET:
            fields.append("date = ?")
            params.append(date)
        if time_ is not _UNSET:
            fields.append("time = ?")
            params.append(time_)
        if reminder_minutes is not _UNSET:
            fields.append("reminder_minutes = ?")
            params.append(reminder_minutes)
        if completed is not None:
            fields.append("completed = ?")
            params.append(1 if completed else 0)
        if project_id is not _UNSET:
            fields.append("project_id = ?")
            params.append(project_id)

        if not fields:
            return self.get_task(task_id) is not None

        fields.append("updated_at = ?")
        params.append(time.time())

        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                f"UPDATE tasks SET {', '.join(fields)} WHERE id = ?",
                (*params, str(task_id)),
            )
            conn.commit()
            return cur.rowcount == 1
        finally:
            conn.close()

    def toggle_task(self, task_id: str) -> bool | None:
        """Flip completed. Returns the new value, or None if the task does not exist."""
        task = self.get_task(task_id)
        if task is None:
            return None
        new_value = not task.completed
        self.update_task_fields(task_id, completed=new_value)
        return new_value

    def assign_date(self, task_id: str, date: str | None) -> bool:
        return self.update_task_fields(task_id, date=date)

    def delete_task(self, task_id: str) -> bool:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("DELETE FROM tasks WHERE id = ?", (str(task_id),))
            conn.commit()
            return cur.rowcount == 1
        finally:
            conn.close()

    def list_tasks(self, *, date: str | None = None, limit: int = 500) -> list[Task]:
        """All tasks, or only those planned for `date`; ordered by date/time."""
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            if date is None:
                cur.execute(
                    """
                    SELECT * FROM tasks
                    ORDER BY date IS NULL, date ASC, time IS NULL, time ASC, created_at ASC
                    LIMIT ?
                    """,
                    (int(limit),),
                )
            else:
                cur.execute(
                    """
                    SELECT * FROM tasks
                    WHERE date = ?
                    ORDER BY time IS NULL, time ASC, created_at ASC
                    LIMIT ?
                    """,
                    (date, int(limit)),
                )
            return [self._row_to_task(r) for r in cur.fetchall()]
        finally:
            conn.close()

    def list_unplanned(self, limit: int = 500) -> list[Task]:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                "SELECT * FROM tasks WHERE date IS NULL ORDER BY created_at ASC LIMIT ?",
                (int(limit),),
            )
            return [self._row_to_task(r) for r in cur.fetchall()]
        finally:
            conn.close()

    def snapshot(self) -> list[Task]:
        """TaskFeed: every task as currently stored."""
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT * FROM tasks")
            return [self._row_to_task(r) for r in cur.fetchall()]
        finally:
            conn.close()

    # ---- timeline counters ----

    def _count(self, where: str, params: tuple[Any, ...]) -> int:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(f"SELECT COUNT(*) FROM tasks WHERE {where}", params)
            (n,) = cur.fetchone()
            return int(n)
        finally:
            conn.close()

    def todo_count(self, date: str) -> int:
        return self._count("date = ? AND completed = 0", (date,))

    def upcoming_count(self, today: str) -> int:
        return self._count("date > ? AND completed = 0", (today,))

    def unplanned_count(self) -> int:
        return self._count("date IS NULL", ())

# src/procrastinote/tasks/task_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path
from typing import Any

from ..errors import PersistenceError
from .task_models import Category, Task, TaskStatus

logger = logging.getLogger(__name__)

_ORDER_BY = {
    "due_date": "due_date ASC, seq ASC",
    "title": "title COLLATE NOCASE ASC, seq ASC",
    "created": "seq ASC",
}


class TaskStore:
    """
    SQLite entity store for categories and tasks.

    The schema is intentionally simple and migration-safe:
    - create tables if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed

    Tasks keep the category id as plain text (no foreign key): a task may point
    at a category that was deleted, and readers resolve it at query time.

    Every public method is one transaction. Any sqlite3 error rolls back and is
    re-raised as PersistenceError.
    """

    def __init__(self, db_path: str | Path = "procrastinote.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        try:
            total = self.count_tasks()
        except PersistenceError:
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
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    @contextlib.contextmanager
    def _transaction(self, op: str) -> Iterator[sqlite3.Cursor]:
        try:
            conn = self._get_conn()
        except sqlite3.Error as e:
            raise PersistenceError(f"{op} failed: cannot open {self._db_path}: {e}") from e
        try:
            cur = conn.cursor()
            yield cur
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            logger.exception("TaskStore %s failed; rolled back", op)
            raise PersistenceError(f"{op} failed: {e}") from e
        except BaseException:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._transaction("ensure_schema") as cur:
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS categories (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    seq INTEGER PRIMARY KEY AUTOINCREMENT,
                    id TEXT NOT NULL UNIQUE,
                    title TEXT NOT NULL,
                    detail TEXT,
                    due_date TEXT NOT NULL,
                    estimated_time REAL NOT NULL DEFAULT 1.0,
                    status TEXT NOT NULL DEFAULT 'Not Started',
                    category_id TEXT,
                    event_identifier TEXT
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

            add_col("detail", "TEXT")
            add_col("estimated_time", "REAL NOT NULL DEFAULT 1.0")
            add_col("status", "TEXT NOT NULL DEFAULT 'Not Started'")
            add_col("category_id", "TEXT")
            add_col("event_identifier", "TEXT")

            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_due ON tasks(due_date)")
            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_status ON tasks(status)")
            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_category ON tasks(category_id)")

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            id=str(row["id"]),
            title=str(row["title"]),
            detail=row["detail"] or None,
            due_date=datetime.fromisoformat(row["due_date"]),
            estimated_time=float(row["estimated_time"] or 0.0),
            status=TaskStatus.from_db(row["status"]),
            category_id=row["category_id"] or None,
            event_identifier=row["event_identifier"] or None,
        )

    @staticmethod
    def _task_params(task: Task) -> tuple[Any, ...]:
        return (
            task.title,
            task.detail,
            task.due_date.isoformat(),
            float(task.estimated_time),
            task.status.value,
            task.category_id,
            task.event_identifier,
        )

    # ---- categories ----

    def add_category(self, category: Category) -> str:
        with self._transaction("add_category") as cur:
            cur.execute(
                "INSERT INTO categories(id, name) VALUES (?, ?)",
                (category.id, category.name),
            )
        logger.debug("Category added id=%s name=%s", category.id, category.name)
        return category.id

    def get_category(self, category_id: str) -> Category | None:
        with self._transaction("get_category") as cur:
            cur.execute("SELECT id, name FROM categories WHERE id = ?", (category_id,))
            row = cur.fetchone()
        return Category(id=row["id"], name=row["name"]) if row else None

    def list_categories(self) -> list[Category]:
        with self._transaction("list_categories") as cur:
            cur.execute("SELECT id, name FROM categories ORDER BY rowid ASC")
            rows = cur.fetchall()
        return [Category(id=r["id"], name=r["name"]) for r in rows]

    def delete_category(self, category_id: str) -> None:
        """Remove the category row only. Tasks that point at it are left as they are."""
        with self._transaction("delete_category") as cur:
            cur.execute("DELETE FROM categories WHERE id = ?", (category_id,))
            deleted = cur.rowcount
        logger.debug("Category delete id=%s rows=%s", category_id, deleted)

    # ---- tasks ----

    def count_tasks(self) -> int:
        with self._transaction("count_tasks") as cur:
            cur.execute("SELECT COUNT(*) FROM tasks")
            (n,) = cur.fetchone()
        return int(n)

    def add_task(self, task: Task) -> str:
        with self._transaction("add_task") as cur:
            cur.execute(
                """
                INSERT INTO tasks(
                    id, title, detail, due_date, estimated_time,
                    status, category_id, event_identifier
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (task.id, *self._task_params(task)),
            )
        logger.debug(
            "Task added id=%s status=%s due=%s category=%s",
            task.id,
            task.status.value,
            task.due_date.isoformat(),
            task.category_id,
        )
        return task.id

    def update_task(self, task: Task) -> None:
        """Overwrite every mutable field of an existing task."""
        with self._transaction("update_task") as cur:
            cur.execute(
                """
                UPDATE tasks
                SET title = ?,
                    detail = ?,
                    due_date = ?,
                    estimated_time = ?,
                    status = ?,
                    category_id = ?,
                    event_identifier = ?
                WHERE id = ?
                """,
                (*self._task_params(task), task.id),
            )
            if cur.rowcount != 1:
                raise sqlite3.DataError(f"task {task.id} does not exist")

    def get_task(self, task_id: str) -> Task | None:
        with self._transaction("get_task") as cur:
            cur.execute("SELECT * FROM tasks WHERE id = ?", (task_id,))
            row = cur.fetchone()
        return self._row_to_task(row) if row else None

    def list_tasks(
        self,
        *,
        status: TaskStatus | None = None,
        category_id: str | None = None,
        order_by: str = "due_date",
    ) -> list[Task]:
        """
        Query tasks with optional filters.

        order_by: "due_date" (default), "title" or "created".
        Ties keep insertion order.
        """
        order = _ORDER_BY.get(order_by)
        if order is None:
            raise ValueError(f"unsupported order_by: {order_by!r}")

        where: list[str] = []
        params: list[Any] = []
        if status is not None:
            where.append("status = ?")
            params.append(status.value)
        if category_id is not None:
            where.append("category_id = ?")
            params.append(category_id)

        sql = "SELECT * FROM tasks"
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += f" ORDER BY {order}"

        with self._transaction("list_tasks") as cur:
            cur.execute(sql, params)
            rows = cur.fetchall()
        return [self._row_to_task(r) for r in rows]

    def delete_task(self, task_id: str) -> None:
        with self._transaction("delete_task") as cur:
            cur.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
            deleted = cur.rowcount
        logger.debug("Task delete id=%s rows=%s", task_id, deleted)

    def delete_tasks_with_status(self, status: TaskStatus) -> int:
        """Delete every task in the given status in a single transaction."""
        with self._transaction("delete_tasks_with_status") as cur:
            cur.execute("DELETE FROM tasks WHERE status = ?", (status.value,))
            deleted = int(cur.rowcount)
        logger.debug("Tasks deleted status=%s rows=%s", status.value, deleted)
        return deleted

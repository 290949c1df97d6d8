# src/medsync/tasks/task_store.py

from __future__ import annotations

import logging
import sqlite3
from datetime import date

from ..storage.database import PlannerDatabase
from .task_models import Task

logger = logging.getLogger(__name__)


class TaskStore:
    """
    Task table of the planner database.

    Every mutating call goes through PlannerDatabase.mutation(), so the full
    database image is re-serialized after each insert/update/delete.
    Reads always re-query the table.
    """

    def __init__(self, db: PlannerDatabase) -> None:
        self._db = db
        logger.info("TaskStore ready total=%s", self.count_tasks())

    # ---- low-level helpers ----

    @staticmethod
    def _parse_day(raw: str | None) -> date | None:
        if not raw:
            return None
        try:
            return date.fromisoformat(str(raw))
        except ValueError:
            return None

    def _row_to_task(self, row: sqlite3.Row) -> Task:
        return Task(
            id=int(row["id"]),
            title=str(row["title"]),
            start=str(row["start_time"] or ""),
            end=str(row["end_time"] or ""),
            description=str(row["description"] or ""),
            completed=bool(row["completed"]),
            task_date=self._parse_day(row["task_date"]),
            created_at=str(row["created_at"] or ""),
        )

    # ---- public API ----

    def count_tasks(self) -> int:
        row = self._db.query_one("SELECT COUNT(*) AS n FROM tasks")
        return int(row["n"]) if row is not None else 0

    def add_task(
        self,
        *,
        title: str,
        start: str = "",
        end: str = "",
        description: str = "",
        completed: bool = False,
        task_date: date | None = None,
    ) -> int:
        if not title or not title.strip():
            raise ValueError("title is required")

        with self._db.mutation() as conn:
            cur = conn.execute(
                """
                INSERT INTO tasks(title, start_time, end_time, description, completed, task_date)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    title.strip(),
                    start or "",
                    end or "",
                    description or "",
                    1 if completed else 0,
                    task_date.isoformat() if task_date is not None else None,
                ),
            )
            rowid = cur.lastrowid
            if rowid is None:
                raise RuntimeError("SQLite did not return lastrowid for tasks insert")
            task_id = int(rowid)

        logger.debug("Task added id=%s start=%s end=%s date=%s", task_id, start, end, task_date)
        return task_id

    def list_tasks(self) -> list[Task]:
        rows = self._db.query("SELECT * FROM tasks ORDER BY start_time ASC, id ASC")
        return [self._row_to_task(r) for r in rows]

    def get_task(self, task_id: int) -> Task | None:
        row = self._db.query_one("SELECT * FROM tasks WHERE id = ?", (int(task_id),))
        return self._row_to_task(row) if row else None

    def set_completed(self, task_id: int, completed: bool) -> bool:
        with self._db.mutation() as conn:
            cur = conn.execute(
                "UPDATE tasks SET completed = ? WHERE id = ?",
                (1 if completed else 0, int(task_id)),
            )
        return cur.rowcount == 1

    def toggle_completed(self, task_id: int) -> bool | None:
        """Flip the completion flag. Returns the new value, or None if the task is gone."""
        task = self.get_task(task_id)
        if task is None:
            return None
        new_value = not task.completed
        self.set_completed(task_id, new_value)
        logger.debug("Task %s completed=%s", task_id, new_value)
        return new_value

    def delete_task(self, task_id: int) -> bool:
        with self._db.mutation() as conn:
            cur = conn.execute("DELETE FROM tasks WHERE id = ?", (int(task_id),))
        deleted = cur.rowcount == 1
        if deleted:
            logger.debug("Task deleted id=%s", task_id)
        return deleted

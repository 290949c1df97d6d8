# src/medsync/notes/note_store.py

from __future__ import annotations

import logging
import sqlite3

from ..storage.database import PlannerDatabase
from .note_models import Note

logger = logging.getLogger(__name__)


class NoteStore:
    """Note table of the planner database (same persistence rules as TaskStore)."""

    def __init__(self, db: PlannerDatabase) -> None:
        self._db = db
        logger.info("NoteStore ready total=%s", self.count_notes())

    @staticmethod
    def _row_to_note(row: sqlite3.Row) -> Note:
        return Note(
            id=int(row["id"]),
            content=str(row["content"]),
            created_at=str(row["created_at"] or ""),
            updated_at=str(row["updated_at"] or ""),
        )

    def count_notes(self) -> int:
        row = self._db.query_one("SELECT COUNT(*) AS n FROM notes")
        return int(row["n"]) if row is not None else 0

    def add_note(self, content: str) -> int:
        text = (content or "").strip()
        if not text:
            raise ValueError("content is required")

        with self._db.mutation() as conn:
            cur = conn.execute("INSERT INTO notes(content) VALUES (?)", (text,))
            rowid = cur.lastrowid
            if rowid is None:
                raise RuntimeError("SQLite did not return lastrowid for notes insert")
            note_id = int(rowid)

        logger.debug("Note added id=%s chars=%d", note_id, len(text))
        return note_id

    def update_note(self, note_id: int, content: str) -> bool:
        # Millisecond stamp: an edit must outrank a note inserted in the same second.
        with self._db.mutation() as conn:
            cur = conn.execute(
                "UPDATE notes SET content = ?, updated_at = strftime('%Y-%m-%d %H:%M:%f', 'now') WHERE id = ?",
                (content, int(note_id)),
            )
        return cur.rowcount == 1

    def delete_note(self, note_id: int) -> bool:
        with self._db.mutation() as conn:
            cur = conn.execute("DELETE FROM notes WHERE id = ?", (int(note_id),))
        return cur.rowcount == 1

    def get_note(self, note_id: int) -> Note | None:
        row = self._db.query_one("SELECT * FROM notes WHERE id = ?", (int(note_id),))
        return self._row_to_note(row) if row else None

    def list_notes(self) -> list[Note]:
        """Most recently edited first."""
        rows = self._db.query("SELECT * FROM notes ORDER BY updated_at DESC, id DESC")
        return [self._row_to_note(r) for r in rows]

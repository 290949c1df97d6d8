# src/medsync/storage/database.py

from __future__ import annotations

import base64
import binascii
import logging
import sqlite3
import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any

from ..config import DEFAULT_DB_IMAGE_KEY
from ..core.ports import KeyValueStore

logger = logging.getLogger(__name__)


class StoreError(RuntimeError):
    """Base class for persistent store failures."""


class SnapshotCorruptedError(StoreError):
    """The stored image cannot be decoded or is not a SQLite database."""


class SnapshotPersistError(StoreError):
    """Writing the image to the key-value store failed."""


def encode_image(image: bytes) -> str:
    return base64.b64encode(image).decode("ascii")


def decode_image(text: str) -> bytes:
    try:
        return base64.b64decode(text.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as exc:
        raise SnapshotCorruptedError("stored image is not valid base64") from exc


class PlannerDatabase:
    """
    In-memory SQLite database persisted as a base64 image in a key-value store.

    Lifecycle:
    - on open, restore the image stored under image_key (if any) with
      Connection.deserialize, otherwise start empty
    - ensure the schema (create missing tables, add missing columns)
    - after every committed mutation, serialize the whole image and
      overwrite image_key

    Thread-safety:
    - one shared connection (check_same_thread=False) guarded by an RLock
    """

    def __init__(self, kv: KeyValueStore, *, image_key: str = DEFAULT_DB_IMAGE_KEY) -> None:
        self._kv = kv
        self._image_key = image_key
        self._lock = threading.RLock()
        self._conn = sqlite3.connect(":memory:", check_same_thread=False)
        self._conn.row_factory = sqlite3.Row

        stored = kv.get(image_key)
        self.restored = bool(stored)
        try:
            if stored:
                self._restore(stored)
            changed = self._ensure_schema()
        except StoreError:
            self._conn.close()
            raise
        except sqlite3.DatabaseError as exc:
            self._conn.close()
            raise SnapshotCorruptedError(f"stored image under {image_key!r} is unusable: {exc}") from exc

        if changed:
            self.persist()

        logger.info(
            "PlannerDatabase ready key=%s restored=%s tasks=%s notes=%s",
            image_key,
            self.restored,
            self._count("tasks"),
            self._count("notes"),
        )

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    @property
    def image_key(self) -> str:
        return self._image_key

    # ---- lifecycle ----

    def _restore(self, stored: str) -> None:
        image = decode_image(stored)
        if not image:
            raise SnapshotCorruptedError("stored image is empty")
        self._conn.deserialize(image)
        # deserialize() accepts any bytes; the first real read validates them.
        self._conn.execute("SELECT count(*) FROM sqlite_master").fetchone()
        logger.debug("Restored database image bytes=%d", len(image))

    def _ensure_schema(self) -> bool:
        """Create missing tables and columns. Returns True if anything changed."""
        changed = False
        cur = self._conn.cursor()

        existing = {
            row["name"]
            for row in cur.execute("SELECT name FROM sqlite_master WHERE type = 'table'").fetchall()
        }

        if "tasks" not in existing:
            cur.execute(
                """
                CREATE TABLE tasks (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL,
                    start_time TEXT,
                    end_time TEXT,
                    description TEXT,
                    completed INTEGER DEFAULT 0,
                    task_date TEXT,
                    created_at DATETIME DEFAULT CURRENT_TIMESTAMP
                )
                """
            )
            changed = True

        if "notes" not in existing:
            cur.execute(
                """
                CREATE TABLE notes (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    content TEXT NOT NULL,
                    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
                    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
                )
                """
            )
            changed = True

        # Migrations (safe): images from the earlier revision have no task_date.
        cols = {row["name"] for row in cur.execute("PRAGMA table_info(tasks)").fetchall()}
        if "task_date" not in cols:
            cur.execute("ALTER TABLE tasks ADD COLUMN task_date TEXT")
            logger.info("PlannerDatabase migration: added column tasks.task_date")
            changed = True

        self._conn.commit()
        return changed

    def export_image(self) -> bytes:
        with self._lock:
            return self._conn.serialize()

    def image_text(self) -> str:
        return encode_image(self.export_image())

    def persist(self) -> None:
        """Serialize the full image and overwrite the stored key."""
        with self._lock:
            text = self.image_text()
            try:
                self._kv.set(self._image_key, text)
            except OSError as exc:
                logger.exception("Failed to persist database image key=%s", self._image_key)
                raise SnapshotPersistError(f"could not write {self._image_key!r}: {exc}") from exc
        logger.debug("Persisted database image key=%s chars=%d", self._image_key, len(text))

    # ---- statements ----

    @contextmanager
    def mutation(self) -> Iterator[sqlite3.Connection]:
        """
        Run writes, commit, then persist the image.

        On error the transaction is rolled back and nothing is persisted.
        """
        with self._lock:
            try:
                yield self._conn
                self._conn.commit()
            except Exception:
                self._conn.rollback()
                raise
            self.persist()

    def query(self, sql: str, params: Sequence[Any] = ()) -> list[sqlite3.Row]:
        with self._lock:
            return self._conn.execute(sql, tuple(params)).fetchall()

    def query_one(self, sql: str, params: Sequence[Any] = ()) -> sqlite3.Row | None:
        with self._lock:
            return self._conn.execute(sql, tuple(params)).fetchone()

    def _count(self, table: str) -> int:
        row = self.query_one(f"SELECT COUNT(*) AS n FROM {table}")
        return int(row["n"]) if row is not None else 0

# src/medsync/storage/kv_store.py

from __future__ import annotations

import contextlib
import json
import logging
import os
import threading
from pathlib import Path

logger = logging.getLogger(__name__)


class MemoryKeyValueStore:
    """Process-local key-value store. Nothing survives the process."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = str(value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)


class JsonFileKeyValueStore:
    """
    Key-value store backed by a single JSON object on disk.

    Every write rewrites the whole file (tmp file + os.replace), so a crash
    mid-write leaves the previous version in place. Two processes sharing the
    file follow last-writer-wins.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._quarantine_if_unreadable()
        logger.info("KeyValueStore ready path=%s keys=%d", self._path, len(self.keys()))

    def _quarantine_if_unreadable(self) -> None:
        """Move an unparsable storage file aside so the next write cannot clobber it."""
        if not self._path.exists():
            return
        try:
            raw = self._path.read_bytes().decode("utf-8")
            data = json.loads(raw) if raw.strip() else {}
        except (UnicodeDecodeError, json.JSONDecodeError):
            data = None
        if isinstance(data, dict):
            return
        backup = self._path.with_suffix(self._path.suffix + ".corrupt")
        os.replace(self._path, backup)
        logger.warning("Storage file %s is unreadable; moved to %s", self._path, backup)

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            raw = self._path.read_bytes().decode("utf-8")
            if not raw.strip():
                return {}
            data = json.loads(raw)
        except (UnicodeDecodeError, json.JSONDecodeError):
            logger.exception("Storage file %s is not valid UTF-8 JSON; treating as empty.", self._path)
            return {}
        if not isinstance(data, dict):
            logger.warning("Storage file %s does not hold an object; treating as empty.", self._path)
            return {}
        return {str(k): str(v) for k, v in data.items() if isinstance(v, str)}

    def _write_all(self, data: dict[str, str]) -> None:
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2, sort_keys=True), "utf-8")
        os.replace(tmp, self._path)
        with contextlib.suppress(OSError):
            # Keep the file private on disk: notes may be personal.
            os.chmod(self._path, 0o600)

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read_all()
            data[key] = str(value)
            self._write_all(data)
        logger.debug("KeyValueStore set key=%s bytes=%d", key, len(value))

    def delete(self, key: str) -> None:
        with self._lock:
            data = self._read_all()
            if key not in data:
                return
            del data[key]
            self._write_all(data)
        logger.debug("KeyValueStore deleted key=%s", key)

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._read_all())

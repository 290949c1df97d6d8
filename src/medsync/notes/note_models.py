# src/medsync/notes/note_models.py

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Note:
    id: int
    content: str
    created_at: str
    updated_at: str

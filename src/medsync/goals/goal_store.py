# src/medsync/goals/goal_store.py

"""
Long-term goals ("targets").

Goals never touch the planner database: the whole list is kept as one JSON
array under its own key and rewritten on every add or remove.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any

from ..config import DEFAULT_GOALS_KEY
from ..core.ports import KeyValueStore

logger = logging.getLogger(__name__)

_DAY_END = time(23, 59, 59)


@dataclass(frozen=True, slots=True)
class Goal:
    title: str
    start_date: datetime
    end_date: datetime

    def to_json(self) -> dict[str, str]:
        return {
            "title": self.title,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
        }

    @staticmethod
    def from_json(data: Any) -> "Goal | None":
        """Parse one stored goal. Accepts the legacy startDate/endDate spelling."""
        if not isinstance(data, dict):
            return None
        title = str(data.get("title") or "").strip()
        start_raw = data.get("start_date", data.get("startDate"))
        end_raw = data.get("end_date", data.get("endDate"))
        if not title or not isinstance(start_raw, str) or not isinstance(end_raw, str):
            return None
        try:
            start = _parse_iso(start_raw)
            end = _parse_iso(end_raw)
        except ValueError:
            return None
        return Goal(title=title, start_date=start, end_date=end)


@dataclass(frozen=True, slots=True)
class GoalProgress:
    percent: float
    remaining: timedelta
    days_left: int
    hours_left: int
    accomplished: bool


def _parse_iso(raw: str) -> datetime:
    # JavaScript's toISOString() ends in "Z".
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    return datetime.fromisoformat(raw)


def _comparable(value: datetime, reference: datetime) -> datetime:
    """Align naive/aware datetimes so they can be subtracted."""
    if value.tzinfo is None and reference.tzinfo is not None:
        return value.replace(tzinfo=reference.tzinfo)
    if value.tzinfo is not None and reference.tzinfo is None:
        # Naive reference means local wall-clock time.
        return value.astimezone().replace(tzinfo=None)
    return value


def goal_progress(goal: Goal, now: datetime) -> GoalProgress:
    """
    Countdown and elapsed percentage of a goal.

    percent is always clamped to [0, 100], whatever the order of now,
    start_date and end_date.
    """
    start = _comparable(goal.start_date, now)
    end = _comparable(goal.end_date, now)

    remaining = end - now
    if remaining <= timedelta(0):
        return GoalProgress(
            percent=100.0,
            remaining=timedelta(0),
            days_left=0,
            hours_left=0,
            accomplished=True,
        )

    total = (end - start).total_seconds()
    if total <= 0:
        percent = 0.0
    else:
        elapsed = (now - start).total_seconds()
        percent = min(100.0, max(0.0, elapsed / total * 100.0))

    left_s = remaining.total_seconds()
    return GoalProgress(
        percent=percent,
        remaining=remaining,
        days_left=int(left_s // 86400),
        hours_left=int((left_s // 3600) % 24),
        accomplished=False,
    )


def format_countdown(progress: GoalProgress) -> str:
    if progress.accomplished:
        return "STATUS: ACCOMPLISHED"
    return f"{progress.days_left}d {progress.hours_left}h LEFT"


class GoalStore:
    """JSON goal list stored under a single key of the key-value store."""

    def __init__(self, kv: KeyValueStore, *, key: str = DEFAULT_GOALS_KEY) -> None:
        self._kv = kv
        self._key = key

    def list_goals(self) -> list[Goal]:
        raw = self._kv.get(self._key)
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.exception("Stored goals under %s are not valid JSON; ignoring.", self._key)
            return []
        if not isinstance(data, list):
            logger.warning("Stored goals under %s are not a list; ignoring.", self._key)
            return []

        goals: list[Goal] = []
        for item in data:
            goal = Goal.from_json(item)
            if goal is None:
                logger.warning("Skipping malformed goal entry: %r", item)
                continue
            goals.append(goal)
        return goals

    def replace_goals(self, goals: list[Goal]) -> None:
        self._kv.set(self._key, json.dumps([g.to_json() for g in goals], ensure_ascii=False))
        logger.debug("Goals saved key=%s count=%d", self._key, len(goals))

    def add_goal(self, title: str, target_day: date | None, *, now: datetime) -> Goal:
        """Add a goal running from now until 23:59:59 of target_day."""
        clean = (title or "").strip()
        if not clean or target_day is None:
            raise ValueError("Please enter title and date")

        goal = Goal(
            title=clean,
            start_date=now,
            end_date=datetime.combine(target_day, _DAY_END, tzinfo=now.tzinfo),
        )
        goals = self.list_goals()
        goals.append(goal)
        self.replace_goals(goals)
        logger.info("Goal added title=%r end=%s", goal.title, goal.end_date.isoformat())
        return goal

    def remove_goal(self, index: int) -> Goal | None:
        """Remove the goal at index (0-based). Returns it, or None if out of range."""
        goals = self.list_goals()
        if index < 0 or index >= len(goals):
            return None
        removed = goals.pop(index)
        self.replace_goals(goals)
        logger.info("Goal removed title=%r", removed.title)
        return removed

# src/medsync/tasks/expiry.py

"""
Task expiry classification.

A task is "expired" (belongs to history) once the wall clock has passed its
end time on its recorded day. Nothing about expiry is stored: the partition is
recomputed from the current time on every refresh.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, time, timezone

from .task_models import Task, TaskPartition


def parse_end_time(value: str | None) -> tuple[int, int] | None:
    """
    Parse a 24-hour "HH:MM" string.

    Returns (hour, minute), or None for anything else: empty input, a wrong
    number of segments, non-digit segments or out-of-range values.
    """
    if not value:
        return None
    parts = value.strip().split(":")
    if len(parts) != 2:
        return None
    h_raw, m_raw = parts
    if not (h_raw.isdecimal() and m_raw.isdecimal()) or len(h_raw) > 2 or len(m_raw) > 2:
        return None
    hour, minute = int(h_raw), int(m_raw)
    if hour > 23 or minute > 59:
        return None
    return hour, minute


def is_task_expired(end_time: str | None, *, now: datetime, task_date: date | None = None) -> bool:
    """
    True iff now is strictly after task_date at end_time.

    A task without a recorded date is judged against now's date. Malformed
    or missing end times never expire.
    """
    hm = parse_end_time(end_time)
    if hm is None:
        return False
    day = task_date if task_date is not None else now.date()
    deadline = _deadline(datetime.combine(day, time(hm[0], hm[1])), now)
    # Instants, not wall clocks: same-tzinfo comparison would ignore fold.
    return now.timestamp() > deadline.timestamp()


def _deadline(wall: datetime, now: datetime) -> datetime:
    """Place the naive wall-clock deadline in now's timezone."""
    tz = now.tzinfo
    if tz is None:
        return wall
    if isinstance(tz, timezone) and now.utcoffset() == now.astimezone().utcoffset():
        # A fixed offset taken from the system clock (datetime.now().astimezone()).
        # The deadline's own date decides its offset, which differs across a DST change.
        return wall.astimezone()
    return wall.replace(tzinfo=tz)


def task_is_expired(task: Task, now: datetime) -> bool:
    return is_task_expired(task.end, now=now, task_date=task.task_date)


def partition_tasks(tasks: Iterable[Task], now: datetime) -> TaskPartition:
    """Split tasks into active and history, keeping input order in each."""
    partition = TaskPartition()
    for task in tasks:
        if task_is_expired(task, now):
            partition.history.append(task)
        else:
            partition.active.append(task)
    return partition

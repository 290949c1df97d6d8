# src/medsync/cli/commands.py

from __future__ import annotations

import logging
import shlex
from collections.abc import Callable
from datetime import date

from ..core.state import AppState
from ..goals.goal_store import format_countdown, goal_progress
from ..tasks import task_api
from ..tasks.task_models import Task

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)

STORE_UNAVAILABLE = "Store unavailable: tasks and notes cannot be loaded or saved."


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /task, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like '/command args "quoted arg"'.
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError as e:
            return f"Could not parse command: {e}."
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        logger.debug("Command /%s args=%d", name, len(args))
        return handler(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- helpers ----


def _split_options(args: list[str], allowed: set[str]) -> tuple[list[str], dict[str, str]]:
    """Separate key=value options (for allowed keys) from positional words."""
    words: list[str] = []
    options: dict[str, str] = {}
    for arg in args:
        key, sep, value = arg.partition("=")
        if sep and key.lower() in allowed:
            options[key.lower()] = value
        else:
            words.append(arg)
    return words, options


def _parse_id(raw: str) -> int | None:
    try:
        return int(raw.lstrip("#"))
    except ValueError:
        return None


def _format_task(task: Task) -> str:
    mark = "x" if task.completed else " "
    line = f"  [{mark}] #{task.id} {task.start or '--:--'}-{task.end or '--:--'} {task.title}"
    if task.description:
        line += f" | {task.description}"
    return line


def _progress_bar(percent: float, width: int = 20) -> str:
    filled = int(round(percent / 100.0 * width))
    return "#" * filled + "." * (width - filled)


# ---- handlers ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    settings = state.settings
    storage = getattr(settings, "storage_path", "(in memory)")
    if state.tasks is None or state.notes is None:
        store = "UNAVAILABLE"
        counts = ""
    else:
        store = "OK"
        counts = f"\n  Tasks: {state.tasks.count_tasks()}\n  Notes: {state.notes.count_notes()}"
    return (
        "Status:\n"
        f"  Storage: {storage}\n"
        f"  Database: {store}"
        f"{counts}\n"
        f"  Goals: {len(state.goals.list_goals())}"
    )


def cmd_tasks(state: AppState, args: list[str]) -> str:
    if state.tasks is None:
        return STORE_UNAVAILABLE
    board = task_api.load_task_board(state)
    lines = [f"Active tasks ({board.active_label}):"]
    lines.extend(_format_task(t) for t in board.active)
    if not board.active:
        lines.append("  (none)")
    lines.append(f"History ({board.history_label}):")
    lines.extend(_format_task(t) for t in board.history)
    if not board.history:
        lines.append("  (none)")
    return "\n".join(lines)


_TASK_USAGE = (
    "Usage:\n"
    '  /task add <title...> [start=HH:MM] [end=HH:MM] [desc="..."]\n'
    "  /task done <id>   - toggle completion\n"
    "  /task rm <id>     - delete task"
)


def cmd_task(state: AppState, args: list[str]) -> str:
    """
    /task add <title...> [start=HH:MM] [end=HH:MM] [desc=...]
    /task done <id>
    /task rm <id>
    """
    if not args:
        return _TASK_USAGE
    if state.tasks is None:
        return STORE_UNAVAILABLE

    sub = args[0].lower()
    rest = args[1:]

    if sub == "add":
        words, opts = _split_options(rest, {"start", "end", "desc"})
        title = " ".join(words)
        task_id = task_api.add_task_from_inputs(
            state,
            title,
            start=opts.get("start"),
            end=opts.get("end"),
            description=opts.get("desc", ""),
        )
        if task_id is None:
            return "Task title is required."
        task = state.tasks.get_task(task_id)
        return f"Task added:\n{_format_task(task)}" if task else f"Task #{task_id} added."

    if sub in ("done", "toggle", "rm", "remove", "del"):
        if not rest or (task_id := _parse_id(rest[0])) is None:
            return _TASK_USAGE

        if sub in ("done", "toggle"):
            completed = task_api.toggle_task(state, task_id)
            if completed is None:
                return f"No task #{task_id}."
            return f"Task #{task_id} marked {'done' if completed else 'not done'}."

        if not task_api.remove_task(state, task_id):
            return f"No task #{task_id}."
        return f"Task #{task_id} removed."

    return _TASK_USAGE


def cmd_notes(state: AppState, args: list[str]) -> str:
    if state.notes is None:
        return STORE_UNAVAILABLE
    notes = task_api.load_notes(state)
    if not notes:
        return "No notes yet."
    lines = [f"Notes ({len(notes)}):"]
    for n in notes:
        lines.append(f"  #{n.id} [{n.updated_at[:10]}] {n.content}")
    return "\n".join(lines)


_NOTE_USAGE = (
    "Usage:\n"
    "  /note add <text...>\n"
    "  /note edit <id> <text...>\n"
    "  /note rm <id>"
)


def cmd_note(state: AppState, args: list[str]) -> str:
    if not args:
        return _NOTE_USAGE
    if state.notes is None:
        return STORE_UNAVAILABLE

    sub = args[0].lower()
    rest = args[1:]

    if sub == "add":
        note_id = task_api.add_note(state, " ".join(rest))
        if note_id is None:
            return "Note text is required."
        return f"Saved Successfully (note #{note_id})."

    if sub == "edit":
        if len(rest) < 2 or (note_id := _parse_id(rest[0])) is None:
            return _NOTE_USAGE
        if not task_api.edit_note(state, note_id, " ".join(rest[1:])):
            return f"No note #{note_id}."
        return f"Note #{note_id} updated."

    if sub in ("rm", "remove", "del"):
        if not rest or (note_id := _parse_id(rest[0])) is None:
            return _NOTE_USAGE
        if not task_api.remove_note(state, note_id):
            return f"No note #{note_id}."
        return f"Note #{note_id} removed."

    return _NOTE_USAGE


def cmd_goals(state: AppState, args: list[str]) -> str:
    goals = state.goals.list_goals()
    if not goals:
        return "No targets yet."
    now = state.now()
    lines = [f"Targets ({len(goals)}):"]
    for i, goal in enumerate(goals, start=1):
        progress = goal_progress(goal, now)
        lines.append(
            f"  {i}. {goal.title}  [{_progress_bar(progress.percent)}] {progress.percent:.0f}%  "
            f"{format_countdown(progress)}  "
            f"(start {goal.start_date.date().isoformat()} -> target {goal.end_date.date().isoformat()})"
        )
    return "\n".join(lines)


_GOAL_USAGE = (
    "Usage:\n"
    "  /goal add <YYYY-MM-DD> <title...>\n"
    "  /goal rm <number>   - number as shown by /goals"
)


def cmd_goal(state: AppState, args: list[str]) -> str:
    if not args:
        return _GOAL_USAGE

    sub = args[0].lower()
    rest = args[1:]

    if sub == "add":
        if len(rest) < 2:
            return "Please enter title and date.\n" + _GOAL_USAGE
        try:
            target_day = date.fromisoformat(rest[0])
        except ValueError:
            return f"Invalid date {rest[0]!r}; expected YYYY-MM-DD."
        try:
            goal = state.goals.add_goal(" ".join(rest[1:]), target_day, now=state.now())
        except ValueError as e:
            return f"{e}."
        return f"Target added: {goal.title} (until {goal.end_date.date().isoformat()})."

    if sub in ("rm", "remove", "del"):
        if not rest or (number := _parse_id(rest[0])) is None:
            return _GOAL_USAGE
        removed = state.goals.remove_goal(number - 1)
        if removed is None:
            return f"No target {number}."
        return f"Target removed: {removed.title}."

    return _GOAL_USAGE


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show storage status and counts.")
registry.register(
    "tasks", cmd_tasks, help_text="Show active tasks and history.", aliases=["refresh"]
)
registry.register("task", cmd_task, help_text="Tasks: /task add | /task done <id> | /task rm <id>.")
registry.register("notes", cmd_notes, help_text="List notes (most recently edited first).")
registry.register("note", cmd_note, help_text="Notes: /note add | /note edit <id> | /note rm <id>.")
registry.register("goals", cmd_goals, help_text="Show targets with countdown and progress.", aliases=["targets"])
registry.register("goal", cmd_goal, help_text="Targets: /goal add <YYYY-MM-DD> <title> | /goal rm <n>.")

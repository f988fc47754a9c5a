# src/taskito/cli/commands.py

from __future__ import annotations

import contextlib
import inspect
import logging
import shlex
from collections.abc import Callable
from datetime import datetime
from typing import cast

from ..core.clock import local_date_string
from ..core.state import AppState
from ..navigation.surfaces import Surface
from ..reminders.evaluator import trigger_minute
from ..tasks.task_models import Task, TaskKind

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /tasks, /back, ...)."""

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

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like '/command args'.
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError:
            # Unbalanced quotes: fall back to plain whitespace split.
            parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except Exception:
            nparams = 3

        try:
            if nparams >= 3:
                h3 = cast(CommandHandler3, handler)
                return h3(state, args, emit)

            h2 = cast(CommandHandler2, handler)
            return h2(state, args)
        except ValueError as e:
            return f"Error: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- formatting helpers ----


def format_task(task: Task) -> str:
    mark = "x" if task.completed else " "
    when = " ".join(p for p in (task.date, task.time) if p) or "unplanned"
    parts = [f"[{mark}] {task.id[:8]} {task.title} ({when})"]
    if task.kind == TaskKind.NOTE:
        parts.append("note")
    if task.reminder_minutes is not None:
        trig = trigger_minute(task)
        at = f"{trig // 60:02d}:{trig % 60:02d}" if trig is not None else "never"
        parts.append(f"reminder -{task.reminder_minutes}m @ {at}")
    return " | ".join(parts)


def format_reminder_popup(task: Task) -> str:
    details = (task.details or "").strip() or "Time for your task!"
    return (
        f"*** REMINDER: {task.title} at {task.time} ***\n"
        f"    {details}\n"
        "    /dismiss to stop the alarm, /view to open the task, /back closes the popup."
    )


def _resolve_date(raw: str) -> str | None:
    low = raw.strip().lower()
    if low in ("", "none", "-"):
        return None
    if low == "today":
        return local_date_string()
    return raw.strip()


def _resolve_reminder(raw: str) -> int | None:
    low = raw.strip().lower()
    if low in ("", "none", "off", "-"):
        return None
    try:
        return int(low)
    except ValueError:
        raise ValueError(f"reminder must be a number of minutes, got {raw!r}") from None


def _split_fields(args: list[str]) -> tuple[list[str], dict[str, str]]:
    """Split 'word word key=value' into positional words and key/value pairs."""
    words: list[str] = []
    fields: dict[str, str] = {}
    for a in args:
        key, sep, value = a.partition("=")
        if sep and key.isidentifier():
            fields[key.lower()] = value
        else:
            words.append(a)
    return words, fields


def _find_task(state: AppState, raw_id: str) -> Task | None:
    """Exact id, or a unique id prefix (ids are long hex strings)."""
    task = state.task_store.get_task(raw_id)
    if task is not None:
        return task
    matches = [t for t in state.task_store.snapshot() if t.id.startswith(raw_id)]
    return matches[0] if len(matches) == 1 else None


# ---- commands ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    settings = state.settings
    store = state.task_store
    today = local_date_string()
    active = state.reminders.active_reminder
    overlays = ", ".join(s.value for s in state.navigation.surfaces()) or "none"
    notif = "ON" if state.reminders.dispatcher.notifications_granted() else "OFF"
    return (
        "Status:\n"
        f"  Tasks: {store.count_tasks()} (today todo={store.todo_count(today)}, "
        f"upcoming={store.upcoming_count(today)}, unplanned={store.unplanned_count()})\n"
        f"  Reminder poll: every {getattr(settings, 'reminder_interval_seconds', 20.0):.0f}s, "
        f"grace={state.reminders.grace_minutes}min, fired this session={len(state.reminders.ledger)}\n"
        f"  System notifications: {notif}\n"
        f"  Active reminder: {active.title if active else 'none'}\n"
        f"  Open overlays: {overlays}"
    )


def cmd_tasks(state: AppState, args: list[str]) -> str:
    """
    /tasks            -> today
    /tasks all        -> everything
    /tasks unplanned  -> tasks without a date
    /tasks 2026-01-31 -> that day
    """
    arg = args[0].lower() if args else "today"
    if arg == "all":
        tasks = state.task_store.list_tasks()
    elif arg == "unplanned":
        tasks = state.task_store.list_unplanned()
    else:
        tasks = state.task_store.list_tasks(date=_resolve_date(arg))
    if not tasks:
        return "No tasks."
    return "\n".join(format_task(t) for t in tasks)


def cmd_add(state: AppState, args: list[str]) -> str:
    """/add <title...> [date=today|YYYY-MM-DD] [time=HH:MM] [remind=N] [details=...] [note]"""
    words, fields = _split_fields(args)
    kind = TaskKind.TASK
    if words and words[-1].lower() == "note":
        kind = TaskKind.NOTE
        words = words[:-1]

    title = " ".join(words).strip()
    if not title:
        return "Usage: /add <title> [date=today] [time=HH:MM] [remind=MINUTES] [details=TEXT] [note]"

    with state.lock:
        task_id = state.task_store.add_task(
            title=title,
            details=fields.get("details", ""),
            date=_resolve_date(fields["date"]) if "date" in fields else None,
            time_=fields.get("time") or None,
            reminder_minutes=_resolve_reminder(fields["remind"]) if "remind" in fields else None,
            kind=kind,
            project_id=fields.get("project") or None,
        )
    logger.info("Task created id=%s", task_id)
    return f"Added {task_id[:8]}: {title}"


def cmd_edit(state: AppState, args: list[str]) -> str:
    """/edit <id> [title=...] [date=...] [time=...] [remind=N|none] [details=...]"""
    if not args:
        return "Usage: /edit <id> field=value ..."
    task = _find_task(state, args[0])
    if task is None:
        return f"No task {args[0]!r}."

    _words, fields = _split_fields(args[1:])
    updates: dict[str, object] = {}
    if "title" in fields:
        updates["title"] = fields["title"]
    if "details" in fields:
        updates["details"] = fields["details"]
    if "date" in fields:
        updates["date"] = _resolve_date(fields["date"])
    if "time" in fields:
        updates["time_"] = fields["time"] or None
    if "remind" in fields:
        updates["reminder_minutes"] = _resolve_reminder(fields["remind"])
    if not updates:
        return "Nothing to change."

    with state.lock:
        # Saving from the editor closes it, like pressing Save in the modal.
        state.navigation.open(Surface.TASK_EDITOR)
        try:
            state.task_store.update_task_fields(task.id, **updates)  # type: ignore[arg-type]
        finally:
            state.navigation.close(Surface.TASK_EDITOR)
    return f"Updated {task.id[:8]}."


def cmd_done(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /done <id>"
    task = _find_task(state, args[0])
    if task is None:
        return f"No task {args[0]!r}."
    with state.lock:
        completed = state.task_store.toggle_task(task.id)
        if completed:
            state.reminders.dispatcher.play_completion_cue()
    return f"{task.title}: {'done' if completed else 'reopened'}."


def cmd_delete(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /delete <id>"
    task = _find_task(state, args[0])
    if task is None:
        return f"No task {args[0]!r}."

    def _forget() -> None:
        state.pending_delete_id = None

    with state.lock:
        state.pending_delete_id = task.id
        state.navigation.open(Surface.CONFIRM, on_close=_forget)
    return f"Delete {task.title!r}? /yes to confirm, /no or /back to cancel."


def cmd_yes(state: AppState, args: list[str]) -> str:
    with state.lock:
        task_id = state.pending_delete_id
        if task_id is None or not state.navigation.is_open(Surface.CONFIRM):
            return "Nothing to confirm."
        deleted = state.task_store.delete_task(task_id)
        state.navigation.close(Surface.CONFIRM)
    return "Deleted." if deleted else "Task was already gone."


def cmd_no(state: AppState, args: list[str]) -> str:
    with state.lock:
        if not state.navigation.close(Surface.CONFIRM):
            return "Nothing to cancel."
    return "Cancelled."


def cmd_search(state: AppState, args: list[str]) -> str:
    query = " ".join(args).strip().lower()
    with state.lock:
        if not state.navigation.is_open(Surface.SEARCH):
            state.navigation.open(Surface.SEARCH)
    if not query:
        return "Search open. /search <text> to filter, /back to close."
    hits = [
        t for t in state.task_store.snapshot()
        if query in t.title.lower() or query in (t.details or "").lower()
    ]
    if not hits:
        return "No matches."
    return "\n".join(format_task(t) for t in hits)


def cmd_open(state: AppState, args: list[str]) -> str:
    surface = Surface.parse(args[0]) if args else None
    if surface is None or surface == Surface.REMINDER_POPUP:
        names = ", ".join(s.value for s in Surface if s != Surface.REMINDER_POPUP)
        return f"Usage: /open <{names}>"
    with state.lock:
        state.navigation.open(surface)
    return f"Opened {surface.value}."


def cmd_close(state: AppState, args: list[str]) -> str:
    surface = Surface.parse(args[0]) if args else None
    if surface is None:
        return "Usage: /close <surface>"
    with state.lock:
        closed = state.navigation.close(surface)
    return f"Closed {surface.value}." if closed else f"{surface.value} is not open."


def cmd_back(state: AppState, args: list[str]) -> str:
    with state.lock:
        before = state.navigation.top
        if not state.history.go_back():
            return "Nothing to close."
    return f"Closed {before.value}." if before else "Back."


def cmd_overlays(state: AppState, args: list[str]) -> str:
    surfaces = state.navigation.surfaces()
    if not surfaces:
        return "No overlays open."
    return "Overlays (top last): " + " > ".join(s.value for s in surfaces)


def cmd_dismiss(state: AppState, args: list[str]) -> str:
    if state.reminders.active_reminder is None:
        return "No active reminder."
    state.reminders.dismiss_active_reminder()
    return "Reminder dismissed."


def cmd_view(state: AppState, args: list[str]) -> str:
    with state.lock:
        task = state.reminders.active_reminder
        if task is None:
            return "No active reminder."
        state.navigation.open(Surface.TASK_EDITOR)
        state.reminders.dismiss_active_reminder()
    return format_task(task) + "\n(task editor open; /back to close)"


def cmd_signout(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if emit:
        with contextlib.suppress(Exception):
            emit("Signing out: clearing reminders and overlays...")
    state.reset_session()
    return f"Signed out at {datetime.now().astimezone().strftime('%H:%M:%S')}."


registry.register("help", cmd_help, "Show this help.", aliases=["h", "?"])
registry.register("status", cmd_status, "Show counters, reminder and overlay state.")
registry.register("tasks", cmd_tasks, "List tasks: /tasks [today|all|unplanned|YYYY-MM-DD].", aliases=["ls"])
registry.register("add", cmd_add, "Add a task: /add <title> [date=today] [time=HH:MM] [remind=MIN] [note].")
registry.register("edit", cmd_edit, "Edit a task: /edit <id> field=value ...")
registry.register("done", cmd_done, "Toggle completion: /done <id>.")
registry.register("delete", cmd_delete, "Delete a task (asks for confirmation).", aliases=["rm"])
registry.register("yes", cmd_yes, "Confirm the open dialog.")
registry.register("no", cmd_no, "Cancel the open dialog.")
registry.register("search", cmd_search, "Open search: /search <text>.")
registry.register("open", cmd_open, "Open an overlay: /open <surface>.")
registry.register("close", cmd_close, "Close an overlay explicitly: /close <surface>.")
registry.register("back", cmd_back, "Back gesture: closes the top-most overlay.")
registry.register("overlays", cmd_overlays, "Show open overlays.")
registry.register("dismiss", cmd_dismiss, "Dismiss the active reminder.")
registry.register("view", cmd_view, "Open the active reminder's task and dismiss the reminder.")
registry.register("signout", cmd_signout, "End the session (clears reminders and overlays).")

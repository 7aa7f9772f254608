# src/taskpad/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from ..core.state import AppState
from ..tasks.task_api import (
    SortKey,
    StatusFilter,
    add_task,
    compute_reminder_time,
    filter_tasks,
    sort_tasks,
)
from ..tasks.task_models import Category, Priority, Reminder, Task, TaskResult, iso_now, parse_iso

CommandHandler = Callable[[AppState, list[str]], Awaitable[str]]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by connectors (/help, /add, ...)."""

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

    async def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        return await handler(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- formatting ----


def format_task(task: Task) -> str:
    box = "[x]" if task.completed else "[ ]"
    due = parse_iso(task.date)
    due_s = due.astimezone().strftime("%Y-%m-%d %H:%M") if due else task.date
    line = f"{box} {task.id} !{task.priority} @{task.category} {task.title} (due {due_s})"
    if task.tags:
        line += " " + " ".join(f"#{t}" for t in task.tags)
    return line


def _format_list(title: str, tasks: list[Task]) -> str:
    if not tasks:
        return f"{title}: nothing here."
    return "\n".join([f"{title} ({len(tasks)}):", *(f"  {format_task(t)}" for t in tasks)])


def _format_result(action: str, result: TaskResult) -> str:
    if not result.success:
        return f"{action} failed: {result.error}"
    if result.task is None:
        return f"{action}: ok."
    return f"{action}: {format_task(result.task)}"


def _coerce(raw: str) -> Any:
    low = raw.lower()
    if low in {"true", "on", "yes"}:
        return True
    if low in {"false", "off", "no"}:
        return False
    if raw.isdigit():
        return int(raw)
    return raw


# ---- handlers ----


async def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def _parse_add_args(state: AppState, args: list[str]) -> dict[str, Any] | str:
    """Split /add arguments into task fields; returns an error string on bad input."""
    tz = state.settings.zone()
    title: list[str] = []
    fields: dict[str, Any] = {"tags": []}
    due_raw: str | None = None
    at_raw: str | None = None
    reminder: dict[str, Any] = {
        "enabled": True,
        "minutes": state.settings.default_reminder_minutes,
    }

    for tok in args:
        if tok.startswith("!") and len(tok) > 1:
            try:
                fields["priority"] = Priority(tok[1:].lower())
            except ValueError:
                return f"Unknown priority: {tok[1:]} (use high, medium or low)"
        elif tok.startswith("@") and len(tok) > 1:
            fields["category"] = Category.parse(tok[1:].lower())
        elif tok.startswith("#") and len(tok) > 1:
            fields["tags"].append(tok[1:])
        elif tok.startswith("due:"):
            due_raw = tok[4:]
        elif tok.startswith("at:"):
            at_raw = tok[3:]
        elif tok.startswith("remind:"):
            val = tok[7:].lower()
            if val == "off":
                reminder["enabled"] = False
            elif val.isdigit():
                reminder["minutes"] = int(val)
            else:
                return f"Bad reminder: {val} (use minutes or 'off')"
        else:
            title.append(tok)

    fields["title"] = " ".join(title)
    fields["reminder"] = reminder

    if due_raw is not None or at_raw is not None:
        due = parse_iso(due_raw, tz=tz) if due_raw is not None else state.tasks.now()
        if due is None:
            return f"Cannot parse due date: {due_raw}"
        due = due.astimezone(tz) if tz is not None else due.astimezone()
        if at_raw is not None:
            try:
                hh, mm = (int(p) for p in at_raw.split(":", 1))
                due = due.replace(hour=hh, minute=mm, second=0, microsecond=0)
            except ValueError:
                return f"Cannot parse time: {at_raw} (use HH:MM)"
        fields["date"] = iso_now(due)
        fields["time"] = due.strftime("%H:%M:%S")
    return fields


async def cmd_add(state: AppState, args: list[str]) -> str:
    parsed = _parse_add_args(state, args)
    if isinstance(parsed, str):
        return parsed
    result = await add_task(state.tasks, tz=state.settings.zone(), **parsed)
    return _format_result("Added", result)


async def cmd_list(state: AppState, args: list[str]) -> str:
    status = StatusFilter.ALL
    sort_by = SortKey.CREATED
    for a in args:
        try:
            if a.startswith("sort:"):
                sort_by = SortKey(a[5:])
            else:
                status = StatusFilter(a)
        except ValueError:
            return f"Bad argument: {a}"
    tasks = sort_tasks(filter_tasks(await state.tasks.get_all(), status=status), sort_by)
    return _format_list(f"Tasks [{status}]", tasks)


async def cmd_show(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /show <id>"
    task = await state.tasks.get_by_id(args[0])
    if task is None:
        return f"Task not found: {args[0]}"
    lines = [format_task(task)]
    if task.description:
        lines.append(f"  {task.description}")
    if task.reminder.enabled:
        lines.append(f"  reminder: {task.reminder.minutes} min before ({task.reminder.reminder_time or 'not set'})")
    if task.notes:
        lines.append(f"  notes: {task.notes}")
    lines.append(f"  created {task.created_at}, updated {task.updated_at}")
    return "\n".join(lines)


async def cmd_done(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /done <id>"
    return _format_result("Toggled", await state.tasks.toggle_completion(args[0]))


async def cmd_edit(state: AppState, args: list[str]) -> str:
    if len(args) < 3:
        return "Usage: /edit <id> <field> <value...>"
    task_id, name, value = args[0], args[1].lower(), " ".join(args[2:])
    patch: Any = value
    if name == "tags":
        patch = [t.strip() for t in value.split(",") if t.strip()]
    elif name == "completed":
        patch = _coerce(value)
    elif name == "reminder":
        # minutes before the due moment, or "off"
        task = await state.tasks.get_by_id(task_id)
        if task is None:
            return f"Task not found: {task_id}"
        low = value.lower()
        if low == "off":
            patch = Reminder(enabled=False, minutes=task.reminder.minutes)
        elif low.isdigit():
            minutes = int(low)
            patch = Reminder(
                enabled=True,
                minutes=minutes,
                reminder_time=compute_reminder_time(task.date, task.time, minutes, tz=state.settings.zone()),
            )
        else:
            return f"Bad reminder: {value} (use minutes or 'off')"
    return _format_result("Updated", await state.tasks.update(task_id, **{name: patch}))


async def cmd_delete(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /delete <id>"
    return _format_result("Deleted", await state.tasks.delete(args[0]))


async def cmd_today(state: AppState, args: list[str]) -> str:
    return _format_list("Today", await state.tasks.today())


async def cmd_upcoming(state: AppState, args: list[str]) -> str:
    days = int(args[0]) if args and args[0].isdigit() else None
    return _format_list("Upcoming", await state.tasks.upcoming(days))


async def cmd_overdue(state: AppState, args: list[str]) -> str:
    return _format_list("Overdue", await state.tasks.overdue())


async def cmd_search(state: AppState, args: list[str]) -> str:
    term = " ".join(args)
    return _format_list(f"Search '{term}'", await state.tasks.search(term))


async def cmd_reminders(state: AppState, args: list[str]) -> str:
    return _format_list("Reminders", await state.tasks.reminders())


async def cmd_stats(state: AppState, args: list[str]) -> str:
    stats = await state.tasks.stats()
    if stats is None:
        return "Statistics are unavailable (storage could not be read)."
    prio = ", ".join(f"{k}={v}" for k, v in stats.priority_breakdown.items())
    cats = ", ".join(f"{k}={v}" for k, v in sorted(stats.category_breakdown.items())) or "-"
    return (
        "Stats:\n"
        f"  total={stats.total} completed={stats.completed} pending={stats.pending}\n"
        f"  overdue={stats.overdue} today={stats.today}\n"
        f"  pending by priority: {prio}\n"
        f"  pending by category: {cats}"
    )


async def cmd_prefs(state: AppState, args: list[str]) -> str:
    if len(args) >= 2:
        result = await state.preferences.update(args[0], _coerce(" ".join(args[1:])))
        return "Preference saved." if result.success else f"Preference not saved: {result.error}"
    prefs = await state.preferences.get()
    if prefs is None:
        return "Preferences are unavailable (storage could not be read)."
    return "Preferences:\n" + "\n".join(f"  {k} = {v}" for k, v in prefs.to_dict().items())


async def cmd_clear(state: AppState, args: list[str]) -> str:
    if args != ["confirm"]:
        return "This deletes every task. Run /clear confirm to proceed."
    return _format_result("Cleared", await state.tasks.clear_all())


registry.register("help", cmd_help, "Show this help", aliases=["h", "?"])
registry.register(
    "add",
    cmd_add,
    "Add a task: /add <title> [!high|!medium|!low] [@category] [#tag] [due:YYYY-MM-DD] [at:HH:MM] [remind:N|off]",
    aliases=["new"],
)
registry.register("list", cmd_list, "List tasks: /list [all|pending|completed] [sort:created|due|priority|category|status]", aliases=["ls"])
registry.register("show", cmd_show, "Show one task: /show <id>")
registry.register("done", cmd_done, "Toggle completion: /done <id>", aliases=["toggle"])
registry.register("edit", cmd_edit, "Change one field: /edit <id> <field> <value> (reminder takes N|off)")
registry.register("delete", cmd_delete, "Delete a task: /delete <id>", aliases=["rm"])
registry.register("today", cmd_today, "Pending tasks due today")
registry.register("upcoming", cmd_upcoming, "Pending tasks due soon: /upcoming [days]")
registry.register("overdue", cmd_overdue, "Pending tasks past their due day")
registry.register("search", cmd_search, "Search title, description and tags: /search <text>", aliases=["find"])
registry.register("reminders", cmd_reminders, "Pending tasks with a reminder, earliest first")
registry.register("stats", cmd_stats, "Task statistics")
registry.register("prefs", cmd_prefs, "Show or change preferences: /prefs [name value]")
registry.register("clear", cmd_clear, "Delete all tasks: /clear confirm")

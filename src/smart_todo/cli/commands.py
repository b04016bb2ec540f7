# src/smart_todo/cli/commands.py

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime

from ..core import api
from ..core.errors import ExternalDataError, ValidationError
from ..core.state import AppState
from ..tasks.task_models import CATEGORY_META, PRIORITY_META, Task, TaskDraft
from ..tasks.task_views import CATEGORY_FILTERS, PRIORITY_FILTERS
from ..weather.models import WeatherRecord

CommandEmitter = Callable[[str], None]
CommandHandler = Callable[[AppState, list[str], CommandEmitter | None], str]

logger = logging.getLogger(__name__)

CONFIRM_WORDS = ("yes", "y", "confirm")


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

    def handle(self, state: AppState, line: str, emit: CommandEmitter | None = None) -> str | None:
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

        try:
            return handler(state, args, emit)
        except ValidationError as e:
            return f"Invalid input: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- formatting ----


def format_day(day: str) -> str:
    return datetime.strptime(day, "%Y-%m-%d").strftime("%Y-%m-%d (%a)")


def format_task(n: int, task: Task) -> str:
    box = "[x]" if task.completed else "[ ]"
    p = PRIORITY_META[task.priority]
    c = CATEGORY_META[task.category]
    when = f" @{task.time}" if task.time else ""
    return f"{n}. {box} {p.emoji} {task.text} ({c.emoji} {c.label}){when}"


def format_weather(record: WeatherRecord | None) -> str:
    if record is None:
        return "No weather data. Use /weather refresh."
    return (
        f"{record.icon} {record.location}: {record.temperature:.0f}°C, {record.condition}, "
        f"humidity {record.humidity}%, wind {record.wind_speed:.1f} m/s"
    )


def _resolve_task(state: AppState, ref: str) -> Task | None:
    """
    Resolve a task reference typed by the user.

    A number is a 1-based position in the current (filtered, sorted) list;
    anything else is matched as an id prefix on the selected date.
    """
    shown = api.filtered_tasks(state)
    if ref.isdigit():
        idx = int(ref) - 1
        return shown[idx] if 0 <= idx < len(shown) else None
    matches = [t for t in state.task_store.tasks_for(state.selected_date) if t.id.startswith(ref)]
    return matches[0] if len(matches) == 1 else None


# ---- handlers ----


def cmd_help(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    return registry.build_help()


def cmd_list(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    tasks = api.filtered_tasks(state)
    day = api.day_stats(state)
    f = state.filters
    header = (
        f"{format_day(state.selected_date)}  {day.completed}/{day.total} done"
        f"  [priority={f.priority} category={f.category}]"
    )
    if not tasks:
        return header + "\n  (no tasks)"
    return "\n".join([header, *(format_task(i, t) for i, t in enumerate(tasks, start=1))])


def cmd_add(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /add [!high|!normal|!low] [#category] [@time] text...
    """
    priority = "normal"
    category = "personal"
    time_s = ""
    words: list[str] = []
    for tok in args:
        if tok.startswith("!") and len(tok) > 1:
            priority = tok[1:]
        elif tok.startswith("#") and len(tok) > 1:
            category = tok[1:]
        elif tok.startswith("@") and len(tok) > 1:
            time_s = tok[1:]
        else:
            words.append(tok)

    text = " ".join(words).strip()
    if not text:
        return "Usage: /add [!high|!normal|!low] [#category] [@time] text"

    task = api.add_task(state, TaskDraft(text=text, priority=priority, category=category, time=time_s))
    return f"Added: {task.text}"


def cmd_done(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if len(args) != 1:
        return "Usage: /done <n>"
    task = _resolve_task(state, args[0])
    if task is None:
        return f"No task {args[0]}."
    updated = api.toggle_task(state, task.id)
    if updated is None:
        return f"No task {args[0]}."
    return f"{'Completed' if updated.completed else 'Reopened'}: {updated.text}"


def cmd_edit(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if len(args) < 2:
        return "Usage: /edit <n> new text"
    task = _resolve_task(state, args[0])
    if task is None:
        return f"No task {args[0]}."
    if api.edit_task(state, task.id, " ".join(args[1:])):
        return "Task updated."
    return "Nothing changed."


def cmd_rm(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /rm <n>       -> ask for confirmation
    /rm <n> yes   -> delete
    """
    if not args or len(args) > 2:
        return "Usage: /rm <n> [yes]"
    task = _resolve_task(state, args[0])
    if task is None:
        return f"No task {args[0]}."
    if len(args) == 1 or args[1].lower() not in CONFIRM_WORDS:
        return f'Delete "{task.text}"? Repeat as /rm {args[0]} yes to confirm.'
    api.delete_task(state, task.id)
    return f"Deleted: {task.text}"


def cmd_date(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /date             -> show selected date
    /date today       -> select today
    /date YYYY-MM-DD  -> select that date
    """
    if not args:
        return f"Selected date: {format_day(state.selected_date)}"
    target = datetime.now().date() if args[0].lower() == "today" else args[0]
    day = api.select_date(state, target)
    return f"Selected date: {format_day(day)}"


def cmd_filter(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /filter priority <all|high|normal|low>
    /filter category <all|work|personal|...>
    /filter reset
    """
    if args and args[0].lower() == "reset":
        api.set_filter(state, "priority", "all")
        f = api.set_filter(state, "category", "all")
        return f"Filters: priority={f.priority} category={f.category}"
    if len(args) != 2:
        return (
            "Usage:\n"
            f"  /filter priority <{'|'.join(PRIORITY_FILTERS)}>\n"
            f"  /filter category <{'|'.join(CATEGORY_FILTERS)}>\n"
            "  /filter reset"
        )
    f = api.set_filter(state, args[0], args[1])
    return f"Filters: priority={f.priority} category={f.category}"


def cmd_stats(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    s = api.global_stats(state)
    lines = [
        "Progress:",
        f"  Tasks: {s.completed}/{s.total} done ({s.completion_percent}%)",
        f"  Active days: {s.active_day_count}",
    ]
    saved = state.task_store.last_saved_at
    if saved is not None:
        lines.append(f"  Last saved: {datetime.fromtimestamp(saved).strftime('%H:%M:%S')}")
    return "\n".join(lines)


def cmd_cal(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    markers = api.calendar_markers(state)
    lines = ["Calendar:"]
    for day in sorted(markers):
        m = markers[day]
        status = m.status.value if m.status is not None else "-"
        sel = " <selected>" if m.selected else ""
        lines.append(f"  {day}  {m.completed}/{m.total}  {status}{sel}")
    return "\n".join(lines)


def cmd_weather(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /weather          -> show cached weather
    /weather refresh  -> fetch now
    """
    if args and args[0].lower() == "refresh":
        if emit:
            emit("[WEATHER] Fetching...")
        try:
            record = asyncio.run(api.refresh_external_data(state))
        except ExternalDataError as e:
            return f"Weather unavailable: {e}. Showing last known value.\n{format_weather(state.weather.active)}"
        if record is None:
            return "A weather refresh is already running."
        return format_weather(record)
    return format_weather(state.weather.active)


def cmd_theme(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /theme           -> toggle
    /theme dark|light
    """
    if not args:
        dark = api.toggle_preference(state)
    elif args[0].lower() in ("dark", "on"):
        dark = api.set_preference(state, True)
    elif args[0].lower() in ("light", "off"):
        dark = api.set_preference(state, False)
    else:
        return "Usage: /theme [dark|light]"
    return f"Theme: {'dark' if dark else 'light'}"


def cmd_clear(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not args or args[0].lower() not in CONFIRM_WORDS:
        return "This deletes ALL tasks, the theme and cached weather and cannot be undone. Use /clear yes."
    api.clear_all(state)
    return "All data deleted."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("list", cmd_list, help_text="Show tasks for the selected date.", aliases=["ls"])
registry.register("add", cmd_add, help_text="Add a task: /add [!high] [#work] [@09:00] text.")
registry.register("done", cmd_done, help_text="Toggle completion: /done <n>.", aliases=["toggle"])
registry.register("edit", cmd_edit, help_text="Edit text: /edit <n> new text.")
registry.register("rm", cmd_rm, help_text="Delete a task: /rm <n> yes.", aliases=["delete"])
registry.register("date", cmd_date, help_text="Select date: /date YYYY-MM-DD | today.")
registry.register("filter", cmd_filter, help_text="Filter list: /filter priority|category <value> | reset.")
registry.register("stats", cmd_stats, help_text="Overall progress.")
registry.register("cal", cmd_cal, help_text="Calendar markers for all days with tasks.")
registry.register("weather", cmd_weather, help_text="Weather: /weather | /weather refresh.")
registry.register("theme", cmd_theme, help_text="Theme: /theme [dark|light].")
registry.register("clear", cmd_clear, help_text="Delete all data: /clear yes.")

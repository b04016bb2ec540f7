# tasks/task_views.py

from __future__ import annotations

"""
Derived views over a TaskStore snapshot.

Everything here is a pure function of (snapshot, filters, selected date):
nothing is cached and nothing is mutated, so every read reflects the
latest store state.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from enum import StrEnum

from ..core.errors import ValidationError
from .task_models import PRIORITY_RANK, Category, Priority, Task, normalize_date_key
from .task_store import TaskSnapshot

ALL = "all"

PRIORITY_FILTERS: tuple[str, ...] = (ALL, *(p.value for p in Priority))
CATEGORY_FILTERS: tuple[str, ...] = (ALL, *(c.value for c in Category))


class FilterKind(StrEnum):
    PRIORITY = "priority"
    CATEGORY = "category"


@dataclass(frozen=True, slots=True)
class ViewFilters:
    priority: str = ALL
    category: str = ALL

    def with_filter(self, kind: FilterKind | str, value: str) -> ViewFilters:
        """Return a copy with one filter changed. Unknown kinds/values raise ValidationError."""
        try:
            fk = FilterKind(str(kind).strip().lower())
        except ValueError:
            raise ValidationError(f"unknown filter kind: {kind!r}") from None

        v = str(value or "").strip().lower()
        allowed = PRIORITY_FILTERS if fk is FilterKind.PRIORITY else CATEGORY_FILTERS
        if v not in allowed:
            raise ValidationError(f"invalid {fk.value} filter: {value!r}")

        if fk is FilterKind.PRIORITY:
            return replace(self, priority=v)
        return replace(self, category=v)


def filter_tasks(tasks: Iterable[Task], filters: ViewFilters = ViewFilters()) -> list[Task]:
    """
    Keep tasks matching both filters ("all" matches everything), then order by
    priority high -> low. sorted() is stable, so ties keep insertion order.
    """
    kept = [
        t
        for t in tasks
        if (filters.priority == ALL or t.priority.value == filters.priority)
        and (filters.category == ALL or t.category.value == filters.category)
    ]
    return sorted(kept, key=lambda t: PRIORITY_RANK[t.priority], reverse=True)


def filtered_tasks(snapshot: TaskSnapshot, day: str, filters: ViewFilters = ViewFilters()) -> list[Task]:
    return filter_tasks(snapshot.get(normalize_date_key(day), ()), filters)


# ---- calendar markers ----


class MarkerStatus(StrEnum):
    ALL_COMPLETE = "allComplete"
    PARTIAL = "partial"
    NONE = "none"


MARKER_COLORS: dict[MarkerStatus, str] = {
    MarkerStatus.ALL_COMPLETE: "#2ed573",
    MarkerStatus.PARTIAL: "#ffa502",
    MarkerStatus.NONE: "#ff4757",
}
SELECTED_COLOR = "#2196F3"


@dataclass(frozen=True, slots=True)
class CalendarMarker:
    """
    Marker for one calendar day.

    status is None for a day that is only marked because it is selected
    (it has no tasks). selected is layered on top of status, never instead of it.
    """

    date: str
    completed: int
    total: int
    status: MarkerStatus | None
    selected: bool = False

    @property
    def dot_color(self) -> str | None:
        return MARKER_COLORS[self.status] if self.status is not None else None

    @property
    def selected_color(self) -> str | None:
        return SELECTED_COLOR if self.selected else None


def completion_status(completed: int, total: int) -> MarkerStatus:
    if completed == total:
        return MarkerStatus.ALL_COMPLETE
    if completed > 0:
        return MarkerStatus.PARTIAL
    return MarkerStatus.NONE


def calendar_markers(snapshot: TaskSnapshot, selected_date: str | None = None) -> dict[str, CalendarMarker]:
    markers: dict[str, CalendarMarker] = {}
    for day, tasks in snapshot.items():
        if not tasks:
            continue
        done = sum(1 for t in tasks if t.completed)
        markers[day] = CalendarMarker(
            date=day,
            completed=done,
            total=len(tasks),
            status=completion_status(done, len(tasks)),
        )

    if selected_date:
        key = normalize_date_key(selected_date)
        existing = markers.get(key)
        if existing is None:
            markers[key] = CalendarMarker(date=key, completed=0, total=0, status=None, selected=True)
        else:
            markers[key] = replace(existing, selected=True)
    return markers


# ---- statistics ----


@dataclass(frozen=True, slots=True)
class TaskStats:
    total: int
    completed: int
    active_day_count: int

    @property
    def completion_rate(self) -> float:
        # 0 when there is nothing to complete.
        if self.total == 0:
            return 0.0
        return self.completed / self.total

    @property
    def completion_percent(self) -> int:
        return round(self.completion_rate * 100)


def _stats(groups: Iterable[Sequence[Task]]) -> TaskStats:
    total = completed = active = 0
    for tasks in groups:
        if not tasks:
            continue
        active += 1
        total += len(tasks)
        completed += sum(1 for t in tasks if t.completed)
    return TaskStats(total=total, completed=completed, active_day_count=active)


def global_stats(snapshot: TaskSnapshot) -> TaskStats:
    return _stats(snapshot.values())


def day_stats(snapshot: TaskSnapshot, day: str) -> TaskStats:
    return _stats([snapshot.get(normalize_date_key(day), ())])

# tests/test_task_views.py

from __future__ import annotations

from types import MappingProxyType

import pytest

from smart_todo.core.errors import ValidationError
from smart_todo.tasks.task_models import Category, Priority, Task
from smart_todo.tasks.task_views import (
    MarkerStatus,
    ViewFilters,
    calendar_markers,
    day_stats,
    filter_tasks,
    filtered_tasks,
    global_stats,
)

DAY = "2024-03-01"


def _task(tid: str, priority: str = "normal", category: str = "personal", completed: bool = False) -> Task:
    return Task(
        id=tid,
        text=f"task {tid}",
        priority=Priority(priority),
        category=Category(category),
        created_at=0.0,
        completed=completed,
        completed_at=1.0 if completed else None,
    )


def _snap(data: dict[str, list[Task]]):
    return MappingProxyType({k: tuple(v) for k, v in data.items()})


def test_all_filters_reorders_by_priority_stably() -> None:
    tasks = [
        _task("n1"),
        _task("l1", "low"),
        _task("h1", "high"),
        _task("n2"),
        _task("h2", "high"),
        _task("l2", "low"),
    ]
    out = filter_tasks(tasks)
    assert [t.id for t in out] == ["h1", "h2", "n1", "n2", "l1", "l2"]
    assert sorted(t.id for t in out) == sorted(t.id for t in tasks)


def test_filters_combine_and_return_subset() -> None:
    tasks = [
        _task("a", "high", "work"),
        _task("b", "high", "health"),
        _task("c", "low", "work"),
        _task("d", "normal", "work"),
    ]
    out = filter_tasks(tasks, ViewFilters(priority="all", category="work"))
    assert [t.id for t in out] == ["a", "d", "c"]

    out = filter_tasks(tasks, ViewFilters(priority="high", category="work"))
    assert [t.id for t in out] == ["a"]

    out = filter_tasks(tasks, ViewFilters(priority="low", category="health"))
    assert out == []


def test_filtered_tasks_missing_date_is_empty() -> None:
    assert filtered_tasks(_snap({}), DAY) == []


def test_with_filter_validates() -> None:
    f = ViewFilters().with_filter("priority", "HIGH")
    assert f.priority == "high"
    assert f.category == "all"
    f = f.with_filter("category", "study")
    assert f == ViewFilters(priority="high", category="study")

    with pytest.raises(ValidationError):
        f.with_filter("colour", "red")
    with pytest.raises(ValidationError):
        f.with_filter("category", "gardening")


def test_calendar_markers_status_and_selection_layering() -> None:
    snap = _snap(
        {
            "2024-03-01": [_task("a", completed=True), _task("b", completed=True)],
            "2024-03-02": [_task("c", completed=True), _task("d")],
            "2024-03-03": [_task("e")],
            "2024-03-04": [],
        }
    )
    markers = calendar_markers(snap, selected_date="2024-03-02")

    assert markers["2024-03-01"].status is MarkerStatus.ALL_COMPLETE
    assert markers["2024-03-01"].dot_color == "#2ed573"
    assert markers["2024-03-02"].status is MarkerStatus.PARTIAL
    assert markers["2024-03-02"].selected is True
    assert markers["2024-03-02"].selected_color == "#2196F3"
    assert (markers["2024-03-02"].completed, markers["2024-03-02"].total) == (1, 2)
    assert markers["2024-03-03"].status is MarkerStatus.NONE
    assert markers["2024-03-03"].selected is False
    assert "2024-03-04" not in markers


def test_selected_date_without_tasks_is_still_marked() -> None:
    markers = calendar_markers(_snap({DAY: [_task("a")]}), selected_date="2024-04-10")
    sel = markers["2024-04-10"]
    assert sel.selected is True
    assert sel.status is None
    assert sel.dot_color is None
    assert markers[DAY].selected is False


def test_global_stats_zero_total() -> None:
    stats = global_stats(_snap({DAY: []}))
    assert stats.total == 0
    assert stats.completion_rate == 0.0
    assert stats.active_day_count == 0


def test_global_and_day_stats() -> None:
    snap = _snap(
        {
            "2024-03-01": [_task("a", completed=True), _task("b")],
            "2024-03-02": [_task("c", completed=True)],
            "2024-03-03": [],
        }
    )
    stats = global_stats(snap)
    assert (stats.total, stats.completed, stats.active_day_count) == (3, 2, 2)
    assert stats.completion_rate == pytest.approx(2 / 3)
    assert 0.0 <= stats.completion_rate <= 1.0
    assert stats.completion_percent == 67

    day = day_stats(snap, "2024-03-01")
    assert (day.total, day.completed) == (2, 1)
    assert day.completion_rate == 0.5

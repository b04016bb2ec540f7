# src/smart_todo/core/api.py

from __future__ import annotations

"""
UI-facing operations.

A front-end (console, GUI, web handler) talks to the core only through these
functions. Mutations run under AppState.lock; views are recomputed from a
fresh snapshot on every call.

Error policy:
- ValidationError propagates (the caller may show a message)
- NotFoundError is a stale UI reference: logged and turned into a falsy result
- persistence failures are already absorbed by the stores
- ExternalDataError propagates from refresh_external_data; cached data is kept
"""

import logging
from datetime import date

from ..tasks import task_views
from ..tasks.task_models import Task, TaskDraft, normalize_date_key
from ..tasks.task_views import CalendarMarker, FilterKind, TaskStats, ViewFilters
from ..weather.models import WeatherRecord
from .errors import NotFoundError
from .ports import WeatherFetcher
from .state import AppState

logger = logging.getLogger(__name__)


def _day(state: AppState, day: str | date | None) -> str:
    return state.selected_date if day is None else normalize_date_key(day)


# ---- task mutations ----


def add_task(state: AppState, draft: TaskDraft, day: str | date | None = None) -> Task:
    """Add a task to `day` (default: the selected date). Raises ValidationError on empty text."""
    with state.lock:
        return state.task_store.add_task(_day(state, day), draft)


def toggle_task(state: AppState, task_id: str, day: str | date | None = None) -> Task | None:
    with state.lock:
        key = _day(state, day)
        try:
            return state.task_store.toggle_task(key, task_id)
        except NotFoundError as e:
            logger.debug("toggle ignored: %s", e)
            return None


def edit_task(state: AppState, task_id: str, new_text: str, day: str | date | None = None) -> bool:
    """True if the text changed. Empty text raises ValidationError; unknown ids are a no-op."""
    with state.lock:
        key = _day(state, day)
        try:
            return state.task_store.edit_task(key, task_id, new_text)
        except NotFoundError as e:
            logger.debug("edit ignored: %s", e)
            return False


def delete_task(state: AppState, task_id: str, day: str | date | None = None) -> bool:
    """
    Delete without asking. Confirmation belongs to the caller.
    Deleting an id that is already gone is a no-op returning False.
    """
    with state.lock:
        key = _day(state, day)
        try:
            state.task_store.delete_task(key, task_id)
            return True
        except NotFoundError as e:
            logger.debug("delete ignored: %s", e)
            return False


def clear_all(state: AppState) -> None:
    """Wipe tasks, theme and weather cache, in memory and on disk. Caller confirms first."""
    with state.lock:
        state.task_store.clear()
        state.theme.clear()
        state.weather.clear()
    logger.info("All data cleared.")


# ---- view state ----


def set_filter(state: AppState, kind: FilterKind | str, value: str) -> ViewFilters:
    with state.lock:
        state.filters = state.filters.with_filter(kind, value)
        return state.filters


def select_date(state: AppState, day: str | date) -> str:
    with state.lock:
        state.selected_date = normalize_date_key(day)
        return state.selected_date


# ---- derived views ----


def filtered_tasks(state: AppState) -> list[Task]:
    with state.lock:
        snapshot = state.task_store.snapshot()
        return task_views.filtered_tasks(snapshot, state.selected_date, state.filters)


def calendar_markers(state: AppState) -> dict[str, CalendarMarker]:
    with state.lock:
        return task_views.calendar_markers(state.task_store.snapshot(), state.selected_date)


def global_stats(state: AppState) -> TaskStats:
    with state.lock:
        return task_views.global_stats(state.task_store.snapshot())


def day_stats(state: AppState, day: str | date | None = None) -> TaskStats:
    with state.lock:
        return task_views.day_stats(state.task_store.snapshot(), _day(state, day))


# ---- external data ----


async def refresh_external_data(state: AppState, fetcher: WeatherFetcher | None = None) -> WeatherRecord | None:
    """
    Fetch new weather and write it through.

    Returns None when another refresh is already in flight. The lock is not
    held across the await; the cache itself refuses overlapping refreshes.
    """
    return await state.weather.refresh(fetcher or state.weather_fetcher)


async def ensure_fresh_weather(state: AppState) -> WeatherRecord | None:
    """Refresh only if the cached value is missing or older than the TTL."""
    if state.weather.is_fresh():
        return state.weather.active
    return await refresh_external_data(state)


# ---- preference ----


def set_preference(state: AppState, dark_mode: bool) -> bool:
    with state.lock:
        return state.theme.set(dark_mode)


def toggle_preference(state: AppState) -> bool:
    with state.lock:
        return state.theme.toggle()

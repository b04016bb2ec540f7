# src/smart_todo/core/state.py

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field

from ..preferences.theme import ThemeStore
from ..tasks.task_models import today_key
from ..tasks.task_store import TaskStore
from ..tasks.task_views import ViewFilters
from ..weather.cache import WeatherCache
from .ports import BlobBackend, WeatherFetcher

logger = logging.getLogger(__name__)


@dataclass
class AppState:
    """
    Single owner of all mutable state.

    Stores own their records; the transient view state (selected date,
    filters) lives here because it is never persisted. Every operation in
    core/api.py runs under `lock`, so callers on other threads see each
    operation as atomic.
    """

    # Store Settings on the state for easy access in other modules later.
    settings: object

    backend: BlobBackend
    task_store: TaskStore
    theme: ThemeStore
    weather: WeatherCache
    weather_fetcher: WeatherFetcher

    selected_date: str = field(default_factory=today_key)
    filters: ViewFilters = field(default_factory=ViewFilters)
    lock: threading.RLock = field(default_factory=threading.RLock)


def load_persisted_state(state: AppState) -> None:
    """Load tasks, theme and (fresh-only) weather from the backend. Never raises on bad data."""
    with state.lock:
        tasks = state.task_store.load()
        dark = state.theme.load()
        weather = state.weather.load()
    logger.info(
        "State loaded: tasks=%d dark_mode=%s weather=%s",
        tasks,
        dark,
        "fresh" if weather is not None else "absent",
    )

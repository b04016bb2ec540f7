# src/smart_todo/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (storage/weather),
- loads persisted tasks, theme and weather.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.errors import PersistenceError
from ..core.ports import BlobBackend, WeatherFetcher
from ..core.state import AppState, load_persisted_state
from ..preferences.theme import ThemeStore
from ..storage.blob_store import MemoryBlobStore, SqliteBlobStore
from ..tasks.task_store import TaskStore
from ..weather.cache import WeatherCache
from ..weather.client import OpenMeteoWeatherFetcher
from ..weather.demo import DemoWeatherFetcher

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.storage_db_path.parent.mkdir(parents=True, exist_ok=True)


def build_backend(settings) -> BlobBackend:
    try:
        return SqliteBlobStore(settings.storage_db_path)
    except PersistenceError:
        # The session still works; nothing will survive a restart.
        logger.exception("Blob store unavailable; falling back to in-memory storage.")
        return MemoryBlobStore()


def build_weather_fetcher(settings) -> WeatherFetcher:
    if settings.weather_provider == "open-meteo":
        return OpenMeteoWeatherFetcher(
            location=settings.weather_location,
            latitude=settings.weather_latitude,
            longitude=settings.weather_longitude,
            timeout_seconds=settings.weather_timeout_seconds,
        )
    return DemoWeatherFetcher(
        settings.weather_location,
        delay_seconds=settings.weather_demo_delay_seconds,
    )


def create_initial_state(*, settings=None, backend: BlobBackend | None = None) -> AppState:
    """
    Create AppState from the provided settings and load persisted data.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    if backend is None:
        try:
            _ensure_local_dirs(settings)
        except OSError:
            logger.exception("Cannot create data dir %s", settings.data_dir)
        backend = build_backend(settings)

    state = AppState(
        settings=settings,
        backend=backend,
        task_store=TaskStore(backend),
        theme=ThemeStore(backend),
        weather=WeatherCache(backend),
        weather_fetcher=build_weather_fetcher(settings),
    )
    load_persisted_state(state)
    return state

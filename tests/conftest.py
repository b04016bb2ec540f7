# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from smart_todo.core.state import AppState
from smart_todo.preferences.theme import ThemeStore
from smart_todo.storage.blob_store import MemoryBlobStore
from smart_todo.tasks.task_store import TaskStore
from smart_todo.weather.cache import WeatherCache

from .fakes import FakeClock, StaticWeatherFetcher


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="smart-todo-test",
        log_level="DEBUG",
        data_dir=tmp_path,
        storage_db_path=tmp_path / "storage.sqlite3",
        weather_provider="demo",
        weather_location="Changwon",
        weather_latitude=35.2281,
        weather_longitude=128.6811,
        weather_timeout_seconds=5.0,
        weather_demo_delay_seconds=0.0,
        refresh_weather_on_start=False,
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def backend() -> MemoryBlobStore:
    return MemoryBlobStore()


@pytest.fixture()
def fetcher() -> StaticWeatherFetcher:
    return StaticWeatherFetcher()


@pytest.fixture()
def state(settings, backend, clock, fetcher) -> AppState:
    """AppState over in-memory storage, a fake clock and a deterministic fetcher."""
    return AppState(
        settings=settings,
        backend=backend,
        task_store=TaskStore(backend, clock=clock),
        theme=ThemeStore(backend),
        weather=WeatherCache(backend, clock=clock),
        weather_fetcher=fetcher,
        selected_date="2024-03-01",
    )

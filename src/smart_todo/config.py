# src/smart_todo/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing required at import time: every value has a usable default.
- The weather TTL is deliberately NOT here (see weather/cache.py).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

ENV_PREFIX = "SMART_TODO"

WEATHER_PROVIDERS = ("demo", "open-meteo")


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    storage_db_path: Path

    # ---- Weather ----
    weather_provider: str
    weather_location: str
    weather_latitude: float
    weather_longitude: float
    weather_timeout_seconds: float
    weather_demo_delay_seconds: float
    refresh_weather_on_start: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "smart-todo").strip() or "smart-todo"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/smart_todo"))
        storage_db_path = _env_path(_k("STORAGE_DB_PATH"), data_dir / "storage.sqlite3")

        weather_provider = _env(_k("WEATHER_PROVIDER"), "demo").strip().lower()
        if weather_provider not in WEATHER_PROVIDERS:
            weather_provider = "demo"

        # Defaults point at Changwon, the demo location.
        weather_location = _env(_k("WEATHER_LOCATION"), "Changwon").strip() or "Changwon"
        weather_latitude = _env_float(_k("WEATHER_LATITUDE"), 35.2281)
        weather_longitude = _env_float(_k("WEATHER_LONGITUDE"), 128.6811)
        weather_timeout_seconds = max(1.0, _env_float(_k("WEATHER_TIMEOUT_SECONDS"), 10.0))
        weather_demo_delay_seconds = max(0.0, _env_float(_k("WEATHER_DEMO_DELAY_SECONDS"), 1.0))
        refresh_weather_on_start = _env_bool(_k("REFRESH_WEATHER_ON_START"), True)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            storage_db_path=storage_db_path,
            weather_provider=weather_provider,
            weather_location=weather_location,
            weather_latitude=weather_latitude,
            weather_longitude=weather_longitude,
            weather_timeout_seconds=weather_timeout_seconds,
            weather_demo_delay_seconds=weather_demo_delay_seconds,
            refresh_weather_on_start=refresh_weather_on_start,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS

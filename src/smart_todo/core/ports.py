# src/smart_todo/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps storage backends and weather providers swappable and makes testing easier.
"""

from typing import TYPE_CHECKING, Awaitable, Protocol

if TYPE_CHECKING:
    from ..weather.models import WeatherRecord


class BlobBackend(Protocol):
    """
    Raw string key/value storage.

    Implementations raise PersistenceError on any failure.
    get() returns None when the key was never saved (not an error).
    """

    def get(self, key: str) -> str | None: ...
    def set(self, key: str, value: str) -> None: ...
    def remove(self, key: str) -> None: ...


class WeatherFetcher(Protocol):
    """
    External data source: called with no arguments, yields one weather record.

    Any exception (including ExternalDataError) means the fetch failed.
    """

    def __call__(self) -> Awaitable[WeatherRecord]: ...

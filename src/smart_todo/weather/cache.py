# src/smart_todo/weather/cache.py

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Final

from ..core.errors import ExternalDataError
from ..core.ports import BlobBackend, WeatherFetcher
from ..storage.blob_store import Slot, read_json, remove_slot, write_json
from .models import WeatherRecord

logger = logging.getLogger(__name__)

# Fixed policy, not a setting.
WEATHER_TTL_SECONDS: Final[float] = 60 * 60


@dataclass(frozen=True, slots=True)
class CacheEntry:
    payload: WeatherRecord
    fetched_at: float

    def age(self, now: float) -> float:
        return now - self.fetched_at

    def is_fresh(self, now: float) -> bool:
        return self.age(now) < WEATHER_TTL_SECONDS

    def to_dict(self) -> dict[str, Any]:
        return {"payload": self.payload.to_dict(), "fetched_at": self.fetched_at}

    @classmethod
    def from_dict(cls, raw: Any) -> CacheEntry:
        """
        Decode the persisted entry.

        Also accepts the legacy `{data, timestamp}` layout, where timestamp is
        epoch milliseconds.
        """
        if not isinstance(raw, dict):
            raise ExternalDataError("weather cache entry must be a mapping")
        if "payload" in raw:
            payload, ts = raw.get("payload"), raw.get("fetched_at")
        else:
            payload, ts = raw.get("data"), raw.get("timestamp")
            if isinstance(ts, (int, float)):
                ts = float(ts) / 1000.0
        if not isinstance(ts, (int, float)) or isinstance(ts, bool):
            raise ExternalDataError("weather cache entry has no usable timestamp")
        return cls(payload=WeatherRecord.from_dict(payload), fetched_at=float(ts))


class WeatherCache:
    """
    Single-entry TTL cache for the external weather record.

    - load(): adopt the persisted entry only if it is younger than the TTL
    - refresh(fetcher): fetch, adopt, write through; on failure keep whatever
      was active before and raise ExternalDataError
    - overlapping refreshes are refused: a second call while one is in
      flight returns None immediately, so a slow response can never
      overwrite a newer one
    - clear() bumps a generation counter; a refresh that started before the
      clear drops its result instead of writing it back
    """

    def __init__(self, backend: BlobBackend, *, clock: Callable[[], float] = time.time) -> None:
        self._backend = backend
        self._clock = clock
        self._entry: CacheEntry | None = None
        self._in_flight = False
        self._generation = 0

    @property
    def active(self) -> WeatherRecord | None:
        return self._entry.payload if self._entry is not None else None

    @property
    def fetched_at(self) -> float | None:
        return self._entry.fetched_at if self._entry is not None else None

    @property
    def refreshing(self) -> bool:
        return self._in_flight

    def is_fresh(self) -> bool:
        return self._entry is not None and self._entry.is_fresh(self._clock())

    def load(self) -> WeatherRecord | None:
        raw = read_json(self._backend, Slot.WEATHER_CACHE)
        if raw is None:
            return None
        try:
            entry = CacheEntry.from_dict(raw)
        except ExternalDataError as e:
            logger.warning("Ignoring unreadable weather cache: %s", e)
            return None

        now = self._clock()
        if not entry.is_fresh(now):
            logger.info("Cached weather is stale (age=%.0fs); refresh needed.", entry.age(now))
            return None

        self._entry = entry
        logger.info("Using cached weather for %s (age=%.0fs)", entry.payload.location, entry.age(now))
        return entry.payload

    async def refresh(self, fetcher: WeatherFetcher) -> WeatherRecord | None:
        if self._in_flight:
            logger.debug("Weather refresh already in flight; ignoring request.")
            return None

        self._in_flight = True
        generation = self._generation
        try:
            try:
                result = await fetcher()
            except ExternalDataError:
                logger.warning("Weather fetch failed; keeping previous value.", exc_info=True)
                raise
            except Exception as e:
                logger.warning("Weather fetch failed; keeping previous value.", exc_info=True)
                raise ExternalDataError(f"weather fetch failed: {e}") from e

            record = result if isinstance(result, WeatherRecord) else WeatherRecord.from_dict(result)
            if generation != self._generation:
                logger.debug("Weather cleared during refresh; dropping result.")
                return None

            entry = CacheEntry(payload=record, fetched_at=self._clock())
            self._entry = entry
            write_json(self._backend, Slot.WEATHER_CACHE, entry.to_dict())
            logger.info(
                "Weather refreshed: %s %s %.1f°C",
                record.location,
                record.condition,
                record.temperature,
            )
            return record
        finally:
            self._in_flight = False

    def clear(self) -> None:
        self._generation += 1
        self._entry = None
        remove_slot(self._backend, Slot.WEATHER_CACHE)

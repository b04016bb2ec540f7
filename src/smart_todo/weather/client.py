# src/smart_todo/weather/client.py

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..core.errors import ExternalDataError
from .models import CONDITION_ICONS, Condition, WeatherRecord

logger = logging.getLogger(__name__)

OPEN_METEO_URL = "https://api.open-meteo.com/v1/forecast"

_CURRENT_FIELDS = "temperature_2m,relative_humidity_2m,wind_speed_10m,weather_code"


def condition_from_wmo(code: int) -> Condition:
    """Collapse a WMO weather interpretation code into our coarse conditions."""
    if code == 0:
        return Condition.CLEAR
    if code in (1, 2):
        return Condition.PARTLY_CLOUDY
    if code == 3:
        return Condition.CLOUDY
    if code in (45, 48):
        return Condition.FOG
    if 71 <= code <= 77 or code in (85, 86):
        return Condition.SNOW
    if code >= 95:
        return Condition.THUNDERSTORM
    # drizzle, rain, freezing rain, showers
    return Condition.RAIN


def _make_timeout(total_s: float) -> httpx.Timeout:
    connect_s = min(5.0, total_s)
    return httpx.Timeout(connect=connect_s, read=total_s, write=10.0, pool=connect_s)


class OpenMeteoWeatherFetcher:
    """
    Weather fetcher backed by the Open-Meteo forecast API (no API key needed).

    Every failure (transport, HTTP status, unexpected body) surfaces as
    ExternalDataError so the cache can keep its previous value.
    """

    def __init__(
        self,
        *,
        location: str,
        latitude: float,
        longitude: float,
        timeout_seconds: float = 10.0,
        base_url: str = OPEN_METEO_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.location = location
        self.latitude = float(latitude)
        self.longitude = float(longitude)
        self.base_url = base_url
        self._timeout = _make_timeout(max(1.0, float(timeout_seconds)))
        self._transport = transport

    def _params(self) -> dict[str, Any]:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "current": _CURRENT_FIELDS,
            "wind_speed_unit": "ms",
        }

    async def __call__(self) -> WeatherRecord:
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.get(self.base_url, params=self._params())
                resp.raise_for_status()
                body = resp.json()
        except httpx.HTTPStatusError as e:
            raise ExternalDataError(f"weather provider returned HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise ExternalDataError(f"weather provider unreachable: {e.__class__.__name__}") from e
        except ValueError as e:
            raise ExternalDataError("weather provider returned invalid JSON") from e

        return self._parse(body)

    def _parse(self, body: Any) -> WeatherRecord:
        current = body.get("current") if isinstance(body, dict) else None
        if not isinstance(current, dict):
            raise ExternalDataError("weather response has no 'current' block")
        try:
            code = int(current["weather_code"])
            condition = condition_from_wmo(code)
            record = WeatherRecord(
                location=self.location,
                temperature=float(current["temperature_2m"]),
                condition=condition.value,
                icon=CONDITION_ICONS[condition],
                humidity=int(round(float(current["relative_humidity_2m"]))),
                wind_speed=round(float(current["wind_speed_10m"]), 1),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ExternalDataError(f"weather response missing field: {e}") from e

        logger.debug("Open-Meteo code=%s -> %s", code, condition.value)
        return record

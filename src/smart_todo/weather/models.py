# src/smart_todo/weather/models.py

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import StrEnum
from typing import Any

from ..core.errors import ExternalDataError


class Condition(StrEnum):
    CLEAR = "clear"
    PARTLY_CLOUDY = "partly_cloudy"
    CLOUDY = "cloudy"
    RAIN = "rain"
    SNOW = "snow"
    FOG = "fog"
    THUNDERSTORM = "thunderstorm"


CONDITION_ICONS: dict[Condition, str] = {
    Condition.CLEAR: "☀️",
    Condition.PARTLY_CLOUDY: "⛅",
    Condition.CLOUDY: "☁️",
    Condition.RAIN: "🌧️",
    Condition.SNOW: "❄️",
    Condition.FOG: "🌫️",
    Condition.THUNDERSTORM: "⛈️",
}

CONDITION_COLORS: dict[str, str] = {
    Condition.CLEAR: "#FFA726",
    Condition.PARTLY_CLOUDY: "#42A5F5",
    Condition.CLOUDY: "#78909C",
    Condition.RAIN: "#5C6BC0",
}
DEFAULT_WEATHER_COLOR = "#2196F3"

# Condition labels written by the earlier app version.
LEGACY_CONDITIONS: dict[str, Condition] = {
    "맑음": Condition.CLEAR,
    "구름많음": Condition.PARTLY_CLOUDY,
    "흐림": Condition.CLOUDY,
    "비": Condition.RAIN,
}


@dataclass(frozen=True, slots=True)
class WeatherRecord:
    location: str
    temperature: float
    condition: str
    icon: str
    humidity: int
    wind_speed: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: Any) -> WeatherRecord:
        """Accepts snake_case, the legacy camelCase `windSpeed` and legacy Korean condition labels."""
        if not isinstance(raw, dict):
            raise ExternalDataError(f"weather record must be a mapping, got {type(raw).__name__}")
        try:
            condition = str(raw["condition"]).strip()
            return cls(
                location=str(raw["location"]),
                temperature=float(raw["temperature"]),
                condition=str(LEGACY_CONDITIONS.get(condition, condition)),
                icon=str(raw.get("icon") or ""),
                humidity=int(raw["humidity"]),
                wind_speed=float(raw.get("wind_speed", raw.get("windSpeed"))),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ExternalDataError(f"malformed weather record: {e}") from e


def weather_color(record: WeatherRecord | None) -> str:
    """Accent colour for the weather card."""
    if record is None:
        return DEFAULT_WEATHER_COLOR
    return CONDITION_COLORS.get(record.condition, DEFAULT_WEATHER_COLOR)

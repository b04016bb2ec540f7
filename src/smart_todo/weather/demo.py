# src/smart_todo/weather/demo.py

from __future__ import annotations

import asyncio
import random

from .models import CONDITION_ICONS, Condition, WeatherRecord

_DEMO_CONDITIONS = (Condition.CLEAR, Condition.PARTLY_CLOUDY, Condition.CLOUDY, Condition.RAIN)


class DemoWeatherFetcher:
    """
    Offline weather source used when no real provider is configured.

    Behavior:
    - waits `delay_seconds` to mimic a network round trip
    - returns a random but plausible record (10-24°C, 40-69% humidity, 1-4 m/s wind)
    """

    def __init__(self, location: str = "Changwon", *, delay_seconds: float = 1.0, rng: random.Random | None = None) -> None:
        self.location = location
        self.delay_seconds = max(0.0, float(delay_seconds))
        self._rng = rng or random.Random()

    async def __call__(self) -> WeatherRecord:
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)

        condition = self._rng.choice(_DEMO_CONDITIONS)
        return WeatherRecord(
            location=self.location,
            temperature=float(self._rng.randint(10, 24)),
            condition=condition.value,
            icon=CONDITION_ICONS[condition],
            humidity=self._rng.randint(40, 69),
            wind_speed=round(self._rng.uniform(1.0, 4.0), 1),
        )

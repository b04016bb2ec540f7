"""
External-data (weather) subsystem.

- models.py: WeatherRecord and condition metadata
- cache.py: TTL cache with its own persistence slot
- demo.py: simulated fetcher used when no real provider is configured
- client.py: Open-Meteo fetcher over httpx
"""

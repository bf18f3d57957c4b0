"""Weather ingestion using Open-Meteo."""

from __future__ import annotations

from datetime import datetime, timezone
import logging
import math
from typing import Any, Optional

import httpx

from flight_tracker.config import settings
from flight_tracker.exceptions import FetchError
from flight_tracker.models.weather import CurrentWeather, WeatherData, WeatherLocation

logger = logging.getLogger("flight_tracker.ingestors.weather")

CURRENT_VARIABLES = (
    "temperature_2m",
    "weather_code",
    "wind_speed_10m",
    "wind_direction_10m",
    "relative_humidity_2m",
    "precipitation",
)

WMO_CONDITIONS = {
    0: "Clear sky",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Fog",
    48: "Rime fog",
    51: "Light drizzle",
    53: "Drizzle",
    55: "Dense drizzle",
    56: "Freezing drizzle",
    57: "Heavy freezing drizzle",
    61: "Light rain",
    63: "Rain",
    65: "Heavy rain",
    66: "Light freezing rain",
    67: "Freezing rain",
    71: "Light snow",
    73: "Snow",
    75: "Heavy snow",
    77: "Snow grains",
    80: "Light showers",
    81: "Showers",
    82: "Violent showers",
    85: "Light snow showers",
    86: "Snow showers",
    95: "Thunderstorm",
    96: "Thunderstorm hail",
    99: "Heavy thunderstorm",
}

COMPASS_DIRECTIONS = (
    "N", "NNE", "NE", "ENE",
    "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW",
    "W", "WNW", "NW", "NNW",
)


def get_weather_condition(code: Optional[int]) -> str:
    """Return the label for a WMO weather code, or ``"Unknown"``."""

    return WMO_CONDITIONS.get(code, "Unknown") if code is not None else "Unknown"


def get_compass_direction(degrees: float) -> str:
    """Convert a bearing in degrees to a 16-point compass heading.

    Halves round up so 11.25 degrees is NNE, not N.
    """

    index = int(math.floor(degrees / 22.5 + 0.5)) % 16
    return COMPASS_DIRECTIONS[index]


def _as_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _observation_time(raw_time: Any, utc_offset_seconds: int) -> datetime:
    if isinstance(raw_time, (int, float)):
        return datetime.fromtimestamp(raw_time + utc_offset_seconds, tz=timezone.utc)
    if isinstance(raw_time, str):
        # ISO time strings are already local to the location
        return datetime.fromisoformat(raw_time).replace(tzinfo=timezone.utc)
    raise FetchError("Weather response is missing the observation time")


class WeatherIngestor:
    """Fetch current conditions at a point from Open-Meteo."""

    def __init__(
        self,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.weather_base_url
        self.timeout = timeout or settings.weather_timeout
        self.transport = transport

    async def get_weather(self, lat: float, lon: float) -> WeatherData:
        params = {
            "latitude": lat,
            "longitude": lon,
            "current": ",".join(CURRENT_VARIABLES),
            "temperature_unit": "fahrenheit",
            "windspeed_unit": "mph",
            "precipitation_unit": "inch",
            "timeformat": "unixtime",
            "timezone": "auto",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(self.base_url, params=params)
                response.raise_for_status()
        except httpx.TimeoutException as exc:
            logger.error("Weather request timed out: %s", exc)
            raise FetchError("Weather service timeout") from exc
        except httpx.HTTPStatusError as exc:
            logger.error(
                "Weather service returned error: status=%s body=%s",
                exc.response.status_code,
                exc.response.text,
            )
            raise FetchError("Weather service error") from exc
        except httpx.RequestError as exc:
            logger.error("Weather request failed: %s", exc)
            raise FetchError("Weather request failed") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            logger.error("Failed to parse weather JSON response: %s", exc)
            raise FetchError("Weather service returned invalid JSON") from exc

        current = payload.get("current") if isinstance(payload, dict) else None
        if not isinstance(current, dict):
            raise FetchError("Weather response has no current conditions")

        utc_offset_seconds = _as_int(payload.get("utc_offset_seconds"))
        weather_code = _as_int(current.get("weather_code"))
        wind_direction = current.get("wind_direction_10m")

        snapshot = WeatherData(
            current=CurrentWeather(
                time=_observation_time(current.get("time"), utc_offset_seconds or 0),
                temperature=current.get("temperature_2m"),
                weather_code=weather_code,
                weather_condition=get_weather_condition(weather_code),
                wind_speed=current.get("wind_speed_10m"),
                wind_direction=wind_direction,
                wind_direction_heading=(
                    get_compass_direction(wind_direction) if wind_direction is not None else None
                ),
                relative_humidity=current.get("relative_humidity_2m"),
                precipitation=current.get("precipitation"),
            ),
            location=WeatherLocation(
                latitude=payload.get("latitude"),
                longitude=payload.get("longitude"),
                timezone=payload.get("timezone"),
                timezone_abbreviation=payload.get("timezone_abbreviation"),
                utc_offset_seconds=utc_offset_seconds,
            ),
        )
        logger.debug("Weather snapshot ingested: %s", snapshot)
        return snapshot


__all__ = ["WeatherIngestor", "get_compass_direction", "get_weather_condition"]

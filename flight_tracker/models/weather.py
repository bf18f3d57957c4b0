"""Weather data models published on the weather channel."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CurrentWeather(BaseModel):
    """Current conditions at the monitored point."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    time: datetime = Field(..., description="Observation time shifted by the UTC offset")
    temperature: Optional[float] = Field(default=None, description="Temperature in Fahrenheit")
    weather_code: Optional[int] = Field(default=None, description="WMO weather code")
    weather_condition: str = Field(default="Unknown", description="Label for the WMO code")
    wind_speed: Optional[float] = Field(default=None, description="Wind speed in mph")
    wind_direction: Optional[float] = Field(default=None, description="Wind direction in degrees")
    wind_direction_heading: Optional[str] = Field(
        default=None, description="16-point compass heading"
    )
    relative_humidity: Optional[float] = Field(
        default=None, description="Relative humidity in percent"
    )
    precipitation: Optional[float] = Field(default=None, description="Precipitation in inches")


class WeatherLocation(BaseModel):
    """Location metadata echoed back by the weather source."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    latitude: Optional[float] = None
    longitude: Optional[float] = None
    timezone: Optional[str] = None
    timezone_abbreviation: Optional[str] = None
    utc_offset_seconds: Optional[int] = None


class WeatherData(BaseModel):
    """A point-in-time weather snapshot."""

    model_config = ConfigDict(frozen=True)

    current: CurrentWeather
    location: WeatherLocation


__all__ = ["CurrentWeather", "WeatherData", "WeatherLocation"]

"""Data ingestors for the flight tracker."""

from .adsb import ADSBIngestor
from .flightaware import FlightAwareResolver, is_airline_ident
from .weather import WeatherIngestor, get_compass_direction, get_weather_condition

__all__ = [
    "ADSBIngestor",
    "FlightAwareResolver",
    "WeatherIngestor",
    "get_compass_direction",
    "get_weather_condition",
    "is_airline_ident",
]

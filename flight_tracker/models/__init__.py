"""Pydantic models for the flight tracker."""

from .air_traffic import Aircraft, AircraftWithFlight, RouteSummary
from .flight import FlightDetails
from .weather import CurrentWeather, WeatherData, WeatherLocation

__all__ = [
    "Aircraft",
    "AircraftWithFlight",
    "CurrentWeather",
    "FlightDetails",
    "RouteSummary",
    "WeatherData",
    "WeatherLocation",
]

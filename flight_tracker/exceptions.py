"""Error types raised by the flight tracker."""

from __future__ import annotations


class FlightTrackerError(RuntimeError):
    """Base class for flight tracker failures."""


class ConfigError(FlightTrackerError):
    """Required configuration is missing or invalid."""


class FetchError(FlightTrackerError):
    """An upstream HTTP source failed or returned an unusable response."""


class PublishError(FlightTrackerError):
    """A message could not be delivered to the message bus."""


__all__ = ["ConfigError", "FetchError", "FlightTrackerError", "PublishError"]

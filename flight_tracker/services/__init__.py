"""Service-layer helpers for the flight tracker."""

from .mqtt_client import MQTTClient
from .publisher import ChangeDetectionPublisher, Channel, MessageBus, to_jsonable
from .tracker import FlightTracker, build_tracker, merge_routes

__all__ = [
    "ChangeDetectionPublisher",
    "Channel",
    "FlightTracker",
    "MQTTClient",
    "MessageBus",
    "build_tracker",
    "merge_routes",
    "to_jsonable",
]

"""Polling loop that ties the ingestors to the change-detection publisher."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from typing import Callable, Optional

from flight_tracker.cache import FlightDetailsCache
from flight_tracker.config import Settings, settings as default_settings
from flight_tracker.exceptions import FetchError, PublishError
from flight_tracker.ingestors import ADSBIngestor, FlightAwareResolver, WeatherIngestor
from flight_tracker.models.air_traffic import Aircraft, AircraftWithFlight, RouteSummary
from flight_tracker.models.flight import FlightDetails
from flight_tracker.services.mqtt_client import MQTTClient
from flight_tracker.services.publisher import ChangeDetectionPublisher, Channel

logger = logging.getLogger("flight_tracker.tracker")


def merge_routes(
    aircraft: list[Aircraft], flights: dict[str, Optional[FlightDetails]]
) -> list[AircraftWithFlight]:
    """Attach origin and destination to each aircraft; other route fields stay out."""

    merged: list[AircraftWithFlight] = []
    for plane in aircraft:
        details = flights.get(plane.flight)
        route = RouteSummary(
            origin=details.origin if details else None,
            destination=details.destination if details else None,
        )
        merged.append(AircraftWithFlight.from_aircraft(plane, route))
    return merged


class FlightTracker:
    """Run the aircraft and weather channels on their own cadences."""

    def __init__(
        self,
        *,
        adsb_ingestor: ADSBIngestor,
        resolver: FlightAwareResolver,
        weather_ingestor: WeatherIngestor,
        publisher: ChangeDetectionPublisher,
        latitude: float,
        longitude: float,
        radius_nm: float,
        loop_interval: float = 30.0,
        weather_interval: float = 1800.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.adsb_ingestor = adsb_ingestor
        self.resolver = resolver
        self.weather_ingestor = weather_ingestor
        self.publisher = publisher
        self.latitude = latitude
        self.longitude = longitude
        self.radius_nm = radius_nm
        self.loop_interval = loop_interval
        self.weather_interval = weather_interval
        self._clock = clock
        self.last_weather_update: float | None = None

    async def update_aircraft(self) -> None:
        try:
            aircraft = await self.adsb_ingestor.get_air_traffic(
                self.latitude, self.longitude, radius_nm=self.radius_nm
            )
        except FetchError as exc:
            logger.error("Aircraft fetch failed: %s", exc)
            return

        flight_numbers = [plane.flight for plane in aircraft if plane.flight.strip()]
        flights = await self.resolver.resolve_flights(flight_numbers)
        merged = merge_routes(aircraft, flights)

        try:
            await self.publisher.submit(Channel.AIRCRAFT, merged)
        except PublishError as exc:
            logger.error("Aircraft publish failed: %s", exc)

    def weather_due(self) -> bool:
        if self.last_weather_update is None:
            return True
        return self._clock() - self.last_weather_update >= self.weather_interval

    async def update_weather(self) -> None:
        if not self.weather_due():
            return

        now = self._clock()
        try:
            weather = await self.weather_ingestor.get_weather(self.latitude, self.longitude)
        except FetchError as exc:
            logger.error("Weather fetch failed; retrying next cycle: %s", exc)
            return

        self.last_weather_update = now
        try:
            await self.publisher.submit(Channel.WEATHER, weather)
        except PublishError as exc:
            logger.error("Weather publish failed: %s", exc)

    async def run_cycle(self) -> None:
        """One iteration: aircraft first, then weather when it is due."""

        await self.update_aircraft()
        await self.update_weather()

    async def run(self, stop_event: asyncio.Event | None = None) -> None:
        """Repeat cycles until ``stop_event`` is set or the task is cancelled."""

        stop_event = stop_event or asyncio.Event()
        logger.info(
            "Flight tracker starting at %s, %s (radius %s nm, interval %ss)",
            self.latitude,
            self.longitude,
            self.radius_nm,
            self.loop_interval,
        )
        while not stop_event.is_set():
            try:
                await self.run_cycle()
            except asyncio.CancelledError:
                logger.info("Flight tracker cancelled")
                raise
            except Exception:
                logger.exception("Error in main loop")

            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(stop_event.wait(), timeout=self.loop_interval)

        logger.info("Flight tracker stopped")


def build_tracker(config: Settings | None = None) -> tuple[FlightTracker, MQTTClient]:
    """Wire a tracker from settings. The caller owns connecting the bus."""

    config = config or default_settings
    bus = MQTTClient(
        config.mqtt_broker_url,
        qos=config.mqtt_qos,
        retain=config.mqtt_retain,
        publish_timeout=config.mqtt_publish_timeout,
    )
    tracker = FlightTracker(
        adsb_ingestor=ADSBIngestor(
            base_url=config.adsb_base_url,
            timeout=config.adsb_timeout,
            default_radius_nm=config.area_nautical_miles,
        ),
        resolver=FlightAwareResolver(
            api_key=config.flightaware_api_key,
            base_url=config.flightaware_base_url,
            timeout=config.flightaware_timeout,
            cache=FlightDetailsCache(config.flight_cache_ttl_seconds),
        ),
        weather_ingestor=WeatherIngestor(
            base_url=config.weather_base_url, timeout=config.weather_timeout
        ),
        publisher=ChangeDetectionPublisher(bus, topic_prefix=config.mqtt_topic_prefix),
        latitude=config.latitude,
        longitude=config.longitude,
        radius_nm=config.area_nautical_miles,
        loop_interval=config.loop_interval_seconds,
        weather_interval=config.weather_update_interval_seconds,
    )
    return tracker, bus


__all__ = ["FlightTracker", "build_tracker", "merge_routes"]

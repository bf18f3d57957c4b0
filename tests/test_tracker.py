import asyncio
import json

import anyio
import httpx
import pytest

from flight_tracker.cache import FlightDetailsCache
from flight_tracker.exceptions import FetchError, PublishError
from flight_tracker.ingestors import ADSBIngestor, FlightAwareResolver, WeatherIngestor
from flight_tracker.services.publisher import ChangeDetectionPublisher
from flight_tracker.services.tracker import FlightTracker

WEATHER_PAYLOAD = {
    "latitude": 40.5,
    "longitude": -73.25,
    "utc_offset_seconds": 0,
    "timezone": "GMT",
    "timezone_abbreviation": "GMT",
    "current": {
        "time": 1704067200,
        "temperature_2m": 50.0,
        "weather_code": 0,
        "wind_speed_10m": 5.0,
        "wind_direction_10m": 180,
        "relative_humidity_2m": 60,
        "precipitation": 0.0,
    },
}


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class FakeBus:
    def __init__(self):
        self.messages: list[tuple[str, str]] = []

    async def publish(self, topic: str, payload: str) -> None:
        self.messages.append((topic, payload))

    def on(self, topic: str) -> list:
        return [json.loads(payload) for t, payload in self.messages if t == topic]


class Upstream:
    """Routes requests for all three HTTP sources and records them."""

    def __init__(self):
        self.aircraft = {"total": 0, "ac": []}
        self.aircraft_status = 200
        self.weather_status = 200
        self.flights = {"UAL123": {"flights": [
            {"ident": "UAL123", "operator_icao": "UAL", "progress_percent": 0,
             "origin": {"code_iata": "ORD"}, "destination": {"code_iata": "LAX"}},
            {"ident": "UAL123", "operator_icao": "UAL", "progress_percent": 50,
             "origin": {"code_iata": "EWR"}, "destination": {"code_iata": "SFO"}},
        ]}}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        host = request.url.host
        if host == "adsb.test":
            return httpx.Response(self.aircraft_status, json=self.aircraft)
        if host == "aero.test":
            ident = request.url.path.rsplit("/", 1)[-1]
            return httpx.Response(200, json=self.flights.get(ident, {"flights": []}))
        return httpx.Response(self.weather_status, json=WEATHER_PAYLOAD)

    def count(self, host: str) -> int:
        return sum(1 for r in self.requests if r.url.host == host)


def _tracker(upstream: Upstream, bus: FakeBus, clock: FakeClock) -> FlightTracker:
    transport = httpx.MockTransport(upstream)
    return FlightTracker(
        adsb_ingestor=ADSBIngestor(base_url="https://adsb.test", transport=transport),
        resolver=FlightAwareResolver(
            api_key="key",
            base_url="https://aero.test",
            cache=FlightDetailsCache(86400, clock=clock),
            transport=transport,
        ),
        weather_ingestor=WeatherIngestor(base_url="https://weather.test", transport=transport),
        publisher=ChangeDetectionPublisher(bus),
        latitude=40.5,
        longitude=-73.25,
        radius_nm=3,
        loop_interval=30,
        weather_interval=1800,
        clock=clock,
    )


@pytest.mark.anyio
async def test_empty_area_published_once():
    upstream, bus, clock = Upstream(), FakeBus(), FakeClock()
    tracker = _tracker(upstream, bus, clock)

    await tracker.run_cycle()
    clock.now += 30
    await tracker.run_cycle()

    assert bus.on("flight_tracker/aircraft") == [[]]
    assert upstream.count("aero.test") == 0


@pytest.mark.anyio
async def test_cycle_merges_active_route():
    upstream, bus, clock = Upstream(), FakeBus(), FakeClock()
    upstream.aircraft = {
        "total": 3,
        "ac": [
            {"flight": "UAL123 ", "t": "B739", "alt_baro": 9000, "gs": 300},
            {"flight": "N172SP", "t": "C172", "alt_baro": 2500, "gs": 100},
            {"flight": "   ", "t": "GLF5", "alt_baro": 41000, "gs": 450},
        ],
    }
    tracker = _tracker(upstream, bus, clock)

    await tracker.run_cycle()

    published = bus.on("flight_tracker/aircraft")[0]
    assert published[0]["flightDetails"] == {"origin": "EWR", "destination": "SFO"}
    assert published[1]["flightDetails"] == {"origin": None, "destination": None}
    assert published[2]["flight"] == ""
    assert "operator" not in published[0]["flightDetails"]
    assert upstream.count("aero.test") == 1


@pytest.mark.anyio
async def test_weather_fetched_on_its_own_cadence():
    upstream, bus, clock = Upstream(), FakeBus(), FakeClock()
    tracker = _tracker(upstream, bus, clock)

    await tracker.run_cycle()
    clock.now += 1799
    await tracker.run_cycle()
    assert upstream.count("weather.test") == 1

    clock.now += 1
    await tracker.run_cycle()
    assert upstream.count("weather.test") == 2
    assert len(bus.on("flight_tracker/weather")) == 1
    assert bus.on("flight_tracker/weather")[0]["current"]["weatherCondition"] == "Clear sky"
    assert bus.on("flight_tracker/weather")[0]["current"]["windDirectionHeading"] == "S"


@pytest.mark.anyio
async def test_weather_failure_retried_next_cycle():
    upstream, bus, clock = Upstream(), FakeBus(), FakeClock()
    upstream.weather_status = 500
    tracker = _tracker(upstream, bus, clock)

    await tracker.run_cycle()
    assert tracker.last_weather_update is None

    upstream.weather_status = 200
    clock.now += 30
    await tracker.run_cycle()

    assert upstream.count("weather.test") == 2
    assert tracker.last_weather_update == 30
    assert len(bus.on("flight_tracker/weather")) == 1


@pytest.mark.anyio
async def test_aircraft_failure_does_not_block_weather():
    upstream, bus, clock = Upstream(), FakeBus(), FakeClock()
    upstream.aircraft_status = 502
    tracker = _tracker(upstream, bus, clock)

    await tracker.run_cycle()

    assert bus.on("flight_tracker/aircraft") == []
    assert len(bus.on("flight_tracker/weather")) == 1


@pytest.mark.anyio
async def test_publish_failure_retried_next_cycle():
    upstream, clock = Upstream(), FakeClock()

    class FlakyBus(FakeBus):
        fail = True

        async def publish(self, topic, payload):
            if self.fail:
                raise PublishError("down")
            await super().publish(topic, payload)

    bus = FlakyBus()
    tracker = _tracker(upstream, bus, clock)

    await tracker.run_cycle()
    bus.fail = False
    clock.now += 30
    await tracker.run_cycle()

    assert bus.on("flight_tracker/aircraft") == [[]]
    # Weather was fetched successfully in the first cycle, so it is not due yet
    assert bus.on("flight_tracker/weather") == []


@pytest.mark.anyio
async def test_run_survives_unexpected_errors_and_stops():
    stop_event = asyncio.Event()
    calls = []

    class ExplodingIngestor:
        async def get_air_traffic(self, lat, lon, radius_nm=None):
            calls.append("adsb")
            if len(calls) >= 2:
                stop_event.set()
            raise ValueError("unexpected")

    class IdleWeather:
        async def get_weather(self, lat, lon):
            raise FetchError("offline")

    tracker = FlightTracker(
        adsb_ingestor=ExplodingIngestor(),
        resolver=None,
        weather_ingestor=IdleWeather(),
        publisher=ChangeDetectionPublisher(FakeBus()),
        latitude=0.0,
        longitude=0.0,
        radius_nm=3,
        loop_interval=0.01,
    )

    with anyio.fail_after(5):
        await tracker.run(stop_event)

    assert calls == ["adsb", "adsb"]

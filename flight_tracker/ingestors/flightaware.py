"""Route resolution through FlightAware AeroAPI with a 24 hour cache."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import logging
import re
from typing import Any, Callable, Iterable, Optional

import httpx
from pydantic import ValidationError

from flight_tracker.cache import FlightDetailsCache
from flight_tracker.config import settings
from flight_tracker.exceptions import FetchError
from flight_tracker.models.flight import FlightDetails

logger = logging.getLogger("flight_tracker.ingestors.flightaware")

# Airline callsigns only; general-aviation tail numbers never reach AeroAPI.
AIRLINE_IDENT_RE = re.compile(r"[A-Z]{2,3}[0-9]{1,4}")

SEARCH_WINDOW = timedelta(hours=48)


def is_airline_ident(ident: str) -> bool:
    return AIRLINE_IDENT_RE.fullmatch(ident) is not None


def _format_instant(value: datetime) -> str:
    return value.astimezone(timezone.utc).replace(microsecond=0).strftime("%Y-%m-%dT%H:%M:%SZ")


def _airport_code(airport: Any) -> Optional[str]:
    if not isinstance(airport, dict):
        return None
    return airport.get("code_iata") or airport.get("code_icao")


def _is_active(flight: dict[str, Any]) -> bool:
    progress = flight.get("progress_percent")
    if not isinstance(progress, (int, float)) or isinstance(progress, bool):
        return False
    return 0 < progress < 100


def _to_details(flight: dict[str, Any]) -> FlightDetails:
    return FlightDetails(
        ident=flight.get("ident") or "",
        operator=flight.get("operator_icao"),
        origin=_airport_code(flight.get("origin")),
        destination=_airport_code(flight.get("destination")),
        scheduled_out=flight.get("scheduled_out"),
        actual_out=flight.get("actual_out"),
        status=flight.get("status"),
    )


class FlightAwareResolver:
    """Resolve flight identifiers to their currently active route."""

    def __init__(
        self,
        *,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        cache: FlightDetailsCache | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        self.api_key = api_key or settings.flightaware_api_key
        self.base_url = (base_url or settings.flightaware_base_url).rstrip("/")
        self.timeout = timeout or settings.flightaware_timeout
        self.cache = cache if cache is not None else FlightDetailsCache()
        self.transport = transport
        self._now = now or (lambda: datetime.now(timezone.utc))

    async def resolve_flights(
        self, flight_numbers: Iterable[str]
    ) -> dict[str, Optional[FlightDetails]]:
        """Map every distinct identifier to its details or ``None``.

        Lookups run one at a time. Every outcome, including failures, is
        cached so an identifier is not sent upstream again until its entry
        expires.
        """

        result: dict[str, Optional[FlightDetails]] = {}
        unique = list(dict.fromkeys(flight_numbers))
        if not unique:
            return result

        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self.transport,
            headers={"x-apikey": self.api_key, "Accept": "application/json"},
        ) as client:
            for ident in unique:
                result[ident] = None

                if not is_airline_ident(ident):
                    continue

                found, cached = self.cache.lookup(ident)
                if found:
                    result[ident] = cached
                    continue

                try:
                    details = await self.fetch_flight_details(client, ident)
                except FetchError as exc:
                    logger.warning("FlightAware lookup failed for %s: %s", ident, exc)
                    details = None

                self.cache.set(ident, details)
                result[ident] = details

        logger.debug("Resolved %s flights (cache %s)", len(result), self.cache.stats)
        return result

    async def fetch_flight_details(
        self, client: httpx.AsyncClient, ident: str
    ) -> Optional[FlightDetails]:
        now = self._now()
        params = {
            "max_pages": "1",
            "start": _format_instant(now - SEARCH_WINDOW),
            "end": _format_instant(now + SEARCH_WINDOW),
        }
        logger.debug("FlightAware fetching details for %s with %s", ident, params)

        try:
            response = await client.get(f"/aeroapi/flights/{ident}", params=params)
        except httpx.TimeoutException as exc:
            raise FetchError("FlightAware request timed out") from exc
        except httpx.RequestError as exc:
            raise FetchError(f"FlightAware request failed: {exc}") from exc

        if not response.is_success:
            logger.warning("FlightAware HTTP %s for %s", response.status_code, ident)
            return None

        try:
            payload = response.json()
        except ValueError as exc:
            raise FetchError("FlightAware returned invalid JSON") from exc

        flights = payload.get("flights") if isinstance(payload, dict) else None
        if not flights:
            return None
        if not isinstance(flights, list):
            raise FetchError("FlightAware returned a malformed flight list")

        active = [f for f in flights if isinstance(f, dict) and _is_active(f)]
        if not active:
            return None

        # First active flight in response order wins.
        try:
            return _to_details(active[0])
        except ValidationError as exc:
            raise FetchError(f"FlightAware returned a malformed flight: {exc}") from exc


__all__ = ["AIRLINE_IDENT_RE", "FlightAwareResolver", "is_airline_ident"]

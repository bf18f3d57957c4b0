"""ADS-B ingestor for nearby aircraft using the airplanes.live REST API."""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from flight_tracker.config import settings
from flight_tracker.exceptions import FetchError
from flight_tracker.models.air_traffic import Aircraft

logger = logging.getLogger("flight_tracker.ingestors.adsb")


class ADSBIngestor:
    """Fetch aircraft within a radius of a point."""

    def __init__(
        self,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
        default_radius_nm: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.adsb_base_url).rstrip("/")
        self.timeout = timeout or settings.adsb_timeout
        self.default_radius_nm = default_radius_nm or settings.area_nautical_miles
        self.transport = transport

    async def get_air_traffic(
        self, lat: float, lon: float, radius_nm: float | None = None
    ) -> list[Aircraft]:
        radius = radius_nm or self.default_radius_nm
        url = f"{self.base_url}/v2/point/{lat}/{lon}/{radius}"

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.get(url)
        except httpx.TimeoutException as exc:
            logger.warning("ADSB request timed out: %s", exc)
            raise FetchError("Aircraft source timeout") from exc
        except httpx.RequestError as exc:
            logger.warning("ADSB request failed: %s", exc)
            raise FetchError("Aircraft request failed") from exc

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "ADSB provider returned HTTP %s: %s", exc.response.status_code, exc.response.text
            )
            raise FetchError(
                f"Failed to fetch airplanes: HTTP {exc.response.status_code}"
            ) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            logger.warning("Failed to parse ADSB JSON response: %s", exc)
            raise FetchError("Aircraft source returned invalid JSON") from exc

        if not isinstance(payload, dict):
            logger.warning("ADSB response is not a JSON object: %r", payload)
            raise FetchError("Aircraft source returned an unexpected body")
        if payload.get("total") == 0:
            return []

        raw_aircraft = payload.get("ac") or []
        if not isinstance(raw_aircraft, list):
            raise FetchError("Aircraft source returned a malformed aircraft list")

        aircraft: list[Aircraft] = []
        for entry in raw_aircraft:
            normalized = self._normalize_aircraft(entry)
            if normalized:
                aircraft.append(normalized)

        logger.debug("Ingested %s aircraft", len(aircraft))
        return aircraft

    def _normalize_aircraft(self, entry: Any) -> Optional[Aircraft]:
        if not isinstance(entry, dict):
            return None

        # airplanes.live pads callsigns with whitespace
        flight = entry.get("flight")
        try:
            return Aircraft(
                flight=flight.strip() if isinstance(flight, str) else "",
                type=entry.get("t"),
                altitude=entry.get("alt_baro"),
                speed_knots=entry.get("gs"),
            )
        except ValidationError as exc:
            logger.warning("Skipping malformed ADSB record %r: %s", entry, exc)
            return None


__all__ = ["ADSBIngestor", "Aircraft"]

"""Models for aircraft observed by the position source."""

from __future__ import annotations

import math
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

KNOTS_TO_MPH = 1.15078


def knots_to_mph(speed_knots: float | None) -> int | None:
    """Convert knots to whole miles per hour, rounding halves up."""

    if speed_knots is None:
        return None
    return int(math.floor(speed_knots * KNOTS_TO_MPH + 0.5))


class Aircraft(BaseModel):
    """One aircraft inside the monitored radius at fetch time."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True, extra="ignore"
    )

    flight: str = Field(default="", description="Trimmed callsign or flight number")
    type: Optional[str] = Field(default=None, description="Aircraft type designator")
    altitude: Optional[Union[int, float, str]] = Field(
        default=None, description="Barometric altitude in feet, as reported"
    )
    speed_knots: Optional[float] = Field(default=None, description="Ground speed in knots")

    @computed_field(alias="speedMph")  # type: ignore[prop-decorator]
    @property
    def speed_mph(self) -> Optional[int]:
        return knots_to_mph(self.speed_knots)


class RouteSummary(BaseModel):
    """Origin and destination merged into the published aircraft view."""

    model_config = ConfigDict(frozen=True)

    origin: Optional[str] = None
    destination: Optional[str] = None


class AircraftWithFlight(Aircraft):
    """Aircraft enriched with its resolved route."""

    flight_details: RouteSummary = Field(default_factory=RouteSummary)

    @classmethod
    def from_aircraft(
        cls, aircraft: Aircraft, route: RouteSummary | None = None
    ) -> "AircraftWithFlight":
        return cls(
            **aircraft.model_dump(exclude={"speed_mph"}),
            flight_details=route or RouteSummary(),
        )


__all__ = ["Aircraft", "AircraftWithFlight", "KNOTS_TO_MPH", "RouteSummary", "knots_to_mph"]

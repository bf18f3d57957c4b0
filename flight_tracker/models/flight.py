"""Route and status metadata resolved from FlightAware AeroAPI."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class FlightDetails(BaseModel):
    """Resolved details for one flight identifier.

    ``operator`` is required so a resolved flight always states whether the
    operator is known; an identifier that has not been resolved has no
    ``FlightDetails`` at all.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    ident: str = Field(..., description="Identifier as returned by AeroAPI")
    origin: Optional[str] = Field(default=None, description="Origin IATA, else ICAO code")
    destination: Optional[str] = Field(
        default=None, description="Destination IATA, else ICAO code"
    )
    scheduled_out: Optional[str] = None
    actual_out: Optional[str] = None
    status: Optional[str] = None
    operator: Optional[str] = Field(..., description="Operator ICAO code, or None if unknown")


__all__ = ["FlightDetails"]

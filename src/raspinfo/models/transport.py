"""Public transit departure records."""

from __future__ import annotations

from pydantic import Field

from raspinfo.models._base import EPOCH, AwareDatetime, RecordModel


class Departure(RecordModel):
    """A single upcoming departure from a stop."""

    route_number: str = ""
    """Route short name (e.g. ``"550"``)."""
    destination: str = ""
    """Headsign shown on the vehicle."""
    time: AwareDatetime = EPOCH
    """Departure time (realtime estimate when available)."""
    realtime: bool = False
    """Whether ``time`` comes from realtime tracking."""


class StopData(RecordModel):
    """Departures for one configured stop."""

    stop_name: str = ""
    departures: list[Departure] = Field(default_factory=list)


class TransportData(RecordModel):
    """Latest departures for all configured stops."""

    stops: list[StopData] = Field(default_factory=list)
    timestamp: AwareDatetime = EPOCH

"""Domain identifiers for the snapshot store."""

from __future__ import annotations

from enum import StrEnum

from raspinfo.models._base import RecordModel
from raspinfo.models.electricity import ElectricityData
from raspinfo.models.transport import TransportData
from raspinfo.models.weather import WeatherData


class Domain(StrEnum):
    TRANSPORT = "transport"
    WEATHER = "weather"
    ELECTRICITY = "electricity"


DOMAIN_RECORD_TYPES: dict[Domain, type[RecordModel]] = {
    Domain.TRANSPORT: TransportData,
    Domain.WEATHER: WeatherData,
    Domain.ELECTRICITY: ElectricityData,
}

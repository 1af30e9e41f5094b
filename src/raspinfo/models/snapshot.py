"""Aggregate snapshot returned to readers."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from raspinfo.models._base import RecordModel
from raspinfo.models.debug import CallRecord, DeviceMetrics, LogLine
from raspinfo.models.electricity import ElectricityData
from raspinfo.models.transport import TransportData
from raspinfo.models.weather import WeatherData


class AggregateSnapshot(RecordModel):
    """Point-in-time copy of every domain record plus the operational buffers."""

    transport: TransportData = Field(default_factory=TransportData)
    weather: WeatherData = Field(default_factory=WeatherData)
    electricity: ElectricityData = Field(default_factory=ElectricityData)
    call_history: list[CallRecord] = Field(default_factory=list)
    app_log: list[LogLine] = Field(default_factory=list)
    device: DeviceMetrics = Field(default_factory=DeviceMetrics)

    def status_payload(self) -> dict[str, Any]:
        """JSON-ready view of the domain records only (no debug buffers)."""
        return self.model_dump(mode="json", include={"weather", "transport", "electricity"})

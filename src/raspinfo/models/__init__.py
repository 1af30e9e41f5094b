"""Data models for raspinfo records."""

from raspinfo.models._base import EPOCH, AwareDatetime, RecordModel
from raspinfo.models.debug import CallOutcome, CallRecord, DebugView, DeviceMetrics, LogLine
from raspinfo.models.electricity import ElectricityData, PriceSlot
from raspinfo.models.snapshot import AggregateSnapshot
from raspinfo.models.transport import Departure, StopData, TransportData
from raspinfo.models.weather import WeatherData, WeatherPoint

__all__ = [
    "EPOCH",
    "AggregateSnapshot",
    "AwareDatetime",
    "CallOutcome",
    "CallRecord",
    "DebugView",
    "Departure",
    "DeviceMetrics",
    "ElectricityData",
    "LogLine",
    "PriceSlot",
    "RecordModel",
    "StopData",
    "TransportData",
    "WeatherData",
    "WeatherPoint",
]

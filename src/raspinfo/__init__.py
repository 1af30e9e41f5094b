"""raspinfo - Polls transit, weather and spot price sources into a live snapshot."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("raspinfo")
except PackageNotFoundError:
    __version__ = "0+local"
from raspinfo.config import BusStop, RaspInfoConfig
from raspinfo.exceptions import (
    RaspInfoConfigError,
    RaspInfoError,
    StopLookupError,
    UpstreamError,
)
from raspinfo.models import (
    AggregateSnapshot,
    CallOutcome,
    CallRecord,
    DebugView,
    Departure,
    DeviceMetrics,
    ElectricityData,
    LogLine,
    PriceSlot,
    StopData,
    TransportData,
    WeatherData,
    WeatherPoint,
)
from raspinfo.polling import InstrumentedFetcher, PollJob, Scheduler
from raspinfo.state import Domain, SnapshotStore

__all__ = [
    "__version__",
    "AggregateSnapshot",
    "BusStop",
    "CallOutcome",
    "CallRecord",
    "DebugView",
    "Departure",
    "DeviceMetrics",
    "Domain",
    "ElectricityData",
    "InstrumentedFetcher",
    "LogLine",
    "PollJob",
    "PriceSlot",
    "RaspInfoConfig",
    "RaspInfoConfigError",
    "RaspInfoError",
    "Scheduler",
    "SnapshotStore",
    "StopData",
    "StopLookupError",
    "TransportData",
    "UpstreamError",
    "WeatherData",
    "WeatherPoint",
]

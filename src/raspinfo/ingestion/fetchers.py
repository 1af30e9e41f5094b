"""Domain fetch operations.

Each fetcher is a zero-argument coroutine callable: it calls its upstream
endpoint, builds the domain record and replaces that domain in the store.
On failure it raises and leaves the store untouched, so the last known-good
record stays visible.
"""

from __future__ import annotations

import logging

from raspinfo._api import fmi as _fmi_api
from raspinfo._api import hsl as _hsl_api
from raspinfo._api import spot as _spot_api
from raspinfo._api.hsl import StopQuery
from raspinfo._transport import Transport
from raspinfo.config import RaspInfoConfig
from raspinfo.exceptions import StopLookupError, UpstreamError
from raspinfo.models.electricity import ElectricityData
from raspinfo.models.transport import TransportData
from raspinfo.models.weather import WeatherData
from raspinfo.state.store import SnapshotStore

_logger = logging.getLogger(__name__)


class _StoreFetcher:
    name: str = ""

    def __init__(self, config: RaspInfoConfig, transport: Transport, store: SnapshotStore) -> None:
        self._config = config
        self._transport = transport
        self._store = store


class TransportFetcher(_StoreFetcher):
    """Departures for every configured stop."""

    name = "HSL"

    async def lookup_stop(self, code: str) -> str:
        return await _hsl_api.lookup_stop(self._config, self._transport, code)

    async def resolve_queries(self) -> list[StopQuery]:
        """Build one query per configured stop, resolving stop codes.

        A stop whose code cannot be resolved is logged and skipped for this
        cycle.
        """
        queries: list[StopQuery] = []
        for index, stop in enumerate(self._config.bus_stops):
            stop_id = stop.id
            if stop.needs_lookup:
                _logger.info("Resolving stop code via geocoding API: %s", stop.id)
                try:
                    stop_id = await self.lookup_stop(stop.id)
                except StopLookupError as exc:
                    _logger.error("Failed to resolve stop %s: %s", stop.id, exc)
                    continue
                _logger.info("Resolved %s to GTFS id %s", stop.id, stop_id)
            queries.append(StopQuery(key=f"s{index}", stop_id=stop_id, name=stop.name))
        return queries

    async def __call__(self) -> TransportData:
        _logger.info("Starting HSL fetch...")
        queries = await self.resolve_queries()
        if self._config.bus_stops and not queries:
            raise UpstreamError("none of the configured stops could be resolved", source=self.name)
        data = await _hsl_api.fetch_departures(self._config, self._transport, queries)
        self._store.update_transport(data)
        _logger.info("HSL: Fetch completed successfully")
        return data


class WeatherFetcher(_StoreFetcher):
    """Hourly forecast for the configured location."""

    name = "FMI"

    async def __call__(self) -> WeatherData:
        data = await _fmi_api.fetch_weather(self._config, self._transport)
        self._store.update_weather(data)
        return data


class ElectricityFetcher(_StoreFetcher):
    """Spot prices for the next 24 hours."""

    name = "Electricity"

    async def __call__(self) -> ElectricityData:
        data = await _spot_api.fetch_electricity(self._config, self._transport)
        self._store.update_electricity(data)
        return data

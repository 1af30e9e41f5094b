"""Process wiring: one store, one HTTP session, the scheduler and the read API."""

from __future__ import annotations

import logging

import aiohttp
from aiohttp import web

from raspinfo._api import hsl as _hsl_api
from raspinfo._transport import HttpTransport, Transport
from raspinfo.config import RaspInfoConfig
from raspinfo.ingestion.fetchers import ElectricityFetcher, TransportFetcher, WeatherFetcher
from raspinfo.polling.instrumented import InstrumentedFetcher
from raspinfo.polling.scheduler import PollJob, Scheduler
from raspinfo.state.store import SnapshotStore
from raspinfo.web import create_app

_logger = logging.getLogger(__name__)


def build_jobs(config: RaspInfoConfig, transport: Transport, store: SnapshotStore) -> list[PollJob]:
    """One instrumented poll job per domain, each on its configured interval."""
    transport_fetcher = TransportFetcher(config, transport, store)
    weather_fetcher = WeatherFetcher(config, transport, store)
    electricity_fetcher = ElectricityFetcher(config, transport, store)
    return [
        PollJob(
            InstrumentedFetcher(transport_fetcher.name, transport_fetcher, store),
            config.transport_interval,
        ),
        PollJob(
            InstrumentedFetcher(weather_fetcher.name, weather_fetcher, store),
            config.weather_interval,
        ),
        PollJob(
            InstrumentedFetcher(electricity_fetcher.name, electricity_fetcher, store),
            config.electricity_interval,
        ),
    ]


async def serve(config: RaspInfoConfig, store: SnapshotStore) -> None:
    """Run the scheduler and the read API until cancelled."""
    async with aiohttp.ClientSession() as session:
        transport = HttpTransport(session, timeout=config.http_timeout)
        scheduler = Scheduler(
            store,
            build_jobs(config, transport, store),
            metrics_interval=config.metrics_interval,
        )

        runner = web.AppRunner(create_app(store, config))
        await runner.setup()
        site = web.TCPSite(runner, config.host, config.port)
        await site.start()
        _logger.info("Server starting on %s:%d", config.host, config.port)

        scheduler.start()
        try:
            await scheduler.wait()
        finally:
            await scheduler.aclose()
            await runner.cleanup()


async def lookup_stop_code(config: RaspInfoConfig, code: str) -> str:
    """Resolve a single stop code with a short-lived HTTP session."""
    async with aiohttp.ClientSession() as session:
        transport = HttpTransport(session, timeout=config.http_timeout)
        return await _hsl_api.lookup_stop(config, transport, code)

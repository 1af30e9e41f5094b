"""Fixed-interval polling of the instrumented fetchers.

Every job gets its own loop task, so a slow or failing source never delays
another one. Within a job, ticks are sequential: the next interval starts
after the previous ``run()`` has returned.

At start each job also gets one immediate fetch, running next to its loop.
That fetch and the first tick of the same job may overlap and both write the
store; each write replaces the whole record atomically, so the outcome is
last-write-wins and never a mixed record.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from raspinfo.polling.instrumented import InstrumentedFetcher
from raspinfo.polling.metrics import run_metrics_sampler
from raspinfo.state.store import SnapshotStore

_logger = logging.getLogger(__name__)

DEFAULT_METRICS_INTERVAL = 30.0


@dataclass(frozen=True, slots=True)
class PollJob:
    """An instrumented fetcher and the seconds between its ticks."""

    fetcher: InstrumentedFetcher[Any]
    interval: float

    def __post_init__(self) -> None:
        if self.interval <= 0:
            raise ValueError(f"interval for {self.fetcher.name} must be positive")


class Scheduler:
    """Runs poll jobs and the device metrics sampler until stopped.

    Usage::

        scheduler = Scheduler(store, jobs)
        scheduler.start()
        ...
        await scheduler.stop()
    """

    def __init__(
        self,
        store: SnapshotStore,
        jobs: Iterable[PollJob],
        *,
        metrics_interval: float | None = DEFAULT_METRICS_INTERVAL,
        initial_fetch: bool = True,
        started_at: float | None = None,
    ) -> None:
        self._store = store
        self._jobs = tuple(jobs)
        self._metrics_interval = metrics_interval
        self._initial_fetch = initial_fetch
        self._started_at = time.monotonic() if started_at is None else started_at
        self._stop = asyncio.Event()
        self._loops: list[asyncio.Task[None]] = []
        self._initial: list[asyncio.Task[None]] = []
        self._started = False

    @property
    def jobs(self) -> tuple[PollJob, ...]:
        return self._jobs

    @property
    def tasks(self) -> list[asyncio.Task[None]]:
        """Handles of every task started by :meth:`start`."""
        return [*self._loops, *self._initial]

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._loops)

    @property
    def stop_event(self) -> asyncio.Event:
        """Cancellation token shared by every loop."""
        return self._stop

    def start(self) -> None:
        """Create the loop tasks. Must be called from a running event loop."""
        if self._started:
            raise RuntimeError("scheduler already started")
        self._started = True
        self._stop.clear()
        for job in self._jobs:
            self._loops.append(asyncio.create_task(self._run_job(job), name=f"poll-{job.fetcher.name}"))
        if self._initial_fetch:
            for job in self._jobs:
                self._initial.append(asyncio.create_task(self._tick(job), name=f"initial-{job.fetcher.name}"))
        if self._metrics_interval is not None:
            self._loops.append(
                asyncio.create_task(
                    run_metrics_sampler(
                        self._store,
                        self._metrics_interval,
                        self._stop,
                        started_at=self._started_at,
                    ),
                    name="device-metrics",
                )
            )
        _logger.info("Scheduler started with %d jobs", len(self._jobs))

    async def _tick(self, job: PollJob) -> None:
        try:
            await job.fetcher.run()
        except Exception as exc:
            _logger.error("Error fetching %s data: %s", job.fetcher.name, exc)

    async def _wait_interval(self, interval: float) -> bool:
        """Sleep for *interval*; return ``True`` when stopped meanwhile."""
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(self._stop.wait(), timeout=interval)
        return self._stop.is_set()

    async def _run_job(self, job: PollJob) -> None:
        while not await self._wait_interval(job.interval):
            await self._tick(job)
        _logger.debug("Poll loop for %s stopped", job.fetcher.name)

    async def wait(self) -> None:
        """Block until every loop has exited."""
        if self._loops:
            await asyncio.gather(*self._loops, return_exceptions=True)

    async def stop(self) -> None:
        """Signal every loop to exit and wait for them.

        In-flight ticks finish first; pending initial fetches are cancelled.
        """
        await self._shutdown(self._initial)

    async def aclose(self) -> None:
        """Like :meth:`stop`, but also cancel ticks that are still in flight.

        A cancelled tick is recorded in the call history as a failed call.
        """
        await self._shutdown([*self._loops, *self._initial])

    async def _shutdown(self, cancel: list[asyncio.Task[None]]) -> None:
        self._stop.set()
        for task in cancel:
            if not task.done():
                task.cancel()
        await asyncio.gather(*self._loops, *self._initial, return_exceptions=True)
        self._loops.clear()
        self._initial.clear()
        self._started = False
        _logger.info("Scheduler stopped")

    async def __aenter__(self) -> Scheduler:
        self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.stop()

"""Process/runtime metrics sampling."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import threading
import time

import psutil

from raspinfo.models.debug import DeviceMetrics
from raspinfo.state.store import SnapshotStore

_logger = logging.getLogger(__name__)


def _task_count() -> int:
    try:
        tasks = len(asyncio.all_tasks())
    except RuntimeError:
        # No running loop in this thread.
        tasks = 0
    return tasks + threading.active_count()


def sample_device_metrics(started_at: float, *, process: psutil.Process | None = None) -> DeviceMetrics:
    """Take one sample. *started_at* is a ``time.monotonic()`` value."""
    memory = (process or psutil.Process()).memory_info()
    return DeviceMetrics(
        uptime=max(0.0, time.monotonic() - started_at),
        task_count=_task_count(),
        mem_allocated=memory.rss,
        mem_reserved=memory.vms,
        cpu_count=os.cpu_count() or 0,
    )


async def run_metrics_sampler(
    store: SnapshotStore,
    interval: float,
    stop: asyncio.Event,
    *,
    started_at: float | None = None,
) -> None:
    """Sample immediately, then every *interval* seconds until *stop* is set."""
    started_at = time.monotonic() if started_at is None else started_at
    process = psutil.Process()
    while True:
        store.update_device_metrics(sample_device_metrics(started_at, process=process))
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(stop.wait(), timeout=interval)
        if stop.is_set():
            _logger.debug("Metrics sampler stopped")
            return

"""Polling orchestration: instrumented fetchers, scheduler and metrics sampler."""

from raspinfo.polling.instrumented import InstrumentedFetcher
from raspinfo.polling.metrics import run_metrics_sampler, sample_device_metrics
from raspinfo.polling.scheduler import PollJob, Scheduler

__all__ = ["InstrumentedFetcher", "PollJob", "Scheduler", "run_metrics_sampler", "sample_device_metrics"]

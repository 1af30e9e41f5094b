"""Operational records: call history, captured log lines and device metrics."""

from __future__ import annotations

from enum import StrEnum

from pydantic import Field

from raspinfo.models._base import AwareDatetime, RecordModel


class CallOutcome(StrEnum):
    SUCCESS = "success"
    ERROR = "error"


class CallRecord(RecordModel):
    """Outcome of one instrumented fetch.

    Parameters
    ----------
    timestamp : datetime
        When the fetch started.
    duration : float
        Elapsed time in seconds.
    source : str
        Name of the fetcher (``"HSL"``, ``"FMI"``, ...).
    outcome : CallOutcome
        ``success`` or ``error``.
    error : str or None
        Failure message, only set when ``outcome`` is ``error``.
    """

    timestamp: AwareDatetime
    duration: float
    source: str
    outcome: CallOutcome
    error: str | None = None


class LogLine(RecordModel):
    """A captured application log message."""

    timestamp: AwareDatetime
    message: str


class DeviceMetrics(RecordModel):
    """Process/runtime sample.

    Memory values are in bytes; ``uptime`` is in seconds.
    """

    uptime: float = 0.0
    task_count: int = 0
    mem_allocated: int = 0
    mem_reserved: int = 0
    cpu_count: int = 0


class DebugView(RecordModel):
    """Copies of the operational buffers, independent of the domain snapshot."""

    call_history: list[CallRecord] = Field(default_factory=list)
    app_log: list[LogLine] = Field(default_factory=list)
    device: DeviceMetrics = Field(default_factory=DeviceMetrics)

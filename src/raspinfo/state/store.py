"""Concurrency-safe in-memory snapshot store.

This is the only component allowed to mutate the aggregate state. Fetchers,
the log capture handler and the metrics sampler write through it; HTTP
handlers read copies from it.
"""

from __future__ import annotations

import copy
import threading
from collections import deque
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from raspinfo.models.debug import CallRecord, DebugView, DeviceMetrics, LogLine
from raspinfo.models.electricity import ElectricityData
from raspinfo.models.snapshot import AggregateSnapshot
from raspinfo.models.transport import TransportData
from raspinfo.models.weather import WeatherData
from raspinfo.state.sections import DOMAIN_RECORD_TYPES, Domain

CALL_HISTORY_CAPACITY = 50
APP_LOG_CAPACITY = 100


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SnapshotStore:
    """Latest record per domain plus bounded operational logs.

    A single lock guards all state. Critical sections only swap references
    or append to a bounded deque; deep copies for readers are taken after the
    lock is released. Stored records are never mutated in place (writers hand
    in a record, the store keeps its own deep copy), so copying outside the
    lock still yields a consistent point-in-time view.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], datetime] = _utcnow,
        call_history_capacity: int = CALL_HISTORY_CAPACITY,
        app_log_capacity: int = APP_LOG_CAPACITY,
    ) -> None:
        if call_history_capacity <= 0 or app_log_capacity <= 0:
            raise ValueError("log capacities must be positive")
        self._clock = clock
        self._lock = threading.Lock()
        self._domains: dict[Domain, Any] = {domain: cls() for domain, cls in DOMAIN_RECORD_TYPES.items()}
        self._call_history: deque[CallRecord] = deque(maxlen=call_history_capacity)
        self._app_log: deque[LogLine] = deque(maxlen=app_log_capacity)
        self._device = DeviceMetrics()

    @property
    def call_history_capacity(self) -> int:
        return self._call_history.maxlen or 0

    @property
    def app_log_capacity(self) -> int:
        return self._app_log.maxlen or 0

    # ------------------------------------------------------------------
    # Readers
    # ------------------------------------------------------------------

    def get(self) -> AggregateSnapshot:
        """Return a deep copy of the whole state."""
        with self._lock:
            domains = dict(self._domains)
            calls = list(self._call_history)
            logs = list(self._app_log)
            device = self._device

        return AggregateSnapshot(
            transport=copy.deepcopy(domains[Domain.TRANSPORT]),
            weather=copy.deepcopy(domains[Domain.WEATHER]),
            electricity=copy.deepcopy(domains[Domain.ELECTRICITY]),
            call_history=calls,
            app_log=logs,
            device=device,
        )

    def get_debug_view(self) -> DebugView:
        """Return copies of the call history, the app log and the device sample."""
        with self._lock:
            calls = list(self._call_history)
            logs = list(self._app_log)
            device = self._device
        return DebugView(call_history=calls, app_log=logs, device=device)

    # ------------------------------------------------------------------
    # Writers
    # ------------------------------------------------------------------

    def update_domain(self, domain: Domain, record: Any) -> None:
        """Replace one domain record as a whole."""
        domain = Domain(domain)
        expected = DOMAIN_RECORD_TYPES[domain]
        if not isinstance(record, expected):
            raise TypeError(f"{domain} expects {expected.__name__}, got {type(record).__name__}")
        owned = copy.deepcopy(record)
        with self._lock:
            self._domains[domain] = owned

    def update_transport(self, record: TransportData) -> None:
        self.update_domain(Domain.TRANSPORT, record)

    def update_weather(self, record: WeatherData) -> None:
        self.update_domain(Domain.WEATHER, record)

    def update_electricity(self, record: ElectricityData) -> None:
        self.update_domain(Domain.ELECTRICITY, record)

    def append_call_record(self, record: CallRecord) -> None:
        """Append to the call history, evicting the oldest entry when full."""
        with self._lock:
            self._call_history.append(record)

    def append_log_line(self, message: str) -> LogLine:
        """Append a log message stamped with the store's clock."""
        line = LogLine(timestamp=self._clock(), message=message)
        with self._lock:
            self._app_log.append(line)
        return line

    def update_device_metrics(self, sample: DeviceMetrics) -> None:
        with self._lock:
            self._device = sample

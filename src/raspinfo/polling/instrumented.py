"""Timing and outcome capture around a domain fetch."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Generic, TypeVar

from raspinfo.models.debug import CallOutcome, CallRecord
from raspinfo.state.store import SnapshotStore

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(UTC)


def describe_error(exc: BaseException) -> str:
    """Message for a failed call; never empty."""
    message = str(exc).strip()
    return message or type(exc).__name__


class InstrumentedFetcher(Generic[T]):
    """Wrap a fetch so every call appends exactly one :class:`CallRecord`.

    The wrapped result is returned unchanged and failures are re-raised
    unchanged; the wrapper only observes them. Retrying is left to the next
    scheduler tick.
    """

    def __init__(
        self,
        name: str,
        fetch: Callable[[], Awaitable[T]],
        store: SnapshotStore,
        *,
        clock: Callable[[], datetime] = _utcnow,
        timer: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.name = name
        self._fetch = fetch
        self._store = store
        self._clock = clock
        self._timer = timer

    def __repr__(self) -> str:
        return f"InstrumentedFetcher({self.name!r})"

    def _record(self, started_at: datetime, start: float, error: str | None) -> None:
        self._store.append_call_record(
            CallRecord(
                timestamp=started_at,
                duration=max(0.0, self._timer() - start),
                source=self.name,
                outcome=CallOutcome.SUCCESS if error is None else CallOutcome.ERROR,
                error=error,
            )
        )

    async def run(self) -> T:
        started_at = self._clock()
        start = self._timer()
        try:
            result = await self._fetch()
        except asyncio.CancelledError:
            self._record(started_at, start, "cancelled")
            raise
        except Exception as exc:
            self._record(started_at, start, describe_error(exc))
            raise
        self._record(started_at, start, None)
        return result

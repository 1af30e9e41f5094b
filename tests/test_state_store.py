from __future__ import annotations

import asyncio
import threading
from datetime import UTC, datetime, timedelta

import pytest

from raspinfo.models.debug import CallOutcome, CallRecord, DeviceMetrics
from raspinfo.models.electricity import ElectricityData, PriceSlot
from raspinfo.models.transport import Departure, StopData, TransportData
from raspinfo.models.weather import WeatherData, WeatherPoint
from raspinfo.state.sections import Domain
from raspinfo.state.store import APP_LOG_CAPACITY, CALL_HISTORY_CAPACITY, SnapshotStore


def _dt(minutes: int = 0) -> datetime:
    return datetime(2026, 1, 1, tzinfo=UTC) + timedelta(minutes=minutes)


def _call(source: str, outcome: CallOutcome = CallOutcome.SUCCESS) -> CallRecord:
    return CallRecord(
        timestamp=_dt(),
        duration=0.1,
        source=source,
        outcome=outcome,
        error="boom" if outcome == CallOutcome.ERROR else None,
    )


def _weather(value: float) -> WeatherData:
    points = [WeatherPoint(temperature=value, pop=value, time=_dt(i * 60)) for i in range(5)]
    return WeatherData(current=points[0], forecast=points)


def _transport(label: str) -> TransportData:
    departures = [Departure(route_number=label, destination=label, time=_dt(i)) for i in range(4)]
    return TransportData(stops=[StopData(stop_name=label, departures=departures)], timestamp=_dt())


# ------------------------------------------------------------------
# Bounded logs
# ------------------------------------------------------------------


def test_call_history_keeps_last_50_in_append_order() -> None:
    store = SnapshotStore()
    for i in range(55):
        store.append_call_record(_call(str(i)))

    history = store.get_debug_view().call_history
    assert len(history) == 50
    assert [r.source for r in history] == [str(i) for i in range(5, 55)]


def test_app_log_keeps_last_100_in_append_order() -> None:
    store = SnapshotStore()
    for i in range(105):
        store.append_log_line(str(i))

    log = store.get().app_log
    assert len(log) == 100
    assert [line.message for line in log] == [str(i) for i in range(5, 105)]


def test_app_log_with_capacity_50() -> None:
    store = SnapshotStore(app_log_capacity=50)
    for i in range(55):
        store.append_log_line(str(i))

    assert [line.message for line in store.get().app_log] == [str(i) for i in range(5, 55)]


def test_log_capacity_never_exceeded_after_each_append() -> None:
    store = SnapshotStore(call_history_capacity=3, app_log_capacity=4)
    assert (store.call_history_capacity, store.app_log_capacity) == (3, 4)
    for i in range(10):
        store.append_call_record(_call(str(i)))
        store.append_log_line(str(i))
        view = store.get_debug_view()
        assert len(view.call_history) <= 3
        assert len(view.app_log) <= 4


def test_default_capacities() -> None:
    store = SnapshotStore()
    assert store.call_history_capacity == CALL_HISTORY_CAPACITY == 50
    assert store.app_log_capacity == APP_LOG_CAPACITY == 100


def test_invalid_capacity_rejected() -> None:
    with pytest.raises(ValueError):
        SnapshotStore(call_history_capacity=0)


def test_log_line_timestamp_assigned_by_store() -> None:
    store = SnapshotStore(clock=lambda: _dt(42))
    line = store.append_log_line("hello")
    assert line.timestamp == _dt(42)
    assert store.get().app_log[0].timestamp == _dt(42)


# ------------------------------------------------------------------
# Domain records
# ------------------------------------------------------------------


def test_empty_store_has_default_records() -> None:
    snapshot = SnapshotStore().get()
    assert snapshot.transport == TransportData()
    assert snapshot.weather.forecast == []
    assert snapshot.electricity.current_price == 0.0
    assert snapshot.device == DeviceMetrics()


def test_update_domain_replaces_whole_record() -> None:
    store = SnapshotStore()
    store.update_domain(Domain.WEATHER, _weather(1.0))
    store.update_domain(Domain.WEATHER, _weather(2.0))

    weather = store.get().weather
    assert weather == _weather(2.0)


def test_update_domain_accepts_string_domain() -> None:
    store = SnapshotStore()
    store.update_domain("electricity", ElectricityData(current_price=5.0))  # type: ignore[arg-type]
    assert store.get().electricity.current_price == 5.0


def test_update_domain_rejects_wrong_record_type() -> None:
    store = SnapshotStore()
    with pytest.raises(TypeError):
        store.update_domain(Domain.TRANSPORT, _weather(1.0))


def test_domains_are_independent() -> None:
    store = SnapshotStore()
    store.update_transport(_transport("550"))
    store.update_electricity(ElectricityData(current_price=7.5))

    snapshot = store.get()
    assert snapshot.transport == _transport("550")
    assert snapshot.electricity.current_price == 7.5
    assert snapshot.weather == WeatherData()


def test_get_is_idempotent_without_writes() -> None:
    store = SnapshotStore()
    store.update_weather(_weather(3.0))
    store.append_call_record(_call("FMI"))
    store.append_log_line("fetched")

    assert store.get() == store.get()


def test_reader_copies_do_not_alias_store_state() -> None:
    store = SnapshotStore()
    store.update_transport(_transport("A"))
    store.append_call_record(_call("HSL"))

    snapshot = store.get()
    snapshot.transport.stops.clear()
    snapshot.call_history.clear()
    view = store.get_debug_view()
    view.app_log.append(store.append_log_line("x"))

    assert store.get().transport == _transport("A")
    assert len(store.get().call_history) == 1
    assert len(store.get_debug_view().app_log) == 1


def test_writer_mutating_its_record_after_update_does_not_leak() -> None:
    store = SnapshotStore()
    record = ElectricityData(prices=[PriceSlot(price=1.0, start_time=_dt(), end_time=_dt(15))])
    store.update_electricity(record)
    record.prices.append(PriceSlot(price=2.0))

    assert len(store.get().electricity.prices) == 1


def test_device_metrics_fully_replaced() -> None:
    store = SnapshotStore()
    store.update_device_metrics(DeviceMetrics(uptime=1.0, task_count=3, mem_allocated=10, cpu_count=4))
    store.update_device_metrics(DeviceMetrics(uptime=2.0))

    assert store.get_debug_view().device == DeviceMetrics(uptime=2.0)


# ------------------------------------------------------------------
# Concurrency
# ------------------------------------------------------------------


def test_concurrent_updates_and_reads_never_see_torn_records() -> None:
    store = SnapshotStore()
    written = {0.0}
    stop = threading.Event()
    errors: list[str] = []

    def writer(offset: int) -> None:
        for i in range(300):
            value = float(offset * 1000 + i)
            written.add(value)
            store.update_weather(_weather(value))

    def reader() -> None:
        while not stop.is_set():
            weather = store.get().weather
            values = {p.temperature for p in weather.forecast} | {weather.current.temperature}
            if weather.forecast and len(values) != 1:
                errors.append(f"torn record: {values}")

    readers = [threading.Thread(target=reader) for _ in range(3)]
    writers = [threading.Thread(target=writer, args=(n,)) for n in range(3)]
    for t in readers + writers:
        t.start()
    for t in writers:
        t.join()
    stop.set()
    for t in readers:
        t.join()

    assert errors == []
    assert store.get().weather.current.temperature in written


@pytest.mark.asyncio
async def test_simultaneous_updates_to_two_domains_are_both_visible() -> None:
    store = SnapshotStore()

    await asyncio.gather(
        asyncio.to_thread(store.update_domain, Domain.WEATHER, _weather(9.0)),
        asyncio.to_thread(store.update_domain, Domain.TRANSPORT, _transport("X")),
    )

    snapshot = store.get()
    assert snapshot.weather == _weather(9.0)
    assert snapshot.transport == _transport("X")


def test_concurrent_appends_keep_capacity() -> None:
    store = SnapshotStore()

    def append(prefix: str) -> None:
        for i in range(200):
            store.append_log_line(f"{prefix}-{i}")
            store.append_call_record(_call(f"{prefix}-{i}"))

    threads = [threading.Thread(target=append, args=(str(n),)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    view = store.get_debug_view()
    assert len(view.app_log) == 100
    assert len(view.call_history) == 50
    # Per-writer order survives eviction.
    for prefix in "0123":
        seq = [int(line.message.split("-")[1]) for line in view.app_log if line.message.startswith(f"{prefix}-")]
        assert seq == sorted(seq)

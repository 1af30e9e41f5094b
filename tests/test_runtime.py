from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from raspinfo.__main__ import main
from raspinfo._transport import HttpTransport
from raspinfo.config import RaspInfoConfig
from raspinfo.runtime import build_jobs
from raspinfo.state.store import SnapshotStore


@pytest.fixture
def restore_root_logger() -> Iterator[None]:
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_build_jobs_one_per_domain_with_configured_intervals() -> None:
    config = RaspInfoConfig(transport_interval=60, weather_interval=600, electricity_interval=900)
    store = SnapshotStore()

    jobs = build_jobs(config, object(), store)  # type: ignore[arg-type]

    assert [(job.fetcher.name, job.interval) for job in jobs] == [
        ("HSL", 60),
        ("FMI", 600),
        ("Electricity", 900),
    ]


def test_lookup_mode_without_api_key_exits_with_error(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    restore_root_logger: None,
) -> None:
    monkeypatch.delenv("RASPINFO_HSL_API_KEY", raising=False)
    monkeypatch.setattr(HttpTransport, "get_json", _fail_if_called)

    code = main(
        [
            "--lookup",
            "E2185",
            "--config",
            str(tmp_path / "config.json"),
            "--secrets",
            str(tmp_path / "secrets.txt"),
        ]
    )

    assert code == 1


async def _fail_if_called(*_: object, **__: object) -> None:  # pragma: no cover
    raise AssertionError("lookup must not reach the network without a key")

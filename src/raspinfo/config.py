"""Service configuration for raspinfo."""

from __future__ import annotations

import dataclasses
import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from raspinfo.exceptions import RaspInfoConfigError

_logger = logging.getLogger(__name__)

DEFAULT_HSL_API_URL = "https://api.digitransit.fi/routing/v2/hsl/gtfs/v1"
DEFAULT_GEOCODING_API_URL = "https://api.digitransit.fi/geocoding/v1/search"
DEFAULT_FMI_API_URL = "https://opendata.fmi.fi/wfs"
DEFAULT_SPOT_API_URL = "https://api.spot-hinta.fi/TodayAndDayForward?region=FI&priceResolution=15"


@dataclasses.dataclass(frozen=True)
class BusStop:
    """A stop to show departures for.

    ``id`` is either a GTFS id (``"HSL:1234567"``) or a human-readable stop
    code (``"E2185"``) that is resolved through the geocoding API on every
    transport fetch.
    """

    id: str
    name: str = ""

    @property
    def needs_lookup(self) -> bool:
        return not self.id.startswith("HSL:")


@dataclasses.dataclass(frozen=True)
class RaspInfoConfig:
    """Service configuration.

    Parameters
    ----------
    host : str
        Interface the read API binds to.
    port : int
        Port of the read API.
    transport_interval : float
        Seconds between transit departure fetches.
    weather_interval : float
        Seconds between weather forecast fetches.
    electricity_interval : float
        Seconds between spot price fetches.
    metrics_interval : float
        Seconds between device metrics samples.
    http_timeout : float
        Total timeout in seconds for a single upstream request.
    hsl_api_url : str
        Digitransit GraphQL routing endpoint.
    hsl_api_key : str
        Digitransit subscription key. Masked in every debug output.
    geocoding_api_url : str
        Digitransit geocoding endpoint used for stop code lookups.
    fmi_api_url : str
        FMI open data WFS endpoint.
    spot_api_url : str
        Spot price endpoint returning 15 minute slots.
    weather_location : str
        Place name passed to the FMI forecast query.
    bus_stops : tuple of BusStop
        Stops to show departures for. There are no defaults.
    static_dir : str
        Directory served at ``/`` when it exists.
    """

    host: str = "0.0.0.0"
    port: int = 8080
    transport_interval: float = 5 * 60
    weather_interval: float = 15 * 60
    electricity_interval: float = 15 * 60
    metrics_interval: float = 30.0
    http_timeout: float = 10.0
    hsl_api_url: str = DEFAULT_HSL_API_URL
    hsl_api_key: str = ""
    geocoding_api_url: str = DEFAULT_GEOCODING_API_URL
    fmi_api_url: str = DEFAULT_FMI_API_URL
    spot_api_url: str = DEFAULT_SPOT_API_URL
    weather_location: str = "Espoo"
    bus_stops: tuple[BusStop, ...] = ()
    static_dir: str = "static"

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> RaspInfoConfig:
        """Build a configuration from a ``config.json`` style mapping.

        Unknown keys are ignored. A known key with an unusable value is logged
        and left at its default; the remaining keys still apply.
        """
        known = {f.name: f for f in dataclasses.fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                _logger.debug("Ignoring unknown config key %s", key)
                continue
            try:
                if key == "bus_stops":
                    kwargs[key] = _parse_bus_stops(value)
                elif key == "port":
                    kwargs[key] = _parse_port(value)
                else:
                    kwargs[key] = _coerce(key, value, known[key].type)
            except RaspInfoConfigError as exc:
                _logger.error("Ignoring config key %s: %s", key, exc)
        return cls(**kwargs)

    @classmethod
    def load(
        cls,
        config_path: str | os.PathLike[str] = "config.json",
        secrets_path: str | os.PathLike[str] = "secrets.txt",
        *,
        env: Mapping[str, str] | None = None,
    ) -> RaspInfoConfig:
        """Load configuration, never failing.

        Reads *config_path* when present. Without it, the HSL key is read
        from *secrets_path*. ``RASPINFO_*`` environment variables override
        both. Any read or parse error is logged and the built-in defaults
        are used for the affected part.
        """
        config = cls()
        path = Path(config_path)
        if path.is_file():
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
                if not isinstance(data, dict):
                    raise RaspInfoConfigError(f"{path} must contain a JSON object")
                config = cls.from_mapping(data)
            except (OSError, ValueError, RaspInfoConfigError) as exc:
                _logger.error("Error parsing %s: %s", path, exc)
        else:
            secrets = Path(secrets_path)
            try:
                key = secrets.read_text(encoding="utf-8").strip()
                config = dataclasses.replace(config, hsl_api_key=key)
            except OSError:
                _logger.warning("Could not read %s or %s", path, secrets)

        return config.with_env(os.environ if env is None else env)

    def with_env(self, env: Mapping[str, str]) -> RaspInfoConfig:
        """Return a copy with ``RASPINFO_<FIELD>`` overrides applied."""
        overrides: dict[str, Any] = {}
        for f in dataclasses.fields(self):
            if f.name == "bus_stops":
                continue
            raw = env.get(f"RASPINFO_{f.name.upper()}")
            if raw is None:
                continue
            try:
                if f.name == "port":
                    overrides[f.name] = _parse_port(raw)
                else:
                    overrides[f.name] = _coerce(f.name, raw, f.type)
            except RaspInfoConfigError as exc:
                _logger.error("Ignoring environment override: %s", exc)
        if not overrides:
            return self
        return dataclasses.replace(self, **overrides)


def _coerce(key: str, value: Any, annotation: Any) -> Any:
    type_name = annotation if isinstance(annotation, str) else getattr(annotation, "__name__", "")
    try:
        if type_name == "float":
            result = float(value)
            if result <= 0 and key.endswith(("interval", "timeout")):
                raise ValueError("must be positive")
            return result
        if type_name == "int":
            return int(value)
    except (TypeError, ValueError) as exc:
        raise RaspInfoConfigError(f"invalid value for {key}: {value!r} ({exc})") from exc
    if not isinstance(value, str):
        raise RaspInfoConfigError(f"invalid value for {key}: expected a string, got {value!r}")
    return value


def _parse_port(value: Any) -> int:
    """Accept ``8080``, ``"8080"`` and listen addresses like ``":8080"``."""
    raw = value.rpartition(":")[2] if isinstance(value, str) else value
    if isinstance(raw, bool):
        raise RaspInfoConfigError(f"invalid value for port: {value!r}")
    try:
        port = int(raw)
    except (TypeError, ValueError) as exc:
        raise RaspInfoConfigError(f"invalid value for port: {value!r}") from exc
    if not 0 < port < 65536:
        raise RaspInfoConfigError(f"port out of range: {value!r}")
    return port


def _parse_bus_stops(value: Any) -> tuple[BusStop, ...]:
    if not isinstance(value, list):
        raise RaspInfoConfigError("bus_stops must be a list")
    stops: list[BusStop] = []
    for item in value:
        if not isinstance(item, dict) or not isinstance(item.get("id"), str) or not item["id"].strip():
            _logger.error("Ignoring invalid bus stop entry: %r", item)
            continue
        stops.append(BusStop(id=item["id"].strip(), name=str(item.get("name", ""))))
    return tuple(stops)

"""FMI weather forecast endpoint.

Endpoint:
  - WFS getFeature, stored query
    ``fmi::forecast::harmonie::surface::point::timevaluepair``

The response holds one ``MeasurementTimeseries`` per parameter; the series
are merged into one :class:`WeatherPoint` per forecast hour.
"""

from __future__ import annotations

import logging
import math
import xml.etree.ElementTree as ET
from datetime import UTC, datetime, timedelta

from raspinfo._transport import Transport
from raspinfo.config import RaspInfoConfig
from raspinfo.exceptions import UpstreamError
from raspinfo.models.weather import WeatherData, WeatherPoint

_logger = logging.getLogger(__name__)

_SOURCE = "FMI"
_STORED_QUERY = "fmi::forecast::harmonie::surface::point::timevaluepair"
FORECAST_HOURS = 24

# Matched as substrings of the series id, in this order.
_PARAMETERS = ("temperature", "Precipitation1h", "Pop")


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _series_id(element: ET.Element) -> str:
    for name, value in element.attrib.items():
        if _local(name) == "id":
            return value
    return ""


def _child_text(element: ET.Element, name: str) -> str | None:
    for child in element.iter():
        if _local(child.tag) == name:
            return (child.text or "").strip()
    return None


def _parse_time(value: str) -> datetime | None:
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _finite(value: float | None) -> float:
    if value is None or math.isnan(value):
        return 0.0
    return value


def symbol_for(precipitation: float, pop: float) -> str:
    if precipitation > 0.1 or pop > 50:
        return "rain"
    return "cloudy"


def parse_series(xml_text: str) -> dict[str, dict[datetime, float]]:
    """Parse a timevaluepair document into ``{parameter: {time: value}}``.

    Points with an unparsable time are skipped; unparsable values become NaN.
    """
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as exc:
        raise UpstreamError(f"failed to decode FMI XML: {exc}", source=_SOURCE) from exc

    series: dict[str, dict[datetime, float]] = {name: {} for name in _PARAMETERS}
    for element in root.iter():
        if _local(element.tag) != "MeasurementTimeseries":
            continue
        series_id = _series_id(element)
        parameter = next((name for name in _PARAMETERS if name in series_id), None)
        if parameter is None:
            _logger.debug("FMI: Ignoring series %s", series_id)
            continue
        for point in element.iter():
            if _local(point.tag) != "MeasurementTVP":
                continue
            at = _parse_time(_child_text(point, "time") or "")
            if at is None:
                continue
            try:
                value = float(_child_text(point, "value") or "nan")
            except ValueError:
                value = math.nan
            series[parameter][at] = value
    return series


def closest_point(points: list[WeatherPoint], now: datetime) -> WeatherPoint:
    """Return the point closest to *now*.

    Ties keep the earlier candidate of *points*; the choice is arbitrary.
    """
    current: WeatherPoint | None = None
    for point in points:
        if current is None or abs(point.time - now) < abs(current.time - now):
            current = point
    return current if current is not None else WeatherPoint()


def build_weather(series: dict[str, dict[datetime, float]], now: datetime) -> WeatherData:
    temps = series.get("temperature", {})
    precips = series.get("Precipitation1h", {})
    pops = series.get("Pop", {})
    times = sorted(set(temps) | set(precips) | set(pops))

    forecast: list[WeatherPoint] = []
    for at in times:
        precipitation = _finite(precips.get(at))
        pop = _finite(pops.get(at))
        forecast.append(
            WeatherPoint(
                temperature=_finite(temps.get(at)),
                precipitation=precipitation,
                pop=pop,
                symbol=symbol_for(precipitation, pop),
                time=at,
            )
        )
    return WeatherData(current=closest_point(forecast, now), forecast=forecast)


async def fetch_weather(
    config: RaspInfoConfig,
    transport: Transport,
    *,
    now: datetime | None = None,
) -> WeatherData:
    """Fetch the hourly forecast for the next 24 hours.

    Raises
    ------
    UpstreamError
        On network failure, non-200 status or malformed XML.
    """
    now = (now or datetime.now(UTC)).astimezone(UTC)
    end = now + timedelta(hours=FORECAST_HOURS)
    params = {
        "service": "WFS",
        "version": "2.0.0",
        "request": "getFeature",
        "storedquery_id": _STORED_QUERY,
        "place": config.weather_location,
        "timestep": "60",
        "parameters": ",".join(_PARAMETERS),
        "starttime": now.replace(microsecond=0).isoformat().replace("+00:00", "Z"),
        "endtime": end.replace(microsecond=0).isoformat().replace("+00:00", "Z"),
    }
    text = await transport.get_text(config.fmi_api_url, source=_SOURCE, params=params)
    weather = build_weather(parse_series(text), now)
    _logger.debug("FMI: Parsed %d forecast points", len(weather.forecast))
    return weather

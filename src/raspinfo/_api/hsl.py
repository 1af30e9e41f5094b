"""HSL transit endpoints (Digitransit).

Endpoints:
  - GraphQL routing API (batched departures for all configured stops)
  - Pelias geocoding search (stop code -> GTFS stop id)

Departures for several stops are fetched with one GraphQL request. Each
stop is described by a :class:`StopQuery` carrying a correlation key; the
key is used as the field alias in the document and as the variable name for
the stop id, and the response is joined back to the queries by that key.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

from raspinfo._transport import Transport
from raspinfo.config import RaspInfoConfig
from raspinfo.exceptions import StopLookupError, UpstreamError
from raspinfo.models.transport import Departure, StopData, TransportData

_logger = logging.getLogger(__name__)

_SOURCE = "HSL"
_KEY_HEADER = "digitransit-subscription-key"
DEPARTURES_PER_STOP = 4

_STOP_FIELDS_FRAGMENT = f"""
fragment StopDepartures on Stop {{
  name
  stoptimesWithoutPatterns(numberOfDepartures: {DEPARTURES_PER_STOP}) {{
    scheduledDeparture
    realtimeDeparture
    realtime
    serviceDay
    headsign
    trip {{
      route {{
        shortName
      }}
    }}
  }}
}}
"""


@dataclasses.dataclass(frozen=True)
class StopQuery:
    """One stop in a batched departures request.

    Parameters
    ----------
    key : str
        Correlation key, unique within a batch and a valid GraphQL name.
    stop_id : str
        Resolved GTFS stop id (``"HSL:1234567"``).
    name : str
        Display name, taken from configuration.
    """

    key: str
    stop_id: str
    name: str


def build_departures_request(queries: Sequence[StopQuery]) -> dict[str, Any]:
    """Build the GraphQL request body for *queries*."""
    keys = [q.key for q in queries]
    if len(set(keys)) != len(keys):
        raise ValueError(f"duplicate stop query keys: {keys}")

    variables = {q.key: q.stop_id for q in queries}
    declarations = ", ".join(f"${q.key}: String!" for q in queries)
    selections = "\n".join(f"  {q.key}: stop(id: ${q.key}) {{ ...StopDepartures }}" for q in queries)
    document = f"query Departures({declarations}) {{\n{selections}\n}}\n{_STOP_FIELDS_FRAGMENT}"
    return {"query": document, "variables": variables}


def _parse_departure(item: dict[str, Any]) -> Departure:
    service_day = int(item.get("serviceDay") or 0)
    offset = item.get("realtimeDeparture")
    if offset is None:
        offset = item.get("scheduledDeparture") or 0
    route = ((item.get("trip") or {}).get("route") or {}).get("shortName") or ""
    return Departure(
        route_number=str(route),
        destination=str(item.get("headsign") or ""),
        time=datetime.fromtimestamp(service_day + int(offset), tz=UTC),
        realtime=bool(item.get("realtime")),
    )


def parse_departures(response: Any, queries: Sequence[StopQuery]) -> list[StopData]:
    """Join a GraphQL response back to *queries* by correlation key.

    Stops missing from the response are logged and left out; the order of
    *queries* is preserved.
    """
    if not isinstance(response, dict) or not isinstance(response.get("data"), dict):
        errors = response.get("errors") if isinstance(response, dict) else None
        raise UpstreamError(f"HSL response has no data: {errors!r}", source=_SOURCE)

    by_key: dict[str, Any] = response["data"]
    stops: list[StopData] = []
    for query in queries:
        stop = by_key.get(query.key)
        if not isinstance(stop, dict):
            _logger.info("HSL: No data found for stop %s (%s)", query.name, query.stop_id)
            continue
        try:
            departures = [
                _parse_departure(item)
                for item in stop.get("stoptimesWithoutPatterns") or []
                if isinstance(item, dict)
            ]
        except (TypeError, ValueError, OverflowError) as exc:
            raise UpstreamError(f"malformed departure for stop {query.stop_id}: {exc}", source=_SOURCE) from exc
        stops.append(StopData(stop_name=query.name or str(stop.get("name") or ""), departures=departures))
        _logger.info("HSL: Processed stop %s (%s): %d departures", query.name, query.stop_id, len(departures))
    return stops


async def fetch_departures(
    config: RaspInfoConfig,
    transport: Transport,
    queries: Sequence[StopQuery],
    *,
    now: datetime | None = None,
) -> TransportData:
    """Fetch departures for all *queries* in one request.

    Raises
    ------
    UpstreamError
        On network failure, non-200 status or a response without data.
    """
    timestamp = now or datetime.now(UTC)
    if not queries:
        return TransportData(stops=[], timestamp=timestamp)

    _logger.info("HSL: Sending request to %s", config.hsl_api_url)
    response = await transport.post_json(
        config.hsl_api_url,
        build_departures_request(queries),
        source=_SOURCE,
        headers={_KEY_HEADER: config.hsl_api_key},
    )
    stops = parse_departures(response, queries)
    return TransportData(stops=stops, timestamp=timestamp)


def parse_stop_gid(gid: str, code: str = "") -> str:
    """Extract the GTFS stop id from a geocoding ``gid``.

    ``gtfshsl:stop:GTFS:HSL:1234567#E2185`` becomes ``HSL:1234567``.
    """
    parts = gid.split(":")
    if len(parts) < 5:
        raise StopLookupError(f"unexpected gid format: {gid}", code=code)
    stop_number = parts[4].split("#", 1)[0]
    if not stop_number:
        raise StopLookupError(f"unexpected gid format: {gid}", code=code)
    return f"HSL:{stop_number}"


async def lookup_stop(config: RaspInfoConfig, transport: Transport, code: str) -> str:
    """Resolve a human-friendly stop code (e.g. ``E2185``) into a GTFS id.

    Raises
    ------
    StopLookupError
        When the code matches nothing or the service fails.
    """
    params = {
        "text": code,
        "size": "1",
        "layers": "stop",
        "sources": "gtfshsl",
    }
    try:
        result = await transport.get_json(
            config.geocoding_api_url,
            source="geocoding",
            params=params,
            headers={_KEY_HEADER: config.hsl_api_key},
        )
    except StopLookupError:
        raise
    except UpstreamError as exc:
        raise StopLookupError(
            f"geocoding failed for {code}: {exc}", code=code, status_code=exc.status_code
        ) from exc

    features = result.get("features") if isinstance(result, dict) else None
    if not features:
        raise StopLookupError(f"no features found for code: {code}", code=code)
    if not isinstance(features, list) or not isinstance(features[0], dict):
        raise StopLookupError(f"unexpected geocoding payload for code: {code}", code=code)

    properties = features[0].get("properties")
    gid = properties.get("gid") if isinstance(properties, dict) else None
    if not isinstance(gid, str):
        raise StopLookupError(f"feature for {code} has no gid", code=code)
    return parse_stop_gid(gid, code)

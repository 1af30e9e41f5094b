"""Electricity spot price endpoint (spot-hinta.fi).

The API returns a JSON array of 15 minute slots::

    [{"DateTime": "2026-01-01T00:00:00+02:00", "PriceNoTax": 0.05, "PriceWithTax": 0.0627}, ...]

Prices are converted from EUR/kWh to c/kWh.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import Any

from raspinfo._transport import Transport
from raspinfo.config import RaspInfoConfig
from raspinfo.exceptions import UpstreamError
from raspinfo.models.electricity import ElectricityData, PriceSlot

_logger = logging.getLogger(__name__)

_SOURCE = "Electricity"
SLOT_LENGTH = timedelta(minutes=15)
WINDOW = timedelta(hours=24)
MAX_SLOTS = 96


def build_electricity(items: Any, now: datetime) -> ElectricityData:
    """Select the slots that have not ended and start within the next 24 hours.

    The current price is the first slot containing *now*; when no slot does,
    the first upcoming slot is used.
    """
    if not isinstance(items, list):
        raise UpstreamError("failed to decode electricity json: expected a list", source=_SOURCE)

    window_end = now + WINDOW
    prices: list[PriceSlot] = []
    current: float | None = None

    for item in items:
        if not isinstance(item, dict):
            continue
        try:
            start = datetime.fromisoformat(str(item.get("DateTime")))
            price = float(item["PriceWithTax"]) * 100
        except (KeyError, TypeError, ValueError):
            continue
        if start.tzinfo is None:
            start = start.replace(tzinfo=UTC)

        end = start + SLOT_LENGTH
        if end <= now:
            continue
        if start > window_end:
            break

        if current is None and start <= now < end:
            current = price

        prices.append(PriceSlot(price=price, start_time=start, end_time=end))
        if len(prices) >= MAX_SLOTS:
            break

    if current is None:
        current = prices[0].price if prices else 0.0

    return ElectricityData(current_price=current, prices=prices, timestamp=now)


async def fetch_electricity(
    config: RaspInfoConfig,
    transport: Transport,
    *,
    now: datetime | None = None,
) -> ElectricityData:
    """Fetch today's and tomorrow's spot prices.

    Raises
    ------
    UpstreamError
        On network failure, non-200 status or malformed JSON.
    """
    now = now or datetime.now(UTC)
    items = await transport.get_json(config.spot_api_url, source=_SOURCE)
    data = build_electricity(items, now)
    _logger.debug("Electricity: %d slots, current %.2f c/kWh", len(data.prices), data.current_price)
    return data

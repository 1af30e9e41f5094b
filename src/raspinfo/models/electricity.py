"""Electricity spot price records."""

from __future__ import annotations

from pydantic import Field

from raspinfo.models._base import EPOCH, AwareDatetime, RecordModel


class PriceSlot(RecordModel):
    """Spot price for one 15 minute slot, in c/kWh including tax."""

    price: float = 0.0
    start_time: AwareDatetime = EPOCH
    end_time: AwareDatetime = EPOCH


class ElectricityData(RecordModel):
    """Current price and the upcoming slots (at most 24 hours)."""

    current_price: float = 0.0
    prices: list[PriceSlot] = Field(default_factory=list)
    timestamp: AwareDatetime = EPOCH

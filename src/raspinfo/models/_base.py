"""Base model shared by every raspinfo record.

Records are frozen so a snapshot handed to a reader can never be changed
underneath it. Datetimes are always timezone-aware (naive values are taken
as UTC).
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


AwareDatetime = Annotated[datetime, AfterValidator(ensure_utc)]
"""Datetime coerced to a timezone-aware value."""

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
"""Zero value used by records that have not been populated yet."""


class RecordModel(BaseModel):
    """Base for immutable domain and debug records."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
    )

"""Custom exception hierarchy for raspinfo."""

from __future__ import annotations


class RaspInfoError(Exception):
    """Base exception for all raspinfo errors."""


class RaspInfoConfigError(RaspInfoError):
    """Invalid or missing configuration."""


class UpstreamError(RaspInfoError):
    """Upstream API failure (network, non-200, malformed payload)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        source: str = "",
    ) -> None:
        self.status_code = status_code
        self.source = source
        super().__init__(message)


class StopLookupError(UpstreamError):
    """A human-readable stop code could not be resolved to a GTFS stop id."""

    def __init__(self, message: str, *, code: str = "", status_code: int | None = None) -> None:
        self.code = code
        super().__init__(message, status_code=status_code, source="geocoding")

"""Domain fetchers that turn upstream responses into store updates."""

from raspinfo.ingestion.fetchers import ElectricityFetcher, TransportFetcher, WeatherFetcher

__all__ = ["ElectricityFetcher", "TransportFetcher", "WeatherFetcher"]

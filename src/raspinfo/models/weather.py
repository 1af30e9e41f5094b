"""Weather forecast records."""

from __future__ import annotations

from pydantic import Field

from raspinfo.models._base import EPOCH, AwareDatetime, RecordModel


class WeatherPoint(RecordModel):
    """Forecast values for a single hour.

    Parameters
    ----------
    temperature : float
        Air temperature in °C.
    wind_speed : float
        Wind speed in m/s. FMI is not queried for wind, so this stays ``0``.
    precipitation : float
        Precipitation amount for the hour in mm.
    pop : float
        Probability of precipitation in percent.
    symbol : str
        Coarse icon name, ``"rain"`` or ``"cloudy"``.
    time : datetime
        Forecast time.
    """

    temperature: float = 0.0
    wind_speed: float = 0.0
    precipitation: float = 0.0
    pop: float = 0.0
    symbol: str = ""
    time: AwareDatetime = EPOCH


class WeatherData(RecordModel):
    """Point closest to now plus the hourly forecast."""

    current: WeatherPoint = Field(default_factory=WeatherPoint)
    forecast: list[WeatherPoint] = Field(default_factory=list)

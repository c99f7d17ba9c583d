"""Decode OpenWeatherMap current-weather bodies into typed observations.

Only the fields the controller stores are declared. Everything required is
validated up front so a partial body can never reach the status writer;
`wind.gust` and `coord` are optional because the provider omits them for
calm conditions and some station reports.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from weather_controller.errors import MalformedResponseError
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="response_parser")


class _ProviderModel(BaseModel):
    model_config = ConfigDict(extra="ignore", strict=True)


class _Coord(_ProviderModel):
    lat: Optional[float] = None
    lon: Optional[float] = None


class _Main(_ProviderModel):
    temp: float
    pressure: int
    humidity: int


class _Wind(_ProviderModel):
    speed: float
    gust: Optional[float] = None


class _Sys(_ProviderModel):
    country: str


class CurrentWeatherResponse(_ProviderModel):
    """Subset of the /data/2.5/weather payload."""
    dt: int
    name: str
    main: _Main
    wind: _Wind
    sys: _Sys
    coord: _Coord = _Coord()


@dataclass(frozen=True)
class ObservationRecord:
    """One parsed provider observation, consumed once per reconcile."""
    lat: Optional[float]
    lon: Optional[float]
    temp: float
    pressure: int
    humidity: int
    wind_speed: float
    wind_gust: Optional[float]  # None when the provider omitted it
    country_code: str
    location_name: str
    observed_at: int  # epoch seconds


def parse_observation(raw: bytes | str) -> ObservationRecord:
    """Validate a provider body and return an ObservationRecord.

    Raises MalformedResponseError naming the first offending field.
    """
    try:
        payload = CurrentWeatherResponse.model_validate_json(raw)
    except ValidationError as exc:
        field, detail = _first_error(exc)
        logger.debug(f"Rejected weather response at '{field}': {detail}")
        raise MalformedResponseError(field, detail) from exc

    return ObservationRecord(
        lat=payload.coord.lat,
        lon=payload.coord.lon,
        temp=payload.main.temp,
        pressure=payload.main.pressure,
        humidity=payload.main.humidity,
        wind_speed=payload.wind.speed,
        wind_gust=payload.wind.gust,
        country_code=payload.sys.country,
        location_name=payload.name,
        observed_at=payload.dt,
    )


def _first_error(exc: ValidationError) -> tuple[str, str]:
    """Return (dotted field path, message) for the first validation error."""
    errors = exc.errors()
    if not errors:
        return "<body>", str(exc)
    first = errors[0]
    if first.get("type") == "json_invalid":
        return "<body>", first.get("msg", "invalid JSON")
    loc = ".".join(str(part) for part in first.get("loc", ()))
    return loc or "<body>", first.get("msg", "")

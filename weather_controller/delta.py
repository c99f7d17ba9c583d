"""Field-level delta between the stored status and a fresh observation.

Decimal fields (temperature, wind speed, wind gust) are stored as strings
formatted to two decimals, and change detection compares those strings, not
the underlying floats: 71.004 and 71.001 both store as "71.00" and count as
unchanged. Integer fields (pressure, humidity) compare numerically.

A changed field is tagged with a trailing "+" or "-" when the direction can
be established, and with the bare field name otherwise (e.g. the previous
value was empty on the first reconcile, or the provider omitted the new
value).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterator, List, Optional, Tuple

from weather_controller.provider.parser import ObservationRecord
from weather_controller.resources import LocationStatus

TEMP = "Temp"
PRESSURE = "Pressure"
HUMIDITY = "Humidity"
WIND_SPEED = "WindSpeed"
WIND_GUST = "WindGust"

REFRESH_TIME_FORMAT = "%Y-%m-%d %H:%M:%S %z %Z"


@dataclass
class ChangeSet:
    """Ordered change tags produced by one reconcile."""
    tags: List[str] = field(default_factory=list)

    def add(self, tag: str) -> None:
        self.tags.append(tag)

    def __iter__(self) -> Iterator[str]:
        return iter(self.tags)

    def __len__(self) -> int:
        return len(self.tags)

    def __bool__(self) -> bool:
        return bool(self.tags)

    def __contains__(self, tag: object) -> bool:
        return tag in self.tags


def format_decimal(value: Optional[float]) -> str:
    """Format a decimal reading for status; absent readings stay empty."""
    if value is None:
        return ""
    return f"{value:.2f}"


def format_refresh_time(epoch_seconds: int) -> str:
    """Render an epoch as e.g. "2022-03-01 18:04:05 +0000 UTC"."""
    return datetime.fromtimestamp(epoch_seconds, tz=timezone.utc).strftime(REFRESH_TIME_FORMAT)


def _parse_previous(text: str) -> Optional[float]:
    try:
        return float(text)
    except (TypeError, ValueError):
        return None


def _direction_tag(name: str, previous: Optional[float], current: Optional[float]) -> str:
    if previous is None or current is None or previous == current:
        return name
    return f"{name}+" if current > previous else f"{name}-"


def _compare_decimal(changes: ChangeSet, name: str, previous: str, current: Optional[float]) -> str:
    formatted = format_decimal(current)
    if formatted != previous:
        # Direction is judged on the rounded value that will actually be stored.
        rounded = float(formatted) if formatted else None
        changes.add(_direction_tag(name, _parse_previous(previous), rounded))
    return formatted


def _compare_integer(changes: ChangeSet, name: str, previous: int, current: int) -> int:
    if current != previous:
        changes.add(f"{name}+" if current > previous else f"{name}-")
    return current


def compute_delta(previous: LocationStatus, observation: ObservationRecord) -> Tuple[ChangeSet, LocationStatus]:
    """Return the ChangeSet and a fully updated status; `previous` is not modified."""
    changes = ChangeSet()

    temp = _compare_decimal(changes, TEMP, previous.temp, observation.temp)
    pressure = _compare_integer(changes, PRESSURE, previous.pressure, observation.pressure)
    humidity = _compare_integer(changes, HUMIDITY, previous.humidity, observation.humidity)
    wind_speed = _compare_decimal(changes, WIND_SPEED, previous.wind_speed, observation.wind_speed)
    wind_gust = _compare_decimal(changes, WIND_GUST, previous.wind_gust, observation.wind_gust)

    updated = LocationStatus(
        refresh_time=format_refresh_time(observation.observed_at),
        country_code=observation.country_code,
        location_name=observation.location_name,
        temp=temp,
        pressure=pressure,
        humidity=humidity,
        wind_speed=wind_speed,
        wind_gust=wind_gust,
    )
    return changes, updated

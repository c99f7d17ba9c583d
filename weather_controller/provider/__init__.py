"""Weather provider access: HTTP client and response parsing."""

from .openweathermap_client import OpenWeatherMapClient
from .parser import CurrentWeatherResponse, ObservationRecord, parse_observation

__all__ = [
    "OpenWeatherMapClient",
    "CurrentWeatherResponse",
    "ObservationRecord",
    "parse_observation",
]

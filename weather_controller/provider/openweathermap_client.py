"""HTTP client for the OpenWeatherMap current-weather endpoint."""
from __future__ import annotations

from typing import Optional

import requests

from weather_controller.errors import ProviderStatusError, TransportError
from utils.logging_utils import get_tagged_logger, mask_url

logger = get_tagged_logger(__name__, tag="openweathermap_client")

OPENWEATHERMAP_URL = "https://api.openweathermap.org/data/2.5/weather"
DEFAULT_UNITS = "imperial"
DEFAULT_TIMEOUT_SECONDS = 10.0

# Error bodies are kept for diagnostics only, never parsed.
_BODY_EXCERPT_CHARS = 200


class OpenWeatherMapClient:
    """Issue one bounded GET per call; retries belong to the caller."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        *,
        base_url: str = OPENWEATHERMAP_URL,
        units: str = DEFAULT_UNITS,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.session = session or requests.Session()
        self.base_url = base_url.rstrip("/")
        self.units = units
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings, session: Optional[requests.Session] = None) -> "OpenWeatherMapClient":
        return cls(
            session,
            base_url=settings.provider_url,
            units=settings.unit_system,
            timeout=settings.request_timeout_seconds,
        )

    def fetch_current(self, lat: str, lon: str, token: str, *, timeout: Optional[float] = None) -> bytes:
        """Fetch the current observation for the coordinates and return the raw body.

        Raises TransportError when the provider cannot be reached and
        ProviderStatusError when it answers with anything but HTTP 200.
        """
        params = {
            "lat": lat,
            "lon": lon,
            "units": self.units,
            "appid": token,
        }
        effective_timeout = self.timeout if timeout is None else min(self.timeout, timeout)

        try:
            resp = self.session.get(self.base_url, params=params, timeout=effective_timeout)
        except requests.RequestException as exc:
            detail = _scrub(str(exc), token)
            logger.warning("Weather request failed", extra={"error": detail})
            raise TransportError(f"failed to get weather info: {detail}") from exc

        logger.debug(f"GET {mask_url(getattr(resp, 'url', '') or self.base_url)} -> {resp.status_code}")
        if resp.status_code != 200:
            excerpt = (getattr(resp, "text", "") or "")[:_BODY_EXCERPT_CHARS]
            raise ProviderStatusError(resp.status_code, excerpt)

        return resp.content


def _scrub(text: str, token: str) -> str:
    """Remove the API token from exception text (urllib3 echoes the full URL)."""
    if not token:
        return text
    return text.replace(token, "***")

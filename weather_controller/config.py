"""Controller configuration pulled from environment variables via pydantic."""
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from weather_controller.durations import parse_duration
from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="config")


class Settings(BaseSettings):
    """Environment-driven configuration for the weather controller."""
    model_config = SettingsConfigDict(env_prefix="WEATHER_", extra="ignore")

    provider_url: str = "https://api.openweathermap.org/data/2.5/weather"
    unit_system: str = "imperial"
    request_timeout_seconds: float = 10.0
    default_refresh_period: str = "5m"
    default_secret_key: str = "token"
    state_store: str = "memory"  # options: memory, redis
    redis_url: str | None = None
    redis_prefix: str = "weather:"
    max_events_per_resource: int = 50
    log_level: str = "INFO"
    job_name: str = "weather-controller"

    @field_validator("provider_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize the endpoint so query strings attach cleanly."""
        return str(v).rstrip("/")

    @field_validator("default_refresh_period", mode="after")
    @classmethod
    def validate_refresh_period(cls, v: str) -> str:
        """Reject defaults that would requeue in a tight loop."""
        if parse_duration(v).total_seconds() <= 0:
            raise ValueError("default_refresh_period must be a positive duration")
        return v

    @field_validator("request_timeout_seconds", mode="after")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("request_timeout_seconds must be positive")
        return v

    @field_validator("max_events_per_resource", mode="after")
    @classmethod
    def validate_max_events(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_events_per_resource must be at least 1")
        return v


settings = Settings()


if __name__ == "__main__":
    logger.setLevel("DEBUG")
    logger.debug(f"Loaded settings: {settings.model_dump_json(indent=4)}")

"""Factory helpers for choosing a state-store backend at startup."""

from __future__ import annotations

from typing import Tuple

import redis

from weather_controller import config
from weather_controller.store.base import EventRecorder, StateStore
from weather_controller.store.memory import InMemoryEventRecorder, InMemoryStateStore
from weather_controller.store.redis import RedisEventRecorder, RedisStateStore
from utils.logging_utils import get_tagged_logger, mask_url

logger = get_tagged_logger(__name__, tag="store/factory")


DEFAULT_BACKEND_NAME = "memory"


def build_state_backend(settings: config.Settings | None = None) -> Tuple[StateStore, EventRecorder]:
    """Instantiate the configured state store and its matching event recorder."""
    settings = settings or config.settings
    backend = (settings.state_store or DEFAULT_BACKEND_NAME).lower()

    if backend == "memory":
        logger.info("Using in-memory state store")
        return InMemoryStateStore(), InMemoryEventRecorder(settings.max_events_per_resource)

    if backend == "redis":
        if not settings.redis_url:
            raise ValueError("redis_url must be set for the Redis state store")
        logger.info("Using Redis state store", extra={"redis_url": mask_url(settings.redis_url)})
        client = redis.Redis.from_url(settings.redis_url)
        return (
            RedisStateStore(client, prefix=settings.redis_prefix),
            RedisEventRecorder(
                client,
                prefix=settings.redis_prefix,
                max_events_per_resource=settings.max_events_per_resource,
            ),
        )

    raise ValueError(f"Unknown state store '{backend}'")

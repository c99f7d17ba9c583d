"""Redis-backed state store and event recorder.

Layout under the configured prefix:

- ``<prefix>location:<namespace>:<name>``: Location JSON (string)
- ``<prefix>secret:<namespace>:<name>``: Secret data (hash of key -> bytes)
- ``<prefix>events:<namespace>:<name>``: Event JSON (capped list)
- ``<prefix>version``: store-wide resource version counter
"""

import json
from typing import List, Optional

from pydantic import ValidationError
from redis.exceptions import RedisError, WatchError

from weather_controller.errors import ConflictError, NotFoundError, PersistenceError
from weather_controller.resources import Event, Location, ObjectKey, ObjectMeta, Secret
from weather_controller.store.base import EventRecorder, StateStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="store/redis_state_store")


class RedisStateStore(StateStore):
    """Locations as JSON strings, status updates guarded by WATCH/MULTI."""

    def __init__(self, client, prefix: str = "weather:") -> None:
        logger.debug("Initializing RedisStateStore")
        self.client = client
        self.prefix = prefix

    def _key(self, kind: str, key: ObjectKey) -> str:
        return f"{self.prefix}{kind}:{key.namespace}:{key.name}"

    def _version_key(self) -> str:
        return f"{self.prefix}version"

    @staticmethod
    def _load_location(raw, key: ObjectKey) -> Location:
        try:
            return Location.model_validate_json(raw)
        except ValidationError as exc:
            raise PersistenceError(f"stored location '{key}' is corrupt: {exc}") from exc

    def get_location(self, key: ObjectKey) -> Location:
        try:
            raw = self.client.get(self._key("location", key))
        except RedisError as exc:
            logger.error("Failed to read location from Redis: %s", exc)
            raise PersistenceError(f"failed to read location '{key}': {exc}") from exc
        if raw is None:
            raise NotFoundError("location", key)
        return self._load_location(raw, key)

    def get_secret(self, key: ObjectKey) -> Secret:
        try:
            raw = self.client.hgetall(self._key("secret", key))
        except RedisError as exc:
            logger.error("Failed to read secret from Redis: %s", exc)
            raise PersistenceError(f"failed to read secret '{key}': {exc}") from exc
        if not raw:
            raise NotFoundError("secret", key)
        data = {
            (k.decode("utf-8") if isinstance(k, bytes) else k): (v if isinstance(v, bytes) else str(v).encode("utf-8"))
            for k, v in raw.items()
        }
        return Secret(metadata=ObjectMeta(namespace=key.namespace, name=key.name), data=data)

    def update_status(self, location: Location) -> Location:
        """Write the status if nobody else wrote the Location since it was read."""
        key = location.key
        redis_key = self._key("location", key)
        try:
            with self.client.pipeline() as pipe:
                pipe.watch(redis_key)
                raw = pipe.get(redis_key)
                if raw is None:
                    raise NotFoundError("location", key)
                stored = self._load_location(raw, key)
                if stored.metadata.resource_version != location.metadata.resource_version:
                    raise ConflictError(
                        f"location '{key}' was modified (have {location.metadata.resource_version}, "
                        f"stored {stored.metadata.resource_version})"
                    )
                stored.status = location.status.model_copy()
                stored.metadata.resource_version = str(pipe.incr(self._version_key()))
                pipe.multi()
                pipe.set(redis_key, stored.model_dump_json(by_alias=True))
                pipe.execute()
                return stored
        except WatchError as exc:
            raise ConflictError(f"location '{key}' changed during status update") from exc
        except RedisError as exc:
            logger.error("Failed to update location status in Redis: %s", exc)
            raise PersistenceError(f"failed to update status for '{key}': {exc}") from exc

    def put_location(self, location: Location) -> Location:
        key = location.key
        redis_key = self._key("location", key)
        try:
            with self.client.pipeline() as pipe:
                pipe.watch(redis_key)
                raw = pipe.get(redis_key)
                fresh = location.model_copy(deep=True)
                if raw is not None:
                    fresh.status = self._load_location(raw, key).status
                fresh.metadata.resource_version = str(pipe.incr(self._version_key()))
                pipe.multi()
                pipe.set(redis_key, fresh.model_dump_json(by_alias=True))
                pipe.execute()
                return fresh
        except WatchError as exc:
            raise ConflictError(f"location '{key}' changed during write") from exc
        except RedisError as exc:
            logger.error("Failed to write location to Redis: %s", exc)
            raise PersistenceError(f"failed to write location '{key}': {exc}") from exc

    def delete_location(self, key: ObjectKey) -> None:
        try:
            self.client.delete(self._key("location", key))
        except RedisError as exc:
            raise PersistenceError(f"failed to delete location '{key}': {exc}") from exc

    def list_locations(self, namespace: Optional[str] = None) -> List[Location]:
        pattern = f"{self.prefix}location:{namespace}:*" if namespace else f"{self.prefix}location:*"
        out: List[Location] = []
        try:
            keys = sorted(self.client.scan_iter(pattern))
            for redis_key in keys:
                raw = self.client.get(redis_key)
                if raw is None:
                    continue
                try:
                    out.append(Location.model_validate_json(raw))
                except ValidationError as exc:
                    logger.warning("Skipping corrupt location %s: %s", redis_key, exc)
        except RedisError as exc:
            raise PersistenceError(f"failed to list locations: {exc}") from exc
        return out

    def put_secret(self, secret: Secret) -> None:
        redis_key = self._key("secret", secret.metadata.key)
        try:
            with self.client.pipeline() as pipe:
                pipe.multi()
                pipe.delete(redis_key)
                if secret.data:
                    pipe.hset(redis_key, mapping=dict(secret.data))
                pipe.execute()
        except RedisError as exc:
            raise PersistenceError(f"failed to write secret '{secret.metadata.key}': {exc}") from exc


class RedisEventRecorder(EventRecorder):
    """Appends events to a capped Redis list per Location; best effort."""

    def __init__(self, client, prefix: str = "weather:", max_events_per_resource: int = 50) -> None:
        self.client = client
        self.prefix = prefix
        self.max_events = max_events_per_resource

    def _key(self, key: ObjectKey) -> str:
        return f"{self.prefix}events:{key.namespace}:{key.name}"

    def record(self, location: Location, event_type: str, reason: str, message: str) -> Event:
        event = Event(
            namespace=location.metadata.namespace,
            name=location.metadata.name,
            type=event_type,
            reason=reason,
            message=message,
        )
        redis_key = self._key(location.key)
        try:
            self.client.rpush(redis_key, event.model_dump_json())
            self.client.ltrim(redis_key, -self.max_events, -1)
        except RedisError as exc:
            logger.error("Failed to record event in Redis: %s", exc)
            raise PersistenceError(f"failed to record event for '{location.key}': {exc}") from exc
        return event

    def events_for(self, key: ObjectKey) -> List[Event]:
        try:
            raw_events = self.client.lrange(self._key(key), 0, -1)
        except RedisError as exc:
            logger.error("Failed to read events from Redis: %s", exc)
            return []
        events: List[Event] = []
        for raw in raw_events:
            try:
                events.append(Event.model_validate(json.loads(raw)))
            except (ValueError, ValidationError) as exc:
                logger.warning("Skipping corrupt event: %s", exc)
        return events

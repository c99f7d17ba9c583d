"""In-memory state store and event recorder, intended for development and tests."""

import threading
from collections import defaultdict, deque
from typing import Deque, Dict, List, Optional

from weather_controller.errors import ConflictError, NotFoundError
from weather_controller.resources import Event, Location, ObjectKey, Secret
from weather_controller.store.base import EventRecorder, StateStore

from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="store/in_memory_state_store")


class InMemoryStateStore(StateStore):
    """Thread-safe store with integer resource versions (dev/test)."""

    def __init__(self) -> None:
        logger.debug("Initializing InMemoryStateStore")
        self._locations: Dict[ObjectKey, Location] = {}
        self._secrets: Dict[ObjectKey, Secret] = {}
        self._version = 0
        self._lock = threading.Lock()

    def _next_version(self) -> str:
        """Bump the store-wide version counter; caller holds the lock."""
        self._version += 1
        return str(self._version)

    def get_location(self, key: ObjectKey) -> Location:
        """Return a deep copy so callers never mutate stored state."""
        with self._lock:
            stored = self._locations.get(key)
            if stored is None:
                raise NotFoundError("location", key)
            return stored.model_copy(deep=True)

    def get_secret(self, key: ObjectKey) -> Secret:
        with self._lock:
            stored = self._secrets.get(key)
            if stored is None:
                raise NotFoundError("secret", key)
            return stored.model_copy(deep=True)

    def update_status(self, location: Location) -> Location:
        """Replace the stored status if the caller's resource version is current."""
        key = location.key
        with self._lock:
            stored = self._locations.get(key)
            if stored is None:
                raise NotFoundError("location", key)
            if stored.metadata.resource_version != location.metadata.resource_version:
                raise ConflictError(
                    f"location '{key}' was modified (have {location.metadata.resource_version}, "
                    f"stored {stored.metadata.resource_version})"
                )
            updated = stored.model_copy(deep=True)
            updated.status = location.status.model_copy()
            updated.metadata.resource_version = self._next_version()
            self._locations[key] = updated
            return updated.model_copy(deep=True)

    def put_location(self, location: Location) -> Location:
        """Create or replace the spec; the stored status survives replacement."""
        key = location.key
        with self._lock:
            stored = self._locations.get(key)
            fresh = location.model_copy(deep=True)
            if stored is not None:
                fresh.status = stored.status.model_copy()
            fresh.metadata.resource_version = self._next_version()
            self._locations[key] = fresh
            return fresh.model_copy(deep=True)

    def delete_location(self, key: ObjectKey) -> None:
        with self._lock:
            self._locations.pop(key, None)

    def list_locations(self, namespace: Optional[str] = None) -> List[Location]:
        with self._lock:
            return [
                loc.model_copy(deep=True)
                for key, loc in sorted(self._locations.items())
                if namespace is None or key.namespace == namespace
            ]

    def put_secret(self, secret: Secret) -> None:
        with self._lock:
            self._secrets[secret.metadata.key] = secret.model_copy(deep=True)

    def clear(self) -> None:
        """Drop all stored objects."""
        with self._lock:
            self._locations.clear()
            self._secrets.clear()


class InMemoryEventRecorder(EventRecorder):
    """Keeps the most recent events per Location in bounded deques."""

    def __init__(self, max_events_per_resource: int = 50) -> None:
        self.max_events = max_events_per_resource
        self._events: Dict[ObjectKey, Deque[Event]] = defaultdict(lambda: deque(maxlen=self.max_events))
        self._lock = threading.Lock()

    def record(self, location: Location, event_type: str, reason: str, message: str) -> Event:
        event = Event(
            namespace=location.metadata.namespace,
            name=location.metadata.name,
            type=event_type,
            reason=reason,
            message=message,
        )
        with self._lock:
            self._events[location.key].append(event)
        return event

    def events_for(self, key: ObjectKey) -> List[Event]:
        with self._lock:
            return list(self._events.get(key, ()))

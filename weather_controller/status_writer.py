"""Persist a freshly computed status as a status-only conditional update."""

from __future__ import annotations

from weather_controller.resources import Location, LocationStatus
from weather_controller.store.base import StateStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="status_writer")


class StatusWriter:
    """Writes `Location.status` using the resource version the store attached on read."""

    def __init__(self, store: StateStore) -> None:
        self.store = store

    def write(self, location: Location, status: LocationStatus) -> Location:
        """Assign `status` to `location` and persist it.

        The in-memory `location` keeps the new status even when the write
        fails. ConflictError, NotFoundError and PersistenceError from the
        store propagate unchanged. On success the new resource version is
        copied back onto `location`.
        """
        location.status = status
        stored = self.store.update_status(location)
        location.metadata.resource_version = stored.metadata.resource_version
        logger.debug(
            f"Persisted status for {location.key} at version {stored.metadata.resource_version}"
        )
        return location

"""Shared protocols for state-store backends and event recorders."""

from typing import List, Optional, Protocol

from weather_controller.resources import Event, Location, ObjectKey, Secret

NORMAL = "Normal"
WARNING = "Warning"


class StateStore(Protocol):
    """Declarative-state store holding Locations and Secrets."""

    def get_location(self, key: ObjectKey) -> Location:
        """Return a copy of the Location; raise NotFoundError if absent."""

    def get_secret(self, key: ObjectKey) -> Secret:
        """Return the Secret; raise NotFoundError if absent."""

    def update_status(self, location: Location) -> Location:
        """Persist only `location.status`.

        Raises ConflictError when `location.metadata.resource_version` is
        stale, NotFoundError when the Location is gone, and PersistenceError
        when the store itself fails. Returns the stored object with its new
        resource version.
        """

    def put_location(self, location: Location) -> Location:
        """Create or replace a Location's spec, preserving any stored status."""

    def delete_location(self, key: ObjectKey) -> None:
        """Delete a Location without raising if it is absent."""

    def list_locations(self, namespace: Optional[str] = None) -> List[Location]:
        """List Locations, optionally restricted to one namespace."""

    def put_secret(self, secret: Secret) -> None:
        """Create or replace a Secret."""


class EventRecorder(Protocol):
    """Sink for user-visible events attached to a Location."""

    def record(self, location: Location, event_type: str, reason: str, message: str) -> Event:
        """Record an event and return it."""

    def events_for(self, key: ObjectKey) -> List[Event]:
        """Return recorded events for a Location, oldest first."""

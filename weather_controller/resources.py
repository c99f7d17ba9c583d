"""Resource schemas exchanged with the state store.

`Location` mirrors the declarative resource: an immutable spec owned by the
user and a status sub-object owned by the controller. `Secret` and `Event`
are the two collaborating object kinds the reconciler reads and writes.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, NamedTuple

from pydantic import BaseModel, ConfigDict, Field


class _ResourceModel(BaseModel):
    """Base model accepting both field names and JSON aliases."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ObjectKey(NamedTuple):
    """Namespace-scoped object identity."""
    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


class ObjectMeta(_ResourceModel):
    namespace: str = "default"
    name: str
    resource_version: str = Field(default="", alias="resourceVersion")

    @property
    def key(self) -> ObjectKey:
        return ObjectKey(self.namespace, self.name)


class SecretRef(_ResourceModel):
    """Reference to the secret holding the provider API token."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    name: str
    key: str = ""


class LocationSpec(_ResourceModel):
    """Desired state: where to observe and how often."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    lat: str
    lon: str
    secret_ref: SecretRef = Field(alias="secretRef")
    refresh_period: str = Field(default="", alias="refreshPeriod")


class LocationStatus(_ResourceModel):
    """Observed state written by the controller after each successful fetch."""
    refresh_time: str = ""
    country_code: str = ""
    location_name: str = ""
    temp: str = ""
    pressure: int = 0
    humidity: int = 0
    wind_speed: str = ""
    wind_gust: str = ""


class Location(_ResourceModel):
    metadata: ObjectMeta
    spec: LocationSpec
    status: LocationStatus = Field(default_factory=LocationStatus)

    @property
    def key(self) -> ObjectKey:
        return self.metadata.key


class Secret(_ResourceModel):
    metadata: ObjectMeta
    data: Dict[str, bytes] = Field(default_factory=dict)


class Event(_ResourceModel):
    """User-visible event attached to a Location."""
    namespace: str
    name: str
    type: str
    reason: str
    message: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

"""HTTP surface for inspecting Locations and triggering reconciles."""

from typing import List, Optional

from fastapi import APIRouter, HTTPException, Response, status
from pydantic import BaseModel

from weather_controller.config import settings
from weather_controller.context import ReconcileContext
from weather_controller.durations import format_duration
from weather_controller.errors import (
    ConflictError,
    InvalidRefreshPeriodError,
    MalformedResponseError,
    NotFoundError,
    PersistenceError,
    ProviderStatusError,
    ReconcileCancelled,
    ReconcileError,
    SecretKeyMissingError,
    SecretMissingError,
    TransportError,
)
from weather_controller.reconciler import LocationReconciler
from weather_controller.resources import Event, Location, LocationSpec, LocationStatus, ObjectKey, ObjectMeta
from weather_controller.store import build_state_backend
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="api")

router = APIRouter()
STORE, RECORDER = build_state_backend(settings)
RECONCILER = LocationReconciler(STORE, RECORDER, settings=settings)

# Most specific classes first; the first isinstance match wins.
_ERROR_STATUS = (
    (ConflictError, status.HTTP_409_CONFLICT),
    (PersistenceError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (ReconcileCancelled, status.HTTP_503_SERVICE_UNAVAILABLE),
    (InvalidRefreshPeriodError, 422),
    (SecretMissingError, 422),
    (SecretKeyMissingError, 422),
    (TransportError, status.HTTP_502_BAD_GATEWAY),
    (ProviderStatusError, status.HTTP_502_BAD_GATEWAY),
    (MalformedResponseError, status.HTTP_502_BAD_GATEWAY),
)


class LocationSummary(BaseModel):
    """One row of the Location listing (lat, lon, location, temp, refreshed)."""
    namespace: str
    name: str
    lat: str
    lon: str
    location: str
    temp: str
    refreshed: str


class ReconcileResponse(BaseModel):
    """Outcome of a triggered reconcile."""
    found: bool
    requeue_after_seconds: float
    requeue_after: str
    changes: List[str]
    status: Optional[LocationStatus] = None


def _http_status_for(exc: ReconcileError) -> int:
    for error_type, code in _ERROR_STATUS:
        if isinstance(exc, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _summary(location: Location) -> LocationSummary:
    return LocationSummary(
        namespace=location.metadata.namespace,
        name=location.metadata.name,
        lat=location.spec.lat,
        lon=location.spec.lon,
        location=location.status.location_name,
        temp=location.status.temp,
        refreshed=location.status.refresh_time,
    )


def _store_call(fn, *args):
    """Run a store operation, mapping store failures onto HTTP errors."""
    try:
        return fn(*args)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    except ReconcileError as exc:
        raise HTTPException(status_code=_http_status_for(exc), detail={"reason": exc.reason, "message": str(exc)})


@router.get("/locations", response_model=List[LocationSummary])
def list_locations(namespace: Optional[str] = None):
    """List Locations with their latest observed temperature."""
    return [_summary(loc) for loc in _store_call(STORE.list_locations, namespace)]


@router.get("/namespaces/{namespace}/locations/{name}", response_model=Location)
def get_location(namespace: str, name: str):
    return _store_call(STORE.get_location, ObjectKey(namespace, name))


@router.put("/namespaces/{namespace}/locations/{name}", response_model=Location)
def put_location(namespace: str, name: str, spec: LocationSpec):
    """Create or replace a Location's spec; any observed status is kept."""
    location = Location(metadata=ObjectMeta(namespace=namespace, name=name), spec=spec)
    logger.info(f"Storing location spec for {namespace}/{name}")
    return _store_call(STORE.put_location, location)


@router.delete("/namespaces/{namespace}/locations/{name}", status_code=status.HTTP_204_NO_CONTENT)
def delete_location(namespace: str, name: str):
    _store_call(STORE.delete_location, ObjectKey(namespace, name))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/namespaces/{namespace}/locations/{name}/events", response_model=List[Event])
def list_events(namespace: str, name: str):
    return RECORDER.events_for(ObjectKey(namespace, name))


@router.post("/namespaces/{namespace}/locations/{name}/reconcile", response_model=ReconcileResponse)
def reconcile_location(namespace: str, name: str):
    """Run one reconcile pass and report the requested requeue delay."""
    key = ObjectKey(namespace, name)
    ctx = ReconcileContext(timeout=settings.request_timeout_seconds * 3)
    try:
        result = RECONCILER.reconcile(key, ctx)
    except ReconcileError as exc:
        raise HTTPException(
            status_code=_http_status_for(exc),
            detail={"reason": exc.reason, "message": str(exc)},
        )
    return ReconcileResponse(
        found=result.found,
        requeue_after_seconds=result.requeue_after.total_seconds(),
        requeue_after=format_duration(result.requeue_after),
        changes=list(result.changes),
        status=result.status,
    )

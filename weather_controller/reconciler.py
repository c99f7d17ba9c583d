"""Reconcile one Location against live provider data.

A pass runs these stages in order on the calling thread:

    load -> refresh period -> secret -> fetch -> parse -> delta -> persist -> notify -> schedule

A vanished Location ends the pass quietly. Every other failure is logged
with the resource key and stage, recorded as a Warning event on the
Location, and raised to the caller as a ReconcileError subclass. The
previous status is only replaced once fetch and parse have both succeeded.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Optional

from weather_controller.config import Settings
from weather_controller.context import ReconcileContext
from weather_controller.delta import ChangeSet, compute_delta
from weather_controller.durations import format_duration, parse_duration
from weather_controller.errors import (
    InvalidRefreshPeriodError,
    NotFoundError,
    ReconcileCancelled,
    ReconcileError,
    SecretKeyMissingError,
    SecretMissingError,
)
from weather_controller.notifier import ChangeNotifier
from weather_controller.provider.openweathermap_client import OpenWeatherMapClient
from weather_controller.provider.parser import parse_observation
from weather_controller.resources import Location, LocationStatus, ObjectKey
from weather_controller.status_writer import StatusWriter
from weather_controller.store.base import WARNING, EventRecorder, StateStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="reconciler")


@dataclass
class ReconcileResult:
    """Outcome of a successful (or quietly skipped) reconcile."""
    requeue_after: timedelta = timedelta(0)
    found: bool = True
    changes: ChangeSet = field(default_factory=ChangeSet)
    status: Optional[LocationStatus] = None

    @property
    def requeue(self) -> bool:
        return self.requeue_after > timedelta(0)


class LocationReconciler:
    """Keeps a Location's status in sync with the weather provider."""

    def __init__(
        self,
        store: StateStore,
        recorder: EventRecorder,
        client: Optional[OpenWeatherMapClient] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.settings = settings or Settings()
        self.store = store
        self.recorder = recorder
        self.client = client or OpenWeatherMapClient.from_settings(self.settings)
        self.status_writer = StatusWriter(store)
        self.notifier = ChangeNotifier(recorder)
        self.default_refresh_period = parse_duration(self.settings.default_refresh_period)

    def reconcile(self, key: ObjectKey, ctx: Optional[ReconcileContext] = None) -> ReconcileResult:
        """Run one reconcile pass for `key`.

        Returns a ReconcileResult whose `requeue_after` is the next-run delay
        (zero when the Location no longer exists). Raises a ReconcileError
        subclass on failure; ReconcileCancelled when `ctx` is cancelled.
        """
        ctx = ctx or ReconcileContext.background()
        log = logger.bind(resource=str(key))
        log.info("Reconciling weather")

        ctx.check("load")
        try:
            location = self.store.get_location(key)
        except NotFoundError:
            # deleted between the trigger and this read
            log.info("Location not found, probably deleted")
            return ReconcileResult(found=False)
        except ReconcileError as exc:
            log.error(f"Failed to get location: {exc}", extra={"stage": "load"})
            raise
        log.info(f"Got location spec for lat: {location.spec.lat}, lon: {location.spec.lon}")

        stage = "refresh_period"
        try:
            next_run = self._refresh_period(location)

            stage = "secret"
            ctx.check(stage)
            token = self._resolve_token(location)

            stage = "fetch"
            ctx.check(stage)
            timeout = ctx.remaining(self.client.timeout)
            if timeout is not None and timeout <= 0:
                raise ReconcileCancelled(f"reconcile deadline exceeded before {stage}")
            raw = self.client.fetch_current(location.spec.lat, location.spec.lon, token, timeout=timeout)

            stage = "parse"
            ctx.check(stage)
            observation = parse_observation(raw)
            log.info(f"Got weather response for: {observation.location_name}, {observation.country_code}")

            changes, status = compute_delta(location.status, observation)

            stage = "persist"
            ctx.check(stage)
            self.status_writer.write(location, status)
        except NotFoundError:
            log.info("Location deleted before its status could be written")
            return ReconcileResult(found=False)
        except ReconcileCancelled as exc:
            log.warning(f"Reconcile abandoned: {exc}", extra={"stage": stage})
            raise
        except ReconcileError as exc:
            log.error(f"Reconcile failed: {exc}", extra={"stage": stage})
            self._record_failure(location, exc.reason, str(exc))
            raise
        except Exception as exc:
            log.exception(f"Unexpected error during reconcile: {exc}", extra={"stage": stage})
            self._record_failure(location, ReconcileError.reason, f"{stage}: {exc}")
            raise ReconcileError(f"unexpected error during {stage}: {exc}") from exc

        self._notify(location, changes, log)
        log.info(
            f"Reconcile finished, currentTemp: {status.temp or '-'}, nextRun: {format_duration(next_run)}"
        )
        return ReconcileResult(requeue_after=next_run, changes=changes, status=status)

    def _refresh_period(self, location: Location) -> timedelta:
        """Return the declared refresh period, or the default when unset."""
        declared = (location.spec.refresh_period or "").strip()
        if not declared:
            return self.default_refresh_period
        try:
            period = parse_duration(declared)
        except ValueError as exc:
            raise InvalidRefreshPeriodError(declared, str(exc)) from exc
        if period <= timedelta(0):
            raise InvalidRefreshPeriodError(declared, "must be a positive duration")
        return period

    def _resolve_token(self, location: Location) -> str:
        ref = location.spec.secret_ref
        secret_key = ObjectKey(location.metadata.namespace, ref.name)
        try:
            secret = self.store.get_secret(secret_key)
        except NotFoundError as exc:
            raise SecretMissingError(secret_key) from exc
        data_key = ref.key or self.settings.default_secret_key
        value = secret.data.get(data_key)
        if value is None:
            raise SecretKeyMissingError(secret_key, data_key)
        return value.decode("utf-8").strip()

    def _notify(self, location: Location, changes: ChangeSet, log) -> None:
        # status is already persisted
        try:
            self.notifier.notify(location, changes)
        except Exception as exc:
            log.warning(f"Failed to record change event: {exc}")

    def _record_failure(self, location: Location, reason: str, message: str) -> None:
        # best effort; the caller re-raises the original failure
        try:
            self.recorder.record(location, WARNING, reason, message)
        except Exception as exc:
            logger.warning(f"Failed to record failure event: {exc}", extra={"resource": str(location.key)})

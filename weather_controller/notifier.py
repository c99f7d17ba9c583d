"""Aggregate change notifications for a reconciled Location."""

from __future__ import annotations

from weather_controller.delta import ChangeSet
from weather_controller.resources import Location
from weather_controller.store.base import NORMAL, EventRecorder
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="change_notifier")

UPDATED_REASON = "Updated"


def change_message(changes: ChangeSet) -> str:
    return f"Weather changed. [{', '.join(changes)}]"


class ChangeNotifier:
    """Emit one informational event per reconcile that changed something."""

    def __init__(self, recorder: EventRecorder) -> None:
        self.recorder = recorder

    def notify(self, location: Location, changes: ChangeSet) -> bool:
        """Record the change event; returns False (and records nothing) for an empty ChangeSet.

        Call only after the status has been persisted.
        """
        if not changes:
            return False
        message = change_message(changes)
        self.recorder.record(location, NORMAL, UPDATED_REASON, message)
        logger.info(message, extra={"resource": str(location.key)})
        return True

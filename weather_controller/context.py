"""Cancellation and deadline handling for a single reconcile invocation."""

from __future__ import annotations

import threading
import time
from typing import Optional

from weather_controller.errors import ReconcileCancelled


class ReconcileContext:
    """Per-invocation cancellation flag with an optional deadline.

    The hosting runtime keeps a reference and calls `cancel()` on shutdown;
    the reconciler calls `check()` around every blocking call and bounds
    network timeouts with `remaining()`.
    """

    def __init__(self, *, timeout: Optional[float] = None, cancel_event: Optional[threading.Event] = None) -> None:
        self._event = cancel_event or threading.Event()
        self._deadline = time.monotonic() + timeout if timeout is not None else None

    @classmethod
    def background(cls) -> "ReconcileContext":
        """Context that is never cancelled and has no deadline."""
        return cls()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    def remaining(self, cap: Optional[float] = None) -> Optional[float]:
        """Seconds left before the deadline, never more than `cap`."""
        if self._deadline is None:
            return cap
        left = max(0.0, self._deadline - time.monotonic())
        return left if cap is None else min(cap, left)

    def check(self, stage: str) -> None:
        """Raise ReconcileCancelled if the context is done."""
        if self.cancelled:
            raise ReconcileCancelled(f"reconcile cancelled before {stage}")
        if self.expired:
            raise ReconcileCancelled(f"reconcile deadline exceeded before {stage}")

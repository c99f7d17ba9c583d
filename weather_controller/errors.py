"""Error taxonomy for a single reconcile pass.

Each error carries the event `reason` recorded on the Location when it
surfaces, and whether the runtime should retry immediately rather than back
off.
"""

from __future__ import annotations


class ReconcileError(Exception):
    """Base class for failures that end a reconcile."""

    reason = "ReconcileError"
    retry_immediately = False


class NotFoundError(ReconcileError):
    """The requested object does not exist in the state store."""

    reason = "NotFound"

    def __init__(self, kind: str, key) -> None:
        super().__init__(f"{kind} '{key}' not found")
        self.kind = kind
        self.key = key


class SecretMissingError(ReconcileError):
    """The secret referenced by the Location does not exist."""

    reason = "SecretError"

    def __init__(self, key) -> None:
        super().__init__(f"secret '{key}' not found")
        self.key = key


class SecretKeyMissingError(ReconcileError):
    """The secret exists but has no value under the declared key."""

    reason = "SecretError"

    def __init__(self, key, data_key: str) -> None:
        super().__init__(f"secret '{key}' does not have a '{data_key}' attribute")
        self.key = key
        self.data_key = data_key


class InvalidRefreshPeriodError(ReconcileError):
    """The Location declares a refresh period that is not a positive duration."""

    reason = "InvalidRefreshPeriod"

    def __init__(self, value: str, detail: str) -> None:
        super().__init__(f"invalid refreshPeriod {value!r}: {detail}")
        self.value = value


class TransportError(ReconcileError):
    """The weather provider could not be reached (DNS, connect, timeout)."""

    reason = "WeatherAPI"


class ProviderStatusError(ReconcileError):
    """The weather provider answered with a non-200 status."""

    reason = "WeatherAPI"

    def __init__(self, code: int, body_excerpt: str = "") -> None:
        message = f"weather provider returned HTTP {code}"
        if body_excerpt:
            message = f"{message}: {body_excerpt}"
        super().__init__(message)
        self.code = code
        self.body_excerpt = body_excerpt


class MalformedResponseError(ReconcileError):
    """The provider body is missing a required field or has the wrong type."""

    reason = "WeatherResponse"

    def __init__(self, field: str, detail: str = "") -> None:
        message = f"malformed weather response at '{field}'"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.field = field


class ConflictError(ReconcileError):
    """Another writer updated the Location after it was read."""

    reason = "StatusUpdate"
    retry_immediately = True


class PersistenceError(ReconcileError):
    """The state store failed or is unavailable."""

    reason = "StateStore"


class ReconcileCancelled(ReconcileError):
    """The reconcile context was cancelled or ran past its deadline."""

    reason = "Cancelled"

"""State-store backends and event recorders."""

from .base import NORMAL, WARNING, EventRecorder, StateStore
from .factory import build_state_backend
from .memory import InMemoryEventRecorder, InMemoryStateStore
from .redis import RedisEventRecorder, RedisStateStore

__all__ = [
    "NORMAL",
    "WARNING",
    "EventRecorder",
    "StateStore",
    "build_state_backend",
    "InMemoryEventRecorder",
    "InMemoryStateStore",
    "RedisEventRecorder",
    "RedisStateStore",
]

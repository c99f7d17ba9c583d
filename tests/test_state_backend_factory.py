import types
import unittest

import weather_controller.store.factory as factory
from weather_controller.store.factory import DEFAULT_BACKEND_NAME, build_state_backend
from weather_controller.store.memory import InMemoryEventRecorder, InMemoryStateStore
from weather_controller.store.redis import RedisEventRecorder, RedisStateStore


class DummySettings:
    def __init__(self, **kwargs):
        self.state_store = DEFAULT_BACKEND_NAME
        self.redis_url = None
        self.redis_prefix = "weather:"
        self.max_events_per_resource = 50
        for k, v in kwargs.items():
            setattr(self, k, v)


class TestStateBackendFactory(unittest.TestCase):
    def test_build_memory_default(self):
        store, recorder = build_state_backend(DummySettings())
        self.assertIsInstance(store, InMemoryStateStore)
        self.assertIsInstance(recorder, InMemoryEventRecorder)

    def test_backend_name_is_case_insensitive(self):
        store, _ = build_state_backend(DummySettings(state_store="Memory"))
        self.assertIsInstance(store, InMemoryStateStore)

    def test_unknown_backend_raises(self):
        with self.assertRaises(ValueError):
            build_state_backend(DummySettings(state_store="etcd"))

    def test_redis_missing_url_raises(self):
        with self.assertRaises(ValueError):
            build_state_backend(DummySettings(state_store="redis"))

    def test_redis_branch_uses_from_url(self):
        sentinel = object()
        seen = []
        orig_redis = factory.redis.Redis

        def from_url(url):
            seen.append(url)
            return sentinel

        try:
            factory.redis.Redis = types.SimpleNamespace(from_url=from_url)
            store, recorder = build_state_backend(
                DummySettings(state_store="redis", redis_url="redis://:pw@localhost:6379/0", redis_prefix="wx:")
            )
        finally:
            factory.redis.Redis = orig_redis

        self.assertEqual(seen, ["redis://:pw@localhost:6379/0"])
        self.assertIsInstance(store, RedisStateStore)
        self.assertIsInstance(recorder, RedisEventRecorder)
        self.assertIs(store.client, sentinel)
        self.assertIs(recorder.client, sentinel)
        self.assertEqual(store.prefix, "wx:")


if __name__ == "__main__":
    unittest.main()

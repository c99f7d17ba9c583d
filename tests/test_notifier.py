import unittest

from weather_controller.delta import ChangeSet
from weather_controller.notifier import ChangeNotifier, change_message
from weather_controller.resources import Location, LocationSpec, ObjectMeta, SecretRef
from weather_controller.store.memory import InMemoryEventRecorder


def _location() -> Location:
    return Location(
        metadata=ObjectMeta(namespace="default", name="chicago"),
        spec=LocationSpec(lat="41.85", lon="-87.65", secret_ref=SecretRef(name="owm")),
    )


class TestChangeNotifier(unittest.TestCase):
    def test_emits_single_aggregated_event(self):
        recorder = InMemoryEventRecorder()
        notifier = ChangeNotifier(recorder)

        emitted = notifier.notify(_location(), ChangeSet(["Temp+", "Humidity-"]))

        self.assertTrue(emitted)
        events = recorder.events_for(_location().key)
        self.assertEqual(len(events), 1)
        self.assertEqual(events[0].type, "Normal")
        self.assertEqual(events[0].reason, "Updated")
        self.assertEqual(events[0].message, "Weather changed. [Temp+, Humidity-]")

    def test_empty_change_set_emits_nothing(self):
        recorder = InMemoryEventRecorder()
        emitted = ChangeNotifier(recorder).notify(_location(), ChangeSet())
        self.assertFalse(emitted)
        self.assertEqual(recorder.events_for(_location().key), [])

    def test_change_message_single_tag(self):
        self.assertEqual(change_message(ChangeSet(["Temp"])), "Weather changed. [Temp]")


if __name__ == "__main__":
    unittest.main()

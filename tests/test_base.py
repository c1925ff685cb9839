from datetime import datetime, timezone

import pytest

from durablewf.backend.base import Backend
from durablewf.core import new_workflow_instance
from durablewf.history import new_workflow_cancellation_event

METHODS = {
    "create_workflow_instance",
    "cancel_workflow_instance",
    "signal_workflow",
    "get_workflow_task",
    "extend_workflow_task",
    "complete_workflow_task",
    "get_activity_task",
    "complete_activity_task",
    "extend_activity_task",
}


class _RecordingBackend(Backend):
    def __init__(self):
        self.calls = []

    def create_workflow_instance(self, event):
        self.calls.append(("create_workflow_instance", (event,)))

    def cancel_workflow_instance(self, instance):
        self.calls.append(("cancel_workflow_instance", (instance,)))

    def signal_workflow(self, instance_id, event):
        self.calls.append(("signal_workflow", (instance_id, event)))

    def get_workflow_task(self):
        self.calls.append(("get_workflow_task", ()))
        return None

    def extend_workflow_task(self, instance):
        self.calls.append(("extend_workflow_task", (instance,)))

    def complete_workflow_task(self, instance, executed_events, workflow_events):
        self.calls.append(
            ("complete_workflow_task", (instance, executed_events, workflow_events))
        )

    def get_activity_task(self):
        self.calls.append(("get_activity_task", ()))
        return None

    def complete_activity_task(self, instance, activity_id, event):
        self.calls.append(("complete_activity_task", (instance, activity_id, event)))

    def extend_activity_task(self, activity_id):
        self.calls.append(("extend_activity_task", (activity_id,)))


def test_backend_cannot_be_instantiated_and_names_every_operation():
    assert set(Backend.__abstractmethods__) == METHODS
    with pytest.raises(TypeError) as info:
        Backend()
    message = str(info.value)
    for name in METHODS:
        assert name in message


def test_complete_backend_receives_events():
    backend = _RecordingBackend()
    event = new_workflow_cancellation_event(datetime.now(timezone.utc))
    instance = new_workflow_instance("instance-1", "execution-1")

    backend.signal_workflow("instance-1", event)
    backend.cancel_workflow_instance(instance)

    assert backend.calls == [
        ("signal_workflow", ("instance-1", event)),
        ("cancel_workflow_instance", (instance,)),
    ]
    assert _RecordingBackend.__abstractmethods__ == frozenset()
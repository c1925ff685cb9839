from datetime import datetime, timezone

from durablewf.core import new_workflow_instance
from durablewf.history import EventType, new_history_event
from durablewf.task import ActivityTask, TaskKind, WorkflowTask


def test_workflow_task_defaults():
    wfi = new_workflow_instance("i", "e")
    task = WorkflowTask(wfi)
    assert task.kind == TaskKind.DEFAULT
    assert task.history == []
    assert task.new_events == []


def test_workflow_task_lists_are_independent():
    wfi = new_workflow_instance("i", "e")
    a = WorkflowTask(wfi)
    b = WorkflowTask(wfi)
    a.new_events.append(new_history_event(datetime.now(timezone.utc), EventType.TIMER_FIRED, None))
    assert len(a.new_events) == 1
    assert b.new_events == []


def test_continuation_differs_from_default():
    task = WorkflowTask(new_workflow_instance("i", "e"), kind=TaskKind.CONTINUATION)
    assert task.kind != TaskKind.DEFAULT
    assert task.kind == TaskKind.CONTINUATION


def test_activity_task_fields():
    wfi = new_workflow_instance("i", "e")
    event = new_history_event(datetime.now(timezone.utc), EventType.ACTIVITY_SCHEDULED, None)
    task = ActivityTask(event.id, wfi, event)
    assert task.id == event.id
    assert task.workflow_instance == wfi
    assert task.event is event
"""History events and their serialization."""

from __future__ import annotations

import base64
import dataclasses
import json
import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum
from typing import Any, Optional

from durablewf import attributes as attrs
from durablewf.attributes import attributes_to_dict
from durablewf.core import WorkflowInstance


class EventType(IntEnum):
    WORKFLOW_EXECUTION_STARTED = 1
    WORKFLOW_EXECUTION_FINISHED = 2
    WORKFLOW_EXECUTION_TERMINATED = 3
    WORKFLOW_EXECUTION_CANCELED = 4
    WORKFLOW_TASK_STARTED = 5
    WORKFLOW_TASK_FINISHED = 6
    SUB_WORKFLOW_SCHEDULED = 7
    SUB_WORKFLOW_COMPLETED = 8
    SUB_WORKFLOW_FAILED = 9
    ACTIVITY_SCHEDULED = 10
    ACTIVITY_COMPLETED = 11
    ACTIVITY_FAILED = 12
    TIMER_SCHEDULED = 13
    TIMER_FIRED = 14
    SIGNAL_RECEIVED = 15
    SIDE_EFFECT_RESULT = 16

    def __str__(self) -> str:
        return "".join(part.capitalize() for part in self.name.split("_"))


@dataclass
class Event:
    """A single entry in a workflow instance's history."""

    id: str
    type: EventType
    timestamp: datetime
    # Correlates events that belong together, e.g. an activity's schedule and completion.
    schedule_event_id: int = 0
    attributes: Any = None
    visible_at: Optional[datetime] = None

    def __str__(self) -> str:
        return str(int(self.type))


@dataclass
class WorkflowEvent:
    """An event addressed to a specific workflow instance."""

    workflow_instance: WorkflowInstance
    history_event: Event


def new_history_event(
    timestamp: datetime,
    event_type: EventType,
    attributes: Any,
    *,
    schedule_event_id: int = 0,
    visible_at: Optional[datetime] = None,
) -> Event:
    return Event(
        id=str(uuid.uuid4()),
        type=event_type,
        timestamp=timestamp,
        schedule_event_id=schedule_event_id,
        attributes=attributes,
        visible_at=visible_at,
    )


def new_workflow_cancellation_event(timestamp: datetime) -> Event:
    return new_history_event(
        timestamp, EventType.WORKFLOW_EXECUTION_CANCELED, attrs.ExecutionCanceledAttributes()
    )


_ATTRIBUTE_TYPES: dict[EventType, type] = {
    EventType.WORKFLOW_EXECUTION_STARTED: attrs.ExecutionStartedAttributes,
    EventType.WORKFLOW_EXECUTION_FINISHED: attrs.ExecutionCompletedAttributes,
    EventType.WORKFLOW_EXECUTION_CANCELED: attrs.ExecutionCanceledAttributes,
    EventType.WORKFLOW_TASK_STARTED: attrs.WorkflowTaskStartedAttributes,
    EventType.WORKFLOW_TASK_FINISHED: attrs.WorkflowTaskFinishedAttributes,
    EventType.ACTIVITY_SCHEDULED: attrs.ActivityScheduledAttributes,
    EventType.ACTIVITY_COMPLETED: attrs.ActivityCompletedAttributes,
    EventType.ACTIVITY_FAILED: attrs.ActivityFailedAttributes,
    EventType.SIGNAL_RECEIVED: attrs.SignalReceivedAttributes,
    EventType.SIDE_EFFECT_RESULT: attrs.SideEffectResultAttributes,
    EventType.TIMER_SCHEDULED: attrs.TimerScheduledAttributes,
    EventType.TIMER_FIRED: attrs.TimerFiredAttributes,
    EventType.SUB_WORKFLOW_SCHEDULED: attrs.SubWorkflowScheduledAttributes,
    EventType.SUB_WORKFLOW_COMPLETED: attrs.SubWorkflowCompletedAttributes,
    EventType.SUB_WORKFLOW_FAILED: attrs.SubWorkflowFailedAttributes,
}


def serialize_attributes(attributes: Any) -> bytes:
    if attributes is None:
        return b"null"
    return json.dumps(attributes_to_dict(attributes)).encode("utf-8")


def _decode(encoding: Optional[str], raw: Any) -> Any:
    if encoding == "base64":
        return base64.b64decode(raw)
    if encoding == "base64-list":
        return [base64.b64decode(item) for item in raw]
    if encoding == "iso8601":
        return datetime.fromisoformat(raw)
    return raw


def deserialize_attributes(event_type: EventType, data: bytes) -> Any:
    """Rebuild the attributes object for an event of the given type."""
    try:
        cls = _ATTRIBUTE_TYPES[EventType(event_type)]
    except (KeyError, ValueError):
        raise ValueError("unknown event type when deserializing attributes") from None

    raw = json.loads(data)
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise TypeError(f"attributes for {EventType(event_type)} must be an object")

    kwargs = {
        f.name: _decode(f.metadata.get("encoding"), raw[f.name])
        for f in dataclasses.fields(cls)
        if raw.get(f.name) is not None
    }
    return cls(**kwargs)
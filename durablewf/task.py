"""Units of work handed out by a backend."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

from durablewf.core import WorkflowInstance
from durablewf.history import Event


class TaskKind(IntEnum):
    DEFAULT = 0
    # Only new events and the most recent history event are included.
    CONTINUATION = 1


@dataclass
class ActivityTask:
    id: str
    workflow_instance: WorkflowInstance
    event: Event


@dataclass
class WorkflowTask:
    workflow_instance: WorkflowInstance
    kind: TaskKind = TaskKind.DEFAULT
    history: list[Event] = field(default_factory=list)
    new_events: list[Event] = field(default_factory=list)
"""The storage interface that workflow clients and workers talk to."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, Optional

from durablewf.core import WorkflowInstance
from durablewf.history import Event, WorkflowEvent
from durablewf.task import ActivityTask, WorkflowTask


class Backend(ABC):
    """Persists workflow instances, their events and pending work."""

    @abstractmethod
    def create_workflow_instance(self, event: WorkflowEvent) -> None:
        """Create a new workflow instance from its start event."""

    @abstractmethod
    def cancel_workflow_instance(self, instance: WorkflowInstance) -> None:
        """Cancel a running workflow instance and its sub-workflows."""

    @abstractmethod
    def signal_workflow(self, instance_id: str, event: Event) -> None:
        """Deliver a signal event to a running workflow instance."""

    @abstractmethod
    def get_workflow_task(self) -> Optional[WorkflowTask]:
        """Lock and return a pending workflow task, or None if there is none."""

    @abstractmethod
    def extend_workflow_task(self, instance: WorkflowInstance) -> None:
        """Extend the lock held on a workflow task."""

    @abstractmethod
    def complete_workflow_task(
        self,
        instance: WorkflowInstance,
        executed_events: Iterable[Event],
        workflow_events: Iterable[WorkflowEvent],
    ) -> None:
        """Checkpoint a workflow task returned by ``get_workflow_task``.

        ``executed_events`` are added to the instance's history;
        ``workflow_events`` are new events for this or other instances.
        """

    @abstractmethod
    def get_activity_task(self) -> Optional[ActivityTask]:
        """Lock and return a pending activity task, or None if there is none."""

    @abstractmethod
    def complete_activity_task(
        self, instance: WorkflowInstance, activity_id: str, event: Event
    ) -> None:
        """Complete an activity task returned by ``get_activity_task``."""

    @abstractmethod
    def extend_activity_task(self, activity_id: str) -> None:
        """Extend the lock held on an activity task."""
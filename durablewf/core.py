"""Workflow instance identity."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class WorkflowInstance:
    """Identifies one execution of a workflow, possibly as a sub-workflow."""

    instance_id: str
    execution_id: str
    parent_instance: Optional["WorkflowInstance"] = None
    parent_event_id: int = 0

    def sub_workflow(self) -> bool:
        """Whether this instance was started by a parent workflow."""
        return self.parent_instance is not None


def new_workflow_instance(instance_id: str, execution_id: str) -> WorkflowInstance:
    return WorkflowInstance(instance_id, execution_id)


def new_sub_workflow_instance(
    instance_id: str,
    execution_id: str,
    parent_instance: WorkflowInstance,
    parent_event_id: int,
) -> WorkflowInstance:
    return WorkflowInstance(instance_id, execution_id, parent_instance, parent_event_id)
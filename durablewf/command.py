"""Commands produced by workflow executions."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import Any, Optional


class CommandType(IntEnum):
    SCHEDULE_ACTIVITY_TASK = 1
    SCHEDULE_SUB_WORKFLOW = 2
    SCHEDULE_TIMER = 3
    CANCEL_TIMER = 4
    SIDE_EFFECT = 5
    COMPLETE_WORKFLOW = 6


class CommandState(IntEnum):
    PENDING = 0
    COMMITTED = 1
    DONE = 2


@dataclass
class Command:
    id: int
    type: CommandType
    attr: Any
    state: CommandState = CommandState.PENDING


@dataclass
class ScheduleActivityTaskCommandAttr:
    name: str
    inputs: list[bytes] = field(default_factory=list)


@dataclass
class ScheduleSubWorkflowCommandAttr:
    instance_id: str
    name: str
    inputs: list[bytes] = field(default_factory=list)


@dataclass
class ScheduleTimerCommandAttr:
    at: datetime


@dataclass
class CancelTimerCommandAttr:
    timer_id: int


@dataclass
class SideEffectCommandAttr:
    result: Optional[bytes]


@dataclass
class CompleteWorkflowCommandAttr:
    result: Optional[bytes]
    error: str = ""


def schedule_activity_task_command(command_id: int, name: str, inputs: list[bytes]) -> Command:
    return Command(
        command_id,
        CommandType.SCHEDULE_ACTIVITY_TASK,
        ScheduleActivityTaskCommandAttr(name, list(inputs)),
    )


def schedule_sub_workflow_command(
    command_id: int, instance_id: str, name: str, inputs: list[bytes]
) -> Command:
    """Schedule a sub-workflow; an empty instance id gets a fresh one."""
    if not instance_id:
        instance_id = str(uuid.uuid4())
    return Command(
        command_id,
        CommandType.SCHEDULE_SUB_WORKFLOW,
        ScheduleSubWorkflowCommandAttr(instance_id, name, list(inputs)),
    )


def schedule_timer_command(command_id: int, at: datetime) -> Command:
    return Command(command_id, CommandType.SCHEDULE_TIMER, ScheduleTimerCommandAttr(at))


def cancel_timer_command(command_id: int, timer_id: int) -> Command:
    return Command(command_id, CommandType.CANCEL_TIMER, CancelTimerCommandAttr(timer_id))


def side_effect_command(command_id: int, result: Optional[bytes]) -> Command:
    return Command(command_id, CommandType.SIDE_EFFECT, SideEffectCommandAttr(result))


def complete_workflow_command(
    command_id: int, result: Optional[bytes], error: Optional[BaseException]
) -> Command:
    message = str(error) if error is not None else ""
    return Command(
        command_id,
        CommandType.COMPLETE_WORKFLOW,
        CompleteWorkflowCommandAttr(result, message),
    )
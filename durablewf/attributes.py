"""Event-type specific attributes of history events."""

from __future__ import annotations

import base64
import dataclasses
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

# Field metadata telling how a value is written to and read from JSON.
_ENCODING = "encoding"


def _payload() -> Any:
    return field(default=None, metadata={_ENCODING: "base64"})


def _payloads() -> Any:
    return field(default_factory=list, metadata={_ENCODING: "base64-list"})


def _instant() -> Any:
    return field(default=None, metadata={_ENCODING: "iso8601"})


@dataclass
class _Invocation:
    name: str = ""
    inputs: list[bytes] = _payloads()


@dataclass
class _Result:
    result: Optional[bytes] = _payload()


@dataclass
class _Instant:
    at: Optional[datetime] = _instant()


@dataclass
class ExecutionStartedAttributes(_Invocation):
    pass


@dataclass
class ExecutionCompletedAttributes(_Result):
    error: str = ""


@dataclass
class ExecutionCanceledAttributes:
    pass


@dataclass
class WorkflowTaskStartedAttributes:
    pass


@dataclass
class WorkflowTaskFinishedAttributes:
    pass


@dataclass
class ActivityScheduledAttributes(_Invocation):
    pass


@dataclass
class ActivityCompletedAttributes(_Result):
    pass


@dataclass
class ActivityFailedAttributes:
    reason: str = ""


@dataclass
class SignalReceivedAttributes:
    name: str = ""
    arg: Optional[bytes] = _payload()


@dataclass
class SideEffectResultAttributes(_Result):
    pass


@dataclass
class TimerScheduledAttributes(_Instant):
    pass


@dataclass
class TimerFiredAttributes(_Instant):
    pass


@dataclass
class SubWorkflowScheduledAttributes(_Invocation):
    instance_id: str = ""


@dataclass
class SubWorkflowCompletedAttributes(_Result):
    pass


@dataclass
class SubWorkflowFailedAttributes:
    error: str = ""


def _b64(value: bytes) -> str:
    return base64.b64encode(value).decode("ascii")


def _encode(encoding: Optional[str], value: Any) -> Any:
    if value is None:
        return None
    if encoding == "base64":
        return _b64(value)
    if encoding == "base64-list":
        return [_b64(item) for item in value]
    if encoding == "iso8601":
        return value.isoformat()
    return value


def attributes_to_dict(attributes: Any) -> dict[str, Any]:
    """Return a JSON-compatible dict of an attributes object."""
    if not dataclasses.is_dataclass(attributes) or isinstance(attributes, type):
        raise TypeError(f"{type(attributes).__name__} is not an attributes object")
    return {
        f.name: _encode(f.metadata.get(_ENCODING), getattr(attributes, f.name))
        for f in dataclasses.fields(attributes)
    }
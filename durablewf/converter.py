"""Payload conversion between Python values and serialized bytes."""

from __future__ import annotations

import base64
import dataclasses
import json
from abc import ABC, abstractmethod
from datetime import datetime
from types import UnionType
from typing import Any, Union, get_args, get_origin

Payload = bytes


def _zero_value(target_type: Any) -> Any:
    """Return the zero value of a type, or None when it has none."""
    if target_type is None or target_type is Any:
        return None
    try:
        return target_type()
    except TypeError:
        return None


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(value).decode("ascii")
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    raise TypeError(f"value of type {type(value).__name__} is not serializable")


def _coerce(value: Any, target_type: Any) -> Any:
    origin = get_origin(target_type)
    if origin in (Union, UnionType):
        options = [a for a in get_args(target_type) if a is not type(None)]
        if len(options) != 1:
            return value
        target_type = options[0]
        origin = get_origin(target_type)

    if origin is not None:
        if isinstance(value, origin):
            return value
        raise TypeError(f"cannot convert {type(value).__name__} to {target_type}")

    if target_type is datetime:
        if isinstance(value, str):
            return datetime.fromisoformat(value)
        raise TypeError(f"cannot convert {type(value).__name__} to datetime")

    if target_type is bytes:
        if isinstance(value, str):
            return base64.b64decode(value)
        raise TypeError(f"cannot convert {type(value).__name__} to bytes")

    if dataclasses.is_dataclass(target_type):
        if isinstance(value, dict):
            return target_type(**value)
        raise TypeError(f"cannot convert {type(value).__name__} to {target_type.__name__}")

    if target_type is float and isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)

    if target_type is int and isinstance(value, bool):
        raise TypeError("cannot convert bool to int")

    if isinstance(target_type, type) and isinstance(value, target_type):
        return value

    raise TypeError(f"cannot convert {type(value).__name__} to {getattr(target_type, '__name__', target_type)}")


class Converter(ABC):
    """Turns values into payloads and back."""

    @abstractmethod
    def to(self, value: Any) -> Payload:
        """Serialize a value into a payload."""

    @abstractmethod
    def from_payload(self, data: Payload, target_type: Any = None) -> Any:
        """Deserialize a payload into a value of the given type."""


class JsonConverter(Converter):
    """Converter that stores values as JSON."""

    def to(self, value: Any) -> Payload:
        return json.dumps(value, default=_json_default).encode("utf-8")

    def from_payload(self, data: Payload, target_type: Any = None) -> Any:
        value = json.loads(data)
        if target_type is None or target_type is Any:
            return value
        if value is None:
            return _zero_value(target_type)
        return _coerce(value, target_type)


DEFAULT_CONVERTER: Converter = JsonConverter()


def assign_value(converter: Converter, value: Any, target_type: Any) -> Any:
    """Produce a value of ``target_type`` from a raw value or a payload.

    ``None`` and empty payloads yield the zero value of the target type.
    Payloads are decoded unless the target is itself a payload.
    """
    if value is None:
        return _zero_value(target_type)

    if isinstance(value, (bytes, bytearray)):
        if not value:
            return _zero_value(target_type)
        if target_type is None or target_type is bytes:
            return bytes(value)
        return converter.from_payload(bytes(value), target_type)

    if target_type is None or target_type is Any:
        return value
    return _coerce(value, target_type)
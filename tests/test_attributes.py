import base64
from datetime import datetime, timezone

import pytest

from durablewf.attributes import (
    ActivityFailedAttributes,
    ActivityScheduledAttributes,
    ExecutionCanceledAttributes,
    ExecutionCompletedAttributes,
    TimerFiredAttributes,
    attributes_to_dict,
)


def test_payload_lists_are_base64_encoded():
    d = attributes_to_dict(ActivityScheduledAttributes(name="act", inputs=[b"1", b"22"]))
    assert d["name"] == "act"
    assert [base64.b64decode(item) for item in d["inputs"]] == [b"1", b"22"]


def test_missing_payload_is_none():
    d = attributes_to_dict(ExecutionCompletedAttributes(error="boom"))
    assert d == {"result": None, "error": "boom"}


def test_datetime_is_iso_text():
    at = datetime(2022, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    d = attributes_to_dict(TimerFiredAttributes(at=at))
    assert datetime.fromisoformat(d["at"]) == at


def test_empty_attributes_give_empty_dict():
    assert attributes_to_dict(ExecutionCanceledAttributes()) == {}


def test_plain_string_field():
    assert attributes_to_dict(ActivityFailedAttributes(reason="why")) == {"reason": "why"}


def test_non_attributes_raise():
    with pytest.raises(TypeError):
        attributes_to_dict({"name": "x"})
    with pytest.raises(TypeError):
        attributes_to_dict(ActivityFailedAttributes)
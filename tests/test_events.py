import sqlite3
from datetime import datetime, timedelta, timezone

import pytest

from durablewf.attributes import (
    ActivityCompletedAttributes,
    ActivityScheduledAttributes,
    ExecutionStartedAttributes,
    SignalReceivedAttributes,
)
from durablewf.backend.sqlite.events import (
    create_schema,
    get_history,
    get_pending_events,
    insert_events,
    insert_history_events,
    insert_new_events,
    scan_event,
    schedule_activity,
)
from durablewf.history import EventType, new_history_event


@pytest.fixture
def conn():
    connection = sqlite3.connect(":memory:")
    create_schema(connection)
    yield connection
    connection.close()


def _now():
    return datetime.now(timezone.utc)


def test_pending_events_round_trip(conn):
    started = new_history_event(
        _now(), EventType.WORKFLOW_EXECUTION_STARTED, ExecutionStartedAttributes("wf", [b"1"])
    )
    signal = new_history_event(
        _now(), EventType.SIGNAL_RECEIVED, SignalReceivedAttributes("sig", b'"x"'),
        schedule_event_id=3,
    )
    insert_new_events(conn, "inst", [started, signal])

    events = get_pending_events(conn, "inst")
    assert events == [started, signal]


def test_pending_events_are_per_instance(conn):
    event = new_history_event(_now(), EventType.WORKFLOW_EXECUTION_STARTED, ExecutionStartedAttributes())
    insert_new_events(conn, "a", [event])
    assert get_pending_events(conn, "b") == []
    assert [e.id for e in get_pending_events(conn, "a")] == [event.id]


def test_invisible_pending_events_are_skipped(conn):
    later = new_history_event(
        _now(), EventType.ACTIVITY_COMPLETED, ActivityCompletedAttributes(),
        visible_at=_now() + timedelta(hours=1),
    )
    past = new_history_event(
        _now(), EventType.ACTIVITY_COMPLETED, ActivityCompletedAttributes(),
        visible_at=_now() - timedelta(hours=1),
    )
    insert_new_events(conn, "inst", [later, past])
    assert [e.id for e in get_pending_events(conn, "inst")] == [past.id]


def test_history_keeps_insertion_order_across_batches(conn):
    events = [
        new_history_event(_now(), EventType.WORKFLOW_TASK_STARTED, None)
        for _ in range(45)
    ]
    insert_history_events(conn, "inst", events)
    assert [e.id for e in get_history(conn, "inst")] == [e.id for e in events]
    assert get_pending_events(conn, "inst") == []


def test_insert_events_rejects_unknown_table(conn):
    event = new_history_event(_now(), EventType.WORKFLOW_TASK_STARTED, None)
    with pytest.raises(ValueError):
        insert_events(conn, "instances", "inst", [event])


def test_insert_events_with_no_events_inserts_nothing(conn):
    insert_events(conn, "history", "inst", [])
    assert conn.execute("SELECT COUNT(*) FROM history").fetchone() == (0,)


def test_schedule_activity_stores_event(conn):
    event = new_history_event(
        _now(), EventType.ACTIVITY_SCHEDULED, ActivityScheduledAttributes("act", [b"2"]),
        schedule_event_id=1,
    )
    schedule_activity(conn, "inst", "exec", event)
    row = conn.execute(
        "SELECT id, instance_id, event_type, timestamp, schedule_event_id, attributes, visible_at, "
        "execution_id FROM activities"
    ).fetchone()
    assert row[7] == "exec"
    assert scan_event(row[:7]) == event


def test_scan_event_rejects_unknown_type(conn):
    row = ("id", "inst", 999, "2020-01-01T00:00:00.000000+00:00", 0, b"{}", None)
    with pytest.raises(ValueError):
        scan_event(row)
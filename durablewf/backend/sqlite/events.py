"""Reading and writing events and activities in the SQLite store."""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from itertools import islice
from typing import Iterable, Iterator, Optional, Sequence

from durablewf.history import (
    Event,
    EventType,
    deserialize_attributes,
    serialize_attributes,
)

_BATCH_SIZE = 20

_EVENT_COLUMNS = "id, instance_id, event_type, timestamp, schedule_event_id, attributes, visible_at"

_EVENT_TABLES = frozenset({"pending_events", "history"})

SCHEMA = """
CREATE TABLE IF NOT EXISTS instances (
    id TEXT PRIMARY KEY,
    execution_id TEXT NOT NULL,
    parent_instance_id TEXT NULL,
    parent_schedule_event_id INTEGER NULL,
    sticky_until TEXT NULL,
    locked_until TEXT NULL,
    worker TEXT NULL,
    completed_at TEXT NULL
);
CREATE INDEX IF NOT EXISTS idx_instances_parent ON instances (parent_instance_id);

CREATE TABLE IF NOT EXISTS pending_events (
    id TEXT NOT NULL,
    instance_id TEXT NOT NULL,
    event_type INTEGER NOT NULL,
    timestamp TEXT NOT NULL,
    schedule_event_id INTEGER NOT NULL,
    attributes BLOB NOT NULL,
    visible_at TEXT NULL
);
CREATE INDEX IF NOT EXISTS idx_pending_events_instance ON pending_events (instance_id);

CREATE TABLE IF NOT EXISTS history (
    id TEXT NOT NULL,
    instance_id TEXT NOT NULL,
    event_type INTEGER NOT NULL,
    timestamp TEXT NOT NULL,
    schedule_event_id INTEGER NOT NULL,
    attributes BLOB NOT NULL,
    visible_at TEXT NULL
);
CREATE INDEX IF NOT EXISTS idx_history_instance ON history (instance_id);

CREATE TABLE IF NOT EXISTS activities (
    id TEXT PRIMARY KEY,
    instance_id TEXT NOT NULL,
    execution_id TEXT NOT NULL,
    event_type INTEGER NOT NULL,
    timestamp TEXT NOT NULL,
    schedule_event_id INTEGER NOT NULL,
    attributes BLOB NOT NULL,
    visible_at TEXT NULL,
    locked_until TEXT NULL,
    worker TEXT NULL
);
"""


def _format_time(value: Optional[datetime]) -> Optional[str]:
    """Store times as fixed-width UTC strings so they compare lexically."""
    if value is None:
        return None
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f+00:00")


def _parse_time(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    return datetime.fromisoformat(value)


def _now() -> str:
    return _format_time(datetime.now(timezone.utc))


def _batched(events: Iterable[Event], size: int) -> Iterator[list[Event]]:
    iterator = iter(events)
    while batch := list(islice(iterator, size)):
        yield batch


def create_schema(conn: sqlite3.Connection) -> None:
    """Create the tables the backend uses, if they do not exist yet."""
    conn.executescript(SCHEMA)


def scan_event(row: Sequence) -> Event:
    """Build an event from a row of the event columns."""
    event_id, _instance_id, event_type, timestamp, schedule_event_id, attributes, visible_at = row
    event_type = EventType(event_type)
    return Event(
        id=event_id,
        type=event_type,
        timestamp=_parse_time(timestamp),
        schedule_event_id=schedule_event_id,
        attributes=deserialize_attributes(event_type, attributes),
        visible_at=_parse_time(visible_at),
    )


def get_pending_events(conn: sqlite3.Connection, instance_id: str) -> list[Event]:
    """Pending events of an instance that are visible now, oldest first."""
    rows = conn.execute(
        f"SELECT {_EVENT_COLUMNS} FROM pending_events "
        "WHERE instance_id = ? AND (visible_at IS NULL OR visible_at <= ?) ORDER BY rowid",
        (instance_id, _now()),
    )
    return [scan_event(row) for row in rows]


def get_history(conn: sqlite3.Connection, instance_id: str) -> list[Event]:
    """The full history of an instance in the order it was recorded."""
    rows = conn.execute(
        f"SELECT {_EVENT_COLUMNS} FROM history WHERE instance_id = ? ORDER BY rowid",
        (instance_id,),
    )
    return [scan_event(row) for row in rows]


def insert_new_events(conn: sqlite3.Connection, instance_id: str, events: Iterable[Event]) -> None:
    insert_events(conn, "pending_events", instance_id, events)


def insert_history_events(
    conn: sqlite3.Connection, instance_id: str, events: Iterable[Event]
) -> None:
    insert_events(conn, "history", instance_id, events)


def _event_row(instance_id: str, event: Event) -> tuple:
    return (
        event.id,
        instance_id,
        int(event.type),
        _format_time(event.timestamp),
        event.schedule_event_id,
        serialize_attributes(event.attributes),
        _format_time(event.visible_at),
    )


def insert_events(
    conn: sqlite3.Connection, table_name: str, instance_id: str, events: Iterable[Event]
) -> None:
    """Insert events into an event table in batches of multi-row inserts."""
    if table_name not in _EVENT_TABLES:
        raise ValueError(f"unknown event table: {table_name}")
    for batch in _batched(events, _BATCH_SIZE):
        placeholders = ", ".join(["(?, ?, ?, ?, ?, ?, ?)"] * len(batch))
        params = [value for event in batch for value in _event_row(instance_id, event)]
        conn.execute(
            f"INSERT INTO {table_name} ({_EVENT_COLUMNS}) VALUES {placeholders}",
            params,
        )


def schedule_activity(
    conn: sqlite3.Connection, instance_id: str, execution_id: str, event: Event
) -> None:
    """Queue an activity for the scheduling event of an instance."""
    conn.execute(
        "INSERT INTO activities (id, instance_id, execution_id, event_type, timestamp, "
        "schedule_event_id, attributes, visible_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
        (
            event.id,
            instance_id,
            execution_id,
            int(event.type),
            _format_time(event.timestamp),
            event.schedule_event_id,
            serialize_attributes(event.attributes),
            _format_time(event.visible_at),
        ),
    )
"""A workflow backend that keeps its state in a SQLite database."""

from __future__ import annotations

import os
import sqlite3
import threading
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterable, Iterator, Optional, Union

from durablewf.backend.base import Backend
from durablewf.backend.options import BackendOption, Options, apply_options
from durablewf.backend.sqlite.events import (
    _format_time,
    create_schema,
    get_history,
    get_pending_events,
    insert_history_events,
    insert_new_events,
    scan_event,
    schedule_activity,
)
from durablewf.core import WorkflowInstance, new_sub_workflow_instance, new_workflow_instance
from durablewf.history import (
    Event,
    EventType,
    WorkflowEvent,
    new_workflow_cancellation_event,
)
from durablewf.task import ActivityTask, TaskKind, WorkflowTask

_EVENT_SELECT = (
    "SELECT id, instance_id, event_type, timestamp, schedule_event_id, attributes, visible_at"
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SqliteBackend(Backend):
    """Stores instances, pending events, history and activities in SQLite.

    A single connection is shared and guarded by a lock; every operation runs
    in its own transaction.
    """

    def __init__(
        self, database: Union[str, os.PathLike], options: Optional[Options] = None
    ) -> None:
        self._conn = sqlite3.connect(
            os.fspath(database), isolation_level=None, check_same_thread=False
        )
        self._lock = threading.RLock()
        create_schema(self._conn)
        self.worker_name = f"worker-{uuid.uuid4()}"
        self.options = options if options is not None else apply_options()

    def __enter__(self) -> "SqliteBackend":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying database connection."""
        with self._lock:
            self._conn.close()

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        with self._lock:
            conn = self._conn
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise
            if conn.in_transaction:
                conn.execute("COMMIT")

    @staticmethod
    def _create_instance(conn: sqlite3.Connection, instance: WorkflowInstance) -> None:
        parent_instance_id: Optional[str] = None
        parent_event_id: Optional[int] = None
        if instance.sub_workflow():
            parent_instance_id = instance.parent_instance.instance_id
            parent_event_id = instance.parent_event_id
        conn.execute(
            "INSERT OR IGNORE INTO instances "
            "(id, execution_id, parent_instance_id, parent_schedule_event_id) VALUES (?, ?, ?, ?)",
            (instance.instance_id, instance.execution_id, parent_instance_id, parent_event_id),
        )

    def create_workflow_instance(self, event: WorkflowEvent) -> None:
        with self._transaction() as conn:
            self._create_instance(conn, event.workflow_instance)
            # The initial history is empty; only the start event is pending.
            insert_new_events(conn, event.workflow_instance.instance_id, [event.history_event])

    def cancel_workflow_instance(self, instance: WorkflowInstance) -> None:
        with self._transaction() as conn:
            instance_id = instance.instance_id
            insert_new_events(conn, instance_id, [new_workflow_cancellation_event(_utcnow())])

            # Follow running sub-workflows down and cancel them too.
            while True:
                row = conn.execute(
                    "SELECT id FROM instances "
                    "WHERE parent_instance_id = ? AND completed_at IS NULL LIMIT 1",
                    (instance_id,),
                ).fetchone()
                if row is None:
                    break
                sub_instance_id = row[0]
                insert_new_events(
                    conn, sub_instance_id, [new_workflow_cancellation_event(_utcnow())]
                )
                instance_id = sub_instance_id

    def signal_workflow(self, instance_id: str, event: Event) -> None:
        with self._transaction() as conn:
            insert_new_events(conn, instance_id, [event])

    def get_workflow_task(self) -> Optional[WorkflowTask]:
        now = _utcnow()
        stamp = _format_time(now)
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT id, execution_id, parent_instance_id, parent_schedule_event_id, "
                "sticky_until FROM instances i "
                "WHERE (locked_until IS NULL OR locked_until < ?) "
                "AND (sticky_until IS NULL OR sticky_until < ? OR worker = ?) "
                "AND completed_at IS NULL "
                "AND EXISTS (SELECT 1 FROM pending_events "
                "WHERE instance_id = i.id AND (visible_at IS NULL OR visible_at <= ?)) "
                "LIMIT 1",
                (stamp, stamp, self.worker_name, stamp),
            ).fetchone()
            if row is None:
                return None

            instance_id, execution_id, parent_instance_id, parent_event_id, sticky_until = row
            conn.execute(
                "UPDATE instances SET locked_until = ?, worker = ? WHERE id = ?",
                (
                    _format_time(now + self.options.workflow_lock_timeout),
                    self.worker_name,
                    instance_id,
                ),
            )

            kind = TaskKind.DEFAULT
            if sticky_until is not None and sticky_until > stamp:
                kind = TaskKind.CONTINUATION

            if parent_instance_id is not None:
                instance = new_sub_workflow_instance(
                    instance_id,
                    execution_id,
                    new_workflow_instance(parent_instance_id, ""),
                    parent_event_id,
                )
            else:
                instance = new_workflow_instance(instance_id, execution_id)

            pending = get_pending_events(conn, instance_id)
            if not pending:
                conn.execute("ROLLBACK")
                return None

            if kind is TaskKind.CONTINUATION:
                last = conn.execute(
                    f"{_EVENT_SELECT} FROM history WHERE instance_id = ? "
                    "ORDER BY rowid DESC LIMIT 1",
                    (instance_id,),
                ).fetchone()
                if last is None:
                    raise LookupError("could not get workflow history")
                events = [scan_event(last)]
            else:
                events = get_history(conn, instance_id)

            return WorkflowTask(
                workflow_instance=instance, kind=kind, history=events, new_events=pending
            )

    def complete_workflow_task(
        self,
        instance: WorkflowInstance,
        executed_events: Iterable[Event],
        workflow_events: Iterable[WorkflowEvent],
    ) -> None:
        executed = list(executed_events)
        with self._transaction() as conn:
            # Unlock the instance but keep it sticky to this worker.
            cursor = conn.execute(
                "UPDATE instances SET locked_until = NULL, sticky_until = ? "
                "WHERE id = ? AND execution_id = ? AND worker = ?",
                (
                    _format_time(_utcnow() + self.options.sticky_timeout),
                    instance.instance_id,
                    instance.execution_id,
                    self.worker_name,
                ),
            )
            if cursor.rowcount != 1:
                raise LookupError("could not find workflow instance to unlock")

            if executed:
                placeholders = ",".join("?" * len(executed))
                conn.execute(
                    f"DELETE FROM pending_events WHERE instance_id = ? AND id IN ({placeholders})",
                    [instance.instance_id, *(event.id for event in executed)],
                )

            insert_history_events(conn, instance.instance_id, executed)

            completed = False
            for event in executed:
                if event.type == EventType.ACTIVITY_SCHEDULED:
                    schedule_activity(conn, instance.instance_id, instance.execution_id, event)
                elif event.type == EventType.WORKFLOW_EXECUTION_FINISHED:
                    completed = True

            grouped: dict[WorkflowInstance, list[Event]] = {}
            for message in workflow_events:
                grouped.setdefault(message.workflow_instance, []).append(message.history_event)

            for target, events in grouped.items():
                if target.instance_id != instance.instance_id:
                    self._create_instance(conn, target)
                insert_new_events(conn, target.instance_id, events)

            if completed:
                conn.execute(
                    "UPDATE instances SET completed_at = ? WHERE id = ? AND execution_id = ?",
                    (_format_time(_utcnow()), instance.instance_id, instance.execution_id),
                )

    def extend_workflow_task(self, instance: WorkflowInstance) -> None:
        with self._transaction() as conn:
            cursor = conn.execute(
                "UPDATE instances SET locked_until = ? "
                "WHERE id = ? AND execution_id = ? AND worker = ?",
                (
                    _format_time(_utcnow() + self.options.workflow_lock_timeout),
                    instance.instance_id,
                    instance.execution_id,
                    self.worker_name,
                ),
            )
            if cursor.rowcount == 0:
                raise LookupError("could not extend workflow task")

    def get_activity_task(self) -> Optional[ActivityTask]:
        now = _utcnow()
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT id, instance_id, execution_id, event_type, timestamp, "
                "schedule_event_id, attributes, visible_at FROM activities "
                "WHERE locked_until IS NULL OR locked_until < ? LIMIT 1",
                (_format_time(now),),
            ).fetchone()
            if row is None:
                return None

            activity_id, instance_id, execution_id, *rest = row
            conn.execute(
                "UPDATE activities SET locked_until = ?, worker = ? WHERE id = ?",
                (
                    _format_time(now + self.options.activity_lock_timeout),
                    self.worker_name,
                    activity_id,
                ),
            )
            event = scan_event((activity_id, instance_id, *rest))
            return ActivityTask(
                id=event.id,
                workflow_instance=new_workflow_instance(instance_id, execution_id),
                event=event,
            )

    def complete_activity_task(
        self, instance: WorkflowInstance, activity_id: str, event: Event
    ) -> None:
        with self._transaction() as conn:
            cursor = conn.execute(
                "DELETE FROM activities WHERE instance_id = ? AND id = ? AND worker = ?",
                (instance.instance_id, activity_id, self.worker_name),
            )
            if cursor.rowcount != 1:
                raise LookupError("could not find activity to delete")
            insert_new_events(conn, instance.instance_id, [event])

    def extend_activity_task(self, activity_id: str) -> None:
        with self._transaction() as conn:
            cursor = conn.execute(
                "UPDATE activities SET locked_until = ? WHERE id = ? AND worker = ?",
                (
                    _format_time(_utcnow() + self.options.activity_lock_timeout),
                    activity_id,
                    self.worker_name,
                ),
            )
            if cursor.rowcount == 0:
                raise LookupError("could not extend activity")


def new_in_memory_backend(*args: BackendOption) -> SqliteBackend:
    """A backend whose database lives only as long as the backend."""
    return SqliteBackend(":memory:", apply_options(*args))


def new_sqlite_backend(path: Union[str, os.PathLike], *args: BackendOption) -> SqliteBackend:
    """A backend stored in the SQLite database file at ``path``."""
    return SqliteBackend(path, apply_options(*args))
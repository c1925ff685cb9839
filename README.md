# durablewf

Building blocks for durable workflows: an event history that records what a
workflow has done, deterministic cooperative coroutines to replay it, and a
SQLite backend that stores workflow instances, pending events, history and
activity tasks.

## Installation

```
pip install .
```

For running the test suite:

```
pip install ".[test]"
pytest
```

## Modules

- `durablewf.history` – `Event`, `EventType`, `WorkflowEvent`,
  `new_history_event`, `new_workflow_cancellation_event`, and
  `serialize_attributes` / `deserialize_attributes` for storing event
  attributes as JSON.
- `durablewf.attributes` – the per-event attribute dataclasses
  (`ExecutionStartedAttributes`, `ActivityScheduledAttributes`,
  `SignalReceivedAttributes`, …) and `attributes_to_dict`.
- `durablewf.core` – `WorkflowInstance`, `new_workflow_instance`,
  `new_sub_workflow_instance`.
- `durablewf.converter` – `JsonConverter`, `DEFAULT_CONVERTER` and
  `assign_value` for turning values into payload bytes and back.
- `durablewf.command` – `Command`, `CommandType`, `CommandState` and the
  command constructors (`schedule_activity_task_command`,
  `schedule_timer_command`, `complete_workflow_command`, …).
- `durablewf.task` – `WorkflowTask`, `ActivityTask`, `TaskKind`.
- `durablewf.fn` – `function_name`, the short name of a function or method.
- `durablewf.backend.base` – the abstract `Backend` interface.
- `durablewf.backend.options` – `Options`, `with_sticky_timeout`,
  `apply_options`.
- `durablewf.backend.sqlite.backend` – `SqliteBackend`,
  `new_in_memory_backend`, `new_sqlite_backend`.
- `durablewf.sync` – coroutines, `Scheduler`, `go`, `Future`, `Channel`,
  `WaitGroup`, `select` and cancellable contexts.

## Starting and signalling a workflow

Workflow instances are created by handing the backend a start event:

```python
from datetime import datetime, timedelta, timezone

from durablewf.attributes import ExecutionStartedAttributes, SignalReceivedAttributes
from durablewf.backend.options import with_sticky_timeout
from durablewf.backend.sqlite.backend import new_in_memory_backend
from durablewf.converter import DEFAULT_CONVERTER
from durablewf.core import new_workflow_instance
from durablewf.history import EventType, WorkflowEvent, new_history_event

backend = new_in_memory_backend(with_sticky_timeout(timedelta(0)))
now = datetime.now(timezone.utc)

instance = new_workflow_instance("order-1", "execution-1")
started = new_history_event(
    now,
    EventType.WORKFLOW_EXECUTION_STARTED,
    ExecutionStartedAttributes(name="order_workflow", inputs=[DEFAULT_CONVERTER.to(42)]),
)
backend.create_workflow_instance(WorkflowEvent(instance, started))

signal = new_history_event(
    now,
    EventType.SIGNAL_RECEIVED,
    SignalReceivedAttributes(name="approved", arg=DEFAULT_CONVERTER.to(True)),
)
backend.signal_workflow(instance.instance_id, signal)
```

`backend.cancel_workflow_instance(instance)` adds a cancellation event to the
instance and to each of its running sub-workflows.

## Processing tasks

`get_workflow_task()` returns `None` when nothing is pending; otherwise it
locks an instance to this worker and returns a `WorkflowTask` with its history
and its new events. A task's `kind` is `TaskKind.CONTINUATION` when the
instance is still sticky to this worker; its history then holds only the most
recent event.

```python
task = backend.get_workflow_task()
if task is not None:
    backend.complete_workflow_task(
        task.workflow_instance, executed_events, workflow_events
    )
```

`complete_workflow_task` removes the executed events from the pending events,
appends them to the history, queues an activity for every
`ACTIVITY_SCHEDULED` event, marks the instance completed on a
`WORKFLOW_EXECUTION_FINISHED` event, and delivers `workflow_events` to their
target instances, creating instances that do not exist yet. It raises
`LookupError` if the instance is not locked by this worker.

Activities are taken with `get_activity_task()` and finished with
`complete_activity_task(instance, activity_id, event)`. Locks are prolonged
with `extend_workflow_task(instance)` and `extend_activity_task(activity_id)`.

Options: `sticky_timeout` (default 30 s), `workflow_lock_timeout` (1 min) and
`activity_lock_timeout` (2 min). A file-backed store is opened with
`new_sqlite_backend("workflows.db")`; `SqliteBackend` is a context manager and
has `close()`.

## Deterministic coroutines

`Scheduler` steps its coroutines, one at a time, until all of them are
blocked; an exception raised in a coroutine is re-raised by `execute`.

```python
from durablewf.sync.context import background
from durablewf.sync.future import Future
from durablewf.sync.scheduler import Scheduler

results = []
future = Future()
scheduler = Scheduler()
scheduler.new_coroutine(background(), lambda ctx: results.append(future.get(ctx, int)))

scheduler.execute(background())   # blocked on the future
future.set(42, None)
scheduler.execute(background())   # results == [42]
```

`Channel` (`new_channel`, `new_buffered_channel`) passes values between
coroutines, `select` with `await_future`, `receive` and `default` waits on
whichever case is ready first, `WaitGroup` waits for a count to reach zero,
and `with_cancel` creates contexts whose cancellation cascades to children.

## What is not included

There is no client layer that turns a Python function and its arguments into
a start event, no worker loop that polls the backend, and no engine that
replays a workflow's history or runs activity functions. Callers build events
themselves and drive the backend and coroutines directly. The only storage
backend is SQLite.
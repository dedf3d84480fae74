# tests/fakes.py

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

from procrastinote.errors import CalendarError, PersistenceError
from procrastinote.tasks.task_models import Task
from procrastinote.tasks.task_stats import ProgressSnapshot


@dataclass(slots=True)
class FakeCalendar:
    """
    Fake CalendarBridge.

    - Records exported tasks for assertions
    - Returns sequential event ids, or raises `error` if set
    - Optionally waits on `gate` so tests can interleave other work
    - Keeps the ids of events removed again in `removed`
    """

    error: CalendarError | None = None
    gate: asyncio.Event | None = None
    exported: list[Task] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)

    async def export_task(self, task: Task) -> str:
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        self.exported.append(task)
        return f"event-{len(self.exported)}"

    async def remove_event(self, event_id: str) -> None:
        self.removed.append(event_id)


@dataclass(slots=True)
class MemorySink:
    """Fake SnapshotSink keeping every published snapshot."""

    published: list[ProgressSnapshot] = field(default_factory=list)

    def publish(self, snapshot: ProgressSnapshot) -> None:
        self.published.append(snapshot)

    def read(self) -> ProgressSnapshot:
        if not self.published:
            return ProgressSnapshot(completion_rate=0.0, completed_count=0, total_count=0)
        return self.published[-1]


class BrokenWritesStore:
    """
    Wraps a real store; reads pass through, every write raises PersistenceError.

    Used to check that failed writes leave callers' objects and stored data untouched.
    """

    def __init__(self, inner) -> None:
        self._inner = inner
        self.write_attempts = 0

    def __getattr__(self, name):
        return getattr(self._inner, name)

    def _fail(self, *args, **kwargs):
        self.write_attempts += 1
        raise PersistenceError("disk I/O error")

    add_category = _fail
    delete_category = _fail
    add_task = _fail
    update_task = _fail
    delete_task = _fail
    delete_tasks_with_status = _fail

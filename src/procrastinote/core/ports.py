# src/procrastinote/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps the store, calendar and glance surface swappable and makes testing easier.
"""

from typing import Protocol

from ..tasks.task_models import Category, Task, TaskStatus
from ..tasks.task_stats import ProgressSnapshot


class EntityStore(Protocol):
    """
    Persistent store for categories and tasks.

    Every method raises PersistenceError on failure and leaves stored data as it was.
    """

    # Categories
    def add_category(self, category: Category) -> str: ...
    def get_category(self, category_id: str) -> Category | None: ...
    def list_categories(self) -> list[Category]: ...
    def delete_category(self, category_id: str) -> None: ...

    # Tasks
    def add_task(self, task: Task) -> str: ...
    def update_task(self, task: Task) -> None: ...
    def get_task(self, task_id: str) -> Task | None: ...
    def list_tasks(
            self,
            *,
            status: TaskStatus | None = None,
            category_id: str | None = None,
            order_by: str = "due_date",
    ) -> list[Task]: ...
    def delete_task(self, task_id: str) -> None: ...
    def delete_tasks_with_status(self, status: TaskStatus) -> int: ...
    def count_tasks(self) -> int: ...


class CalendarBridge(Protocol):
    """
    One-way export of a task into an external calendar.

    Returns the new event identifier. Raises PermissionDenied or CalendarWriteError.
    remove_event drops an event written earlier; an unknown id is ignored.
    """

    async def export_task(self, task: Task) -> str: ...
    async def remove_event(self, event_id: str) -> None: ...


class SnapshotSink(Protocol):
    """Shared location the glance/widget surface reads progress from."""

    def publish(self, snapshot: ProgressSnapshot) -> None: ...
    def read(self) -> ProgressSnapshot: ...

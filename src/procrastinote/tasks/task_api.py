# src/procrastinote/tasks/task_api.py

"""
High-level task and category operations.

Every entry point takes the store explicitly. Entities are immutable: an
operation builds the new value, persists it, and only then returns it, so a
caller that keeps the old object on failure stays consistent with the store.
"""

from __future__ import annotations

import dataclasses
import logging
from datetime import datetime

from ..core.ports import CalendarBridge, EntityStore
from ..errors import CalendarError, PersistenceError
from .task_models import (
    DEFAULT_ESTIMATED_TIME,
    Category,
    Task,
    TaskStatus,
    clean_detail,
    clean_estimated_time,
    clean_status,
    clean_title,
    new_category,
    new_task,
)

logger = logging.getLogger(__name__)

_UNSET = object()


# ---- categories ----

def add_category(store: EntityStore, name: str) -> Category:
    category = new_category(name)
    store.add_category(category)
    logger.info("Category created id=%s name=%s", category.id, category.name)
    return category


def delete_category(store: EntityStore, category_id: str) -> None:
    """Delete a category. Its tasks are kept and count as uncategorized afterwards."""
    store.delete_category(category_id)
    logger.info("Category deleted id=%s", category_id)


def list_categories(store: EntityStore) -> list[Category]:
    return store.list_categories()


# ---- tasks ----

def add_task(
    store: EntityStore,
    title: str,
    *,
    due_date: datetime | None = None,
    detail: str | None = None,
    estimated_time: float = DEFAULT_ESTIMATED_TIME,
    category_id: str | None = None,
    status: TaskStatus = TaskStatus.NOT_STARTED,
) -> Task:
    task = new_task(
        title,
        due_date=due_date if due_date is not None else datetime.now().replace(microsecond=0),
        detail=detail,
        estimated_time=estimated_time,
        category_id=category_id,
        status=status,
    )
    store.add_task(task)
    logger.info("Task created id=%s title=%r", task.id, task.title)
    return task


def edit_task(
    store: EntityStore,
    task: Task,
    *,
    title: str | object = _UNSET,
    detail: str | None | object = _UNSET,
    due_date: datetime | object = _UNSET,
    estimated_time: float | object = _UNSET,
    category_id: str | None | object = _UNSET,
    status: TaskStatus | object = _UNSET,
) -> Task:
    """
    Apply any subset of field changes as one update.

    Omitted fields keep their current value; pass None to clear detail or category.
    Validation runs before the store is touched.
    """
    changes: dict[str, object] = {}
    if title is not _UNSET:
        changes["title"] = clean_title(title)  # type: ignore[arg-type]
    if detail is not _UNSET:
        changes["detail"] = clean_detail(detail)  # type: ignore[arg-type]
    if due_date is not _UNSET:
        changes["due_date"] = due_date
    if estimated_time is not _UNSET:
        changes["estimated_time"] = clean_estimated_time(estimated_time)  # type: ignore[arg-type]
    if category_id is not _UNSET:
        changes["category_id"] = category_id or None
    if status is not _UNSET:
        changes["status"] = clean_status(status)  # type: ignore[arg-type]

    if not changes:
        return task

    updated = dataclasses.replace(task, **changes)  # type: ignore[arg-type]
    store.update_task(updated)
    logger.info("Task updated id=%s fields=%s", task.id, ",".join(sorted(changes)))
    return updated


def toggle_task_status(store: EntityStore, task: Task) -> Task:
    updated = dataclasses.replace(task, status=task.status.toggled())
    store.update_task(updated)
    logger.info("Task %s %s -> %s", task.id, task.status.value, updated.status.value)
    return updated


def delete_task(store: EntityStore, task_id: str) -> None:
    store.delete_task(task_id)
    logger.info("Task deleted id=%s", task_id)


def clear_completed(store: EntityStore) -> int:
    """Delete every completed task in one store call. Returns how many were removed."""
    removed = store.delete_tasks_with_status(TaskStatus.COMPLETE)
    logger.info("Cleared completed tasks count=%s", removed)
    return removed


def list_tasks(
    store: EntityStore,
    *,
    status: TaskStatus | None = None,
    category_id: str | None = None,
) -> list[Task]:
    return store.list_tasks(status=status, category_id=category_id, order_by="due_date")


async def export_task_to_calendar(
    store: EntityStore, calendar: CalendarBridge, task: Task
) -> Task:
    """
    Export one task to the calendar and remember the event id on the task.

    On CalendarError the task is not modified and the error propagates; no retry.
    The event id is written onto the task as currently stored, so edits made
    while the export was in flight are kept. If that write fails, or the task
    was deleted meanwhile, the new event is removed again and PersistenceError
    propagates.
    """
    try:
        event_id = await calendar.export_task(task)
    except CalendarError:
        logger.warning("Calendar export failed task_id=%s", task.id, exc_info=True)
        raise

    try:
        current = store.get_task(task.id)
        if current is None:
            raise PersistenceError(f"task {task.id} was deleted during calendar export")
        updated = dataclasses.replace(current, event_identifier=event_id)
        store.update_task(updated)
    except PersistenceError:
        await _remove_orphan_event(calendar, event_id)
        raise

    logger.info("Task %s exported to calendar event=%s", task.id, event_id)
    return updated


async def _remove_orphan_event(calendar: CalendarBridge, event_id: str) -> None:
    try:
        await calendar.remove_event(event_id)
    except CalendarError:
        logger.exception("Could not remove calendar event %s left without a task", event_id)

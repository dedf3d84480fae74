# src/procrastinote/tasks/task_models.py

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from ..errors import ValidationError

UNCATEGORIZED = "Uncategorized"
DEFAULT_ESTIMATED_TIME = 1.0


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    Values are the display strings; they are also what the store persists.
    """

    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    COMPLETE = "Complete"

    @classmethod
    def from_db(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.NOT_STARTED
        try:
            return cls(raw)
        except ValueError:
            return cls.NOT_STARTED

    def toggled(self) -> TaskStatus:
        """
        Two-state toggle over a three-state enum.

        COMPLETE -> NOT_STARTED, anything else -> COMPLETE.
        IN_PROGRESS is only reachable by editing and is never restored here.
        """
        if self is TaskStatus.COMPLETE:
            return TaskStatus.NOT_STARTED
        return TaskStatus.COMPLETE


@dataclass(frozen=True, slots=True)
class Category:
    id: str
    name: str


@dataclass(frozen=True, slots=True)
class Task:
    id: str
    title: str
    due_date: datetime
    estimated_time: float
    status: TaskStatus = TaskStatus.NOT_STARTED
    detail: str | None = None
    category_id: str | None = None
    event_identifier: str | None = None

    @property
    def is_complete(self) -> bool:
        return self.status is TaskStatus.COMPLETE


def new_id() -> str:
    return uuid.uuid4().hex


def clean_title(title: str | None) -> str:
    text = (title or "").strip()
    if not text:
        raise ValidationError("title is required")
    return text


def clean_name(name: str | None) -> str:
    text = (name or "").strip()
    if not text:
        raise ValidationError("category name is required")
    return text


def clean_detail(detail: str | None) -> str | None:
    # Empty text is stored as absent.
    if detail is None or detail == "":
        return None
    return detail


def clean_estimated_time(hours: float) -> float:
    try:
        value = float(hours)
    except (TypeError, ValueError):
        raise ValidationError(f"estimated time must be a number of hours, got {hours!r}") from None
    if not math.isfinite(value):
        raise ValidationError(f"estimated time must be a finite number of hours, got {hours!r}")
    if value < 0:
        raise ValidationError("estimated time must not be negative")
    return value


def clean_status(status: TaskStatus | str) -> TaskStatus:
    try:
        return TaskStatus(status)
    except ValueError:
        raise ValidationError(f"unknown status {status!r}") from None


def new_category(name: str) -> Category:
    return Category(id=new_id(), name=clean_name(name))


def new_task(
    title: str,
    *,
    due_date: datetime,
    detail: str | None = None,
    estimated_time: float = DEFAULT_ESTIMATED_TIME,
    category_id: str | None = None,
    status: TaskStatus = TaskStatus.NOT_STARTED,
) -> Task:
    """Build a validated task with a fresh id. Nothing is persisted here."""
    return Task(
        id=new_id(),
        title=clean_title(title),
        due_date=due_date,
        estimated_time=clean_estimated_time(estimated_time),
        status=clean_status(status),
        detail=clean_detail(detail),
        category_id=category_id or None,
    )

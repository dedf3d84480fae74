# src/procrastinote/tasks/task_stats.py

"""
Derived views over a snapshot of tasks.

All functions are pure: they never mutate their inputs and are recomputed on
every read. A task's group is the name of the category its id resolves to in
the given category set, or "Uncategorized" when the id is absent or dangling.
Groups are sorted by label with plain string ordering.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from .task_models import UNCATEGORIZED, Category, Task

CategoryLookup = Mapping[str, Category] | Iterable[Category]


@dataclass(frozen=True, slots=True)
class ProgressSnapshot:
    completion_rate: float
    completed_count: int
    total_count: int


def _index(categories: CategoryLookup | None) -> Mapping[str, Category]:
    if categories is None:
        return {}
    if isinstance(categories, Mapping):
        return categories
    return {c.id: c for c in categories}


def category_label(task: Task, categories: CategoryLookup | None) -> str:
    if not task.category_id:
        return UNCATEGORIZED
    category = _index(categories).get(task.category_id)
    return category.name if category is not None else UNCATEGORIZED


def _labels(tasks: Iterable[Task], categories: CategoryLookup | None) -> Iterable[tuple[str, Task]]:
    index = _index(categories)
    for task in tasks:
        yield category_label(task, index), task


def time_by_category(
    tasks: Iterable[Task], categories: CategoryLookup | None = None
) -> list[tuple[str, float]]:
    """Total estimated hours per category label, ascending by label."""
    totals: dict[str, float] = defaultdict(float)
    for label, task in _labels(tasks, categories):
        totals[label] += task.estimated_time
    return sorted(totals.items(), key=lambda kv: kv[0])


def count_by_category(
    tasks: Iterable[Task], categories: CategoryLookup | None = None
) -> list[tuple[str, int]]:
    """Number of tasks per category label, ascending by label."""
    counts: dict[str, int] = defaultdict(int)
    for label, _ in _labels(tasks, categories):
        counts[label] += 1
    return sorted(counts.items(), key=lambda kv: kv[0])


def group_tasks_by_category(
    tasks: Iterable[Task], categories: CategoryLookup | None = None
) -> list[tuple[str, list[Task]]]:
    """
    Tasks bucketed per category for the list view, ascending by label.

    Buckets are keyed by category id, so two categories sharing a name stay
    separate sections. Absent and dangling ids share the "Uncategorized" bucket.
    Tasks keep their input order inside a bucket.
    """
    index = _index(categories)
    groups: dict[str | None, tuple[str, list[Task]]] = {}
    for task in tasks:
        key = task.category_id if task.category_id in index else None
        label = index[key].name if key is not None else UNCATEGORIZED
        groups.setdefault(key, (label, []))[1].append(task)
    return sorted(groups.values(), key=lambda g: g[0])


def completed_count(tasks: Iterable[Task]) -> int:
    return sum(1 for t in tasks if t.is_complete)


def completion_rate(tasks: Iterable[Task]) -> float:
    # An empty snapshot is 0% complete, not undefined.
    items = list(tasks)
    if not items:
        return 0.0
    return completed_count(items) / len(items)


def total_hours(tasks: Iterable[Task]) -> float:
    return sum(t.estimated_time for t in tasks)


def progress_snapshot(tasks: Iterable[Task]) -> ProgressSnapshot:
    items = list(tasks)
    return ProgressSnapshot(
        completion_rate=completion_rate(items),
        completed_count=completed_count(items),
        total_count=len(items),
    )

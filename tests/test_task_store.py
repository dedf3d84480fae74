# tests/test_task_store.py

from __future__ import annotations

import dataclasses
import sqlite3
from datetime import datetime
from pathlib import Path

import pytest

from procrastinote.errors import PersistenceError
from procrastinote.tasks.task_models import TaskStatus, new_category, new_task
from procrastinote.tasks.task_store import TaskStore

from .conftest import DUE


def test_task_add_get_update_delete(store: TaskStore) -> None:
    work = new_category("Work")
    store.add_category(work)

    task = new_task("Report", due_date=DUE, detail="Q3 numbers", estimated_time=3.5, category_id=work.id)
    assert store.add_task(task) == task.id
    assert store.count_tasks() == 1

    loaded = store.get_task(task.id)
    assert loaded == task

    edited = dataclasses.replace(
        task,
        title="Final report",
        status=TaskStatus.IN_PROGRESS,
        event_identifier="evt-1",
        category_id=None,
    )
    store.update_task(edited)
    assert store.get_task(task.id) == edited

    store.delete_task(task.id)
    assert store.get_task(task.id) is None
    assert store.count_tasks() == 0


def test_update_unknown_task_is_a_persistence_error(store: TaskStore) -> None:
    with pytest.raises(PersistenceError):
        store.update_task(new_task("never stored", due_date=DUE))


def test_duplicate_id_insert_rolls_back(store: TaskStore) -> None:
    task = new_task("once", due_date=DUE)
    store.add_task(task)
    with pytest.raises(PersistenceError):
        store.add_task(dataclasses.replace(task, title="twice"))
    assert [t.title for t in store.list_tasks()] == ["once"]


def test_list_tasks_sorted_by_due_date_and_filtered(store: TaskStore) -> None:
    home = new_category("Home")
    store.add_category(home)
    late = new_task("late", due_date=datetime(2025, 12, 1))
    early = new_task("early", due_date=datetime(2025, 1, 1), category_id=home.id)
    mid = new_task("mid", due_date=datetime(2025, 6, 1), status=TaskStatus.COMPLETE)
    for t in (late, early, mid):
        store.add_task(t)

    assert [t.title for t in store.list_tasks()] == ["early", "mid", "late"]
    assert [t.title for t in store.list_tasks(order_by="created")] == ["late", "early", "mid"]
    assert [t.title for t in store.list_tasks(status=TaskStatus.COMPLETE)] == ["mid"]
    assert [t.title for t in store.list_tasks(category_id=home.id)] == ["early"]

    with pytest.raises(ValueError):
        store.list_tasks(order_by="nope")


def test_deleting_category_keeps_tasks(store: TaskStore) -> None:
    work = new_category("Work")
    store.add_category(work)
    task = new_task("Report", due_date=DUE, category_id=work.id)
    store.add_task(task)

    store.delete_category(work.id)

    assert store.list_categories() == []
    assert store.get_category(work.id) is None
    remaining = store.get_task(task.id)
    assert remaining is not None
    assert remaining.category_id == work.id


def test_delete_tasks_with_status(store: TaskStore) -> None:
    statuses = [
        TaskStatus.NOT_STARTED,
        TaskStatus.COMPLETE,
        TaskStatus.IN_PROGRESS,
        TaskStatus.COMPLETE,
        TaskStatus.NOT_STARTED,
    ]
    for i, status in enumerate(statuses):
        store.add_task(new_task(f"t{i}", due_date=DUE, status=status))

    assert store.delete_tasks_with_status(TaskStatus.COMPLETE) == 2
    assert [t.title for t in store.list_tasks()] == ["t0", "t2", "t4"]
    assert store.delete_tasks_with_status(TaskStatus.COMPLETE) == 0


def test_data_survives_reopen(tmp_path: Path) -> None:
    db = tmp_path / "tasks.sqlite3"
    task = new_task("persist me", due_date=DUE, estimated_time=2.5)
    TaskStore(db).add_task(task)

    assert TaskStore(db).get_task(task.id) == task


def test_migration_adds_missing_columns(tmp_path: Path) -> None:
    db = tmp_path / "old.sqlite3"
    conn = sqlite3.connect(db)
    conn.execute(
        "CREATE TABLE tasks (seq INTEGER PRIMARY KEY AUTOINCREMENT, id TEXT NOT NULL UNIQUE, "
        "title TEXT NOT NULL, due_date TEXT NOT NULL)"
    )
    conn.execute(
        "INSERT INTO tasks(id, title, due_date) VALUES (?, ?, ?)",
        ("legacy", "Old task", DUE.isoformat()),
    )
    conn.commit()
    conn.close()

    store = TaskStore(db)
    task = store.get_task("legacy")
    assert task is not None
    assert task.status is TaskStatus.NOT_STARTED
    assert task.estimated_time == 1.0
    assert task.event_identifier is None

# tests/conftest.py

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from types import SimpleNamespace

import pytest

from procrastinote.core.state import AppState
from procrastinote.glance.shared_defaults import SharedDefaults
from procrastinote.tasks.task_store import TaskStore

from .fakes import FakeCalendar

DUE = datetime(2025, 11, 4, 9, 30)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="procrastinote-test",
        log_level="DEBUG",
        data_dir=tmp_path,
        db_path=tmp_path / "procrastinote.sqlite3",
        calendar_dir=tmp_path / "calendar",
        calendar_access=True,
        event_duration_minutes=60,
        event_reminder_minutes=15,
        glance_namespace="group.test.procrastinote",
        glance_dir=tmp_path / "shared",
        glance_refresh_minutes=30,
    )


@pytest.fixture()
def store(settings: SimpleNamespace) -> TaskStore:
    # Real SQLite store: its behavior is part of what we want to test.
    return TaskStore(settings.db_path)


@pytest.fixture()
def calendar() -> FakeCalendar:
    return FakeCalendar()


@pytest.fixture()
def state(settings: SimpleNamespace, store: TaskStore, calendar: FakeCalendar) -> AppState:
    """AppState wired with a real store, a fake calendar and a real glance file."""
    return AppState(
        settings=settings,
        store=store,
        calendar=calendar,
        glance=SharedDefaults(settings.glance_dir, settings.glance_namespace),
    )

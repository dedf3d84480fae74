# src/procrastinote/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (store/calendar/glance).
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..connectors.calendar_writer import CalendarWriter
from ..core.state import AppState
from ..glance.shared_defaults import SharedDefaults
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)
    settings.calendar_dir.mkdir(parents=True, exist_ok=True)
    settings.glance_dir.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    calendar = CalendarWriter(
        settings.calendar_dir,
        access_granted=settings.calendar_access,
        duration_minutes=settings.event_duration_minutes,
        reminder_minutes=settings.event_reminder_minutes,
    )

    state = AppState(
        settings=settings,
        store=TaskStore(settings.db_path),
        calendar=calendar,
        glance=SharedDefaults(settings.glance_dir, settings.glance_namespace),
    )
    logger.debug("AppState created db=%s calendar_dir=%s", settings.db_path, settings.calendar_dir)
    return state

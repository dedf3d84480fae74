# src/procrastinote/connectors/calendar_writer.py

"""
Calendar bridge backed by iCalendar files.

Each exported task becomes one VEVENT in its own .ics file inside the
calendar directory, ready to be imported or synced by any calendar client.
The event UID is the identifier stored back on the task.
"""

from __future__ import annotations

import asyncio
import logging
import os
import uuid
from datetime import UTC, datetime, timedelta
from pathlib import Path

from icalendar import Alarm, Calendar, Event

from ..errors import CalendarWriteError, PermissionDenied
from ..tasks.task_models import Task

logger = logging.getLogger(__name__)

PRODID = "-//Procrastinote//Task Export//EN"
MIN_EVENT_MINUTES = 15


def event_window(task: Task, duration_minutes: int) -> tuple[datetime, datetime]:
    """Start at the due date; the event always lasts at least MIN_EVENT_MINUTES."""
    start = task.due_date
    minutes = max(int(duration_minutes), MIN_EVENT_MINUTES)
    return start, start + timedelta(minutes=minutes)


def build_event_calendar(
    task: Task,
    *,
    uid: str,
    duration_minutes: int = 60,
    reminder_minutes: int = 15,
) -> Calendar:
    start, end = event_window(task, duration_minutes)

    event = Event()
    event.add("uid", uid)
    event.add("dtstamp", datetime.now(UTC))
    event.add("summary", task.title)
    if task.detail:
        event.add("description", task.detail)
    event.add("dtstart", start)
    event.add("dtend", end)

    alarm = Alarm()
    alarm.add("action", "DISPLAY")
    alarm.add("description", task.title)
    alarm.add("trigger", timedelta(minutes=-abs(int(reminder_minutes))))
    event.add_component(alarm)

    cal = Calendar()
    cal.add("prodid", PRODID)
    cal.add("version", "2.0")
    cal.add_component(event)
    return cal


class CalendarWriter:
    """
    CalendarBridge implementation.

    access_granted stands in for the platform permission prompt: when it is
    False every export fails with PermissionDenied and nothing is written.
    """

    def __init__(
        self,
        calendar_dir: str | Path,
        *,
        access_granted: bool = True,
        duration_minutes: int = 60,
        reminder_minutes: int = 15,
    ) -> None:
        self._dir = Path(calendar_dir)
        self._access_granted = access_granted
        self._duration_minutes = duration_minutes
        self._reminder_minutes = reminder_minutes

    async def request_access(self) -> None:
        if not self._access_granted:
            raise PermissionDenied("calendar access was not granted")

    async def export_task(self, task: Task) -> str:
        await self.request_access()

        uid = f"{uuid.uuid4()}@procrastinote"
        cal = build_event_calendar(
            task,
            uid=uid,
            duration_minutes=self._duration_minutes,
            reminder_minutes=self._reminder_minutes,
        )
        path = self._event_path(uid)

        try:
            await asyncio.to_thread(self._write_atomic, path, cal.to_ical())
        except OSError as e:
            raise CalendarWriteError(f"cannot write {path}: {e}") from e

        logger.debug("Calendar event written uid=%s path=%s", uid, path)
        return uid

    async def remove_event(self, event_id: str) -> None:
        path = self._event_path(event_id)
        try:
            await asyncio.to_thread(path.unlink, missing_ok=True)
        except OSError as e:
            raise CalendarWriteError(f"cannot remove {path}: {e}") from e
        logger.debug("Calendar event removed uid=%s", event_id)

    def _event_path(self, uid: str) -> Path:
        return self._dir / f"{uid.split('@', 1)[0]}.ics"

    @staticmethod
    def _write_atomic(path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".tmp")
        tmp.write_bytes(data)
        os.replace(tmp, path)

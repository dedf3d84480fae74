# tests/test_calendar_writer.py

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import pytest
from icalendar import Calendar

from procrastinote.connectors.calendar_writer import CalendarWriter, build_event_calendar, event_window
from procrastinote.errors import CalendarWriteError, PermissionDenied
from procrastinote.tasks.task_models import new_task

from .conftest import DUE


def _only_event(path: Path):
    cal = Calendar.from_ical(path.read_bytes())
    events = cal.walk("VEVENT")
    assert len(events) == 1
    return events[0]


@pytest.mark.parametrize("minutes, expected", [(60, 60), (15, 15), (5, 15), (0, 15), (90, 90)])
def test_event_window_has_a_floor(minutes: int, expected: int) -> None:
    task = new_task("t", due_date=DUE)
    start, end = event_window(task, minutes)
    assert start == DUE
    assert end - start == timedelta(minutes=expected)


def test_event_content() -> None:
    task = new_task("Dentist", due_date=DUE, detail="Bring insurance card")
    cal = build_event_calendar(task, uid="abc@procrastinote", duration_minutes=60, reminder_minutes=15)
    event = cal.walk("VEVENT")[0]

    assert str(event.get("uid")) == "abc@procrastinote"
    assert str(event.get("summary")) == "Dentist"
    assert str(event.get("description")) == "Bring insurance card"
    assert event.decoded("dtstart") == DUE
    assert event.decoded("dtend") == DUE + timedelta(hours=1)

    alarms = event.walk("VALARM")
    assert len(alarms) == 1
    assert alarms[0].decoded("trigger") == timedelta(minutes=-15)


def test_event_without_detail_has_no_description() -> None:
    task = new_task("Call mom", due_date=DUE)
    event = build_event_calendar(task, uid="x").walk("VEVENT")[0]
    assert event.get("description") is None


@pytest.mark.asyncio
async def test_export_writes_ics_and_returns_uid(tmp_path: Path) -> None:
    writer = CalendarWriter(tmp_path / "cal", duration_minutes=30)
    task = new_task("Standup", due_date=DUE)

    uid = await writer.export_task(task)

    files = list((tmp_path / "cal").glob("*.ics"))
    assert len(files) == 1
    event = _only_event(files[0])
    assert str(event.get("uid")) == uid
    assert event.decoded("dtend") - event.decoded("dtstart") == timedelta(minutes=30)


@pytest.mark.asyncio
async def test_two_exports_get_distinct_ids(tmp_path: Path) -> None:
    writer = CalendarWriter(tmp_path)
    task = new_task("Twice", due_date=DUE)
    assert await writer.export_task(task) != await writer.export_task(task)
    assert len(list(tmp_path.glob("*.ics"))) == 2


@pytest.mark.asyncio
async def test_export_without_access_writes_nothing(tmp_path: Path) -> None:
    writer = CalendarWriter(tmp_path / "cal", access_granted=False)
    with pytest.raises(PermissionDenied):
        await writer.export_task(new_task("Secret", due_date=DUE))
    assert not (tmp_path / "cal").exists()


@pytest.mark.asyncio
async def test_unwritable_directory_is_a_write_error(tmp_path: Path) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("file in the way", "utf-8")
    writer = CalendarWriter(blocker)
    with pytest.raises(CalendarWriteError):
        await writer.export_task(new_task("Nowhere", due_date=DUE))


@pytest.mark.asyncio
async def test_remove_event_deletes_its_file(tmp_path: Path) -> None:
    writer = CalendarWriter(tmp_path)
    keep = await writer.export_task(new_task("Keep", due_date=DUE))
    drop = await writer.export_task(new_task("Drop", due_date=DUE))

    await writer.remove_event(drop)
    await writer.remove_event(drop)

    files = list(tmp_path.glob("*.ics"))
    assert len(files) == 1
    assert str(_only_event(files[0]).get("uid")) == keep

# src/procrastinote/errors.py

"""
Error taxonomy.

Every failure degrades to "no change happened":
- ValidationError is raised before the store is touched,
- PersistenceError means the store rolled the change back,
- CalendarError means the task was not modified.
"""

from __future__ import annotations


class ProcrastinoteError(Exception):
    """Base class for all expected (user-reportable) failures."""


class ValidationError(ProcrastinoteError, ValueError):
    """Rejected input (empty title/name, negative estimate, ...)."""


class PersistenceError(ProcrastinoteError):
    """A store operation failed and was not applied."""


class CalendarError(ProcrastinoteError):
    """Calendar export failed; the task keeps its previous event identifier."""


class PermissionDenied(CalendarError):
    """Calendar access was not granted."""


class CalendarWriteError(CalendarError):
    """The calendar event could not be written."""

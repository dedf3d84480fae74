# src/procrastinote/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- Everything local: data, calendar files and the shared glance snapshot live under data_dir.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

ENV_PREFIX = "PROCRASTINOTE"

DEFAULT_GLANCE_NAMESPACE = "group.com.aryanpalit.procrastinote"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except ImportError:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    db_path: Path

    # ---- Calendar export ----
    calendar_dir: Path
    calendar_access: bool
    event_duration_minutes: int
    event_reminder_minutes: int

    # ---- Glance / widget snapshot ----
    glance_namespace: str
    glance_dir: Path
    glance_refresh_minutes: int

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "Procrastinote").strip() or "Procrastinote"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/procrastinote"))
        db_path = _env_path(_k("DB_PATH"), data_dir / "procrastinote.sqlite3")

        calendar_dir = _env_path(_k("CALENDAR_DIR"), data_dir / "calendar")
        # Stands in for the OS calendar permission prompt.
        calendar_access = _env_bool(_k("CALENDAR_ACCESS"), True)
        event_duration_minutes = _env_int(_k("EVENT_DURATION_MINUTES"), 60)
        event_reminder_minutes = _env_int(_k("EVENT_REMINDER_MINUTES"), 15)

        glance_namespace = _env(_k("GLANCE_NAMESPACE"), DEFAULT_GLANCE_NAMESPACE).strip() or DEFAULT_GLANCE_NAMESPACE
        glance_dir = _env_path(_k("GLANCE_DIR"), data_dir / "shared")
        glance_refresh_minutes = _env_int(_k("GLANCE_REFRESH_MINUTES"), 30)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            db_path=db_path,
            calendar_dir=calendar_dir,
            calendar_access=calendar_access,
            event_duration_minutes=event_duration_minutes,
            event_reminder_minutes=event_reminder_minutes,
            glance_namespace=glance_namespace,
            glance_dir=glance_dir,
            glance_refresh_minutes=glance_refresh_minutes,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS

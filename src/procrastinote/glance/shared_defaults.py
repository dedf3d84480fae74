# src/procrastinote/glance/shared_defaults.py

"""
Shared progress snapshot read by the glance/widget surface.

The main app overwrites the snapshot wholesale; readers may see a stale copy
and must never fail because of it.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
import time
from pathlib import Path
from typing import Any

from ..tasks.task_stats import ProgressSnapshot

logger = logging.getLogger(__name__)

KEY_PROGRESS = "progress"
KEY_COMPLETED = "completed"
KEY_TOTAL = "total"
KEY_UPDATED_AT = "updated_at"

EMPTY_SNAPSHOT = ProgressSnapshot(completion_rate=0.0, completed_count=0, total_count=0)


class SharedDefaults:
    """JSON key/value file named after a well-known namespace."""

    def __init__(self, base_dir: str | Path, namespace: str) -> None:
        if not namespace or not namespace.strip():
            raise ValueError("namespace is required")
        self._path = Path(base_dir) / f"{namespace.strip()}.json"

    @property
    def path(self) -> Path:
        return self._path

    def publish(self, snapshot: ProgressSnapshot) -> None:
        payload: dict[str, Any] = {
            KEY_PROGRESS: float(snapshot.completion_rate),
            KEY_COMPLETED: int(snapshot.completed_count),
            KEY_TOTAL: int(snapshot.total_count),
            KEY_UPDATED_AT: time.time(),
        }
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(".tmp")
        tmp.write_text(json.dumps(payload), "utf-8")
        os.replace(tmp, self._path)
        logger.debug(
            "Glance snapshot published progress=%.3f completed=%s total=%s",
            snapshot.completion_rate,
            snapshot.completed_count,
            snapshot.total_count,
        )

    def read(self) -> ProgressSnapshot:
        """Last published snapshot, or zeros if there is none or it is unreadable."""
        if not self._path.exists():
            return EMPTY_SNAPSHOT
        try:
            data = json.loads(self._path.read_text("utf-8"))
        except (OSError, ValueError):
            logger.warning("Unreadable glance snapshot at %s", self._path, exc_info=True)
            return EMPTY_SNAPSHOT
        if not isinstance(data, dict):
            return EMPTY_SNAPSHOT

        progress = 0.0
        completed = 0
        total = 0
        with contextlib.suppress(TypeError, ValueError):
            progress = float(data.get(KEY_PROGRESS, 0.0))
        with contextlib.suppress(TypeError, ValueError):
            completed = int(data.get(KEY_COMPLETED, 0))
        with contextlib.suppress(TypeError, ValueError):
            total = int(data.get(KEY_TOTAL, 0))

        return ProgressSnapshot(
            completion_rate=max(0.0, min(1.0, progress)),
            completed_count=completed,
            total_count=total,
        )


def render_glance(snapshot: ProgressSnapshot) -> str:
    """Compact widget text, e.g. '60%  6/10'."""
    percent = int(snapshot.completion_rate * 100)
    return f"{percent}%  {snapshot.completed_count}/{snapshot.total_count}"

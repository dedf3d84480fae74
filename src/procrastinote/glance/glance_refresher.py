# src/procrastinote/glance/glance_refresher.py

from __future__ import annotations

"""
Glance refresher.

A small polling loop that recomputes the progress snapshot from the store
and overwrites the shared copy. The main app also calls refresh_glance()
directly after every change.
"""

import asyncio
import logging

from ..core.ports import EntityStore, SnapshotSink
from ..errors import PersistenceError
from ..tasks.task_stats import ProgressSnapshot, progress_snapshot

logger = logging.getLogger(__name__)


def refresh_glance(store: EntityStore, sink: SnapshotSink) -> ProgressSnapshot:
    """Recompute from the store and publish. Errors propagate to the caller."""
    snapshot = progress_snapshot(store.list_tasks())
    sink.publish(snapshot)
    return snapshot


async def run_glance_refresher(
        store: EntityStore,
        sink: SnapshotSink,
        *,
        interval_seconds: float = 30 * 60,
) -> None:
    """
    Publish a fresh snapshot every interval_seconds.

    A failed refresh is logged and skipped; the previous snapshot stays in place.
    To stop the refresher, cancel the coroutine/task.
    """
    sleep_s = max(0.01, float(interval_seconds))

    while True:
        try:
            snapshot = refresh_glance(store, sink)
            logger.debug(
                "Glance refreshed completed=%s total=%s",
                snapshot.completed_count,
                snapshot.total_count,
            )
        except (PersistenceError, OSError):
            logger.exception("Glance refresh failed")

        await asyncio.sleep(sleep_s)

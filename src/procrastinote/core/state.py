# src/procrastinote/core/state.py

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

from .ports import CalendarBridge, EntityStore, SnapshotSink


@dataclass
class AppState:
    # Settings object (config.Settings or a SimpleNamespace in tests).
    settings: Any

    store: EntityStore
    calendar: CalendarBridge
    glance: SnapshotSink

    # In-flight background work (calendar exports); kept referenced until done.
    pending: set[asyncio.Task[Any]] = field(default_factory=set)

    def spawn(self, coro: Any) -> asyncio.Task[Any]:
        """Run a coroutine in the background on the current event loop."""
        task = asyncio.get_running_loop().create_task(coro)
        self.pending.add(task)
        task.add_done_callback(self.pending.discard)
        return task

    async def drain(self) -> None:
        """Wait for all in-flight background work."""
        while self.pending:
            batch = list(self.pending)
            await asyncio.gather(*batch, return_exceptions=True)
            self.pending.difference_update(batch)

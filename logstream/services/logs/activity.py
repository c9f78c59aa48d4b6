"""
Activity tracking for log sources.

A source is "active" while something keeps reporting activity for it;
a periodic sweep demotes sources that have been silent longer than the
inactivity window. The tracker is independent of polling and is only
queried for display.
"""

import asyncio
import time
from typing import Dict, List, Optional, Set

from logstream.core.logging import logger


class ActivityTracker:
    """
    Liveness map keyed by source id.

    Timestamps come from time.monotonic(); pass ``now`` to sweep() to
    drive the clock explicitly.
    """

    def __init__(self, inactivity_window: float = 3.0, sweep_interval: float = 1.0):
        """
        Args:
            inactivity_window: Seconds without activity before a source is demoted
            sweep_interval: Seconds between sweeps of the background task
        """
        self.inactivity_window = inactivity_window
        self.sweep_interval = sweep_interval
        self._last_activity: Dict[str, float] = {}
        self._active: Set[str] = set()
        self._sweep_task: Optional[asyncio.Task] = None
        self._running = False

    def register_activity(self, source_id: str, now: Optional[float] = None) -> None:
        """Stamp a source as alive, adding it to the active set if needed."""
        self._last_activity[source_id] = time.monotonic() if now is None else now
        if source_id not in self._active:
            self._active.add(source_id)
            logger.debug(f"Source {source_id} became active")

    def unregister_activity(self, source_id: str) -> None:
        self._last_activity.pop(source_id, None)
        self._active.discard(source_id)

    def has_active_stream(self, source_id: str) -> bool:
        return source_id in self._active

    def active_sources(self) -> List[str]:
        return sorted(self._active)

    def last_activity(self, source_id: str) -> Optional[float]:
        return self._last_activity.get(source_id)

    def sweep(self, now: Optional[float] = None) -> List[str]:
        """
        Demote every source whose last activity is older than the window.

        Returns:
            Ids of the sources that were demoted
        """
        now = time.monotonic() if now is None else now
        expired = [
            source_id for source_id, stamp in self._last_activity.items()
            if now - stamp >= self.inactivity_window
        ]
        for source_id in expired:
            self.unregister_activity(source_id)
        if expired:
            logger.debug(f"Sources went idle: {', '.join(expired)}")
        return expired

    async def start(self):
        """Start the periodic sweep task."""
        if self._running:
            return
        self._running = True
        self._sweep_task = asyncio.create_task(self._sweep_loop())
        logger.info("Activity tracker started")

    async def stop(self):
        """Stop the sweep task and forget all activity."""
        self._running = False
        if self._sweep_task:
            self._sweep_task.cancel()
            try:
                await self._sweep_task
            except asyncio.CancelledError:
                pass
            self._sweep_task = None

        self._last_activity.clear()
        self._active.clear()
        logger.info("Activity tracker stopped")

    async def _sweep_loop(self):
        while self._running:
            try:
                await asyncio.sleep(self.sweep_interval)
                self.sweep()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in activity sweep: {e}")

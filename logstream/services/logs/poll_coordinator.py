"""
Polling coordinator for registered log sources.

One ticker task drives every registered source on a fixed interval. Each
tick fetches the newest entry per source concurrently, deduplicates it
against the last seen record id, prepends new records to the source's
buffer and notifies listeners, throttled per source.
"""

import asyncio
import inspect
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Deque, Dict, Iterable, List, Optional, Sequence, Union

from logstream.core.exceptions import SourceNotFoundError
from logstream.core.logging import logger
from .activity import ActivityTracker
from .base import OutputFormat, SourceDescriptor, StreamResult, UnifiedLogRecord, utc_now_iso
from .stream_service import StreamLogsService


LOGS_CHANGED = "logs_changed"
SOURCE_UNREGISTERED = "unregistered"

Listener = Callable[[str, str], Any]


class PollStatus:
    SEEDING = "seeding"
    POLLING = "polling"


def select_new_records(
    fetched: Sequence[UnifiedLogRecord],
    last_seen_id: Optional[str]
) -> List[UnifiedLogRecord]:
    """
    Records in a newest-first batch that were not seen before.

    Everything ahead of ``last_seen_id`` is new. When the id has scrolled
    out of the fetched window the whole batch is treated as new.
    """
    if last_seen_id is None:
        return list(fetched)
    for index, record in enumerate(fetched):
        if record.id == last_seen_id:
            return list(fetched[:index])
    return [record for record in fetched if record.id != last_seen_id]


@dataclass
class SourcePollState:
    """Per-source state, owned by the coordinator"""
    source_id: str
    buffer: Deque[UnifiedLogRecord]
    status: str = PollStatus.SEEDING
    last_seen_id: Optional[str] = None
    last_update_emitted_at: Optional[float] = None
    last_error: Optional[str] = None
    last_polled_at: Optional[str] = None
    registered_at: str = field(default_factory=utc_now_iso)
    poll_task: Optional[asyncio.Task] = None
    notify_task: Optional[asyncio.Task] = None

    @property
    def poll_in_flight(self) -> bool:
        return self.poll_task is not None and not self.poll_task.done()


class LogPollingCoordinator:
    """
    Keeps registered sources' buffers fresh.

    State for each source is only mutated under that source's lock, and
    every mutation after an await first checks that the state object is
    still the registered one, so results arriving after unregistration
    are dropped.
    """

    def __init__(
        self,
        stream_service: StreamLogsService,
        activity_tracker: Optional[ActivityTracker] = None,
        poll_interval: float = 15.0,
        throttle_window: float = 0.5,
        buffer_size: int = 1000
    ):
        """
        Args:
            stream_service: Service used for every fetch
            activity_tracker: Optional tracker told about sources receiving new records
            poll_interval: Seconds between ticks
            throttle_window: Minimum seconds between notifications for one source
            buffer_size: Records kept per source
        """
        self.stream_service = stream_service
        self.activity_tracker = activity_tracker
        self.poll_interval = poll_interval
        self.throttle_window = throttle_window
        self.buffer_size = buffer_size

        self._descriptors: Dict[str, SourceDescriptor] = {}
        self._states: Dict[str, SourcePollState] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._listeners: List[Listener] = []
        self._ticker_task: Optional[asyncio.Task] = None
        self._running = False

    # Catalogue

    def get_sources(self) -> List[SourceDescriptor]:
        return list(self._descriptors.values())

    def get_source(self, source_id: str) -> Optional[SourceDescriptor]:
        return self._descriptors.get(source_id)

    async def update_sources(
        self,
        descriptors: Iterable[Union[SourceDescriptor, Dict[str, Any]]]
    ) -> List[str]:
        """
        Replace the catalogue of known sources.

        Registered sources missing from the new catalogue are unregistered.

        Returns:
            Ids of the sources that were unregistered
        """
        catalogue = {}
        for descriptor in descriptors:
            if not isinstance(descriptor, SourceDescriptor):
                descriptor = SourceDescriptor.from_dict(descriptor)
            catalogue[descriptor.id] = descriptor
        self._descriptors = catalogue

        removed = [source_id for source_id in list(self._states) if source_id not in catalogue]
        for source_id in removed:
            await self.unregister_source(source_id)

        logger.info(f"Source catalogue updated: {len(catalogue)} sources, {len(removed)} unregistered")
        return removed

    # Registration

    def _lock_for(self, source_id: str) -> asyncio.Lock:
        if source_id not in self._locks:
            self._locks[source_id] = asyncio.Lock()
        return self._locks[source_id]

    def is_registered(self, source_id: str) -> bool:
        return source_id in self._states

    def registered_sources(self) -> List[str]:
        return list(self._states)

    async def register_source(self, source_id: str) -> SourcePollState:
        """
        Start polling a catalogued source.

        The first fetch seeds the buffer and the dedup boundary without
        notifying listeners. Registering an already tracked source is a no-op.

        Raises:
            SourceNotFoundError: If the id is not in the catalogue
        """
        descriptor = self._descriptors.get(source_id)
        if descriptor is None:
            raise SourceNotFoundError(source_id)

        lock = self._lock_for(source_id)
        async with lock:
            existing = self._states.get(source_id)
            if existing is not None:
                return existing
            state = SourcePollState(source_id=source_id, buffer=deque(maxlen=self.buffer_size))
            self._states[source_id] = state

        logger.info(f"Registering source {source_id} ({descriptor.slug})")
        result = await self._fetch(descriptor)

        async with lock:
            if self._states.get(source_id) is not state:
                return state

            state.last_polled_at = utc_now_iso()
            if result.success:
                records = list(result.data or [])[:self.buffer_size]
                state.buffer.extend(records)
                if records:
                    state.last_seen_id = records[0].id
                state.last_error = None
            else:
                state.last_error = result.error
                logger.warning(f"Initial fetch for {source_id} failed: {result.error}")
            state.status = PollStatus.POLLING

        return state

    async def unregister_source(self, source_id: str) -> bool:
        """
        Stop polling a source and discard its state.

        Returns:
            False if the source was not registered
        """
        state = self._states.pop(source_id, None)
        self._locks.pop(source_id, None)
        if state is None:
            return False

        current = asyncio.current_task()
        for task in (state.poll_task, state.notify_task):
            if task and not task.done() and task is not current:
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass

        if self.activity_tracker:
            self.activity_tracker.unregister_activity(source_id)

        logger.info(f"Unregistered source {source_id}")
        await self._notify(source_id, SOURCE_UNREGISTERED)
        return True

    # Buffers

    def _require_state(self, source_id: str) -> SourcePollState:
        state = self._states.get(source_id)
        if state is None:
            raise SourceNotFoundError(source_id)
        return state

    def get_logs(self, source_id: str) -> List[UnifiedLogRecord]:
        """Buffered records for a registered source, newest first."""
        return list(self._require_state(source_id).buffer)

    async def clear_logs(self, source_id: str) -> None:
        """Empty a source's buffer. The dedup boundary is kept."""
        state = self._require_state(source_id)
        async with self._lock_for(source_id):
            if self._states.get(source_id) is not state:
                return
            state.buffer.clear()
        await self._notify(source_id)

    # Listeners

    def add_listener(self, listener: Listener) -> None:
        """Subscribe to ``(event, source_id)`` notifications; sync or async callables."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def _notify(self, source_id: str, event: str = LOGS_CHANGED):
        for listener in list(self._listeners):
            try:
                result = listener(event, source_id)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(f"Log listener failed for {source_id}: {e}")

    def _should_emit_now(self, state: SourcePollState) -> bool:
        """
        Throttle decision for a source with fresh records.

        Returns True when listeners may be notified right away; otherwise a
        single deferred notification is scheduled (or already pending).
        """
        if state.notify_task is not None and not state.notify_task.done():
            return False

        now = time.monotonic()
        if state.last_update_emitted_at is None or now - state.last_update_emitted_at >= self.throttle_window:
            state.last_update_emitted_at = now
            return True

        delay = self.throttle_window - (now - state.last_update_emitted_at)
        state.notify_task = asyncio.create_task(self._deferred_notify(state, delay))
        return False

    async def _deferred_notify(self, state: SourcePollState, delay: float):
        await asyncio.sleep(delay)
        if self._states.get(state.source_id) is not state:
            return
        state.last_update_emitted_at = time.monotonic()
        await self._notify(state.source_id)

    # Polling

    async def _fetch(self, descriptor: SourceDescriptor, line: Optional[int] = None) -> StreamResult:
        try:
            return await self.stream_service.stream_logs(
                descriptor,
                line=line,
                format=OutputFormat.UNIFIED
            )
        except Exception as e:
            logger.error(f"Unexpected error fetching {descriptor.id}: {e}", exc_info=True)
            return StreamResult.fail(str(e), {"source": descriptor.slug})

    async def _poll_source(self, state: SourcePollState):
        descriptor = self._descriptors.get(state.source_id)
        if descriptor is None:
            return

        result = await self._fetch(descriptor, line=1)

        lock = self._locks.get(state.source_id)
        if lock is None:
            return
        async with lock:
            if self._states.get(state.source_id) is not state:
                return

            state.last_polled_at = utc_now_iso()
            if not result.success:
                state.last_error = result.error
                logger.warning(f"Poll failed for {state.source_id}: {result.error}")
                return
            state.last_error = None

            new_records = select_new_records(list(result.data or []), state.last_seen_id)
            if not new_records:
                return

            state.last_seen_id = new_records[0].id
            state.buffer.extendleft(reversed(new_records))
            logger.debug(f"{len(new_records)} new records for {state.source_id}")

            if self.activity_tracker:
                self.activity_tracker.register_activity(state.source_id)
            emit_now = self._should_emit_now(state)

        if emit_now:
            await self._notify(state.source_id)

    def _dispatch_polls(self) -> List[asyncio.Task]:
        tasks = []
        for source_id, state in list(self._states.items()):
            if state.status != PollStatus.POLLING:
                continue
            if state.poll_in_flight:
                logger.debug(f"Previous poll for {source_id} still running, skipping")
                continue
            state.poll_task = asyncio.create_task(self._poll_source(state))
            tasks.append(state.poll_task)
        return tasks

    async def poll_once(self):
        """Run one tick and wait for every source's poll to settle."""
        tasks = self._dispatch_polls()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def start(self):
        """Start the ticker task."""
        if self._running:
            return
        self._running = True
        self._ticker_task = asyncio.create_task(self._ticker())
        logger.info(f"Log polling coordinator started (interval {self.poll_interval}s)")

    async def stop(self):
        """Stop the ticker and unregister every source."""
        self._running = False
        if self._ticker_task:
            self._ticker_task.cancel()
            try:
                await self._ticker_task
            except asyncio.CancelledError:
                pass
            self._ticker_task = None

        for source_id in list(self._states):
            await self.unregister_source(source_id)

        logger.info("Log polling coordinator stopped")

    async def _ticker(self):
        while self._running:
            try:
                await asyncio.sleep(self.poll_interval)
                self._dispatch_polls()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in polling ticker: {e}")

    def get_status(self) -> Dict[str, Dict[str, Any]]:
        """Information about every registered source."""
        return {
            source_id: {
                "status": state.status,
                "last_seen_id": state.last_seen_id,
                "buffer_size": len(state.buffer),
                "last_error": state.last_error,
                "last_polled_at": state.last_polled_at,
                "registered_at": state.registered_at,
                "poll_in_flight": state.poll_in_flight,
                "active": bool(self.activity_tracker and self.activity_tracker.has_active_stream(source_id)),
            }
            for source_id, state in self._states.items()
        }

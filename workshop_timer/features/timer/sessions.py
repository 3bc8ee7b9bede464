"""Per-room polling sessions for the facilitator and the participants"""
import asyncio
import contextlib
import logging
from typing import Optional

from workshop_timer import config
from workshop_timer.features.timer import state
from workshop_timer.features.timer.domain import TimerRecord
from workshop_timer.features.timer.schemas import AdminView, TimerView
from workshop_timer.infra.store.client import StoreError
from workshop_timer.infra.store.repositories.timers import TimerRepository
from workshop_timer.utils.time_helper import Clock, now_ms

logger = logging.getLogger(__name__)


class TimerCommandError(ValueError):
    """A command that does not apply to the room's current timer state"""


def build_view(room_id: str, record: Optional[TimerRecord], now: int) -> TimerView:
    if record is None:
        return TimerView(room_id=room_id)
    remaining = state.derive_remaining(record, now)
    return TimerView(
        room_id=room_id,
        title=record.title,
        status=record.status,
        status_label=state.status_label(record.status),
        remaining=remaining,
        display=state.format_time(remaining),
        time_up=state.is_time_up(record, now),
        waiting=False,
    )


async def _cancel(task: Optional[asyncio.Task]) -> None:
    if task is None:
        return
    task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await task


class PollingSession:
    """Polls the room's timer document on a fixed interval until stopped"""

    def __init__(
        self,
        room_id: str,
        repository: TimerRepository,
        poll_interval: float = config.POLL_INTERVAL_SECONDS,
        clock: Clock = now_ms,
    ):
        self.room_id = room_id
        self._repository = repository
        self._poll_interval = poll_interval
        self._clock = clock
        self._record: Optional[TimerRecord] = None
        self._poll_task: Optional[asyncio.Task] = None
        self._ready = asyncio.Event()

    @property
    def record(self) -> Optional[TimerRecord]:
        return self._record

    @property
    def running(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    async def start(self) -> None:
        """Schedule polling and read the store once before returning"""
        if self.running:
            return
        self._poll_task = asyncio.create_task(self._poll_loop())
        logger.info(f"{type(self).__name__} started for room {self.room_id}")
        try:
            await self.refresh()
        finally:
            self._ready.set()

    async def wait_ready(self) -> None:
        """Wait until the first read issued by start() has settled"""
        await self._ready.wait()

    async def stop(self) -> None:
        await _cancel(self._poll_task)
        self._poll_task = None
        self._ready.set()
        logger.info(f"{type(self).__name__} stopped for room {self.room_id}")

    async def refresh(self) -> None:
        """Read the store once; a failed read leaves the current state alone"""
        try:
            record = await self._repository.find_by_room(self.room_id)
        except StoreError as e:
            logger.warning(f"Poll failed for room {self.room_id}: {e}")
            return
        self._on_polled(record)

    def _on_polled(self, record: Optional[TimerRecord]) -> None:
        if record is not None:
            self._record = record

    async def _poll_loop(self) -> None:
        while True:
            await asyncio.sleep(self._poll_interval)
            try:
                await self.refresh()
            except Exception as e:
                logger.exception(f"Unexpected poll error for room {self.room_id}: {e}")


class AdminSession(PollingSession):
    """
    Facilitator's controller for one room.

    Commands are computed against the locally cached record and the local
    clock, written to the store, then applied to the cache without waiting for
    a confirming read. The background poll overwrites the cache with whatever
    the store holds, so concurrent admins converge on the last write.
    """

    def _require_record(self) -> TimerRecord:
        if self._record is None:
            raise TimerCommandError(f"No timer in room {self.room_id}")
        return self._record

    async def _commit(self, record: TimerRecord, command: str) -> TimerRecord:
        persisted = await self._repository.save(self.room_id, record)
        self._record = record
        logger.info(
            f"Room {self.room_id}: {command} -> {record.status.value}, "
            f"remaining={state.derive_remaining(record, self._clock())}s, persisted={persisted}"
        )
        return record

    async def start_timer(self, title: Optional[str], minutes: int) -> TimerRecord:
        if state.is_active(self._record):
            raise TimerCommandError(f"Timer in room {self.room_id} is already active")
        title, minutes = state.normalize_start_request(title, minutes)
        return await self._commit(state.start(title, minutes, self._clock()), "start")

    async def pause(self) -> TimerRecord:
        record = self._require_record()
        if not record.is_running:
            raise TimerCommandError(f"Timer in room {self.room_id} is not running")
        return await self._commit(state.pause(record, self._clock()), "pause")

    async def resume(self) -> TimerRecord:
        record = self._require_record()
        if not record.is_paused:
            raise TimerCommandError(f"Timer in room {self.room_id} is not paused")
        return await self._commit(state.resume(record, self._clock()), "resume")

    async def stop_timer(self) -> TimerRecord:
        record = self._require_record()
        if not state.is_active(record):
            raise TimerCommandError(f"Timer in room {self.room_id} is not active")
        return await self._commit(state.stop(record), "stop")

    async def adjust(self, delta_seconds: int) -> TimerRecord:
        record = self._require_record()
        if not state.is_active(record):
            raise TimerCommandError(f"Timer in room {self.room_id} is not active")
        return await self._commit(state.adjust(record, delta_seconds, self._clock()), f"adjust {delta_seconds:+d}s")

    def reset(self) -> None:
        """Forget the local timer so a new one can be configured"""
        self._record = None

    def view(self) -> AdminView:
        view = build_view(self.room_id, self._record, self._clock())
        return AdminView(
            **view.model_dump(),
            active=state.is_active(self._record),
            record=self._record,
        )


class ParticipantSession(PollingSession):
    """
    Read-only viewer for one room.

    Besides the slow poll, a fast tick re-derives the remaining time from the
    last polled record so the countdown moves smoothly between polls.
    """

    def __init__(
        self,
        room_id: str,
        repository: TimerRepository,
        poll_interval: float = config.POLL_INTERVAL_SECONDS,
        tick_interval: float = config.TICK_INTERVAL_SECONDS,
        clock: Clock = now_ms,
    ):
        super().__init__(room_id, repository, poll_interval, clock)
        self._tick_interval = tick_interval
        self._tick_task: Optional[asyncio.Task] = None
        self._view = TimerView(room_id=room_id)

    async def start(self) -> None:
        if self.running:
            return
        self._tick_task = asyncio.create_task(self._tick_loop())
        await super().start()
        self.tick()

    async def stop(self) -> None:
        await _cancel(self._tick_task)
        self._tick_task = None
        await super().stop()

    def _on_polled(self, record: Optional[TimerRecord]) -> None:
        super()._on_polled(record)
        self.tick()

    def tick(self) -> TimerView:
        self._view = build_view(self.room_id, self._record, self._clock())
        return self._view

    def view(self) -> TimerView:
        return self._view

    async def _tick_loop(self) -> None:
        while True:
            await asyncio.sleep(self._tick_interval)
            self.tick()

"""Owns the live sessions for every room this process serves"""
import asyncio
import logging
from typing import Dict, Optional

from workshop_timer import config
from workshop_timer.features.timer.sessions import AdminSession, ParticipantSession, PollingSession
from workshop_timer.infra.store.client import get_store_client
from workshop_timer.infra.store.repositories.timers import TimerRepository
from workshop_timer.utils.time_helper import Clock, now_ms

logger = logging.getLogger(__name__)


class SessionRegistry:
    """
    Admin sessions are opened and closed explicitly per room. Participant
    sessions are shared by every viewer of a room and reference counted: the
    first viewer starts polling, the last one to leave stops it.
    """

    def __init__(
        self,
        repository: TimerRepository,
        poll_interval: float = config.POLL_INTERVAL_SECONDS,
        tick_interval: float = config.TICK_INTERVAL_SECONDS,
        clock: Clock = now_ms,
    ):
        self._repository = repository
        self._poll_interval = poll_interval
        self._tick_interval = tick_interval
        self._clock = clock
        self._admins: Dict[str, AdminSession] = {}
        self._participants: Dict[str, ParticipantSession] = {}
        self._viewers: Dict[str, int] = {}
        self._lock = asyncio.Lock()

    @property
    def repository(self) -> TimerRepository:
        return self._repository

    @property
    def clock(self) -> Clock:
        return self._clock

    def get_admin(self, room_id: str) -> Optional[AdminSession]:
        return self._admins.get(room_id)

    async def _ready(self, session: PollingSession, created: bool) -> None:
        # First store read runs outside the registry lock
        if created:
            await session.start()
        else:
            await session.wait_ready()

    async def open_admin(self, room_id: str) -> AdminSession:
        """Return the room's admin session, starting one if needed"""
        async with self._lock:
            session = self._admins.get(room_id)
            created = session is None
            if created:
                session = AdminSession(room_id, self._repository, self._poll_interval, self._clock)
                self._admins[room_id] = session
        await self._ready(session, created)
        return session

    async def close_admin(self, room_id: str) -> bool:
        async with self._lock:
            session = self._admins.pop(room_id, None)
        if session is None:
            return False
        await session.stop()
        return True

    async def acquire_participant(self, room_id: str) -> ParticipantSession:
        async with self._lock:
            session = self._participants.get(room_id)
            created = session is None
            if created:
                session = ParticipantSession(
                    room_id, self._repository, self._poll_interval, self._tick_interval, self._clock
                )
                self._participants[room_id] = session
            self._viewers[room_id] = self._viewers.get(room_id, 0) + 1
        await self._ready(session, created)
        return session

    async def release_participant(self, room_id: str) -> None:
        async with self._lock:
            count = self._viewers.get(room_id, 0) - 1
            if count > 0:
                self._viewers[room_id] = count
                return
            self._viewers.pop(room_id, None)
            session = self._participants.pop(room_id, None)
        if session is not None:
            await session.stop()

    def viewer_count(self, room_id: str) -> int:
        return self._viewers.get(room_id, 0)

    async def close_all(self) -> None:
        async with self._lock:
            sessions = list(self._admins.values()) + list(self._participants.values())
            self._admins.clear()
            self._participants.clear()
            self._viewers.clear()
        for session in sessions:
            await session.stop()
        logger.info(f"Closed {len(sessions)} timer sessions")


_registry: Optional[SessionRegistry] = None


def get_session_registry() -> SessionRegistry:
    """Get or create the process-wide registry"""
    global _registry

    if _registry is None:
        _registry = SessionRegistry(TimerRepository(get_store_client()))

    return _registry


async def shutdown_session_registry() -> None:
    global _registry

    if _registry is not None:
        await _registry.close_all()
    _registry = None

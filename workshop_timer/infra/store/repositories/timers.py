"""Timer repository"""
import logging
from typing import Optional
from urllib.parse import quote

from workshop_timer import config
from workshop_timer.features.timer.domain import TimerRecord
from workshop_timer.infra.store.client import RemoteStoreClient, StoreError

logger = logging.getLogger(__name__)


class TimerRepository:
    """
    Repository for the per-room timer document.

    Hides the store's path layout from the rest of the application. There is
    no versioning: every save replaces the document, last writer wins.
    """

    def __init__(self, client: RemoteStoreClient):
        self._client = client

    def _path(self, room_id: str) -> str:
        return f"{config.TIMERS_PATH}/{quote(room_id, safe='')}"

    async def find_by_room(self, room_id: str) -> Optional[TimerRecord]:
        """
        Read the timer for a room.

        Returns None when the room has no timer yet. Raises StoreError when the
        store cannot be reached so pollers can keep their previous state.
        """
        data = await self._client.get_json(self._path(room_id))
        return TimerRecord.from_store(data)

    async def save(self, room_id: str, record: TimerRecord) -> bool:
        """Write the timer for a room; failures are logged, not raised"""
        try:
            await self._client.put_json(self._path(room_id), record.to_store())
            return True
        except StoreError as e:
            logger.warning(f"Timer for room {room_id} not persisted: {e}")
            return False

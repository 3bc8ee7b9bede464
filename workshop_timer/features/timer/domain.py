"""Domain models for the Timer feature"""

import logging
import math
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)


class TimerStatus(str, Enum):
    """Timer status"""
    RUNNING = "running"
    PAUSED = "paused"
    STOPPED = "stopped"


def _to_int(value: Any) -> Optional[int]:
    """Coerce a JSON number to int, flooring floats; anything else is None"""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return math.floor(value) if math.isfinite(value) else None
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            return None
        return math.floor(value) if math.isfinite(value) else None
    return None


class TimerRecord(BaseModel):
    """
    Timer state persisted at timers/{room_id}.

    While running, `duration` and `started_at` are the anchor fields and the
    true remaining time is always derived from them. While paused or stopped,
    `remaining` is the frozen authoritative value.
    """
    title: str = ""
    duration: int = 0  # seconds remaining as of started_at
    remaining: int = 0  # snapshot, authoritative when not running
    status: TimerStatus = TimerStatus.STOPPED
    started_at: Optional[int] = Field(default=None, alias="startedAt")  # epoch ms
    paused_at: Optional[int] = Field(default=None, alias="pausedAt")  # epoch ms, informational

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("title", mode="before")
    @classmethod
    def _default_title(cls, value: Any) -> str:
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)

    @field_validator("duration", "remaining", mode="before")
    @classmethod
    def _default_seconds(cls, value: Any) -> int:
        return _to_int(value) or 0

    @field_validator("status", mode="before")
    @classmethod
    def _default_status(cls, value: Any) -> TimerStatus:
        try:
            return TimerStatus(value)
        except ValueError:
            return TimerStatus.STOPPED

    @field_validator("started_at", "paused_at", mode="before")
    @classmethod
    def _optional_timestamp(cls, value: Any) -> Optional[int]:
        return _to_int(value)

    @property
    def is_running(self) -> bool:
        return self.status == TimerStatus.RUNNING

    @property
    def is_paused(self) -> bool:
        return self.status == TimerStatus.PAUSED

    @property
    def is_stopped(self) -> bool:
        return self.status == TimerStatus.STOPPED

    @classmethod
    def from_store(cls, data: Any) -> Optional["TimerRecord"]:
        """Parse a stored document, returning None when it is absent or unusable"""
        if data is None:
            return None
        if not isinstance(data, dict):
            logger.warning(f"Ignoring non-object timer document: {data!r}")
            return None
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Ignoring malformed timer document: {e}")
            return None

    def to_store(self) -> dict[str, Any]:
        """Serialize with the store's field names"""
        return self.model_dump(by_alias=True, mode="json")

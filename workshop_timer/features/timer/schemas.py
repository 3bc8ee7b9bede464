"""Request and response schemas for the Timer API"""

from typing import Optional

from pydantic import BaseModel

from workshop_timer.features.timer.domain import TimerRecord, TimerStatus


class StartTimerRequest(BaseModel):
    """Request model for starting a timer"""
    title: Optional[str] = None
    minutes: int = 5


class AdjustTimerRequest(BaseModel):
    """Request model for adding or removing time"""
    delta_seconds: int


class TimerView(BaseModel):
    """What a screen shows for a room at one instant"""
    room_id: str
    title: str = ""
    status: Optional[TimerStatus] = None
    status_label: Optional[str] = None
    remaining: int = 0
    display: str = "00:00"
    time_up: bool = False
    waiting: bool = True  # no timer observed for the room yet


class AdminView(TimerView):
    """Admin screen: the view plus which controls apply"""
    active: bool = False
    record: Optional[TimerRecord] = None


class ShareInfo(BaseModel):
    """Links handed to participants"""
    room_id: str
    participant_url: str
    qr_image_url: str


class LandingResponse(BaseModel):
    """Entry point: a room parameter selects participant mode"""
    mode: str
    room_id: Optional[str] = None
    message: str

"""
Timer state model.

Pure functions over TimerRecord and a wall-clock reading `now` in epoch
milliseconds. Remaining time is never stored as a live counter: while a timer
runs it is recomputed from the anchor fields (started_at, duration) on every
read, so any reader with a loosely synchronized clock derives the same value.
"""
from typing import Optional, Tuple

from workshop_timer import config
from workshop_timer.features.timer.domain import TimerRecord, TimerStatus

STATUS_LABELS = {
    TimerStatus.RUNNING: "Running",
    TimerStatus.PAUSED: "Paused",
    TimerStatus.STOPPED: "Finished",
}


def elapsed_seconds(record: TimerRecord, now: int) -> int:
    """Whole seconds since the current running interval began"""
    if record.started_at is None:
        return 0
    return (now - record.started_at) // 1000


def derive_remaining(record: TimerRecord, now: int) -> int:
    """Current remaining seconds, never negative"""
    if record.status == TimerStatus.STOPPED:
        return 0
    if record.status == TimerStatus.PAUSED:
        return max(0, record.remaining)
    return max(0, record.duration - elapsed_seconds(record, now))


def normalize_start_request(title: Optional[str], minutes: int) -> Tuple[str, int]:
    """Apply the form defaults: a blank title and a sub-minute duration are not accepted"""
    title = (title or "").strip() or config.DEFAULT_TITLE
    return title, max(config.MIN_MINUTES, minutes)


def start(title: str, minutes: int, now: int) -> TimerRecord:
    seconds = minutes * 60
    return TimerRecord(
        title=title,
        duration=seconds,
        remaining=seconds,
        status=TimerStatus.RUNNING,
        started_at=now,
        paused_at=None,
    )


def pause(record: TimerRecord, now: int) -> TimerRecord:
    if record.status != TimerStatus.RUNNING:
        return record
    return record.model_copy(update={
        "remaining": derive_remaining(record, now),
        "status": TimerStatus.PAUSED,
        "paused_at": now,
    })


def resume(record: TimerRecord, now: int) -> TimerRecord:
    if record.status != TimerStatus.PAUSED:
        return record
    # The frozen remaining becomes the anchor for the new running interval
    return record.model_copy(update={
        "duration": record.remaining,
        "started_at": now,
        "status": TimerStatus.RUNNING,
        "paused_at": None,
    })


def stop(record: TimerRecord) -> TimerRecord:
    return record.model_copy(update={
        "status": TimerStatus.STOPPED,
        "remaining": 0,
    })


def adjust(record: TimerRecord, delta_seconds: int, now: int) -> TimerRecord:
    """
    Add (or with a negative delta, remove) time from an active timer.

    A running timer is re-anchored by moving duration so that deriving at `now`
    yields the adjusted value; started_at is left untouched. A paused timer
    keeps duration in step with remaining for the next resume.
    """
    if record.status == TimerStatus.RUNNING:
        elapsed = elapsed_seconds(record, now)
        new_remaining = max(0, derive_remaining(record, now) + delta_seconds)
        return record.model_copy(update={
            "duration": elapsed + new_remaining,
            "remaining": new_remaining,
        })
    if record.status == TimerStatus.PAUSED:
        new_remaining = max(0, record.remaining + delta_seconds)
        return record.model_copy(update={
            "duration": new_remaining,
            "remaining": new_remaining,
        })
    return record


def is_active(record: Optional[TimerRecord]) -> bool:
    return record is not None and record.status in (TimerStatus.RUNNING, TimerStatus.PAUSED)


def is_time_up(record: Optional[TimerRecord], now: int) -> bool:
    if record is None:
        return False
    return record.status == TimerStatus.STOPPED or derive_remaining(record, now) == 0


def format_time(seconds: int) -> str:
    """MM:SS, minutes are not wrapped into hours"""
    seconds = max(0, seconds)
    minutes, secs = divmod(seconds, 60)
    return f"{minutes:02d}:{secs:02d}"


def status_label(status: TimerStatus) -> str:
    return STATUS_LABELS[status]

"""Timer API endpoints"""

import asyncio
import logging
from typing import AsyncIterator, Awaitable

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import StreamingResponse

from workshop_timer import config
from workshop_timer.features.timer.registry import SessionRegistry, get_session_registry
from workshop_timer.features.timer.schemas import (
    AdjustTimerRequest,
    AdminView,
    ShareInfo,
    StartTimerRequest,
    TimerView,
)
from workshop_timer.features.timer.sessions import AdminSession, TimerCommandError, build_view
from workshop_timer.features.timer.sharing import generate_room_id, participant_url, qr_image_url
from workshop_timer.infra.store.client import StoreError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/rooms", tags=["rooms"])


def _share_info(request: Request, room_id: str, size: int) -> ShareInfo:
    base_url = config.PUBLIC_BASE_URL or str(request.base_url)
    url = participant_url(base_url, room_id)
    return ShareInfo(room_id=room_id, participant_url=url, qr_image_url=qr_image_url(url, size))


@router.post("", response_model=ShareInfo, status_code=201)
async def create_room(
    request: Request,
    registry: SessionRegistry = Depends(get_session_registry),
):
    """
    Create a room and open its admin session.

    The room has no timer until the facilitator starts one; participants that
    open the link meanwhile see the waiting screen.
    """
    room_id = generate_room_id()
    await registry.open_admin(room_id)
    logger.info(f"Room {room_id} created")
    return _share_info(request, room_id, config.QR_ADMIN_SIZE)


@router.get("/{room_id}/share", response_model=ShareInfo)
async def get_share_info(
    room_id: str,
    request: Request,
    size: int = Query(config.QR_DEFAULT_SIZE, ge=50, le=1000),
):
    """Participant link and QR image for a room"""
    return _share_info(request, room_id, size)


@router.get("/{room_id}/admin", response_model=AdminView)
async def get_admin_view(
    room_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
):
    """Admin view of a room, opening its admin session if needed"""
    session = await registry.open_admin(room_id)
    return session.view()


@router.delete("/{room_id}/admin", status_code=204)
async def close_admin_session(
    room_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
):
    """Stop polling for a room the facilitator has left"""
    if not await registry.close_admin(room_id):
        raise HTTPException(status_code=404, detail=f"No admin session for room {room_id}")


async def _run_command(session: AdminSession, command: Awaitable) -> AdminView:
    try:
        await command
    except TimerCommandError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return session.view()


@router.post("/{room_id}/start", response_model=AdminView)
async def start_timer(
    room_id: str,
    request: StartTimerRequest,
    registry: SessionRegistry = Depends(get_session_registry),
):
    """Start a new countdown, replacing a finished one"""
    session = await registry.open_admin(room_id)
    return await _run_command(session, session.start_timer(request.title, request.minutes))


@router.post("/{room_id}/pause", response_model=AdminView)
async def pause_timer(
    room_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
):
    session = await registry.open_admin(room_id)
    return await _run_command(session, session.pause())


@router.post("/{room_id}/resume", response_model=AdminView)
async def resume_timer(
    room_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
):
    session = await registry.open_admin(room_id)
    return await _run_command(session, session.resume())


@router.post("/{room_id}/stop", response_model=AdminView)
async def stop_timer(
    room_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
):
    session = await registry.open_admin(room_id)
    return await _run_command(session, session.stop_timer())


@router.post("/{room_id}/adjust", response_model=AdminView)
async def adjust_timer(
    room_id: str,
    request: AdjustTimerRequest,
    registry: SessionRegistry = Depends(get_session_registry),
):
    """Add or remove time; a negative delta never takes the timer below zero"""
    session = await registry.open_admin(room_id)
    return await _run_command(session, session.adjust(request.delta_seconds))


@router.post("/{room_id}/reset", response_model=AdminView)
async def reset_timer(
    room_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
):
    """Return the admin screen to the configuration form"""
    session = await registry.open_admin(room_id)
    session.reset()
    return session.view()


@router.get("/{room_id}/timer", response_model=TimerView)
async def get_participant_view(
    room_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
):
    """One-shot participant view read straight from the store"""
    try:
        record = await registry.repository.find_by_room(room_id)
    except StoreError as e:
        logger.warning(f"Participant read failed for room {room_id}: {e}")
        raise HTTPException(status_code=503, detail="Timer store unavailable")
    return build_view(room_id, record, registry.clock())


async def participant_events(registry: SessionRegistry, room_id: str) -> AsyncIterator[str]:
    """Server-sent events carrying the participant view whenever it changes"""
    session = await registry.acquire_participant(room_id)
    try:
        last = None
        while True:
            view = session.view()
            if view != last:
                yield f"data: {view.model_dump_json()}\n\n"
                last = view
            await asyncio.sleep(config.TICK_INTERVAL_SECONDS)
    finally:
        await registry.release_participant(room_id)


@router.get("/{room_id}/stream")
async def stream_participant_view(
    room_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
):
    """Live countdown for participant screens"""
    return StreamingResponse(
        participant_events(registry, room_id),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )

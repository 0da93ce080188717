from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect, status

from spellgame.api.deps import get_game_service
from spellgame.api.models import (
    SessionCreateResponse,
    SessionJoinRequest,
    SessionListResponse,
    SessionView,
)
from spellgame.game_service import SpellingGameService

router = APIRouter()


@router.websocket("/ws")
async def game_ws(websocket: WebSocket, service: SpellingGameService = Depends(get_game_service)) -> None:
    await websocket.accept()

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            # Text and binary frames are both JSON; parsing decides what to drop.
            raw = message.get("text")
            if raw is None:
                raw = message.get("bytes")
            if raw is None:
                continue
            await service.handle_message(raw, channel=websocket)
    except WebSocketDisconnect:
        pass
    finally:
        await service.disconnect(websocket)


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/sessions", response_model=SessionCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_session_route(service: SpellingGameService = Depends(get_game_service)) -> SessionCreateResponse:
    return SessionCreateResponse(session_id=service.create_session())


@router.get("/sessions", response_model=SessionListResponse)
async def list_sessions_route(service: SpellingGameService = Depends(get_game_service)) -> SessionListResponse:
    return SessionListResponse(session_ids=service.registry.list_ids())


@router.post("/sessions/join", response_model=SessionCreateResponse)
async def join_session_route(
    payload: SessionJoinRequest,
    service: SpellingGameService = Depends(get_game_service),
) -> SessionCreateResponse:
    if service.get_session(payload.session_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return SessionCreateResponse(session_id=payload.session_id)


@router.get("/sessions/{session_id}", response_model=SessionView)
async def get_session_route(session_id: str, service: SpellingGameService = Depends(get_game_service)) -> SessionView:
    state = service.get_session(session_id)
    if state is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return SessionView(session=state, is_host=not state.players)

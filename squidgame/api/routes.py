from __future__ import annotations

import asyncio
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, WebSocket, WebSocketDisconnect, status

from squidgame.api.deps import get_settings, get_store
from squidgame.api.models import InputRequest, SessionCreateRequest, SessionListResponse, SessionState
from squidgame.config import Settings
from squidgame.sessions import SessionStore, TournamentSession
from squidgame.websocket_hub import hub, session_message

router = APIRouter()


def _require(store: SessionStore, session_id: UUID) -> TournamentSession:
    session = store.get(session_id)
    if session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return session


@router.websocket("/ws/session/{session_id}")
async def session_updates_ws(websocket: WebSocket, session_id: UUID) -> None:
    await hub.connect(session_id, websocket)
    # Registered from here on; tell the client to fetch the current state.
    await websocket.send_json(session_message(session_id, "connected"))

    try:
        # Keep the socket open; client can optionally send pings.
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        hub.disconnect(session_id, websocket)
    except Exception:
        hub.disconnect(session_id, websocket)
        raise


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/sessions", response_model=SessionState, status_code=status.HTTP_201_CREATED)
async def create_session_route(
    payload: SessionCreateRequest,
    store: SessionStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> SessionState:
    seed = payload.seed if payload.seed is not None else settings.seed
    try:
        session = store.create(
            num_human_players=payload.num_human_players,
            num_ai_players=payload.num_ai_players,
            names=payload.names,
            seed=seed,
            # Engine events and prompts are pushed from the worker thread onto this loop.
            listeners=[hub.listener(asyncio.get_running_loop())],
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e

    # Let the worker run up to the first human prompt (or to the end for AI-only sessions).
    await asyncio.to_thread(session.wait_idle, settings.input_wait_s)
    return session.to_state()


@router.get("/sessions", response_model=SessionListResponse)
async def list_sessions_route(store: SessionStore = Depends(get_store)) -> SessionListResponse:
    return SessionListResponse(sessions=[s.to_state(event_limit=0) for s in store.list_sessions()])


@router.get("/sessions/{session_id}", response_model=SessionState)
async def get_session_route(
    session_id: UUID,
    events: int = Query(50, ge=0, le=1000),
    store: SessionStore = Depends(get_store),
) -> SessionState:
    return _require(store, session_id).to_state(event_limit=events)


@router.post("/sessions/{session_id}/input", response_model=SessionState)
async def submit_input_route(
    session_id: UUID,
    payload: InputRequest,
    store: SessionStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> SessionState:
    session = _require(store, session_id)
    try:
        await asyncio.to_thread(
            session.submit,
            player=payload.player,
            value=payload.value,
            wait=settings.input_wait_s,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e

    return session.to_state()


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session_route(session_id: UUID, store: SessionStore = Depends(get_store)) -> Response:
    if not store.remove(session_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")

    await hub.publish(session_id, session_message(session_id, "closed"))
    return Response(status_code=status.HTTP_204_NO_CONTENT)

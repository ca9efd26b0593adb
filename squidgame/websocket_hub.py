from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import Any
from uuid import UUID

from fastapi import WebSocket

from squidgame.core.events import GameEvent
from squidgame.sessions import SessionListener, SessionUpdate

logger = logging.getLogger(__name__)


def session_message(session_id: UUID, reason: str, **extra: Any) -> dict[str, Any]:
    """Body of every frame pushed to session watchers.

    `reason` is one of "connected", "event", "prompt" or "closed"; event and prompt
    frames carry the event / prompt that caused them.
    """

    return {"type": "session_updated", "session_id": str(session_id), "reason": reason, **extra}


def update_message(session_id: UUID, update: SessionUpdate) -> dict[str, Any]:
    if isinstance(update, GameEvent):
        return session_message(
            session_id,
            "event",
            event={
                "type": update.type,
                "game": update.game,
                "ts": update.ts.isoformat(),
                "payload": update.payload,
            },
        )
    return session_message(
        session_id,
        "prompt",
        prompt={"seq": update.seq, "kind": update.kind, "player": update.player},
    )


class SessionWebSocketHub:
    """Pushes session updates to the WebSockets watching each session.

    Sockets are only touched on the event loop thread. Session workers reach the hub
    through `listener(loop)`, which hands every update over to that loop.
    """

    def __init__(self) -> None:
        self._watchers: dict[str, set[WebSocket]] = defaultdict(set)

    async def connect(self, session_id: UUID, websocket: WebSocket) -> None:
        await websocket.accept()
        self._watchers[str(session_id)].add(websocket)

    def disconnect(self, session_id: UUID, websocket: WebSocket) -> None:
        key = str(session_id)
        watchers = self._watchers.get(key)
        if watchers is None:
            return
        watchers.discard(websocket)
        if not watchers:
            del self._watchers[key]

    def watcher_count(self, session_id: UUID) -> int:
        return len(self._watchers.get(str(session_id), ()))

    async def publish(self, session_id: UUID, message: dict[str, Any]) -> int:
        """Send `message` to every watcher of the session; returns how many got it."""

        delivered = 0
        for ws in list(self._watchers.get(str(session_id), ())):
            try:
                await ws.send_json(message)
            except Exception:
                logger.debug("dropping dead websocket for session %s", session_id)
                self.disconnect(session_id, ws)
            else:
                delivered += 1
        return delivered

    def listener(self, loop: asyncio.AbstractEventLoop) -> SessionListener:
        """A session listener that publishes each update on `loop` (thread-safe)."""

        def forward(session_id: UUID, update: SessionUpdate) -> None:
            message = update_message(session_id, update)
            coro = self.publish(session_id, message)
            try:
                asyncio.run_coroutine_threadsafe(coro, loop)
            except RuntimeError:
                # Loop already closed (server shutting down); nobody is listening.
                coro.close()
                logger.debug("event loop closed; dropped %s update for session %s", message["reason"], session_id)

        return forward


hub = SessionWebSocketHub()

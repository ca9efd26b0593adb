from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from squidgame.fsm import TournamentPhase


class SessionCreateRequest(BaseModel):
    num_human_players: int = Field(..., ge=0, le=10)
    num_ai_players: int = Field(0, ge=0, le=10)
    # Optional display names, one per seat (humans first, then AI).
    names: list[str] | None = None
    # For reproducibility/debugging; a random seed is drawn when omitted.
    seed: int | None = None


class InputRequest(BaseModel):
    player: str = Field(..., min_length=1)
    # "move"/"stay", "left"/"right", or "tap"/"stop" depending on the pending prompt.
    value: str = Field("", max_length=32)


class PlayerState(BaseModel):
    name: str
    is_ai: bool
    alive: bool
    rlg_progress: int = 0
    bridge_step: int = 0
    tug_strength: float = 0.0


class PromptState(BaseModel):
    seq: int
    kind: str
    player: str
    light: str | None = None
    progress: int | None = None
    step: int | None = None

    # Seconds left before the current time budget expires, when one is running.
    seconds_left: float | None = None


class EventState(BaseModel):
    type: str
    game: str | None = None
    ts: datetime
    payload: dict[str, Any] = Field(default_factory=dict)


class PlayerReportState(BaseModel):
    name: str
    survived: bool
    final_strength: int


class SessionState(BaseModel):
    session_id: UUID
    seed: int
    phase: TournamentPhase
    created_at: datetime
    last_updated_at: datetime

    players: list[PlayerState]

    pending_prompt: PromptState | None = None

    # Most recent events, oldest first.
    events: list[EventState] = Field(default_factory=list)

    # Set once the tournament has finished.
    report: list[PlayerReportState] | None = None

    # Worker failure, if any.
    error: str | None = None
    closed: bool = False


class SessionListResponse(BaseModel):
    sessions: list[SessionState]

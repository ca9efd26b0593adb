from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal, Protocol

EventType = Literal[
    "RULES_SHOWN",
    "ROUND_STARTED",
    "STEP_RESOLVED",
    "TURN_ENDED",
    "ROUND_ENDED",
    "PLAYER_CUT",
    "TOURNAMENT_FINISHED",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GameEvent:
    type: EventType
    game: str | None
    payload: dict[str, Any]
    ts: datetime

    @staticmethod
    def now(*, type: EventType, game: str | None, payload: dict[str, Any]) -> "GameEvent":
        return GameEvent(type=type, game=game, payload=payload, ts=datetime.now(timezone.utc))


class EventSink(Protocol):
    def emit(self, event: GameEvent) -> None:  # pragma: no cover
        ...


@dataclass(slots=True)
class EventLog:
    """In-memory sink; keeps every event of one tournament run in order."""

    history: list[GameEvent] = field(default_factory=list)

    def emit(self, event: GameEvent) -> None:
        logger.debug("%s %s %s", event.type, event.game or "-", event.payload)
        self.history.append(event)

    def of_type(self, type: EventType) -> list[GameEvent]:
        return [e for e in self.history if e.type == type]

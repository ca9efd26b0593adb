from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class Light(StrEnum):
    green = "GREEN"
    red = "RED"


class TurnStatus(StrEnum):
    survived = "survived"
    eliminated = "eliminated"
    skipped = "skipped"


class OutcomeCategory(StrEnum):
    # Red Light Green Light
    advanced = "advanced"
    stayed = "stayed"
    red_light_violation = "red_light_violation"
    timeout = "timeout"
    threshold_reached = "threshold_reached"
    # Glass Bridge
    safe_step = "safe_step"
    fell = "fell"
    crossed = "crossed"
    # Tug of War
    tap = "tap"
    stopped = "stopped"
    time_up = "time_up"
    strength_cutoff = "strength_cutoff"
    # Any game
    not_alive = "not_alive"


@dataclass(frozen=True, slots=True)
class StepOutcome:
    """One resolved step of a minigame turn.

    `fields` carries the game-specific details (light/position, correct_choice, strengths).
    """

    game: str
    player: str
    survived: bool
    category: OutcomeCategory
    message: str
    fields: dict[str, Any] = field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        return {
            "player": self.player,
            "survived": self.survived,
            "category": self.category.value,
            "message": self.message,
            **self.fields,
        }


@dataclass(frozen=True, slots=True)
class TurnResult:
    game: str
    player: str
    status: TurnStatus
    category: OutcomeCategory
    message: str

    @property
    def survived(self) -> bool:
        return self.status == TurnStatus.survived

    def to_payload(self) -> dict[str, Any]:
        return {
            "player": self.player,
            "status": self.status.value,
            "category": self.category.value,
            "message": self.message,
        }

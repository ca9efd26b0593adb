from __future__ import annotations

import random
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from squidgame.core.events import EventLog, EventSink, GameEvent
from squidgame.core.outcomes import OutcomeCategory, StepOutcome, TurnResult, TurnStatus
from squidgame.inputs.base import InputPort
from squidgame.players import Player, Roster


Clock = Callable[[], float]


@dataclass(slots=True)
class RoundContext:
    """Everything a minigame hook may touch besides the roster.

    The RNG is owned by the orchestrator and threaded through here; minigames never
    create their own.
    """

    rng: random.Random
    inputs: InputPort
    clock: Clock = time.monotonic
    sink: EventSink = field(default_factory=EventLog)

    def step(self, outcome: StepOutcome) -> StepOutcome:
        self.sink.emit(GameEvent.now(type="STEP_RESOLVED", game=outcome.game, payload=outcome.to_payload()))
        return outcome


class Minigame(Protocol):
    key: str
    title: str

    def start_round(self, roster: Roster, ctx: RoundContext) -> None:  # pragma: no cover
        ...

    def play(self, player: Player, ctx: RoundContext) -> TurnResult:  # pragma: no cover
        ...

    def end_round(self, roster: Roster, ctx: RoundContext) -> None:  # pragma: no cover
        ...


def skipped_turn(*, game: str, player: Player) -> TurnResult:
    # Same value every time for the same player, so repeated calls are indistinguishable.
    return TurnResult(
        game=game,
        player=player.name,
        status=TurnStatus.skipped,
        category=OutcomeCategory.not_alive,
        message=f"{player.name} is already eliminated",
    )

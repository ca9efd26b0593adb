from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from squidgame.core.events import EventLog, EventSink, GameEvent
from squidgame.core.outcomes import OutcomeCategory, TurnResult
from squidgame.fsm import TournamentFSM, TournamentPhase
from squidgame.inputs.base import InputPort
from squidgame.minigames.base import Clock, Minigame, RoundContext
from squidgame.minigames.glass_bridge import GlassBridge
from squidgame.minigames.red_light import RedLightGreenLight
from squidgame.minigames.tug_of_war import TugOfWar, floored_strength
from squidgame.players import Player, Roster
from squidgame.rules import load_rules

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PlayerReport:
    name: str
    survived: bool
    final_strength: int


@dataclass(frozen=True, slots=True)
class FinalReport:
    players: list[PlayerReport]

    @property
    def survivors(self) -> list[str]:
        return [p.name for p in self.players if p.survived]


def cut_to_strongest(roster: Roster) -> list[Player]:
    """Eliminate every alive player below the best floored tug strength.

    Ties at the top all survive. Returns the players cut, in roster order.
    """

    alive = roster.alive()
    if not alive:
        return []
    best = max(floored_strength(p) for p in alive)
    cut = [p for p in alive if floored_strength(p) < best]
    for p in cut:
        p.eliminate()
    return cut


def build_report(roster: Roster) -> FinalReport:
    return FinalReport(
        players=[PlayerReport(name=p.name, survived=p.alive, final_strength=floored_strength(p)) for p in roster]
    )


def default_games() -> dict[TournamentPhase, Minigame]:
    return {
        TournamentPhase.red_light: RedLightGreenLight(),
        TournamentPhase.glass_bridge: GlassBridge(),
        TournamentPhase.tug_of_war: TugOfWar(),
    }


RoundReducer = Callable[[Roster], list[Player]]


@dataclass(slots=True)
class Orchestrator:
    """Drives one roster through Red Light Green Light, Glass Bridge and Tug of War.

    The FSM decides which game is next; the orchestrator shows its rules once, runs the
    round hooks, plays every alive player in roster order and applies the post-round
    strength cutoff after tug of war.
    """

    roster: Roster
    inputs: InputPort
    rng: random.Random
    clock: Clock = time.monotonic
    sink: EventSink = field(default_factory=EventLog)
    games: dict[TournamentPhase, Minigame] = field(default_factory=default_games)
    reducers: dict[TournamentPhase, RoundReducer] = field(
        default_factory=lambda: {TournamentPhase.tug_of_war: cut_to_strongest}
    )
    fsm: TournamentFSM = field(default_factory=TournamentFSM)
    results: list[TurnResult] = field(default_factory=list)
    report: FinalReport | None = None
    _rules_shown: set[TournamentPhase] = field(default_factory=set)

    @property
    def phase(self) -> TournamentPhase:
        return self.fsm.phase

    def context(self) -> RoundContext:
        return RoundContext(rng=self.rng, inputs=self.inputs, clock=self.clock, sink=self.sink)

    def show_rules_once(self, phase: TournamentPhase) -> bool:
        if phase in self._rules_shown:
            return False
        self._rules_shown.add(phase)
        game = self.games[phase]
        self.sink.emit(
            GameEvent.now(type="RULES_SHOWN", game=game.key, payload={"title": game.title, "rules": load_rules(game.key)})
        )
        return True

    def run(self) -> FinalReport:
        if self.report is not None:
            raise ValueError("Tournament already finished")

        while not self.fsm.is_completed:
            self.play_round(self.fsm.phase)
            self.fsm.advance()

        self.report = build_report(self.roster)
        self.sink.emit(
            GameEvent.now(
                type="TOURNAMENT_FINISHED",
                game=None,
                payload={
                    "players": [
                        {"name": r.name, "survived": r.survived, "final_strength": r.final_strength}
                        for r in self.report.players
                    ]
                },
            )
        )
        logger.info("tournament finished; survivors=%s", self.report.survivors)
        return self.report

    def play_round(self, phase: TournamentPhase) -> list[TurnResult]:
        if phase != self.fsm.phase:
            raise ValueError(f"Round '{phase.value}' is not current (current: '{self.fsm.phase.value}')")

        game = self.games[phase]
        ctx = self.context()

        self.sink.emit(
            GameEvent.now(
                type="ROUND_STARTED",
                game=game.key,
                payload={"title": game.title, "alive": self.roster.alive_count()},
            )
        )
        logger.info("=== %s === (%d alive)", game.title, self.roster.alive_count())
        self.show_rules_once(phase)

        # Setup always sees the whole roster so it can count who is still alive.
        game.start_round(self.roster, ctx)

        results: list[TurnResult] = []
        for player in self.roster:
            if not player.alive:
                continue
            result = game.play(player, ctx)
            results.append(result)
            self.sink.emit(GameEvent.now(type="TURN_ENDED", game=game.key, payload=result.to_payload()))

        game.end_round(self.roster, ctx)

        reducer = self.reducers.get(phase)
        if reducer is not None:
            for p in reducer(self.roster):
                self.sink.emit(
                    GameEvent.now(
                        type="PLAYER_CUT",
                        game=game.key,
                        payload={
                            "player": p.name,
                            "category": OutcomeCategory.strength_cutoff.value,
                            "final_strength": floored_strength(p),
                        },
                    )
                )
                logger.info("%s cut after %s (strength=%d)", p.name, game.title, floored_strength(p))

        self.sink.emit(
            GameEvent.now(type="ROUND_ENDED", game=game.key, payload={"alive": [p.name for p in self.roster.alive()]})
        )
        self.results.extend(results)
        return results

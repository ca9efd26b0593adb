from __future__ import annotations

import random

import pytest
from conftest import ScriptedRandom, taps

from squidgame.core.events import EventLog
from squidgame.core.outcomes import OutcomeCategory, TurnResult, TurnStatus
from squidgame.fsm import TournamentPhase
from squidgame.minigames.base import RoundContext, skipped_turn
from squidgame.orchestrator import Orchestrator, cut_to_strongest
from squidgame.players import Player, Roster, make_roster

# Red light: four greens each; glass bridge: four safe panels each.
ALL_CLEAR = [0.1] * 16


class FixedStrengthTug:
    """Stands in for tug of war and hands out preset strengths."""

    key = "tug_of_war"
    title = "Tug of War"

    def __init__(self, strengths: dict[str, float]) -> None:
        self.strengths = strengths

    def start_round(self, roster: Roster, ctx: RoundContext) -> None:
        for p in roster.alive():
            p.tug_strength = 0.0

    def play(self, player: Player, ctx: RoundContext) -> TurnResult:
        if not player.alive:
            return skipped_turn(game=self.key, player=player)
        player.tug_strength = self.strengths[player.name]
        return TurnResult(self.key, player.name, TurnStatus.survived, OutcomeCategory.stopped, "done")

    def end_round(self, roster: Roster, ctx: RoundContext) -> None:
        return None


def _orchestrator(roster: Roster, port, clock, rng: random.Random) -> Orchestrator:
    return Orchestrator(roster=roster, inputs=port, rng=rng, clock=clock, sink=EventLog())


def _always_move(port, names: list[str]) -> None:
    for n in names:
        port.red_light[n] = ["m"] * 4


def test_cutoff_keeps_everyone_tied_at_the_top() -> None:
    roster = make_roster(names=["Ann", "Bob", "Cid"])
    for p, s in zip(roster, [5.9, 5.2, 3.99]):
        p.tug_strength = s

    cut = cut_to_strongest(roster)

    assert [p.name for p in cut] == ["Cid"]
    assert [p.name for p in roster.alive()] == ["Ann", "Bob"]


def test_cutoff_with_all_equal_strengths_cuts_nobody() -> None:
    roster = make_roster(names=["Ann", "Bob", "Cid"])
    for p in roster:
        p.tug_strength = 5.0

    assert cut_to_strongest(roster) == []
    assert roster.alive_count() == 3


def test_cutoff_ignores_eliminated_players() -> None:
    roster = make_roster(names=["Ann", "Bob"])
    roster.get("Ann").tug_strength = 50.0
    roster.get("Ann").eliminate()
    roster.get("Bob").tug_strength = 1.0

    assert cut_to_strongest(roster) == []
    assert roster.get("Bob").alive


def test_full_run_with_preset_strengths(port, clock) -> None:
    roster = make_roster(names=["Ann", "Bob"])
    _always_move(port, ["Ann", "Bob"])
    orch = _orchestrator(roster, port, clock, ScriptedRandom(ALL_CLEAR))
    orch.games[TournamentPhase.tug_of_war] = FixedStrengthTug({"Ann": 7.5, "Bob": 2.0})

    report = orch.run()

    assert orch.phase == TournamentPhase.completed
    assert [(r.name, r.survived, r.final_strength) for r in report.players] == [
        ("Ann", True, 7),
        ("Bob", False, 2),
    ]
    assert report.survivors == ["Ann"]

    (cut,) = orch.sink.of_type("PLAYER_CUT")
    assert cut.payload == {"player": "Bob", "category": "strength_cutoff", "final_strength": 2}
    assert orch.sink.history[-1].type == "TOURNAMENT_FINISHED"


def test_tapper_against_idle_player(port, clock) -> None:
    roster = make_roster(names=["Tapper", "Idle"])
    _always_move(port, ["Tapper", "Idle"])
    port.tug["Tapper"] = taps(*[i / 20 for i in range(201)])
    orch = _orchestrator(roster, port, clock, ScriptedRandom(ALL_CLEAR))

    report = orch.run()

    by_name = {r.name: r for r in report.players}
    assert by_name["Idle"].final_strength == 0
    assert by_name["Idle"].survived is False
    assert by_name["Tapper"].final_strength > 0
    best = max(r.final_strength for r in report.players)
    # Whoever is below the best floored strength is cut; ties survive.
    for r in report.players:
        assert r.survived == (r.final_strength == best)
    assert by_name["Tapper"].survived


def test_rules_are_shown_once_per_game(port, clock) -> None:
    roster = make_roster(names=["Ann"])
    _always_move(port, ["Ann"])
    orch = _orchestrator(roster, port, clock, ScriptedRandom(ALL_CLEAR))

    assert orch.show_rules_once(TournamentPhase.red_light) is True
    assert orch.show_rules_once(TournamentPhase.red_light) is False

    orch.run()

    shown = orch.sink.of_type("RULES_SHOWN")
    assert [e.game for e in shown] == ["red_light", "glass_bridge", "tug_of_war"]
    assert "Red Light" in shown[0].payload["rules"]


def test_event_order_for_a_round(port, clock) -> None:
    roster = make_roster(names=["Ann"])
    _always_move(port, ["Ann"])
    orch = _orchestrator(roster, port, clock, ScriptedRandom(ALL_CLEAR))

    orch.play_round(TournamentPhase.red_light)

    types = [e.type for e in orch.sink.history]
    assert types[:2] == ["ROUND_STARTED", "RULES_SHOWN"]
    assert types[-2:] == ["TURN_ENDED", "ROUND_ENDED"]
    assert types.count("STEP_RESOLVED") == 4
    assert orch.sink.history[0].payload == {"title": "Red Light Green Light", "alive": 1}


def test_everyone_out_early_still_runs_every_round(port, clock) -> None:
    roster = make_roster(names=["Ann"])
    port.red_light["Ann"] = ["m"]
    # First light is RED.
    orch = _orchestrator(roster, port, clock, ScriptedRandom([0.9]))

    report = orch.run()

    assert report.survivors == []
    assert [e.game for e in orch.sink.of_type("ROUND_STARTED")] == ["red_light", "glass_bridge", "tug_of_war"]
    assert [e.game for e in orch.sink.of_type("TURN_ENDED")] == ["red_light"]
    assert orch.sink.of_type("PLAYER_CUT") == []
    assert port.calls == [("red_light", "Ann")]


def test_rounds_play_in_roster_order(port, clock) -> None:
    roster = make_roster(names=["Cid", "Ann", "Bob"])
    _always_move(port, ["Cid", "Ann", "Bob"])
    orch = _orchestrator(roster, port, clock, ScriptedRandom([0.1] * 12))

    results = orch.play_round(TournamentPhase.red_light)

    assert [r.player for r in results] == ["Cid", "Ann", "Bob"]


def test_run_twice_and_out_of_order_rounds_are_rejected(port, clock) -> None:
    roster = make_roster(names=["Ann"])
    port.red_light_seconds = 5.0
    orch = _orchestrator(roster, port, clock, ScriptedRandom())

    with pytest.raises(ValueError) as e:
        orch.play_round(TournamentPhase.tug_of_war)
    assert "not current" in str(e.value)

    orch.run()
    with pytest.raises(ValueError) as e:
        orch.run()
    assert str(e.value) == "Tournament already finished"

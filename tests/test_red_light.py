from __future__ import annotations

from conftest import ScriptedRandom

from squidgame.core.outcomes import OutcomeCategory, TurnStatus
from squidgame.minigames.red_light import REQUIRED_SUCCESSES, TIME_LIMIT, RedLightGreenLight
from squidgame.players import make_roster

GREEN = 0.1
RED = 0.9


def test_moving_on_every_green_reaches_the_line(port, make_ctx) -> None:
    roster = make_roster(names=["Ann"])
    ann = roster.get("Ann")
    game = RedLightGreenLight()
    ctx = make_ctx(ScriptedRandom([GREEN] * REQUIRED_SUCCESSES))
    port.red_light["Ann"] = ["m", "move", "M", " move "]

    game.start_round(roster, ctx)
    result = game.play(ann, ctx)

    assert result.status == TurnStatus.survived
    assert result.category == OutcomeCategory.threshold_reached
    assert ann.alive
    assert ann.rlg_progress == REQUIRED_SUCCESSES

    steps = ctx.sink.of_type("STEP_RESOLVED")
    assert [e.payload["position"] for e in steps] == [1, 2, 3, 4]
    assert all(e.payload["light"] == "GREEN" for e in steps)


def test_moving_on_red_eliminates(port, make_ctx) -> None:
    roster = make_roster(names=["Ann"])
    ann = roster.get("Ann")
    ctx = make_ctx(ScriptedRandom([RED]))
    port.red_light["Ann"] = ["m"]

    result = RedLightGreenLight().play(ann, ctx)

    assert result.status == TurnStatus.eliminated
    assert result.category == OutcomeCategory.red_light_violation
    assert not ann.alive

    (step,) = ctx.sink.of_type("STEP_RESOLVED")
    assert step.payload["light"] == "RED"
    assert step.payload["position"] == 0
    assert step.payload["survived"] is False


def test_staying_is_never_a_red_light_violation(port, clock, make_ctx) -> None:
    roster = make_roster(names=["Ann"])
    ann = roster.get("Ann")
    ctx = make_ctx(ScriptedRandom([RED, GREEN] * 30))
    port.red_light_seconds = 1.0

    result = RedLightGreenLight().play(ann, ctx)

    # Standing still forever runs out the clock instead.
    assert result.category == OutcomeCategory.timeout
    assert not ann.alive
    categories = [e.payload["category"] for e in ctx.sink.of_type("STEP_RESOLVED")]
    assert OutcomeCategory.red_light_violation.value not in categories
    assert categories.count(OutcomeCategory.stayed.value) == int(TIME_LIMIT)
    assert categories[-1] == OutcomeCategory.timeout.value


def test_unrecognized_input_counts_as_staying(port, make_ctx) -> None:
    roster = make_roster(names=["Ann"])
    ann = roster.get("Ann")
    ctx = make_ctx(ScriptedRandom([RED, GREEN, GREEN, GREEN, GREEN]))
    port.red_light["Ann"] = ["jump", "m", "m", "m", "m"]

    result = RedLightGreenLight().play(ann, ctx)

    assert result.survived
    first = ctx.sink.of_type("STEP_RESOLVED")[0]
    assert first.payload["category"] == OutcomeCategory.stayed.value
    assert first.payload["message"] == "Stayed frozen during RED light. Safe!"


def test_slow_answers_time_out_before_the_next_light(port, make_ctx) -> None:
    roster = make_roster(names=["Ann"])
    ann = roster.get("Ann")
    rng = ScriptedRandom([GREEN, GREEN])
    ctx = make_ctx(rng)
    port.red_light["Ann"] = ["m", "m"]
    port.red_light_seconds = TIME_LIMIT

    result = RedLightGreenLight().play(ann, ctx)

    assert result.category == OutcomeCategory.timeout
    assert ann.rlg_progress == 1
    # The time check runs before drawing a light.
    assert rng.draws == 1


def test_start_round_resets_progress(make_ctx) -> None:
    roster = make_roster(names=["Ann", "Bob"])
    for p in roster:
        p.rlg_progress = 3
    roster.get("Bob").eliminate()

    RedLightGreenLight().start_round(roster, make_ctx())

    assert roster.get("Ann").rlg_progress == 0
    assert roster.get("Bob").rlg_progress == 3


def test_eliminated_player_is_skipped_without_side_effects(port, make_ctx) -> None:
    roster = make_roster(names=["Ann"])
    ann = roster.get("Ann")
    ann.eliminate()
    rng = ScriptedRandom()
    ctx = make_ctx(rng)
    game = RedLightGreenLight()

    first = game.play(ann, ctx)
    second = game.play(ann, ctx)

    assert first == second
    assert first.status == TurnStatus.skipped
    assert first.category == OutcomeCategory.not_alive
    assert port.calls == []
    assert rng.draws == 0
    assert ctx.sink.history == []

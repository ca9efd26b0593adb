from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass

from squidgame.core.outcomes import OutcomeCategory, StepOutcome, TurnResult, TurnStatus
from squidgame.inputs.base import TugEventKind
from squidgame.minigames.base import RoundContext, skipped_turn
from squidgame.players import Player, Roster

logger = logging.getLogger(__name__)

# Track layout (abstract units).
TRACK_W = 1000.0
TARGET_W = 100.0
TARGET_START_X = 18.0
EDGE_MARGIN = 2.0

# Target random walk.
MIN_V = 80.0
MAX_V = 340.0
MAX_ACCEL = 600.0
ACCEL_HOLD_MIN = 0.18
ACCEL_HOLD_MAX = 0.78

# Bar.
BAR_MIN = 6.0
BAR_MAX = TRACK_W * 0.85
SHRINK_SPEED = 210.0
BASE_INC = 30.0
MAX_BONUS = 5.0
BONUS_NUMERATOR = 0.5
MIN_TAP_GAP = 0.04

# Timing and scoring.
DURATION = 10.0
MAX_DT = 0.2
STRENGTH_PER_SECOND = 28.0


@dataclass(frozen=True, slots=True)
class TapResult:
    dt: float
    gained: float
    strength: float
    bar_width: float
    target_x: float
    aligned: bool


class TugSimulation:
    """One player's tug-of-war turn.

    The bar grows from the left edge on every tap and shrinks while idle. Strength only
    accrues while the bar tip sits inside the drifting target window. The 10s timer
    starts on the first tap.
    """

    def __init__(self, rng: random.Random) -> None:
        self._rng = rng

        self.target_x = TARGET_START_X
        self.target_v = 0.0
        self.target_a = 0.0
        self._accel_timer = 0.0
        self._randomize_accel()

        self.bar_width = BAR_MIN
        self.strength = 0.0

        self.started_at: float | None = None
        self._prev_at = 0.0
        self._last_tap_at = 0.0

    @property
    def deadline(self) -> float | None:
        if self.started_at is None:
            return None
        return self.started_at + DURATION

    def expired(self, at: float) -> bool:
        return self.started_at is not None and at - self.started_at >= DURATION

    @property
    def aligned(self) -> bool:
        return self.target_x <= self.bar_width <= self.target_x + TARGET_W

    def tap(self, at: float) -> TapResult:
        if self.started_at is None:
            self.started_at = at
            self._prev_at = at
            self._last_tap_at = at

        # Long pauses are clamped so a single step can't jump the walk too far.
        dt = min(MAX_DT, max(0.0, at - self._prev_at))
        self._prev_at = at

        self._advance_target(dt)

        self.bar_width = max(BAR_MIN, self.bar_width - SHRINK_SPEED * dt)

        tap_gap = max(0.0, at - self._last_tap_at)
        self._last_tap_at = at
        bonus = min(MAX_BONUS, BONUS_NUMERATOR / max(MIN_TAP_GAP, tap_gap))
        self.bar_width = min(BAR_MAX, self.bar_width + BASE_INC * (1.0 + bonus))

        aligned = self.aligned
        gained = dt * STRENGTH_PER_SECOND if aligned else 0.0
        self.strength += gained

        return TapResult(
            dt=dt,
            gained=gained,
            strength=self.strength,
            bar_width=self.bar_width,
            target_x=self.target_x,
            aligned=aligned,
        )

    def _randomize_accel(self) -> None:
        self.target_a = self._rng.uniform(-MAX_ACCEL, MAX_ACCEL)
        self._accel_timer = self._rng.uniform(ACCEL_HOLD_MIN, ACCEL_HOLD_MAX)

    def _advance_target(self, dt: float) -> None:
        self._accel_timer -= dt
        if self._accel_timer <= 0.0:
            self._randomize_accel()

        v = self.target_v + self.target_a * dt
        if abs(v) < MIN_V:
            v = MIN_V if v >= 0.0 else -MIN_V
        self.target_v = max(-MAX_V, min(MAX_V, v))

        self.target_x += self.target_v * dt
        if self.target_x < EDGE_MARGIN:
            self.target_x = EDGE_MARGIN
            self.target_v = abs(self.target_v)
            self._randomize_accel()
        if self.target_x + TARGET_W > TRACK_W - EDGE_MARGIN:
            self.target_x = TRACK_W - EDGE_MARGIN - TARGET_W
            self.target_v = -abs(self.target_v)
            self._randomize_accel()


def floored_strength(player: Player) -> int:
    return math.floor(player.tug_strength)


class TugOfWar:
    key = "tug_of_war"
    title = "Tug of War"

    def start_round(self, roster: Roster, ctx: RoundContext) -> None:
        for p in roster.alive():
            p.tug_strength = 0.0

    def end_round(self, roster: Roster, ctx: RoundContext) -> None:
        return None

    def play(self, player: Player, ctx: RoundContext) -> TurnResult:
        if not player.alive:
            return skipped_turn(game=self.key, player=player)

        sim = TugSimulation(ctx.rng)
        player.tug_strength = 0.0

        while True:
            event = ctx.inputs.tug_event(player, deadline=sim.deadline)

            if sim.expired(event.at):
                category, message = OutcomeCategory.time_up, "Time is up"
                break
            if event.kind is TugEventKind.stop:
                category, message = OutcomeCategory.stopped, "Stopped pulling"
                break

            result = sim.tap(event.at)
            player.tug_strength = sim.strength
            ctx.step(
                StepOutcome(
                    game=self.key,
                    player=player.name,
                    survived=True,
                    category=OutcomeCategory.tap,
                    message="GOOD" if result.aligned else "Missed the window",
                    fields={
                        "tap_strength": result.gained,
                        "running_strength": result.strength,
                        "bar_width": result.bar_width,
                        "target_x": result.target_x,
                        "aligned": result.aligned,
                    },
                )
            )

        ctx.step(
            StepOutcome(
                game=self.key,
                player=player.name,
                survived=True,
                category=category,
                message=message,
                fields={"tap_strength": 0.0, "running_strength": player.tug_strength},
            )
        )
        logger.info("tug of war: %s finished with strength=%d", player.name, floored_strength(player))
        # Elimination for this game happens in the post-round strength cutoff.
        return TurnResult(
            game=self.key,
            player=player.name,
            status=TurnStatus.survived,
            category=category,
            message=f"{message} (strength={floored_strength(player)})",
        )

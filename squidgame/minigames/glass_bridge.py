from __future__ import annotations

import logging

from squidgame.core.outcomes import OutcomeCategory, StepOutcome, TurnResult, TurnStatus
from squidgame.inputs.base import BridgeSide, parse_bridge_side
from squidgame.minigames.base import RoundContext, skipped_turn
from squidgame.players import Player, Roster

logger = logging.getLogger(__name__)

TOTAL_STEPS = 5
P_SAFE = 0.60
# With this many players alive entering the round, one of them crosses no matter what.
GUARANTEE_MIN_ALIVE = 3


class GlassBridge:
    """Five panels, left or right.

    The first panel is always tempered. When at least three players start the round,
    one of them is picked up front as the guaranteed player and every panel holds for
    them, so a round can't wipe out the whole field.
    """

    key = "glass_bridge"
    title = "Glass Bridge"

    def __init__(self) -> None:
        self._guaranteed: str | None = None

    @property
    def guaranteed_player(self) -> str | None:
        return self._guaranteed

    def start_round(self, roster: Roster, ctx: RoundContext) -> None:
        self._guaranteed = None
        alive = roster.alive()
        for p in alive:
            p.bridge_step = 0
        if len(alive) >= GUARANTEE_MIN_ALIVE:
            self._guaranteed = ctx.rng.choice([p.name for p in alive])
            logger.debug("glass bridge: guaranteed player is %s", self._guaranteed)

    def end_round(self, roster: Roster, ctx: RoundContext) -> None:
        self._guaranteed = None

    def play(self, player: Player, ctx: RoundContext) -> TurnResult:
        if not player.alive:
            return skipped_turn(game=self.key, player=player)

        while player.bridge_step < TOTAL_STEPS:
            step = player.bridge_step
            side = self._ask_side(player, step, ctx)

            if step == 0 or player.name == self._guaranteed:
                safe = True
            else:
                safe = ctx.rng.random() < P_SAFE

            correct = side if safe else side.opposite
            if safe:
                player.bridge_step += 1
                self._step(ctx, player, step=step, side=side, correct=correct, category=OutcomeCategory.safe_step,
                           message="Tempered glass! Safe step!")
                continue

            player.eliminate()
            self._step(ctx, player, step=step, side=side, correct=correct, category=OutcomeCategory.fell,
                       message=f"Glass broke! Correct was: {correct.value}")
            logger.info("glass bridge: %s fell at step %d", player.name, step + 1)
            return TurnResult(
                game=self.key,
                player=player.name,
                status=TurnStatus.eliminated,
                category=OutcomeCategory.fell,
                message=f"Fell at step {step + 1}",
            )

        logger.info("glass bridge: %s crossed", player.name)
        return TurnResult(
            game=self.key,
            player=player.name,
            status=TurnStatus.survived,
            category=OutcomeCategory.crossed,
            message="Crossed the bridge",
        )

    def _ask_side(self, player: Player, step: int, ctx: RoundContext) -> BridgeSide:
        while True:
            raw = ctx.inputs.bridge_choice(player, step=step)
            side = parse_bridge_side(raw)
            if side is not None:
                return side
            logger.warning("glass bridge: invalid choice %r from %s, asking again", raw, player.name)

    def _step(
        self,
        ctx: RoundContext,
        player: Player,
        *,
        step: int,
        side: BridgeSide,
        correct: BridgeSide,
        category: OutcomeCategory,
        message: str,
    ) -> None:
        ctx.step(
            StepOutcome(
                game=self.key,
                player=player.name,
                survived=player.alive,
                category=category,
                message=message,
                fields={"step": step, "choice": side.value, "correct_choice": correct.value},
            )
        )

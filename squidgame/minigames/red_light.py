from __future__ import annotations

import logging

from squidgame.core.outcomes import Light, OutcomeCategory, StepOutcome, TurnResult, TurnStatus
from squidgame.inputs.base import RedLightAction, parse_red_light_action
from squidgame.minigames.base import RoundContext, skipped_turn
from squidgame.players import Player, Roster

logger = logging.getLogger(__name__)

REQUIRED_SUCCESSES = 4
TIME_LIMIT = 20.0
P_GREEN = 0.5


class RedLightGreenLight:
    key = "red_light"
    title = "Red Light Green Light"

    def start_round(self, roster: Roster, ctx: RoundContext) -> None:
        for p in roster.alive():
            p.rlg_progress = 0

    def end_round(self, roster: Roster, ctx: RoundContext) -> None:
        return None

    def play(self, player: Player, ctx: RoundContext) -> TurnResult:
        if not player.alive:
            return skipped_turn(game=self.key, player=player)

        started = ctx.clock()
        deadline = started + TIME_LIMIT

        while player.rlg_progress < REQUIRED_SUCCESSES:
            if ctx.clock() - started >= TIME_LIMIT:
                player.eliminate()
                self._step(ctx, player, light=None, category=OutcomeCategory.timeout, message="Out of time!")
                return self._result(player, TurnStatus.eliminated, OutcomeCategory.timeout, "Timed out")

            light = Light.green if ctx.rng.random() < P_GREEN else Light.red
            raw = ctx.inputs.red_light_action(player, light=light, progress=player.rlg_progress, deadline=deadline)
            action = parse_red_light_action(raw)

            if action is RedLightAction.move and light is Light.red:
                player.eliminate()
                self._step(
                    ctx,
                    player,
                    light=light,
                    category=OutcomeCategory.red_light_violation,
                    message="Moved during RED light!",
                )
                return self._result(
                    player, TurnStatus.eliminated, OutcomeCategory.red_light_violation, "Moved on RED"
                )

            if action is RedLightAction.move:
                player.rlg_progress += 1
                self._step(
                    ctx,
                    player,
                    light=light,
                    category=OutcomeCategory.advanced,
                    message=f"Ran forward safely ({player.rlg_progress}/{REQUIRED_SUCCESSES})",
                )
            else:
                message = (
                    "Stayed still during GREEN light. No progress."
                    if light is Light.green
                    else "Stayed frozen during RED light. Safe!"
                )
                self._step(ctx, player, light=light, category=OutcomeCategory.stayed, message=message)

        return self._result(player, TurnStatus.survived, OutcomeCategory.threshold_reached, "Reached the line")

    def _step(
        self,
        ctx: RoundContext,
        player: Player,
        *,
        light: Light | None,
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
                fields={"light": light.value if light else None, "position": player.rlg_progress},
            )
        )

    def _result(self, player: Player, status: TurnStatus, category: OutcomeCategory, message: str) -> TurnResult:
        logger.info("red light: %s %s (%s)", player.name, status.value, category.value)
        return TurnResult(game=self.key, player=player.name, status=status, category=category, message=message)

from __future__ import annotations

import random
import time
from dataclasses import dataclass, field

from squidgame.core.outcomes import Light
from squidgame.inputs.base import BridgeSide, InputPort, RedLightAction, TugEvent, TugEventKind
from squidgame.minigames.base import Clock
from squidgame.players import Player


@dataclass(frozen=True, slots=True)
class BotConfig:
    # Chance of reacting to the wrong light.
    blunder_rate: float = 0.05
    # Seconds between taps, drawn uniformly.
    tap_interval_min: float = 0.08
    tap_interval_max: float = 0.22


@dataclass(slots=True)
class BotInputPort:
    """Autoplay for AI players.

    Bots answer instantly. For tug of war they produce their own tap timestamps
    (starting from the clock at their first tap), so a whole turn resolves without
    waiting on the wall clock. The bot RNG is separate from the tournament RNG.
    """

    rng: random.Random
    clock: Clock = time.monotonic
    config: BotConfig = field(default_factory=BotConfig)
    _tap_clock: dict[str, float] = field(default_factory=dict)

    def red_light_action(self, player: Player, *, light: Light, progress: int, deadline: float) -> str:
        wants_move = light is Light.green
        if self.rng.random() < self.config.blunder_rate:
            wants_move = not wants_move
        return RedLightAction.move.value if wants_move else RedLightAction.stay.value

    def bridge_choice(self, player: Player, *, step: int) -> str:
        return self.rng.choice(list(BridgeSide)).value

    def tug_event(self, player: Player, *, deadline: float | None) -> TugEvent:
        last = self._tap_clock.get(player.name)
        if deadline is None or last is None:
            # First event of the turn: start the synthetic tap clock now.
            at = self.clock()
        else:
            at = last + self.rng.uniform(
                self.config.tap_interval_min, self.config.tap_interval_max
            )
            if at >= deadline:
                self._tap_clock.pop(player.name, None)
                return TugEvent(kind=TugEventKind.stop, at=at)
        self._tap_clock[player.name] = at
        return TugEvent(kind=TugEventKind.tap, at=at)


@dataclass(slots=True)
class RoutingInputPort:
    """Send AI players to the bot port and everyone else to the human port."""

    humans: InputPort
    bots: InputPort

    def _port_for(self, player: Player) -> InputPort:
        return self.bots if player.is_ai else self.humans

    def red_light_action(self, player: Player, *, light: Light, progress: int, deadline: float) -> str:
        return self._port_for(player).red_light_action(player, light=light, progress=progress, deadline=deadline)

    def bridge_choice(self, player: Player, *, step: int) -> str:
        return self._port_for(player).bridge_choice(player, step=step)

    def tug_event(self, player: Player, *, deadline: float | None) -> TugEvent:
        return self._port_for(player).tug_event(player, deadline=deadline)

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass

from squidgame.core.outcomes import Light
from squidgame.inputs.base import TugEvent, TugEventKind, parse_tug_kind
from squidgame.minigames.base import Clock
from squidgame.minigames.glass_bridge import TOTAL_STEPS
from squidgame.minigames.red_light import REQUIRED_SUCCESSES
from squidgame.players import Player


@dataclass(slots=True)
class ConsoleInputPort:
    """Interactive prompts on a terminal. Blocking; deadlines are enforced by the engine."""

    read: Callable[[str], str] = input
    clock: Clock = time.monotonic

    def red_light_action(self, player: Player, *, light: Light, progress: int, deadline: float) -> str:
        return self.read(
            f"     [{player.name} {progress}/{REQUIRED_SUCCESSES}] Light: {light.value}"
            " | press 'm' to MOVE or other to stay: "
        )

    def bridge_choice(self, player: Player, *, step: int) -> str:
        return self.read(f"     [{player.name}] Step {step + 1}/{TOTAL_STEPS}: choose left/right: ")

    def tug_event(self, player: Player, *, deadline: float | None) -> TugEvent:
        line = self.read(f"     [{player.name}] Tap (ENTER) or 'q'+ENTER to finish: ")
        # Anything other than a stop counts as a tap, like a plain ENTER.
        kind = parse_tug_kind(line) or TugEventKind.tap
        return TugEvent(kind=kind, at=self.clock())

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

from squidgame.core.outcomes import Light
from squidgame.players import Player


class RedLightAction(StrEnum):
    move = "move"
    stay = "stay"


class BridgeSide(StrEnum):
    left = "left"
    right = "right"

    @property
    def opposite(self) -> "BridgeSide":
        return BridgeSide.right if self is BridgeSide.left else BridgeSide.left


class TugEventKind(StrEnum):
    tap = "tap"
    stop = "stop"


@dataclass(frozen=True, slots=True)
class TugEvent:
    kind: TugEventKind
    # Arrival time on the round context's clock (seconds).
    at: float


class InputPort(Protocol):
    """Where the engine gets player decisions from.

    Methods return raw text (parsed by the engine) so every transport shares the same
    validation and defaults. `deadline` is the absolute clock value at which the current
    time budget runs out; blocking ports may stop waiting at that point.
    """

    def red_light_action(
        self, player: Player, *, light: Light, progress: int, deadline: float
    ) -> str:  # pragma: no cover
        ...

    def bridge_choice(self, player: Player, *, step: int) -> str:  # pragma: no cover
        ...

    def tug_event(self, player: Player, *, deadline: float | None) -> TugEvent:  # pragma: no cover
        ...


def parse_red_light_action(raw: str | None) -> RedLightAction:
    """Anything that isn't an explicit move counts as staying still."""

    text = (raw or "").strip().casefold()
    if text in {"m", "move"}:
        return RedLightAction.move
    return RedLightAction.stay


def parse_bridge_side(raw: str | None) -> BridgeSide | None:
    text = (raw or "").strip().casefold()
    try:
        return BridgeSide(text)
    except ValueError:
        return None


def parse_tug_kind(raw: str | None) -> TugEventKind | None:
    text = (raw or "").strip().casefold()
    if text in {"", "tap", "t"}:
        return TugEventKind.tap
    if text in {"q", "stop"}:
        return TugEventKind.stop
    return None

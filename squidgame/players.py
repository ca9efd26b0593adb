from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field


DEFAULT_MAX_PLAYERS = 10


@dataclass(slots=True)
class Player:
    name: str
    is_ai: bool = False
    alive: bool = True

    # Per-game scratch state. Untouched games keep their zero values.
    rlg_progress: int = 0
    bridge_step: int = 0
    tug_strength: float = 0.0

    def eliminate(self) -> None:
        # Elimination is one-way; nothing in the engine sets alive back to True.
        self.alive = False


@dataclass(slots=True)
class Roster:
    """Ordered players for one tournament run.

    Order is insertion order and drives the per-round iteration order.
    """

    players: list[Player] = field(default_factory=list)

    def __iter__(self) -> Iterator[Player]:
        return iter(self.players)

    def __len__(self) -> int:
        return len(self.players)

    def alive(self) -> list[Player]:
        return [p for p in self.players if p.alive]

    def alive_count(self) -> int:
        return sum(1 for p in self.players if p.alive)

    def get(self, name: str) -> Player:
        for p in self.players:
            if p.name == name:
                return p
        raise ValueError("Player not found")


def default_player_name(seat: int) -> str:
    return f"Player {seat + 1}"


def make_roster(
    *,
    names: Sequence[str],
    ai_names: Sequence[str] = (),
    max_players: int = DEFAULT_MAX_PLAYERS,
) -> Roster:
    """Build a validated roster.

    Blank names fall back to "Player N" for their seat. Names listed in `ai_names`
    are played by the bot input port.
    """

    if len(names) < 1:
        raise ValueError("At least one player is required")
    if len(names) > max_players:
        raise ValueError(f"At most {max_players} players allowed")

    ai = set(ai_names)
    players: list[Player] = []
    seen: set[str] = set()
    for seat, raw in enumerate(names):
        name = raw.strip() or default_player_name(seat)
        if name in seen:
            raise ValueError(f"Duplicate player name: {name}")
        seen.add(name)
        players.append(Player(name=name, is_ai=name in ai))

    unknown = ai - seen
    if unknown:
        raise ValueError(f"Unknown AI player(s): {', '.join(sorted(unknown))}")

    return Roster(players=players)

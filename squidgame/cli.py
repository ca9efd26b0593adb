"""Play a tournament in the terminal.

Usage:
    squidgame                             # asks for player count and names
    squidgame --players 2 --names Ann,Bob
    squidgame --players 1 --ai 3          # one human against three bots
    python -m squidgame.cli --ai 4 --seed 7
"""

from __future__ import annotations

import argparse
import logging
import random
import sys
from collections.abc import Callable
from dataclasses import dataclass, field

from squidgame.config import Settings, load_env_file, settings_from_env
from squidgame.core.events import EventLog, GameEvent
from squidgame.inputs.bots import BotInputPort, RoutingInputPort
from squidgame.inputs.console import ConsoleInputPort
from squidgame.orchestrator import FinalReport, Orchestrator
from squidgame.players import Roster, default_player_name
from squidgame.rng import make_rng
from squidgame.sessions import BOT_SEED_SALT, build_session_roster

logger = logging.getLogger(__name__)

DEFAULT_PLAYERS = 2


@dataclass(slots=True)
class ConsoleSink:
    """Prints tournament events as they happen and keeps them in an EventLog."""

    out: Callable[[str], None] = print
    log: EventLog = field(default_factory=EventLog)

    def emit(self, event: GameEvent) -> None:
        self.log.emit(event)
        p = event.payload
        if event.type == "ROUND_STARTED":
            self.out(f"\n=== {p['title']} ===")
        elif event.type == "RULES_SHOWN":
            self.out(p["rules"].rstrip())
        elif event.type == "STEP_RESOLVED":
            line = f"     {p['player']}: {p['message']}"
            if "running_strength" in p:
                line += f" (strength={p['running_strength']:.1f})"
            self.out(line)
        elif event.type == "TURN_ENDED":
            self.out(f"  -> {p['player']}: {p['message']}")
        elif event.type == "PLAYER_CUT":
            self.out(f"  -> {p['player']} eliminated (strength={p['final_strength']})")


def format_results(report: FinalReport) -> list[str]:
    lines = ["", "=== Final Results ==="]
    for r in report.players:
        status = "SURVIVED" if r.survived else "ELIMINATED"
        lines.append(f"{r.name} | {status} | strength={r.final_strength}")
    return lines


def _split_names(raw: str | None) -> list[str] | None:
    if raw is None:
        return None
    return [n.strip() for n in raw.split(",")]


def ask_player_count(read: Callable[[str], str], *, max_players: int) -> int:
    raw = read(f"Enter number of players (1-{max_players}) [default {DEFAULT_PLAYERS}]: ")
    try:
        n = int(raw.strip())
    except ValueError:
        return DEFAULT_PLAYERS
    if n < 1 or n > max_players:
        return DEFAULT_PLAYERS
    return n


def ask_names(read: Callable[[str], str], count: int) -> list[str]:
    names: list[str] = []
    for seat in range(count):
        default = default_player_name(seat)
        names.append(read(f"{default} name [{default}]: ").strip() or default)
    return names


def build_roster(args: argparse.Namespace, settings: Settings, read: Callable[[str], str]) -> Roster:
    humans = args.players
    names = _split_names(args.names)
    if humans is None:
        humans = len(names) if names is not None else 0
        if humans == 0 and args.ai == 0:
            humans = ask_player_count(read, max_players=settings.max_players)

    if names is None:
        names = ask_names(read, humans)
    elif len(names) != humans:
        raise ValueError(f"Expected {humans} names, got {len(names)}")

    # Bots take the seats after the humans.
    names = names + [f"Bot {i + 1}" for i in range(args.ai)]
    return build_session_roster(
        num_human_players=humans,
        num_ai_players=args.ai,
        names=names,
        max_players=settings.max_players,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="squidgame",
        description="Red Light Green Light, Glass Bridge and Tug of War in your terminal",
    )
    parser.add_argument("--players", "-p", type=int, default=None,
                        help="Number of human players (asked interactively when omitted)")
    parser.add_argument("--names", "-n", default=None,
                        help="Comma-separated human player names")
    parser.add_argument("--ai", type=int, default=0,
                        help="Number of AI players seated after the humans (default: 0)")
    parser.add_argument("--seed", type=int, default=None,
                        help="Tournament seed (default: SQUIDGAME_SEED or random)")
    parser.add_argument("--log-level", default=None,
                        help="Logging level (default: SQUIDGAME_LOG_LEVEL or INFO)")
    return parser


def main(argv: list[str] | None = None, *, read: Callable[[str], str] = input,
         out: Callable[[str], None] = print) -> int:
    load_env_file()
    settings = settings_from_env()
    args = build_parser().parse_args(argv)

    logging.basicConfig(level=(args.log_level or settings.log_level).upper())

    if args.ai < 0:
        out("Error: --ai must not be negative")
        return 2

    try:
        roster = build_roster(args, settings, read)
    except ValueError as e:
        out(f"Error: {e}")
        return 2

    seed = args.seed if args.seed is not None else settings.seed
    rng, seed = make_rng(seed)
    logger.info("starting tournament with %d players (seed=%d)", len(roster), seed)

    orchestrator = Orchestrator(
        roster=roster,
        inputs=RoutingInputPort(
            humans=ConsoleInputPort(read=read),
            bots=BotInputPort(rng=random.Random(seed ^ BOT_SEED_SALT)),
        ),
        rng=rng,
        sink=ConsoleSink(out=out),
    )
    try:
        report = orchestrator.run()
    except (EOFError, KeyboardInterrupt):
        out("\nAborted.")
        return 130

    for line in format_results(report):
        out(line)
    return 0


if __name__ == "__main__":
    sys.exit(main())

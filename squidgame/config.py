from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from squidgame.players import DEFAULT_MAX_PLAYERS


@dataclass(frozen=True, slots=True)
class Settings:
    # Fixed tournament seed; None draws a fresh one per session.
    seed: int | None = None
    max_players: int = DEFAULT_MAX_PLAYERS
    log_level: str = "INFO"
    # How long an HTTP input call waits for the engine to settle before returning.
    input_wait_s: float = 5.0


def _int_or_none(raw: str | None) -> int | None:
    if raw is None or not raw.strip():
        return None
    return int(raw)


def load_env_file(path: Path | None = None) -> None:
    """Load a local `.env` without clobbering variables already set in the shell."""

    from dotenv import load_dotenv

    if path is None:
        path = Path.cwd() / ".env"
    if path.exists():
        load_dotenv(dotenv_path=path, override=False)


def settings_from_env() -> Settings:
    return Settings(
        seed=_int_or_none(os.environ.get("SQUIDGAME_SEED")),
        max_players=int(os.environ.get("SQUIDGAME_MAX_PLAYERS", DEFAULT_MAX_PLAYERS)),
        log_level=os.environ.get("SQUIDGAME_LOG_LEVEL", "INFO").upper(),
        input_wait_s=float(os.environ.get("SQUIDGAME_INPUT_WAIT_S", "5.0")),
    )

from __future__ import annotations

from pathlib import Path


class RulesLoadError(RuntimeError):
    pass


def rules_dir() -> Path:
    # squidgame/rules.py -> squidgame/rule_texts/
    return Path(__file__).resolve().parent / "rule_texts"


def load_rules(game_key: str) -> str:
    """Load a minigame's rulebook text from the package `rule_texts/` directory.

    Example:
        load_rules("glass_bridge")
    """

    path = rules_dir() / f"{game_key}.txt"
    try:
        return path.read_text(encoding="utf-8").strip() + "\n"
    except FileNotFoundError as e:
        raise RulesLoadError(f"Rules not found: {path}") from e

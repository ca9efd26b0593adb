from __future__ import annotations

from functools import lru_cache

from squidgame.config import Settings, settings_from_env
from squidgame.sessions import SessionStore


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return settings_from_env()


@lru_cache(maxsize=1)
def get_store() -> SessionStore:
    # One registry per process; tests swap it out via dependency_overrides.
    return SessionStore(max_players=get_settings().max_players)

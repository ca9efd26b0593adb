from __future__ import annotations

import random
from collections import deque
from collections.abc import Generator, Iterable
from dataclasses import dataclass, field

import pytest

from squidgame.core.events import EventLog
from squidgame.core.outcomes import Light
from squidgame.inputs.base import TugEvent, TugEventKind
from squidgame.minigames.base import RoundContext
from squidgame.players import Player, Roster, make_roster


class ScriptedRandom(random.Random):
    """`random()` returns queued values first, then falls back to the seeded stream.

    `choice`/`randrange` keep using the seeded bit generator, so only draws made via
    `random()` (and `uniform`) are scripted.
    """

    def __init__(self, values: Iterable[float] = (), seed: int = 1234) -> None:
        super().__init__(seed)
        self.queue: deque[float] = deque(values)
        self.draws = 0

    def random(self) -> float:
        self.draws += 1
        if self.queue:
            return self.queue.popleft()
        return super().random()

    def getrandbits(self, k: int) -> int:
        return super().getrandbits(k)


class FakeClock:
    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@dataclass
class ScriptedInputPort:
    """Per-player scripted answers.

    Red light answers default to "stay", bridge answers to "left", and tug events to a
    stop stamped on the clock once a player's script runs out. `red_light_seconds`
    advances the clock on every red light answer.
    """

    clock: FakeClock = field(default_factory=FakeClock)
    red_light: dict[str, list[str]] = field(default_factory=dict)
    bridge: dict[str, list[str]] = field(default_factory=dict)
    tug: dict[str, list[TugEvent]] = field(default_factory=dict)
    red_light_seconds: float = 0.0
    calls: list[tuple[str, str]] = field(default_factory=list)

    def red_light_action(self, player: Player, *, light: Light, progress: int, deadline: float) -> str:
        self.calls.append(("red_light", player.name))
        self.clock.advance(self.red_light_seconds)
        script = self.red_light.get(player.name) or []
        return script.pop(0) if script else "stay"

    def bridge_choice(self, player: Player, *, step: int) -> str:
        self.calls.append(("glass_bridge", player.name))
        script = self.bridge.get(player.name) or []
        return script.pop(0) if script else "left"

    def tug_event(self, player: Player, *, deadline: float | None) -> TugEvent:
        self.calls.append(("tug_of_war", player.name))
        script = self.tug.get(player.name) or []
        if script:
            return script.pop(0)
        return TugEvent(kind=TugEventKind.stop, at=self.clock())


def taps(*times: float, stop_at: float | None = None) -> list[TugEvent]:
    events = [TugEvent(kind=TugEventKind.tap, at=t) for t in times]
    if stop_at is not None:
        events.append(TugEvent(kind=TugEventKind.stop, at=stop_at))
    return events


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def port(clock: FakeClock) -> ScriptedInputPort:
    return ScriptedInputPort(clock=clock)


@pytest.fixture()
def make_ctx(port: ScriptedInputPort, clock: FakeClock):
    def _make(rng: random.Random | None = None) -> RoundContext:
        return RoundContext(rng=rng or ScriptedRandom(), inputs=port, clock=clock, sink=EventLog())

    return _make


@pytest.fixture()
def roster3() -> Roster:
    return make_roster(names=["Ann", "Bob", "Cid"])


@pytest.fixture()
def client() -> Generator:
    """FastAPI TestClient wired to a fresh in-process session store."""

    from fastapi.testclient import TestClient

    from squidgame.api.deps import get_settings, get_store
    from squidgame.config import Settings
    from squidgame.main import app
    from squidgame.sessions import SessionStore

    store = SessionStore()
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_settings] = lambda: Settings(input_wait_s=5.0)
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    store.close_all()

from __future__ import annotations

import threading
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal

from squidgame.core.outcomes import Light
from squidgame.inputs.base import RedLightAction, TugEvent, TugEventKind, parse_tug_kind
from squidgame.minigames.base import Clock
from squidgame.players import Player


PromptKind = Literal["red_light", "glass_bridge", "tug_of_war"]

# Longest single real-time wait before the deadline is checked again.
POLL_S = 0.05


class SessionClosed(RuntimeError):
    pass


@dataclass(frozen=True, slots=True)
class Prompt:
    """The input the engine is currently blocked on."""

    seq: int
    kind: PromptKind
    player: str
    light: Light | None = None
    progress: int | None = None
    step: int | None = None
    deadline: float | None = None


@dataclass(frozen=True, slots=True)
class Answer:
    value: str
    at: float


class QueuedInputPort:
    """Input port fed from another thread (HTTP handlers).

    Contract:
      - the engine thread calls the port methods while holding `cond`; waiting for an
        answer releases it.
      - producers hold `cond`, push with `answer(...)` and may wait for `seq` to move.
      - `on_prompt`, when given, is called (on the engine thread) for every new prompt.

    Answers are timestamped on arrival, which is what tug of war measures.

    Deadlines are values on `clock`, which need not run at wall-clock speed: the wait is
    cut into slices of at most `poll_s` real seconds and the deadline is re-checked on
    `clock` after each one.
    """

    def __init__(
        self,
        *,
        cond: threading.Condition,
        clock: Clock = time.monotonic,
        on_prompt: Callable[[Prompt], None] | None = None,
        poll_s: float = POLL_S,
    ) -> None:
        self._cond = cond
        self._clock = clock
        self._on_prompt = on_prompt
        self._poll_s = poll_s
        self._answers: deque[Answer] = deque()
        self._pending: Prompt | None = None
        self._seq = 0
        self._closed = False

    @property
    def pending(self) -> Prompt | None:
        return self._pending

    @property
    def seq(self) -> int:
        return self._seq

    @property
    def closed(self) -> bool:
        return self._closed

    def answer(self, value: str) -> Answer:
        if self._closed:
            raise SessionClosed("Session is closed")
        ans = Answer(value=value, at=self._clock())
        self._answers.append(ans)
        self._cond.notify_all()
        return ans

    def close(self) -> None:
        self._closed = True
        self._cond.notify_all()

    def _ready(self) -> bool:
        return bool(self._answers) or self._closed

    def _wait(self, deadline: float | None) -> bool:
        if deadline is None:
            return self._cond.wait_for(self._ready)
        while not self._ready():
            remaining = deadline - self._clock()
            if remaining <= 0:
                return False
            self._cond.wait(timeout=min(remaining, self._poll_s))
        return True

    def _ask(self, *, kind: PromptKind, player: Player, deadline: float | None, **extra: object) -> Answer | None:
        self._seq += 1
        self._pending = Prompt(seq=self._seq, kind=kind, player=player.name, deadline=deadline, **extra)  # type: ignore[arg-type]
        self._cond.notify_all()

        try:
            if self._on_prompt is not None:
                self._on_prompt(self._pending)
            got = self._wait(deadline)
        finally:
            self._pending = None

        if self._closed:
            raise SessionClosed("Session closed while waiting for input")
        if not got:
            return None
        return self._answers.popleft()

    def red_light_action(self, player: Player, *, light: Light, progress: int, deadline: float) -> str:
        ans = self._ask(kind="red_light", player=player, deadline=deadline, light=light, progress=progress)
        # No answer before the budget ran out: standing still is the default.
        return ans.value if ans is not None else RedLightAction.stay.value

    def bridge_choice(self, player: Player, *, step: int) -> str:
        ans = self._ask(kind="glass_bridge", player=player, deadline=None, step=step)
        return ans.value if ans is not None else ""

    def tug_event(self, player: Player, *, deadline: float | None) -> TugEvent:
        ans = self._ask(kind="tug_of_war", player=player, deadline=deadline)
        if ans is None:
            # Timer ran out with nobody tapping; stamp the stop at the deadline.
            return TugEvent(kind=TugEventKind.stop, at=deadline if deadline is not None else self._clock())
        return TugEvent(kind=parse_tug_kind(ans.value) or TugEventKind.tap, at=ans.at)

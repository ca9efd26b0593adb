from __future__ import annotations

import logging
import random
import threading
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID, uuid4

from squidgame.api.models import (
    EventState,
    PlayerReportState,
    PlayerState,
    PromptState,
    SessionState,
)
from squidgame.core.events import EventLog, GameEvent
from squidgame.inputs.bots import BotInputPort, RoutingInputPort
from squidgame.inputs.queued import Prompt, QueuedInputPort, SessionClosed
from squidgame.minigames.base import Clock
from squidgame.orchestrator import Orchestrator
from squidgame.players import DEFAULT_MAX_PLAYERS, Roster, default_player_name, make_roster
from squidgame.rng import make_rng
from squidgame.turn_processing.validators import InputState, ValidationContext, validate_input

logger = logging.getLogger(__name__)

# Bots get their own RNG stream so their choices don't shift the game's draws.
BOT_SEED_SALT = 0x5F3759DF

# Called on the worker thread for every event and every new prompt of a session.
SessionUpdate = GameEvent | Prompt
SessionListener = Callable[[UUID, SessionUpdate], None]


def _now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(slots=True)
class SessionSink:
    """Event sink for one session: records into `log` and fans out to listeners."""

    session_id: UUID
    log: EventLog = field(default_factory=EventLog)
    listeners: list[SessionListener] = field(default_factory=list)

    def emit(self, event: GameEvent) -> None:
        self.log.emit(event)
        self.notify(event)

    def notify(self, update: SessionUpdate) -> None:
        for listener in self.listeners:
            listener(self.session_id, update)


def validate_player_counts(
    *,
    num_human_players: int,
    num_ai_players: int,
    max_players: int = DEFAULT_MAX_PLAYERS,
) -> None:
    total = num_human_players + num_ai_players
    if total < 1:
        raise ValueError("At least one player is required")
    if total > max_players:
        raise ValueError(f"At most {max_players} total players allowed")


def build_session_roster(
    *,
    num_human_players: int,
    num_ai_players: int,
    names: list[str] | None = None,
    max_players: int = DEFAULT_MAX_PLAYERS,
) -> Roster:
    validate_player_counts(
        num_human_players=num_human_players,
        num_ai_players=num_ai_players,
        max_players=max_players,
    )
    total = num_human_players + num_ai_players
    if names is None:
        names = [default_player_name(seat) for seat in range(total)]
    if len(names) != total:
        raise ValueError(f"Expected {total} names, got {len(names)}")

    # Seats are 0..total-1. First num_human as humans, rest AI.
    seated = [n.strip() or default_player_name(seat) for seat, n in enumerate(names)]
    return make_roster(names=seated, ai_names=seated[num_human_players:], max_players=max_players)


class TournamentSession:
    """One isolated tournament run, driven from HTTP.

    The orchestrator runs on its own worker thread. `_cond` guards all session state:
    the worker holds it while computing and releases it only while waiting on the
    queued input port, so snapshots never see a half-applied step.
    """

    def __init__(
        self,
        *,
        roster: Roster,
        seed: int | None = None,
        clock: Clock = time.monotonic,
        listeners: Sequence[SessionListener] = (),
    ) -> None:
        rng, seed = make_rng(seed)
        self.session_id: UUID = uuid4()
        self.seed = seed
        self.created_at = _now()
        self.last_updated_at = self.created_at
        self.clock = clock

        self.sink = SessionSink(session_id=self.session_id, listeners=[self._touch, *listeners])
        self._cond = threading.Condition()
        self.port = QueuedInputPort(cond=self._cond, clock=clock, on_prompt=self.sink.notify)
        bots = BotInputPort(rng=random.Random(seed ^ BOT_SEED_SALT), clock=clock)
        self.orchestrator = Orchestrator(
            roster=roster,
            inputs=RoutingInputPort(humans=self.port, bots=bots),
            rng=rng,
            clock=clock,
            sink=self.sink,
        )

        self.finished = False
        self.error: str | None = None
        self._thread: threading.Thread | None = None

    def _touch(self, session_id: UUID, update: SessionUpdate) -> None:
        self.last_updated_at = _now()

    @property
    def log(self) -> EventLog:
        return self.sink.log

    @property
    def roster(self) -> Roster:
        return self.orchestrator.roster

    def start(self) -> None:
        if self._thread is not None:
            raise ValueError("Session already started")
        self._thread = threading.Thread(target=self._run, name=f"session-{self.session_id}", daemon=True)
        self._thread.start()

    def _run(self) -> None:
        with self._cond:
            try:
                self.orchestrator.run()
            except SessionClosed:
                logger.info("session %s closed before finishing", self.session_id)
            except Exception as e:
                logger.exception("session %s failed", self.session_id)
                self.error = str(e)
            finally:
                self.finished = True
                self.last_updated_at = _now()
                self._cond.notify_all()

    def _idle(self) -> bool:
        return self.finished or self.port.pending is not None

    def wait_idle(self, timeout: float | None = None) -> bool:
        """Block until the engine needs input or has finished."""

        with self._cond:
            return self._cond.wait_for(self._idle, timeout=timeout)

    def input_state(self) -> InputState:
        return InputState(phase=self.orchestrator.phase, finished=self.finished, pending=self.port.pending)

    def submit(self, *, player: str, value: str, wait: float | None = None) -> None:
        """Hand one input to the engine and wait for it to settle again."""

        with self._cond:
            validate_input(
                ctx=ValidationContext(session_id=str(self.session_id), player=player, value=value),
                state=self.input_state(),
            )
            if self.port.closed:
                raise ValueError("Session is closed")
            before = self.port.seq
            self.port.answer(value)
            self.last_updated_at = _now()
            self._cond.wait_for(
                lambda: self.finished or (self.port.pending is not None and self.port.seq != before),
                timeout=wait,
            )
            self.last_updated_at = _now()

    def close(self) -> None:
        with self._cond:
            self.port.close()
            if self._thread is None:
                self.finished = True

    def to_state(self, *, event_limit: int | None = 50) -> SessionState:
        with self._cond:
            pending = self.port.pending
            prompt: PromptState | None = None
            if pending is not None:
                seconds_left = None
                if pending.deadline is not None:
                    seconds_left = max(0.0, pending.deadline - self.clock())
                prompt = PromptState(
                    seq=pending.seq,
                    kind=pending.kind,
                    player=pending.player,
                    light=pending.light.value if pending.light else None,
                    progress=pending.progress,
                    step=pending.step,
                    seconds_left=seconds_left,
                )

            history = self.log.history
            if event_limit is not None:
                history = history[-event_limit:] if event_limit > 0 else []

            report = self.orchestrator.report
            return SessionState(
                session_id=self.session_id,
                seed=self.seed,
                phase=self.orchestrator.phase,
                created_at=self.created_at,
                last_updated_at=self.last_updated_at,
                players=[
                    PlayerState(
                        name=p.name,
                        is_ai=p.is_ai,
                        alive=p.alive,
                        rlg_progress=p.rlg_progress,
                        bridge_step=p.bridge_step,
                        tug_strength=p.tug_strength,
                    )
                    for p in self.roster
                ],
                pending_prompt=prompt,
                events=[EventState(type=e.type, game=e.game, ts=e.ts, payload=e.payload) for e in history],
                report=(
                    [
                        PlayerReportState(name=r.name, survived=r.survived, final_strength=r.final_strength)
                        for r in report.players
                    ]
                    if report is not None
                    else None
                ),
                error=self.error,
                closed=self.port.closed,
            )


class SessionStore:
    """In-process registry of running sessions keyed by id.

    Nothing is persisted; sessions live as long as the process.
    """

    def __init__(self, *, max_players: int = DEFAULT_MAX_PLAYERS, clock: Clock = time.monotonic) -> None:
        self.max_players = max_players
        self.clock = clock
        self._sessions: dict[UUID, TournamentSession] = {}
        self._lock = threading.Lock()

    def create(
        self,
        *,
        num_human_players: int,
        num_ai_players: int,
        names: list[str] | None = None,
        seed: int | None = None,
        listeners: Sequence[SessionListener] = (),
    ) -> TournamentSession:
        roster = build_session_roster(
            num_human_players=num_human_players,
            num_ai_players=num_ai_players,
            names=names,
            max_players=self.max_players,
        )
        session = TournamentSession(roster=roster, seed=seed, clock=self.clock, listeners=listeners)
        with self._lock:
            self._sessions[session.session_id] = session
        session.start()
        logger.info(
            "session %s started (humans=%d ai=%d seed=%d)",
            session.session_id,
            num_human_players,
            num_ai_players,
            session.seed,
        )
        return session

    def get(self, session_id: UUID) -> TournamentSession | None:
        with self._lock:
            return self._sessions.get(session_id)

    def require(self, session_id: UUID) -> TournamentSession:
        session = self.get(session_id)
        if session is None:
            raise ValueError("Session not found")
        return session

    def list_sessions(self) -> list[TournamentSession]:
        with self._lock:
            out = list(self._sessions.values())
        out.sort(key=lambda s: s.created_at, reverse=True)
        return out

    def remove(self, session_id: UUID) -> bool:
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.close()
        return True

    def close_all(self) -> None:
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for s in sessions:
            s.close()

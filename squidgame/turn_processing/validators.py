from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from squidgame.fsm import TournamentPhase
from squidgame.inputs.base import parse_tug_kind
from squidgame.inputs.queued import Prompt


@dataclass(frozen=True, slots=True)
class ValidationContext:
    """Inputs available to validators.

    Keep this tight and serializable-ish so we can safely log it.
    """

    session_id: str
    player: str
    value: str


@dataclass(frozen=True, slots=True)
class InputState:
    """What a session looks like at the moment an input arrives."""

    phase: TournamentPhase
    finished: bool
    pending: Prompt | None


class InputValidator(ABC):
    """A small, composable validation unit for an incoming player input."""

    @abstractmethod
    def validate(self, *, ctx: ValidationContext, state: InputState) -> None:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class CompletedSessionValidator(InputValidator):
    def validate(self, *, ctx: ValidationContext, state: InputState) -> None:
        if state.finished or state.phase == TournamentPhase.completed:
            raise ValueError("Session is completed")


@dataclass(frozen=True, slots=True)
class PendingPromptValidator(InputValidator):
    """The engine must be blocked on a prompt for the input to mean anything."""

    def validate(self, *, ctx: ValidationContext, state: InputState) -> None:
        if state.pending is None:
            raise ValueError("Session is not awaiting input")


@dataclass(frozen=True, slots=True)
class PromptPlayerValidator(InputValidator):
    """Only the player the prompt is addressed to may answer it."""

    def validate(self, *, ctx: ValidationContext, state: InputState) -> None:
        if state.pending is None:
            return
        if ctx.player != state.pending.player:
            raise ValueError(f"Not your turn (expected player={state.pending.player})")


@dataclass(frozen=True, slots=True)
class TugValueValidator(InputValidator):
    def validate(self, *, ctx: ValidationContext, state: InputState) -> None:
        if parse_tug_kind(ctx.value) is None:
            raise ValueError("Tug of war input must be 'tap' or 'stop'")


@dataclass(frozen=True, slots=True)
class ValidatorPipeline:
    validators: tuple[InputValidator, ...]

    def validate(self, *, ctx: ValidationContext, state: InputState) -> None:
        for v in self.validators:
            v.validate(ctx=ctx, state=state)


SESSION_INPUT_PIPELINE = ValidatorPipeline(
    validators=(
        CompletedSessionValidator(),
        PendingPromptValidator(),
        PromptPlayerValidator(),
    )
)

# Red light falls back to "stay" and glass bridge asks again, so only tug of war
# rejects values up front.
PROMPT_PIPELINES: dict[str, ValidatorPipeline] = {
    "red_light": ValidatorPipeline(validators=()),
    "glass_bridge": ValidatorPipeline(validators=()),
    "tug_of_war": ValidatorPipeline(validators=(TugValueValidator(),)),
}


def pipeline_for_prompt(kind: str) -> ValidatorPipeline:
    pipe = PROMPT_PIPELINES.get(kind)
    if pipe is None:
        raise ValueError(f"Unknown prompt kind: {kind}")
    return pipe


def validate_input(*, ctx: ValidationContext, state: InputState) -> None:
    SESSION_INPUT_PIPELINE.validate(ctx=ctx, state=state)
    if state.pending is not None:
        pipeline_for_prompt(state.pending.kind).validate(ctx=ctx, state=state)

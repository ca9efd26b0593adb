from __future__ import annotations

from enum import StrEnum

from statemachine import State, StateMachine


class TournamentPhase(StrEnum):
    red_light = "red_light"
    glass_bridge = "glass_bridge"
    tug_of_war = "tug_of_war"
    completed = "completed"


class TournamentFSM(StateMachine):
    """Fixed game order for a tournament run.

    Each game state's value is the key of the minigame played in it; the orchestrator
    only plays the game matching the current state and then sends `advance`.
    """

    red_light = State(TournamentPhase.red_light.value, value=TournamentPhase.red_light.value, initial=True)
    glass_bridge = State(TournamentPhase.glass_bridge.value, value=TournamentPhase.glass_bridge.value)
    tug_of_war = State(TournamentPhase.tug_of_war.value, value=TournamentPhase.tug_of_war.value)
    completed = State(TournamentPhase.completed.value, value=TournamentPhase.completed.value, final=True)

    advance = red_light.to(glass_bridge) | glass_bridge.to(tug_of_war) | tug_of_war.to(completed)

    def __init__(self, phase: TournamentPhase = TournamentPhase.red_light):
        super().__init__(start_value=phase.value)

    @property
    def phase(self) -> TournamentPhase:
        return TournamentPhase(str(self.current_state.value))

    @property
    def is_completed(self) -> bool:
        return self.phase == TournamentPhase.completed

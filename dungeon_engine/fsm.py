from __future__ import annotations

from enum import StrEnum

from statemachine import State, StateMachine

from dungeon_engine.models import ExecutionResult


class ExecutionPhase(StrEnum):
    not_started = "not_started"
    conditions_checked = "conditions_checked"
    repeat_checked = "repeat_checked"
    executing = "executing"
    completed = "completed"


# Terminal transitions -> whether they append to the event history.
HISTORY_SIDE_EFFECTS: dict[str, bool] = {
    "trigger_blocked": False,
    "policy_blocked": False,
    "finish": True,
    "crash": False,
}


class ExecutionFSM(StateMachine):
    """Lifecycle of a single `execute_event` call.

    not_started -> conditions_checked -> repeat_checked -> executing -> completed

    Every way into `completed` is a declared transition with a fixed history side effect
    (see `HISTORY_SIDE_EFFECTS`):
    - trigger_blocked: trigger conditions false -> failed, not recorded
    - policy_blocked: repeat policy rejects -> cancelled, not recorded
    - finish: chain returned (any result) -> recorded
    - crash: chain raised -> failed, not recorded
    """

    not_started = State(
        ExecutionPhase.not_started.value,
        value=ExecutionPhase.not_started.value,
        initial=True,
    )
    conditions_checked = State(
        ExecutionPhase.conditions_checked.value,
        value=ExecutionPhase.conditions_checked.value,
    )
    repeat_checked = State(
        ExecutionPhase.repeat_checked.value,
        value=ExecutionPhase.repeat_checked.value,
    )
    executing = State(ExecutionPhase.executing.value, value=ExecutionPhase.executing.value)
    completed = State(ExecutionPhase.completed.value, value=ExecutionPhase.completed.value, final=True)

    conditions_passed = not_started.to(conditions_checked)
    repeat_passed = conditions_checked.to(repeat_checked)
    begin = repeat_checked.to(executing)
    finish = executing.to(completed)

    trigger_blocked = not_started.to(completed)
    policy_blocked = conditions_checked.to(completed)
    crash = executing.to(completed)

    def __init__(self, event_id: str):
        self.event_id = event_id
        self.outcome: ExecutionResult | None = None
        self.records_history = False
        self.trail: list[str] = []
        super().__init__()
        self.trail.append(self.phase.value)

    @property
    def phase(self) -> ExecutionPhase:
        return ExecutionPhase(str(self.current_state.value))

    def advance(self, transition: str) -> None:
        self.send(transition)
        self.trail.append(self.phase.value)

    def resolve(self, transition: str, result: ExecutionResult) -> None:
        """Take a terminal transition and pin the outcome plus its history side effect."""

        if transition not in HISTORY_SIDE_EFFECTS:
            raise ValueError(f"Not a terminal transition: {transition}")
        self.advance(transition)
        self.outcome = result
        self.records_history = HISTORY_SIDE_EFFECTS[transition]

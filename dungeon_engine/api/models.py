from __future__ import annotations

from typing import Any

from pydantic import Field

from dungeon_engine.models import DungeonEvent, EditorModel, ExecutionResult, GameState


class ExecuteEventRequest(EditorModel):
    event: DungeonEvent
    trigger_data: dict[str, Any] = Field(default_factory=dict)


class ExecuteEventResponse(EditorModel):
    result: ExecutionResult
    # Phases visited by this call, e.g. ["not_started", "completed"] for a blocked trigger.
    trail: list[str]
    state: GameState


class DispatchTriggerRequest(EditorModel):
    events: list[DungeonEvent]
    trigger_type: str
    trigger_data: dict[str, Any] = Field(default_factory=dict)


class DispatchOutcome(EditorModel):
    event_id: str
    result: ExecutionResult


class DispatchTriggerResponse(EditorModel):
    outcomes: list[DispatchOutcome]
    state: GameState

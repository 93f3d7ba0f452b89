from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from dungeon_engine.conditions import CustomConditionHook, RandomSource
from dungeon_engine.host import EventHost
from dungeon_engine.models import DungeonEvent, GameState


@dataclass(slots=True)
class ExecutionContext:
    """Everything a condition check or action handler may read during one event.

    `game_state` is the engine-owned instance; handlers mutate it in place.
    """

    game_state: GameState
    current_event: DungeonEvent
    host: EventHost
    rng: RandomSource
    trigger_data: dict[str, Any] = field(default_factory=dict)
    custom_condition: CustomConditionHook | None = None

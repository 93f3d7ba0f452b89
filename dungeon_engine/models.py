from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# Flags are an open key/value map; values are restricted to a small scalar union.
FlagValue = bool | int | float | str


class EditorModel(BaseModel):
    """Base for models shared with the map editor.

    The editor stores camelCase JSON (`playerLevel`, `nextActionId`, ...). Either spelling is
    accepted on input; dumps use the editor spelling when `by_alias=True`.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ExecutionResult(StrEnum):
    success = "success"
    failed = "failed"
    cancelled = "cancelled"


class ConditionType(StrEnum):
    flag = "flag"
    item = "item"
    level = "level"
    time = "time"
    random = "random"
    custom = "custom"


class Operator(StrEnum):
    eq = "=="
    ne = "!="
    gt = ">"
    lt = "<"
    ge = ">="
    le = "<="
    has = "has"
    not_has = "not_has"


class RepeatPolicyType(StrEnum):
    once = "once"
    always = "always"
    count = "count"
    daily = "daily"
    custom = "custom"


class TriggerType(StrEnum):
    auto = "auto"
    interact = "interact"
    contact = "contact"
    item = "item"
    step = "step"
    time = "time"
    flag = "flag"
    random = "random"
    battle = "battle"
    combo = "combo"
    custom = "custom"


class ActionType(StrEnum):
    """Action tags with a built-in handler.

    `EventAction.type` stays a plain string: tags outside this set are valid data and hit the
    registry's no-op fallback instead of failing to parse.
    """

    message = "message"
    treasure = "treasure"
    flag = "flag"
    item = "item"
    heal = "heal"
    damage = "damage"
    warp = "warp"
    battle = "battle"
    save = "save"
    sound = "sound"


# --- Game state -------------------------------------------------------------


class InventoryItem(EditorModel):
    id: str
    name: str
    count: int = Field(..., ge=0)


class PlayerPosition(EditorModel):
    x: int = 0
    y: int = 0
    floor: int = 0


class HistoryEntry(EditorModel):
    event_id: str
    timestamp: datetime
    result: ExecutionResult


class GameState(EditorModel):
    """Mutable snapshot of player/world data.

    No behavior lives here; mutation helpers are in `dungeon_engine.state_ops`.
    """

    flags: dict[str, FlagValue | None] = Field(default_factory=dict)

    # Unique by item id.
    inventory: list[InventoryItem] = Field(default_factory=list)

    player_level: int = 1
    player_position: PlayerPosition = Field(default_factory=PlayerPosition)

    # In-simulation clock; unrelated to history timestamps.
    time: float = 0

    # Append-only, ordered by execution.
    event_history: list[HistoryEntry] = Field(default_factory=list)


class GameStatePatch(EditorModel):
    """Top-level fields for a shallow state merge; unset fields are left alone."""

    flags: dict[str, FlagValue | None] | None = None
    inventory: list[InventoryItem] | None = None
    player_level: int | None = None
    player_position: PlayerPosition | None = None
    time: float | None = None
    event_history: list[HistoryEntry] | None = None


# --- Event definitions ------------------------------------------------------


class Condition(EditorModel):
    type: ConditionType
    operator: Operator = Operator.eq
    key: str | None = None
    value: FlagValue | None = None

    # Only used by `random` conditions.
    probability: float | None = None


class RepeatPolicy(EditorModel):
    type: RepeatPolicyType = RepeatPolicyType.always
    max_count: int | None = None
    custom_policy_name: str | None = None
    properties: dict[str, Any] = Field(default_factory=dict)


class EventTrigger(EditorModel):
    type: TriggerType = TriggerType.interact
    conditions: list[Condition] = Field(default_factory=list)
    repeat_policy: RepeatPolicy | None = None
    properties: dict[str, Any] = Field(default_factory=dict)


class BranchAction(EditorModel):
    condition_id: str
    action_id: str


class EventAction(EditorModel):
    id: str
    type: str
    params: dict[str, Any] = Field(default_factory=dict)

    # Gates execution of this action only; traversal continues either way.
    conditions: list[Condition] | None = None

    # Explicit successor; may point anywhere in the owning event's action list.
    next_action_id: str | None = None
    branch_actions: list[BranchAction] = Field(default_factory=list)

    properties: dict[str, Any] = Field(default_factory=dict)


class EventPosition(EditorModel):
    x: int
    y: int


class DungeonEvent(EditorModel):
    id: str
    type: str = "custom"
    trigger: EventTrigger = Field(default_factory=EventTrigger)

    # Entry point is the first element, not the lowest or "first" id.
    actions: list[EventAction] = Field(default_factory=list)

    # Used when several events on one cell fire for the same trigger.
    enabled: bool = True
    priority: int = 1

    # Editor metadata; the engine never reads these.
    name: str = ""
    description: str | None = None
    position: EventPosition | None = None
    appearance: dict[str, Any] = Field(default_factory=dict)
    properties: dict[str, Any] = Field(default_factory=dict)
    flags: dict[str, Any] = Field(default_factory=dict)
    metadata: dict[str, Any] = Field(default_factory=dict)

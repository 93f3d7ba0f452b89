"""Event execution engine for dungeon maps.

Evaluates trigger conditions and repeat policies, then walks an event's id-addressed action
chain against an engine-owned game state. Kept free of FastAPI concerns so the editor, the API
and tests can all drive it directly.
"""

from dungeon_engine.engine import EventEngine
from dungeon_engine.models import DungeonEvent, ExecutionResult, GameState

__all__ = ["EventEngine", "DungeonEvent", "ExecutionResult", "GameState"]

from __future__ import annotations

from dungeon_engine.engine import EventEngine
from dungeon_engine.models import GameState
from dungeon_engine.settings import EngineSettings, settings_from_env


_ENGINE: EventEngine | None = None


def init_engine(*, initial_state: GameState | None = None, settings: EngineSettings | None = None) -> EventEngine:
    """Create the process-wide engine session, replacing any existing one."""

    global _ENGINE
    _ENGINE = EventEngine(initial_state or GameState(), settings=settings or settings_from_env())
    return _ENGINE


def reset_engine_for_tests() -> None:
    global _ENGINE
    _ENGINE = None


def get_engine() -> EventEngine:
    """FastAPI dependency. Lazily starts a session with an empty game state."""

    if _ENGINE is None:
        return init_engine()
    return _ENGINE

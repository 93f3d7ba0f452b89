from __future__ import annotations

import os
import random
from pathlib import Path
from typing import Any

import pytest

from dungeon_engine.context import ExecutionContext
from dungeon_engine.models import DungeonEvent, ExecutionResult, GameState


@pytest.fixture(scope="session", autouse=True)
def _load_dotenv_for_tests() -> None:
    """Load repo .env for local runs when explicitly opted in.

    Keeps engine settings (step limit, timeout, seed) hermetic by default, in CI and locally.
    Opt-in with: DUNGEON_ENGINE_LOAD_DOTENV_FOR_TESTS=1
    """

    if os.environ.get("DUNGEON_ENGINE_LOAD_DOTENV_FOR_TESTS") != "1":
        return

    env_path = Path(__file__).resolve().parents[1] / ".env"
    if env_path.exists():
        from dotenv import load_dotenv

        load_dotenv(dotenv_path=env_path, override=False)


@pytest.fixture(autouse=True)
def _fresh_engine_session() -> None:
    from dungeon_engine.api.deps import reset_engine_for_tests

    reset_engine_for_tests()


@pytest.fixture()
def base_state() -> GameState:
    return GameState.model_validate(
        {
            "flags": {"door_opened": True, "level_cleared": 1, "boss_defeated": False, "note": None},
            "inventory": [
                {"id": "potion", "name": "Potion", "count": 3},
                {"id": "key", "name": "Key", "count": 1},
            ],
            "playerLevel": 5,
            "playerPosition": {"x": 10, "y": 10, "floor": 1},
            "time": 1000,
            "eventHistory": [],
        }
    )


class RecordingHost:
    """Host stub that records every call; `results` overrides the return per method."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.results: dict[str, ExecutionResult] = {}

    def _record(self, name: str, **kwargs: Any) -> ExecutionResult | None:
        self.calls.append((name, kwargs))
        return self.results.get(name)

    async def show_message(self, *, title: str, text: str) -> ExecutionResult | None:
        return self._record("show_message", title=title, text=text)

    async def grant_treasure(self, *, gold: int, experience: int) -> ExecutionResult | None:
        return self._record("grant_treasure", gold=gold, experience=experience)

    async def heal(self, *, params: dict[str, Any]) -> ExecutionResult | None:
        return self._record("heal", params=params)

    async def damage(self, *, params: dict[str, Any]) -> ExecutionResult | None:
        return self._record("damage", params=params)

    async def warp(self, *, params: dict[str, Any]) -> ExecutionResult | None:
        return self._record("warp", params=params)

    async def start_battle(self, *, params: dict[str, Any]) -> ExecutionResult | None:
        return self._record("start_battle", params=params)

    async def save_game(self, *, params: dict[str, Any]) -> ExecutionResult | None:
        return self._record("save_game", params=params)

    async def play_sound(self, *, params: dict[str, Any]) -> ExecutionResult | None:
        return self._record("play_sound", params=params)

    def names(self) -> list[str]:
        return [name for name, _ in self.calls]


@pytest.fixture()
def host() -> RecordingHost:
    return RecordingHost()


@pytest.fixture()
def make_ctx(host: RecordingHost):
    """Build an ExecutionContext around a state and (optional) event."""

    def _make(state: GameState, event: DungeonEvent | None = None, *, rng: Any = None) -> ExecutionContext:
        return ExecutionContext(
            game_state=state,
            current_event=event or DungeonEvent(id="evt", name="Test"),
            host=host,
            rng=rng or random.Random(0),
        )

    return _make


@pytest.fixture()
def client():
    """FastAPI TestClient against a fresh engine session."""

    from fastapi.testclient import TestClient

    from dungeon_engine.main import app

    with TestClient(app) as c:
        yield c

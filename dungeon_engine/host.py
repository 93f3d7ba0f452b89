from __future__ import annotations

import logging
from typing import Any, Protocol

from dungeon_engine.models import ExecutionResult

logger = logging.getLogger(__name__)


class EventHost(Protocol):
    """Downstream systems an event can reach (UI, battle, save, audio).

    Methods may return an `ExecutionResult`; returning None counts as success.
    """

    async def show_message(self, *, title: str, text: str) -> ExecutionResult | None:  # pragma: no cover
        ...

    async def grant_treasure(self, *, gold: int, experience: int) -> ExecutionResult | None:  # pragma: no cover
        ...

    async def heal(self, *, params: dict[str, Any]) -> ExecutionResult | None:  # pragma: no cover
        ...

    async def damage(self, *, params: dict[str, Any]) -> ExecutionResult | None:  # pragma: no cover
        ...

    async def warp(self, *, params: dict[str, Any]) -> ExecutionResult | None:  # pragma: no cover
        ...

    async def start_battle(self, *, params: dict[str, Any]) -> ExecutionResult | None:  # pragma: no cover
        ...

    async def save_game(self, *, params: dict[str, Any]) -> ExecutionResult | None:  # pragma: no cover
        ...

    async def play_sound(self, *, params: dict[str, Any]) -> ExecutionResult | None:  # pragma: no cover
        ...


class LoggingHost:
    """Stub host: logs every request and reports success."""

    async def show_message(self, *, title: str, text: str) -> ExecutionResult | None:
        logger.info("Message: %s: %s", title, text)
        return None

    async def grant_treasure(self, *, gold: int, experience: int) -> ExecutionResult | None:
        logger.info("Treasure: gold=%s experience=%s", gold, experience)
        return None

    async def heal(self, *, params: dict[str, Any]) -> ExecutionResult | None:
        logger.info("Heal: %s", params)
        return None

    async def damage(self, *, params: dict[str, Any]) -> ExecutionResult | None:
        logger.info("Damage: %s", params)
        return None

    async def warp(self, *, params: dict[str, Any]) -> ExecutionResult | None:
        logger.info("Warp: %s", params)
        return None

    async def start_battle(self, *, params: dict[str, Any]) -> ExecutionResult | None:
        logger.info("Battle: %s", params)
        return None

    async def save_game(self, *, params: dict[str, Any]) -> ExecutionResult | None:
        logger.info("Save: %s", params)
        return None

    async def play_sound(self, *, params: dict[str, Any]) -> ExecutionResult | None:
        logger.info("Sound: %s", params)
        return None

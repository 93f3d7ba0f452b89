"""Type-tag -> handler registry for event actions.

Handlers are async for host integration (network-backed inventory, UI prompts), but the
built-in ones never suspend. Game-state effects (flags, inventory) are applied directly to
`context.game_state`; everything else goes through the `EventHost` port.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from dungeon_engine.context import ExecutionContext
from dungeon_engine.models import ActionType, EventAction, ExecutionResult
from dungeon_engine.state_ops import add_flag, add_item, delete_flag, remove_item, set_flag

logger = logging.getLogger(__name__)


ActionHandler = Callable[[EventAction, ExecutionContext], Awaitable[ExecutionResult]]


def _as_result(value: ExecutionResult | str | None) -> ExecutionResult:
    if value is None:
        return ExecutionResult.success
    return ExecutionResult(value)


def _count_param(params: Mapping[str, Any]) -> int:
    # 0 or missing both mean 1, matching how the editor writes item actions.
    return int(params.get("count") or 1)


async def handle_message(action: EventAction, ctx: ExecutionContext) -> ExecutionResult:
    title = action.params.get("title") or "System"
    text = str(action.params.get("text", ""))
    return _as_result(await ctx.host.show_message(title=title, text=text))


async def handle_treasure(action: EventAction, ctx: ExecutionContext) -> ExecutionResult:
    items = action.params.get("items")
    if isinstance(items, list):
        for entry in items:
            add_item(ctx.game_state, str(entry["id"]), _count_param(entry), name=entry.get("name"))

    gold = int(action.params.get("gold") or 0)
    experience = int(action.params.get("experience") or 0)
    return _as_result(await ctx.host.grant_treasure(gold=gold, experience=experience))


async def handle_flag(action: EventAction, ctx: ExecutionContext) -> ExecutionResult:
    operation = action.params.get("operation")
    key = str(action.params.get("key", ""))
    value = action.params.get("value")

    if operation == "set":
        set_flag(ctx.game_state, key, value)
    elif operation == "add":
        add_flag(ctx.game_state, key, value)
    elif operation == "delete":
        delete_flag(ctx.game_state, key)
    else:
        logger.info("Ignoring flag action %s with unknown operation %r", action.id, operation)
        return ExecutionResult.success

    logger.info("Flag %s %s = %r", operation, key, value)
    return ExecutionResult.success


async def handle_item(action: EventAction, ctx: ExecutionContext) -> ExecutionResult:
    operation = action.params.get("operation")
    item_id = str(action.params.get("itemId", ""))
    count = _count_param(action.params)

    if operation == "add":
        add_item(ctx.game_state, item_id, count)
    elif operation == "remove":
        remove_item(ctx.game_state, item_id, count)
    else:
        logger.info("Ignoring item action %s with unknown operation %r", action.id, operation)
        return ExecutionResult.success

    logger.info("Item %s %s x%s", operation, item_id, count)
    return ExecutionResult.success


async def handle_heal(action: EventAction, ctx: ExecutionContext) -> ExecutionResult:
    return _as_result(await ctx.host.heal(params=action.params))


async def handle_damage(action: EventAction, ctx: ExecutionContext) -> ExecutionResult:
    return _as_result(await ctx.host.damage(params=action.params))


async def handle_warp(action: EventAction, ctx: ExecutionContext) -> ExecutionResult:
    return _as_result(await ctx.host.warp(params=action.params))


async def handle_battle(action: EventAction, ctx: ExecutionContext) -> ExecutionResult:
    return _as_result(await ctx.host.start_battle(params=action.params))


async def handle_save(action: EventAction, ctx: ExecutionContext) -> ExecutionResult:
    return _as_result(await ctx.host.save_game(params=action.params))


async def handle_sound(action: EventAction, ctx: ExecutionContext) -> ExecutionResult:
    return _as_result(await ctx.host.play_sound(params=action.params))


DEFAULT_HANDLERS: dict[str, ActionHandler] = {
    ActionType.message: handle_message,
    ActionType.treasure: handle_treasure,
    ActionType.flag: handle_flag,
    ActionType.item: handle_item,
    ActionType.heal: handle_heal,
    ActionType.damage: handle_damage,
    ActionType.warp: handle_warp,
    ActionType.battle: handle_battle,
    ActionType.save: handle_save,
    ActionType.sound: handle_sound,
}


class ActionRegistry:
    """Dispatch table from action type tag to handler.

    Tags without a handler are not errors: they log a warning and succeed, so events authored
    for newer action types still run on older engines.
    """

    def __init__(self, handlers: Mapping[str, ActionHandler] | None = None) -> None:
        self._handlers: dict[str, ActionHandler] = {
            str(k): v for k, v in (DEFAULT_HANDLERS if handlers is None else handlers).items()
        }

    def register(self, action_type: str, handler: ActionHandler) -> None:
        self._handlers[str(action_type)] = handler

    def with_handler(self, action_type: str, handler: ActionHandler) -> ActionRegistry:
        """Copy of this registry with one handler added or replaced."""

        clone = ActionRegistry(self._handlers)
        clone.register(action_type, handler)
        return clone

    def handler_for(self, action_type: str) -> ActionHandler | None:
        return self._handlers.get(action_type)

    @property
    def action_types(self) -> frozenset[str]:
        return frozenset(self._handlers)

    async def dispatch(self, action: EventAction, ctx: ExecutionContext) -> ExecutionResult:
        logger.debug("Executing action %s (%s) params=%s", action.id, action.type, action.params)

        handler = self._handlers.get(action.type)
        if handler is None:
            logger.warning("Unhandled action type: %s", action.type)
            return ExecutionResult.success
        return _as_result(await handler(action, ctx))

from __future__ import annotations

import asyncio
import copy
import logging
import random
from collections.abc import Mapping, Sequence
from typing import Any

from dungeon_engine.clock import Clock, SystemClock
from dungeon_engine.conditions import CustomConditionHook, RandomSource
from dungeon_engine.context import ExecutionContext
from dungeon_engine.fsm import ExecutionFSM
from dungeon_engine.handlers import ActionRegistry
from dungeon_engine.host import EventHost, LoggingHost
from dungeon_engine.interpreter import BranchResolver, execute_action_chain
from dungeon_engine.models import DungeonEvent, ExecutionResult, GameState, HistoryEntry
from dungeon_engine.settings import EngineSettings
from dungeon_engine.state_ops import append_history
from dungeon_engine.trigger_gate import check_repeat_policy, check_trigger_conditions

logger = logging.getLogger(__name__)


def _field_name(key: str) -> str:
    if key in GameState.model_fields:
        return key
    for name, info in GameState.model_fields.items():
        if info.alias == key:
            return name
    raise ValueError(f"Unknown game state field: {key}")


class EventEngine:
    """Runs dungeon events against an engine-owned `GameState`.

    The engine deep-copies the snapshot it is given and never hands out its own instance.
    `execute_event` is the only error boundary: condition and policy checks never raise,
    and anything raised while the action chain runs is logged and reported as `failed`.

    Calls are serialized with an asyncio lock, so two events triggered in the same tick never
    interleave their state mutations.
    """

    def __init__(
        self,
        initial_state: GameState,
        *,
        host: EventHost | None = None,
        registry: ActionRegistry | None = None,
        rng: RandomSource | None = None,
        clock: Clock | None = None,
        custom_condition: CustomConditionHook | None = None,
        branch_resolver: BranchResolver | None = None,
        settings: EngineSettings | None = None,
    ):
        self.settings = settings or EngineSettings()
        self.host: EventHost = host or LoggingHost()
        self.registry = registry or ActionRegistry()
        self.rng: RandomSource = rng or random.Random(self.settings.rng_seed)
        self.clock: Clock = clock or SystemClock()
        self.custom_condition = custom_condition
        self.branch_resolver = branch_resolver

        self._state = initial_state.model_copy(deep=True)
        self._lock = asyncio.Lock()
        self.last_execution: ExecutionFSM | None = None

    # --- State access -----------------------------------------------------

    def get_game_state(self) -> GameState:
        return self._state.model_copy(deep=True)

    def update_game_state(self, partial: Mapping[str, Any]) -> None:
        """Shallow merge of top-level fields.

        A nested value such as `flags` replaces the current one wholesale; it is not merged
        key by key. Field names may use either snake_case or the editor's camelCase.

        The engine-owned instance is updated in place, so a chain that is running against it
        keeps writing to the same object.
        """

        touched = {_field_name(key): value for key, value in copy.deepcopy(dict(partial)).items()}
        merged: dict[str, Any] = {name: getattr(self._state, name) for name in GameState.model_fields}
        merged.update(touched)
        candidate = GameState.model_validate(merged)
        for name in touched:
            setattr(self._state, name, getattr(candidate, name))

    async def patch_game_state(self, partial: Mapping[str, Any]) -> GameState:
        """`update_game_state` that waits for any running event first; returns the new snapshot."""

        async with self._lock:
            self.update_game_state(partial)
            return self.get_game_state()

    # --- Execution --------------------------------------------------------

    def _context(self, event: DungeonEvent, trigger_data: Mapping[str, Any] | None) -> ExecutionContext:
        return ExecutionContext(
            game_state=self._state,
            current_event=event,
            host=self.host,
            rng=self.rng,
            trigger_data=dict(trigger_data or {}),
            custom_condition=self.custom_condition,
        )

    async def _run_chain(self, event: DungeonEvent, ctx: ExecutionContext) -> ExecutionResult:
        chain = execute_action_chain(
            event.actions,
            ctx,
            registry=self.registry,
            branch_resolver=self.branch_resolver,
            max_steps=self.settings.max_chain_steps,
        )
        if self.settings.chain_timeout_s is None:
            return await chain
        return await asyncio.wait_for(chain, timeout=self.settings.chain_timeout_s)

    async def execute_event(
        self,
        event: DungeonEvent,
        trigger_data: Mapping[str, Any] | None = None,
    ) -> ExecutionResult:
        async with self._lock:
            return await self._execute_locked(event, trigger_data)

    async def _execute_locked(
        self,
        event: DungeonEvent,
        trigger_data: Mapping[str, Any] | None,
    ) -> ExecutionResult:
        fsm = ExecutionFSM(event.id)
        self.last_execution = fsm
        ctx = self._context(event, trigger_data)

        if not check_trigger_conditions(event.trigger, ctx):
            logger.info("Event %s: trigger conditions not met", event.id)
            fsm.resolve("trigger_blocked", ExecutionResult.failed)
            return ExecutionResult.failed
        fsm.advance("conditions_passed")

        if not check_repeat_policy(event, self._state.event_history, clock=self.clock):
            logger.info("Event %s: blocked by repeat policy", event.id)
            fsm.resolve("policy_blocked", ExecutionResult.cancelled)
            return ExecutionResult.cancelled
        fsm.advance("repeat_passed")

        fsm.advance("begin")
        try:
            result = await self._run_chain(event, ctx)
        except Exception:
            logger.exception("Event %s: execution error", event.id)
            fsm.resolve("crash", ExecutionResult.failed)
            return ExecutionResult.failed

        fsm.resolve("finish", result)
        if fsm.records_history:
            append_history(
                self._state,
                HistoryEntry(event_id=event.id, timestamp=self.clock.now(), result=result),
            )
        logger.info("Event %s finished: %s", event.id, result.value)
        return result

    async def dispatch_trigger(
        self,
        events: Sequence[DungeonEvent],
        trigger_type: str,
        trigger_data: Mapping[str, Any] | None = None,
    ) -> list[tuple[str, ExecutionResult]]:
        """Fire every enabled event whose trigger type matches, highest priority first.

        Events with equal priority keep their given order. The whole batch holds the engine lock.
        """

        candidates = [e for e in events if e.enabled and e.trigger.type == trigger_type]
        ordered = sorted(candidates, key=lambda e: e.priority, reverse=True)

        out: list[tuple[str, ExecutionResult]] = []
        async with self._lock:
            for event in ordered:
                out.append((event.id, await self._execute_locked(event, trigger_data)))
        return out

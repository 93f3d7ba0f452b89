from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from dungeon_engine.chain_graph import action_arena, entry_action_id
from dungeon_engine.conditions import check_conditions
from dungeon_engine.context import ExecutionContext
from dungeon_engine.handlers import ActionRegistry
from dungeon_engine.models import EventAction, ExecutionResult

logger = logging.getLogger(__name__)


BranchResolver = Callable[[str, ExecutionContext], bool]


class ChainStepLimitExceeded(RuntimeError):
    """An action chain ran more steps than the configured limit (usually an authored cycle)."""


def match_any_branch(condition_id: str, ctx: ExecutionContext) -> bool:
    """Default branch check: every branch matches, so the first listed branch is taken."""

    return True


def _action_conditions_pass(action: EventAction, ctx: ExecutionContext) -> bool:
    if not action.conditions:
        return True
    return check_conditions(
        action.conditions,
        ctx.game_state,
        rng=ctx.rng,
        custom=ctx.custom_condition,
    )


def _next_action_id(action: EventAction, ctx: ExecutionContext, branch_resolver: BranchResolver) -> str | None:
    if action.branch_actions:
        # First matching branch wins; no match falls back to the explicit successor.
        branch = next((b for b in action.branch_actions if branch_resolver(b.condition_id, ctx)), None)
        return branch.action_id if branch is not None else action.next_action_id
    return action.next_action_id


async def execute_action_chain(
    actions: Sequence[EventAction],
    ctx: ExecutionContext,
    *,
    registry: ActionRegistry,
    branch_resolver: BranchResolver | None = None,
    max_steps: int | None = None,
) -> ExecutionResult:
    """Walk the id-addressed action graph starting at the first action.

    - an unknown id ends the chain normally (success)
    - a gated action whose conditions fail is skipped; traversal continues at `next_action_id`
    - a handler returning failed/cancelled stops the chain and that result is returned

    Cycles are followed forever unless `max_steps` is set, in which case exceeding it raises
    `ChainStepLimitExceeded`.
    """

    resolve = branch_resolver or match_any_branch
    arena = action_arena(actions)
    current_id = entry_action_id(actions)
    steps = 0

    while current_id:
        action = arena.get(current_id)
        if action is None:
            logger.debug("Chain for event %s ends at unknown action id %s", ctx.current_event.id, current_id)
            break

        if max_steps is not None and steps >= max_steps:
            raise ChainStepLimitExceeded(
                f"Event '{ctx.current_event.id}' exceeded {max_steps} chain steps (at action '{current_id}')"
            )
        steps += 1

        if not _action_conditions_pass(action, ctx):
            logger.debug("Skipping gated action %s", action.id)
            current_id = action.next_action_id
            continue

        result = await registry.dispatch(action, ctx)
        if result in (ExecutionResult.failed, ExecutionResult.cancelled):
            logger.info("Action %s returned %s; stopping chain", action.id, result.value)
            return result

        current_id = _next_action_id(action, ctx, resolve)

    return ExecutionResult.success

from __future__ import annotations

from collections.abc import Sequence

from dungeon_engine.clock import Clock
from dungeon_engine.conditions import check_conditions
from dungeon_engine.context import ExecutionContext
from dungeon_engine.models import DungeonEvent, EventTrigger, HistoryEntry, RepeatPolicyType
from dungeon_engine.state_ops import execution_count


def check_trigger_conditions(trigger: EventTrigger, context: ExecutionContext) -> bool:
    """AND over the trigger's conditions; a trigger without conditions always passes."""

    return check_conditions(
        trigger.conditions,
        context.game_state,
        rng=context.rng,
        custom=context.custom_condition,
    )


def check_repeat_policy(event: DungeonEvent, history: Sequence[HistoryEntry], *, clock: Clock) -> bool:
    """Whether the event's repeat policy still allows it to fire.

    Every recorded execution counts regardless of its result. `daily` compares calendar days in
    the clock's timezone, so a wall clock makes this depend on real time.
    """

    policy = event.trigger.repeat_policy
    if policy is None:
        return True

    if policy.type == RepeatPolicyType.once:
        return execution_count(history, event.id) == 0

    if policy.type == RepeatPolicyType.count:
        # Missing or zero max_count means unlimited.
        if not policy.max_count:
            return True
        return execution_count(history, event.id) < policy.max_count

    if policy.type == RepeatPolicyType.daily:
        now = clock.now()
        today = now.date()
        return not any(
            h.event_id == event.id and h.timestamp.astimezone(now.tzinfo).date() == today for h in history
        )

    # always, custom
    return True

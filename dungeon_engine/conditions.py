from __future__ import annotations

import logging
import operator as op
from collections.abc import Callable, Iterable
from typing import Any, Protocol

from dungeon_engine.models import Condition, ConditionType, GameState, Operator
from dungeon_engine.state_ops import find_item

logger = logging.getLogger(__name__)


DEFAULT_PROBABILITY = 0.5


class RandomSource(Protocol):
    """Anything with a `random()` in [0, 1); `random.Random` qualifies."""

    def random(self) -> float:  # pragma: no cover
        ...


CustomConditionHook = Callable[[Condition, GameState], bool]


def allow_custom_condition(condition: Condition, state: GameState) -> bool:
    """Default hook for `custom` conditions: always passes."""

    logger.debug("Custom condition %s=%r passes by default", condition.key, condition.value)
    return True


def _strict_eq(a: Any, b: Any) -> bool:
    # True must not equal 1, "1" must not equal 1.
    if isinstance(a, bool) != isinstance(b, bool):
        return False
    return a == b


_ORDERINGS: dict[Operator, Callable[[Any, Any], bool]] = {
    Operator.gt: op.gt,
    Operator.lt: op.lt,
    Operator.ge: op.ge,
    Operator.le: op.le,
}


def compare(left: Any, operator: Operator, right: Any) -> bool:
    """Apply a comparison operator; incomparable operands yield False instead of raising."""

    if operator == Operator.eq:
        return _strict_eq(left, right)
    if operator == Operator.ne:
        return not _strict_eq(left, right)

    fn = _ORDERINGS.get(operator)
    if fn is None:
        return False
    try:
        return bool(fn(left, right))
    except TypeError:
        return False


def _check_flag(condition: Condition, state: GameState) -> bool:
    flag_value = state.flags.get(condition.key or "")
    if condition.operator == Operator.has:
        return flag_value is not None
    if condition.operator == Operator.not_has:
        return flag_value is None
    return compare(flag_value, condition.operator, condition.value)


def _check_item(condition: Condition, state: GameState) -> bool:
    item = find_item(state, condition.key or "")
    count = item.count if item is not None else 0
    if condition.operator == Operator.has:
        return count > 0
    if condition.operator == Operator.not_has:
        return count == 0
    return compare(count, condition.operator, condition.value)


def check_condition(
    condition: Condition,
    state: GameState,
    *,
    rng: RandomSource,
    custom: CustomConditionHook | None = None,
) -> bool:
    """Evaluate a single condition against the game state."""

    if condition.type == ConditionType.flag:
        return _check_flag(condition, state)
    if condition.type == ConditionType.item:
        return _check_item(condition, state)
    if condition.type == ConditionType.level:
        return compare(state.player_level, condition.operator, condition.value)
    if condition.type == ConditionType.time:
        return compare(state.time, condition.operator, condition.value)
    if condition.type == ConditionType.random:
        probability = DEFAULT_PROBABILITY if condition.probability is None else condition.probability
        return rng.random() < probability
    if condition.type == ConditionType.custom:
        hook = custom or allow_custom_condition
        return bool(hook(condition, state))
    return False


def check_conditions(
    conditions: Iterable[Condition],
    state: GameState,
    *,
    rng: RandomSource,
    custom: CustomConditionHook | None = None,
) -> bool:
    """AND over all conditions; an empty list passes."""

    return all(check_condition(c, state, rng=rng, custom=custom) for c in conditions)

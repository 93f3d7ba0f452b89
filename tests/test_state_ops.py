from __future__ import annotations

import pytest
from pydantic import ValidationError

from dungeon_engine.models import GameState
from dungeon_engine.state_ops import add_flag, add_item, delete_flag, find_item, remove_item, set_flag


def test_add_item_creates_or_increments(base_state: GameState) -> None:
    add_item(base_state, "new_item", 3)
    new_item = find_item(base_state, "new_item")
    assert new_item is not None
    assert new_item.count == 3
    assert new_item.name == "Item new_item"

    add_item(base_state, "potion", 2)
    assert find_item(base_state, "potion").count == 5  # type: ignore[union-attr]


def test_remove_item_decrements_then_drops_entry(base_state: GameState) -> None:
    remove_item(base_state, "potion", 1)
    assert find_item(base_state, "potion").count == 2  # type: ignore[union-attr]

    remove_item(base_state, "potion", 10)
    assert find_item(base_state, "potion") is None
    assert [i.id for i in base_state.inventory] == ["key"]


def test_remove_missing_item_is_noop(base_state: GameState) -> None:
    before = base_state.model_copy(deep=True)
    remove_item(base_state, "sword", 1)
    assert base_state == before


def test_flag_helpers(base_state: GameState) -> None:
    add_flag(base_state, "level_cleared", 2)
    assert base_state.flags["level_cleared"] == 3

    add_flag(base_state, "fresh_counter", 1)
    assert base_state.flags["fresh_counter"] == 1

    delete_flag(base_state, "door_opened")
    delete_flag(base_state, "never_there")
    assert "door_opened" not in base_state.flags


def test_add_flag_rejects_string_values() -> None:
    state = GameState(flags={"name": "hero"})
    with pytest.raises(ValueError):
        add_flag(state, "name", 1)


@pytest.mark.parametrize("value", [[1, 2], {"nested": True}])
def test_set_flag_rejects_non_scalar_values(value) -> None:
    state = GameState(flags={"gate": True})
    with pytest.raises(ValidationError):
        set_flag(state, "loot", value)
    assert state.flags == {"gate": True}


def test_set_flag_keeps_scalar_types() -> None:
    state = GameState()
    for key, value in (("b", True), ("i", 1), ("f", 1.5), ("s", "1"), ("n", None)):
        set_flag(state, key, value)
    assert state.flags == {"b": True, "i": 1, "f": 1.5, "s": "1", "n": None}
    assert state.flags["b"] is True

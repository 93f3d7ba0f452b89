from __future__ import annotations

from collections.abc import Sequence

from pydantic import TypeAdapter

from dungeon_engine.models import FlagValue, GameState, HistoryEntry, InventoryItem


def find_item(state: GameState, item_id: str) -> InventoryItem | None:
    return next((i for i in state.inventory if i.id == item_id), None)


def add_item(state: GameState, item_id: str, count: int, *, name: str | None = None) -> InventoryItem:
    """Increase an inventory entry, creating it when missing."""

    item = find_item(state, item_id)
    if item is not None:
        item.count += count
        return item

    item = InventoryItem(id=item_id, name=name or f"Item {item_id}", count=count)
    state.inventory.append(item)
    return item


def remove_item(state: GameState, item_id: str, count: int) -> None:
    """Decrease an inventory entry, clamped at zero.

    An entry that reaches zero is dropped from the inventory entirely. Missing items are ignored.
    """

    item = find_item(state, item_id)
    if item is None:
        return

    item.count = max(0, item.count - count)
    if item.count == 0:
        state.inventory = [i for i in state.inventory if i.id != item_id]


_FLAG_VALUE: TypeAdapter[FlagValue | None] = TypeAdapter(FlagValue | None)


def set_flag(state: GameState, key: str, value: object) -> None:
    """Store a flag; values outside the flag scalar union raise `pydantic.ValidationError`."""

    state.flags[key] = _FLAG_VALUE.validate_python(value)


def add_flag(state: GameState, key: str, delta: int | float) -> None:
    # A missing (or falsy) flag counts as 0.
    current = state.flags.get(key) or 0
    if isinstance(current, str):
        raise ValueError(f"Flag '{key}' holds a string and cannot be incremented")
    state.flags[key] = _FLAG_VALUE.validate_python(current + delta)


def delete_flag(state: GameState, key: str) -> None:
    state.flags.pop(key, None)


def execution_count(history: Sequence[HistoryEntry], event_id: str) -> int:
    return sum(1 for h in history if h.event_id == event_id)


def append_history(state: GameState, entry: HistoryEntry) -> None:
    state.event_history.append(entry)

"""Id-addressed view over an event's action list.

Actions form a graph: `next_action_id` and branch targets may point anywhere in the list, and
array order says nothing about execution order except that the first element is the entry.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence

from dungeon_engine.models import EventAction


def action_arena(actions: Sequence[EventAction]) -> dict[str, EventAction]:
    """Map action id -> action. With duplicate ids the first occurrence wins."""

    arena: dict[str, EventAction] = {}
    for action in actions:
        arena.setdefault(action.id, action)
    return arena


def entry_action_id(actions: Sequence[EventAction]) -> str | None:
    return actions[0].id if actions else None


def successor_ids(action: EventAction) -> list[str]:
    """Every id traversal may move to from `action` (branch targets first)."""

    out = [b.action_id for b in action.branch_actions if b.action_id]
    if action.next_action_id:
        out.append(action.next_action_id)
    return out


def reachable_action_ids(actions: Sequence[EventAction]) -> set[str]:
    arena = action_arena(actions)
    start = entry_action_id(actions)
    if not start:
        return set()

    seen: set[str] = set()
    stack = [start]
    while stack:
        aid = stack.pop()
        if aid in seen or aid not in arena:
            continue
        seen.add(aid)
        stack.extend(successor_ids(arena[aid]))
    return seen


def dangling_references(actions: Sequence[EventAction]) -> list[tuple[str, str]]:
    """(action id, missing target id) pairs. Traversal ends normally at such targets."""

    arena = action_arena(actions)
    out: list[tuple[str, str]] = []
    for action in arena.values():
        for target in successor_ids(action):
            if target not in arena:
                out.append((action.id, target))
    return out


def find_cycle(actions: Sequence[EventAction]) -> list[str] | None:
    """Return one cycle reachable from the entry as a list of ids, or None.

    Depth-first with an explicit stack, so long linear chains do not hit the recursion limit.
    """

    arena = action_arena(actions)
    start = entry_action_id(actions)
    if not start or start not in arena:
        return None

    path: list[str] = [start]
    on_path: set[str] = {start}
    done: set[str] = set()
    stack: list[Iterator[str]] = [iter(successor_ids(arena[start]))]

    while stack:
        nxt = next(stack[-1], None)
        if nxt is None:
            finished = path.pop()
            on_path.discard(finished)
            done.add(finished)
            stack.pop()
            continue
        if nxt not in arena or nxt in done:
            continue
        if nxt in on_path:
            return path[path.index(nxt):] + [nxt]
        path.append(nxt)
        on_path.add(nxt)
        stack.append(iter(successor_ids(arena[nxt])))
    return None

from __future__ import annotations

from dungeon_engine.authoring.validators import (
    EventValidator,
    Severity,
    ValidationReport,
    ValidatorPipeline,
    validate_event,
)
from dungeon_engine.models import DungeonEvent


def _event(**overrides) -> DungeonEvent:
    raw = {
        "id": "chest",
        "name": "Treasure chest",
        "trigger": {"type": "interact", "repeatPolicy": {"type": "once"}},
        "actions": [
            {"id": "1", "type": "message", "params": {"text": "You found a chest."}, "nextActionId": "2"},
            {"id": "2", "type": "item", "params": {"operation": "add", "itemId": "potion", "count": 1}},
        ],
    }
    raw.update(overrides)
    return DungeonEvent.model_validate(raw)


def _messages(issues) -> list[str]:
    return [i.message for i in issues]


def test_well_formed_event_is_clean() -> None:
    report = validate_event(_event())
    assert report.is_valid
    assert report.errors == []
    assert report.warnings == []
    assert report.info == []


def test_missing_name_is_an_error() -> None:
    report = validate_event(_event(name=" "))
    assert not report.is_valid
    assert [i.field for i in report.errors] == ["name"]


def test_count_policy_needs_positive_max() -> None:
    report = validate_event(_event(trigger={"type": "interact", "repeatPolicy": {"type": "count", "maxCount": 0}}))
    assert [i.field for i in report.errors] == ["trigger.repeatPolicy.maxCount"]


def test_missing_policy_and_auto_trigger_warn() -> None:
    report = validate_event(_event(trigger={"type": "auto"}))
    fields = [i.field for i in report.warnings]
    assert "trigger.repeatPolicy" in fields
    assert "combination" in fields
    assert report.is_valid


def test_condition_checks() -> None:
    report = validate_event(
        _event(
            trigger={
                "type": "interact",
                "repeatPolicy": {"type": "once"},
                "conditions": [
                    {"type": "flag", "operator": "has"},
                    {"type": "random", "probability": 1.5},
                ],
            }
        )
    )
    assert [i.field for i in report.errors] == ["trigger.conditions[0].key", "trigger.conditions[1].probability"]


def test_action_param_checks() -> None:
    report = validate_event(
        _event(
            actions=[
                {"id": "1", "type": "message", "params": {"text": ""}, "nextActionId": "2"},
                {"id": "2", "type": "warp", "params": {"x": "1", "y": 2}, "nextActionId": "3"},
                {"id": "3", "type": "item", "params": {"itemId": "potion", "count": 0}, "nextActionId": "4"},
                {"id": "4", "type": "flag", "params": {}},
            ]
        )
    )
    assert [i.field for i in report.errors] == [
        "actions[0].params.text",
        "actions[1].params",
        "actions[2].params.count",
        "actions[3].params.key",
    ]


def test_long_message_and_double_battle_warn() -> None:
    report = validate_event(
        _event(
            actions=[
                {"id": "1", "type": "message", "params": {"text": "x" * 501}, "nextActionId": "2"},
                {"id": "2", "type": "battle", "params": {"enemyId": "slime"}, "nextActionId": "3"},
                {"id": "3", "type": "battle", "params": {"enemyId": "orc"}},
            ]
        )
    )
    assert report.is_valid
    assert "Multiple battle actions in one event" in _messages(report.warnings)
    assert any("too long" in m for m in _messages(report.warnings))


def test_empty_actions_warn() -> None:
    report = validate_event(_event(actions=[]))
    assert _messages(report.warnings) == ["Event has no actions"]


def test_duplicate_action_ids_are_errors() -> None:
    report = validate_event(
        _event(
            actions=[
                {"id": "1", "type": "sound", "nextActionId": "1"},
                {"id": "1", "type": "sound"},
            ]
        )
    )
    assert [i.field for i in report.errors] == ["actions[0].id", "actions[1].id"]


def test_chain_graph_checks() -> None:
    report = validate_event(
        _event(
            actions=[
                {"id": "1", "type": "sound", "nextActionId": "2"},
                {"id": "2", "type": "sound", "nextActionId": "1", "branchActions": [{"conditionId": "c", "actionId": "ghost"}]},
                {"id": "orphan", "type": "sound"},
            ]
        )
    )

    warnings = _messages(report.warnings)
    assert "Action '2' points at missing action 'ghost'; the chain ends there" in warnings
    assert "Action chain loops: 1 -> 2 -> 1" in warnings
    assert _messages(report.info) == ["Actions never reached from the entry action: orphan"]
    assert report.is_valid


def test_pipeline_accepts_custom_validators() -> None:
    class NoSaveValidator(EventValidator):
        def validate(self, *, event: DungeonEvent, report: ValidationReport) -> None:
            if any(a.type == "save" for a in event.actions):
                report.add("actions", "Save points are not allowed here", Severity.error)

    pipeline = ValidatorPipeline(validators=(NoSaveValidator(),))
    report = pipeline.validate(event=_event(actions=[{"id": "1", "type": "save"}]))
    assert _messages(report.errors) == ["Save points are not allowed here"]


def test_long_linear_chain_is_checked_without_recursion() -> None:
    size = 5000
    actions = [
        {"id": str(i), "type": "sound", **({"nextActionId": str(i + 1)} if i + 1 < size else {})}
        for i in range(size)
    ]
    report = validate_event(_event(actions=actions))

    assert report.is_valid
    assert not any("loops" in m for m in _messages(report.warnings))


def test_long_chain_with_back_edge_reports_the_loop() -> None:
    size = 3000
    actions = [{"id": str(i), "type": "sound", "nextActionId": str(i + 1)} for i in range(size - 1)]
    actions.append({"id": str(size - 1), "type": "sound", "nextActionId": str(size - 3)})
    report = validate_event(_event(actions=actions))

    assert f"Action chain loops: {size - 3} -> {size - 2} -> {size - 1} -> {size - 3}" in _messages(report.warnings)

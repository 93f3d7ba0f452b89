from __future__ import annotations

from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field, computed_field

from dungeon_engine.chain_graph import dangling_references, find_cycle, reachable_action_ids
from dungeon_engine.models import (
    ActionType,
    ConditionType,
    DungeonEvent,
    EventAction,
    RepeatPolicyType,
    TriggerType,
)


MAX_ACTIONS = 20
MAX_MESSAGE_LENGTH = 500


class Severity(StrEnum):
    error = "error"
    warning = "warning"
    info = "info"


class ValidationIssue(BaseModel):
    field: str
    message: str
    severity: Severity
    suggestion: str | None = None


class ValidationReport(BaseModel):
    errors: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[ValidationIssue] = Field(default_factory=list)
    info: list[ValidationIssue] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_valid(self) -> bool:
        return not self.errors

    def add(self, field: str, message: str, severity: Severity, suggestion: str | None = None) -> None:
        issue = ValidationIssue(field=field, message=message, severity=severity, suggestion=suggestion)
        if severity == Severity.error:
            self.errors.append(issue)
        elif severity == Severity.warning:
            self.warnings.append(issue)
        else:
            self.info.append(issue)


class EventValidator(ABC):
    """A small, composable check over an authored event definition."""

    @abstractmethod
    def validate(self, *, event: DungeonEvent, report: ValidationReport) -> None:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class RequiredFieldsValidator(EventValidator):
    def validate(self, *, event: DungeonEvent, report: ValidationReport) -> None:
        if not event.id.strip():
            report.add("id", "Event id is required", Severity.error)
        if not event.name.strip():
            report.add("name", "Event name is required", Severity.error, "Use a descriptive name, e.g. 'Treasure chest'")
        if not event.type:
            report.add("type", "Event type is required", Severity.error)


@dataclass(frozen=True, slots=True)
class TriggerValidator(EventValidator):
    def validate(self, *, event: DungeonEvent, report: ValidationReport) -> None:
        trigger = event.trigger
        policy = trigger.repeat_policy

        if policy is None:
            report.add(
                "trigger.repeatPolicy",
                "No repeat policy set; the event will fire every time",
                Severity.warning,
                "Set a repeat policy to limit how often the event runs",
            )
        elif policy.type == RepeatPolicyType.count and (policy.max_count is None or policy.max_count <= 0):
            report.add(
                "trigger.repeatPolicy.maxCount",
                "Count policy needs a positive maxCount",
                Severity.error,
                "Use a number of 1 or more",
            )

        for idx, condition in enumerate(trigger.conditions):
            where = f"trigger.conditions[{idx}]"
            if condition.type in (ConditionType.flag, ConditionType.item) and not condition.key:
                report.add(f"{where}.key", f"Condition {idx + 1} ({condition.type.value}) has no key", Severity.error)
            if condition.type == ConditionType.random and condition.probability is not None:
                if not 0 <= condition.probability <= 1:
                    report.add(f"{where}.probability", f"Condition {idx + 1} probability must be within [0, 1]", Severity.error)


def _check_params(action: EventAction, idx: int, report: ValidationReport) -> None:
    params: dict[str, Any] = action.params
    where = f"actions[{idx}].params"

    if action.type == ActionType.message:
        text = params.get("text")
        if not isinstance(text, str) or not text.strip():
            report.add(f"{where}.text", f"Message action {idx + 1} needs text", Severity.error)
        elif len(text) > MAX_MESSAGE_LENGTH:
            report.add(
                f"{where}.text",
                f"Message action {idx + 1} text is too long",
                Severity.warning,
                f"Keep messages under {MAX_MESSAGE_LENGTH} characters",
            )

    elif action.type == ActionType.warp:
        x, y = params.get("x"), params.get("y")
        if not all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in (x, y)):
            report.add(where, f"Warp action {idx + 1} needs numeric x and y", Severity.error)

    elif action.type == ActionType.item:
        if not params.get("itemId"):
            report.add(f"{where}.itemId", f"Item action {idx + 1} needs an itemId", Severity.error)
        count = params.get("count")
        if not isinstance(count, int) or isinstance(count, bool) or count <= 0:
            report.add(f"{where}.count", f"Item action {idx + 1} needs a positive count", Severity.error)

    elif action.type == ActionType.flag:
        if not params.get("key"):
            report.add(f"{where}.key", f"Flag action {idx + 1} needs a key", Severity.error)

    elif action.type == ActionType.battle:
        if not params.get("enemyId"):
            report.add(f"{where}.enemyId", f"Battle action {idx + 1} has no enemyId", Severity.warning)


@dataclass(frozen=True, slots=True)
class ActionsValidator(EventValidator):
    max_actions: int = MAX_ACTIONS

    def validate(self, *, event: DungeonEvent, report: ValidationReport) -> None:
        actions = event.actions
        if not actions:
            report.add("actions", "Event has no actions", Severity.warning, "Add at least one action")
            return

        if len(actions) > self.max_actions:
            report.add(
                "actions",
                "Event has too many actions",
                Severity.warning,
                f"Keep it to {self.max_actions} actions or fewer",
            )

        seen = Counter(a.id for a in actions)
        for idx, action in enumerate(actions):
            if not action.id:
                report.add(f"actions[{idx}].id", f"Action {idx + 1} needs an id", Severity.error)
            elif seen[action.id] > 1:
                report.add(f"actions[{idx}].id", f"Duplicate action id '{action.id}'", Severity.error)
            if not action.type:
                report.add(f"actions[{idx}].type", f"Action {idx + 1} needs a type", Severity.error)
                continue
            _check_params(action, idx, report)


@dataclass(frozen=True, slots=True)
class ChainValidator(EventValidator):
    """Checks the pointer graph formed by `nextActionId` and branch targets."""

    def validate(self, *, event: DungeonEvent, report: ValidationReport) -> None:
        actions = event.actions
        if not actions:
            return

        for source, target in dangling_references(actions):
            report.add(
                "actions",
                f"Action '{source}' points at missing action '{target}'; the chain ends there",
                Severity.warning,
            )

        reachable = reachable_action_ids(actions)
        unreachable = [a.id for a in actions if a.id and a.id not in reachable]
        if unreachable:
            report.add(
                "actions",
                f"Actions never reached from the entry action: {', '.join(unreachable)}",
                Severity.info,
                "Link them with nextActionId or a branch",
            )

        cycle = find_cycle(actions)
        if cycle is not None:
            report.add(
                "actions",
                f"Action chain loops: {' -> '.join(cycle)}",
                Severity.warning,
                "A loop without an exit never finishes unless a step limit is configured",
            )


@dataclass(frozen=True, slots=True)
class CombinationValidator(EventValidator):
    def validate(self, *, event: DungeonEvent, report: ValidationReport) -> None:
        policy = event.trigger.repeat_policy
        if event.trigger.type == TriggerType.auto and (policy is None or policy.type == RepeatPolicyType.always):
            report.add(
                "combination",
                "Auto trigger with an always-repeat policy fires on every check",
                Severity.warning,
                "Add trigger conditions or limit the repeat policy",
            )

        battles = sum(1 for a in event.actions if a.type == ActionType.battle)
        if battles > 1:
            report.add("actions", "Multiple battle actions in one event", Severity.warning)


@dataclass(frozen=True, slots=True)
class ValidatorPipeline:
    validators: tuple[EventValidator, ...]

    def validate(self, *, event: DungeonEvent) -> ValidationReport:
        report = ValidationReport()
        for v in self.validators:
            v.validate(event=event, report=report)
        return report


DEFAULT_EVENT_PIPELINE = ValidatorPipeline(
    validators=(
        RequiredFieldsValidator(),
        TriggerValidator(),
        ActionsValidator(),
        ChainValidator(),
        CombinationValidator(),
    )
)


def validate_event(event: DungeonEvent) -> ValidationReport:
    return DEFAULT_EVENT_PIPELINE.validate(event=event)

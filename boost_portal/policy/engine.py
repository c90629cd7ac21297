"""Allow/deny decisions over the ordered rule table.

Evaluation is a logical OR: an operation is allowed when any rule registered for
the (entity, operation) pair accepts it. There are no deny rules. Everything in
this module is pure; callers resolve the actor and snapshot the row first.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Iterable, TypeVar

from boost_portal.db.enums import OperationEnum
from boost_portal.errors import PermissionDeniedError
from boost_portal.policy.context import Actor, EntityEnum, Resource
from boost_portal.policy.rules import RULES, rules_for

logger = logging.getLogger("policy.engine")

T = TypeVar("T")


@dataclass(frozen=True)
class RuleEvaluation:
    rule: str
    allowed: bool


@dataclass(frozen=True)
class Decision:
    entity: EntityEnum
    operation: OperationEnum
    allowed: bool
    evaluations: tuple[RuleEvaluation, ...]

    @property
    def matched_rule(self) -> str | None:
        for evaluation in self.evaluations:
            if evaluation.allowed:
                return evaluation.rule
        return None


def can(actor: Actor, operation: OperationEnum, resource: Resource) -> bool:
    return any(rule.predicate(actor, resource) for rule in rules_for(resource.entity, operation))


def explain(actor: Actor, operation: OperationEnum, resource: Resource) -> Decision:
    """Evaluate every applicable rule (no short-circuit) so the full picture is visible."""
    evaluations = tuple(
        RuleEvaluation(rule=rule.name, allowed=bool(rule.predicate(actor, resource)))
        for rule in rules_for(resource.entity, operation)
    )
    return Decision(
        entity=resource.entity,
        operation=operation,
        allowed=any(item.allowed for item in evaluations),
        evaluations=evaluations,
    )


def authorize(actor: Actor, operation: OperationEnum, resource: Resource) -> None:
    decision = explain(actor, operation, resource)
    if decision.allowed:
        logger.debug(
            "Policy allowed",
            extra={
                "entity": resource.entity.value,
                "operation": operation.value,
                "rule": decision.matched_rule,
                "actor_id": actor.id,
            },
        )
        return
    rules = [{"rule": item.rule, "allowed": item.allowed} for item in decision.evaluations]
    logger.info(
        "Policy denied",
        extra={
            "entity": resource.entity.value,
            "operation": operation.value,
            "resource_id": str(resource.id) if resource.id is not None else None,
            "actor": actor.describe(),
            "rules": [item["rule"] for item in rules],
        },
    )
    raise PermissionDeniedError(
        f"Not allowed to {operation.value} {resource.entity.value.replace('_', ' ')}",
        entity=resource.entity.value,
        operation=operation.value,
        rules=rules,
        actor=actor.describe(),
    )


def visible(actor: Actor, rows: Iterable[T], snapshot) -> list[T]:
    """Keep only the rows the actor may read; ``snapshot`` maps a row to its Resource."""
    return [row for row in rows if can(actor, OperationEnum.read, snapshot(row))]


def policy_table() -> list[dict[str, str]]:
    entries: list[dict[str, str]] = []
    for rule in RULES:
        for operation in OperationEnum:
            if operation in rule.operations:
                entries.append(
                    {"entity": rule.entity.value, "operation": operation.value, "rule": rule.name}
                )
    return entries

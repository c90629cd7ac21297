"""Introspection helpers for answering "why was I denied?" without reading logs."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from boost_portal.db.enums import OperationEnum
from boost_portal.db.models import utcnow
from boost_portal.db.repositories import (
    AdvertiserAccountsRepository,
    AudienceRequestsRepository,
    AudiencesRepository,
    CampaignCommentsRepository,
    CampaignsRepository,
    CompaniesRepository,
    CompanyAccountIdsRepository,
    NotificationsRepository,
    UserProfilesRepository,
)
from boost_portal.errors import InvalidRequestError, NotFoundError
from boost_portal.policy.context import Actor, EntityEnum, Resource
from boost_portal.policy.engine import can, explain, policy_table

_REPOSITORIES = {
    EntityEnum.user_profile: UserProfilesRepository,
    EntityEnum.company: CompaniesRepository,
    EntityEnum.company_account_id: CompanyAccountIdsRepository,
    EntityEnum.campaign: CampaignsRepository,
    EntityEnum.audience_request: AudienceRequestsRepository,
    EntityEnum.campaign_comment: CampaignCommentsRepository,
    EntityEnum.notification: NotificationsRepository,
    EntityEnum.audience: AudiencesRepository,
    EntityEnum.advertiser_account: AdvertiserAccountsRepository,
}


def _own_resources(actor: Actor) -> dict[EntityEnum, Resource]:
    """A representative row per entity that the actor owns or that belongs to their company."""
    owned = {"owner_id": actor.id, "owner_company_id": actor.company_id}
    parent = {"parent_owner_id": actor.id, "parent_owner_company_id": actor.company_id}
    return {
        EntityEnum.user_profile: Resource(
            entity=EntityEnum.user_profile,
            id=actor.id,
            owner_id=actor.id,
            company_id=actor.company_id,
            role=actor.role,
        ),
        EntityEnum.company: Resource(entity=EntityEnum.company, id=actor.company_id, company_id=actor.company_id),
        EntityEnum.company_account_id: Resource(entity=EntityEnum.company_account_id, company_id=actor.company_id),
        EntityEnum.campaign: Resource(entity=EntityEnum.campaign, state="draft", **owned),
        EntityEnum.audience_request: Resource(entity=EntityEnum.audience_request, state="pending", **owned),
        EntityEnum.campaign_comment: Resource(entity=EntityEnum.campaign_comment, **owned, **parent),
        EntityEnum.workflow_history: Resource(entity=EntityEnum.workflow_history, **parent),
        EntityEnum.activity_log: Resource(entity=EntityEnum.activity_log, **parent),
        EntityEnum.notification: Resource(entity=EntityEnum.notification, **owned),
        EntityEnum.audience: Resource(entity=EntityEnum.audience),
        EntityEnum.advertiser_account: Resource(entity=EntityEnum.advertiser_account, **owned),
    }


def permissions_report(actor: Actor) -> dict[str, Any]:
    matrix: dict[str, dict[str, bool]] = {}
    for entity, resource in _own_resources(actor).items():
        if entity == EntityEnum.company and actor.company_id is None:
            matrix[entity.value] = {operation.value: False for operation in OperationEnum}
            continue
        matrix[entity.value] = {operation.value: can(actor, operation, resource) for operation in OperationEnum}
    return {
        "user_id": actor.id,
        "email": actor.email,
        "role": actor.role.value,
        "company_id": str(actor.company_id) if actor.company_id else None,
        "is_super_admin": actor.is_super_admin,
        "is_company_admin": actor.is_company_admin,
        "has_profile": actor.has_profile,
        "timestamp": utcnow().isoformat(),
        "own_rows": matrix,
    }


def policies() -> list[dict[str, str]]:
    return policy_table()


def explain_row(session: Session, actor: Actor, entity: str, row_id: Any, operation: str) -> dict[str, Any]:
    try:
        entity_enum = EntityEnum(entity)
        operation_enum = OperationEnum(operation)
    except ValueError as exc:
        raise InvalidRequestError(str(exc)) from exc
    repo_cls = _REPOSITORIES.get(entity_enum)
    if repo_cls is None:
        raise InvalidRequestError(f"Cannot explain {entity} rows", field="entity")
    if entity_enum != EntityEnum.user_profile:
        try:
            row_id = UUID(str(row_id))
        except ValueError as exc:
            raise InvalidRequestError("Invalid id", field="id") from exc
    repo = repo_cls(session)
    row = repo.get(actor, row_id)
    if row is None:
        raise NotFoundError(f"{entity_enum.value.replace('_', ' ').capitalize()} not found")
    decision = explain(actor, operation_enum, repo.snapshot(row))
    return {
        "entity": entity_enum.value,
        "id": str(row_id),
        "operation": operation_enum.value,
        "allowed": decision.allowed,
        "matched_rule": decision.matched_rule,
        "rules": [{"rule": item.rule, "allowed": item.allowed} for item in decision.evaluations],
        "actor": actor.describe(),
    }

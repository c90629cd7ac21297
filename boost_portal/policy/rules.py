from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from boost_portal.db.enums import OperationEnum, UserRoleEnum
from boost_portal.policy.context import Actor, EntityEnum, Resource

Predicate = Callable[[Actor, Resource], bool]

READ = frozenset({OperationEnum.read})
CREATE = frozenset({OperationEnum.create})
UPDATE = frozenset({OperationEnum.update})
DELETE = frozenset({OperationEnum.delete})
WRITE = frozenset({OperationEnum.create, OperationEnum.update, OperationEnum.delete})
ANY = frozenset(OperationEnum)

# Roles a company admin may hand out.
ASSIGNABLE_BY_COMPANY_ADMIN = frozenset({UserRoleEnum.user, UserRoleEnum.admin})


@dataclass(frozen=True)
class Rule:
    name: str
    entity: EntityEnum
    operations: frozenset
    predicate: Predicate


def super_admin(actor: Actor, _resource: Resource) -> bool:
    return actor.is_super_admin


def authenticated(_actor: Actor, _resource: Resource) -> bool:
    return True


def is_owner(actor: Actor, resource: Resource) -> bool:
    return resource.owner_id is not None and resource.owner_id == actor.id


def admin_of_owner_company(actor: Actor, resource: Resource) -> bool:
    return actor.is_company_admin and resource.owner_company_id == actor.company_id


def member_of_row_company(actor: Actor, resource: Resource) -> bool:
    return actor.company_id is not None and resource.company_id == actor.company_id


def admin_of_row_company(actor: Actor, resource: Resource) -> bool:
    return actor.is_company_admin and resource.company_id == actor.company_id


def is_parent_owner(actor: Actor, resource: Resource) -> bool:
    return resource.parent_owner_id is not None and resource.parent_owner_id == actor.id


def member_of_parent_owner_company(actor: Actor, resource: Resource) -> bool:
    return actor.company_id is not None and resource.parent_owner_company_id == actor.company_id


def admin_of_parent_owner_company(actor: Actor, resource: Resource) -> bool:
    return actor.is_company_admin and resource.parent_owner_company_id == actor.company_id


# --- user profiles -----------------------------------------------------------


def profile_is_self(actor: Actor, resource: Resource) -> bool:
    return resource.id == actor.id


def profile_self_name_only(actor: Actor, resource: Resource) -> bool:
    return resource.id == actor.id and set(resource.changes) <= {"name"}


def profile_self_signup(actor: Actor, resource: Resource) -> bool:
    return resource.id == actor.id and resource.company_id is None


def company_admin_over_member(actor: Actor, resource: Resource) -> bool:
    return (
        actor.is_company_admin
        and resource.company_id == actor.company_id
        and resource.role != UserRoleEnum.super_admin
    )


def profile_company_admin_manages(actor: Actor, resource: Resource) -> bool:
    if not company_admin_over_member(actor, resource):
        return False
    changes = resource.changes
    if "email" in changes:
        return False
    if "role" in changes and changes["role"] not in ASSIGNABLE_BY_COMPANY_ADMIN:
        return False
    if "company_id" in changes and changes["company_id"] not in (actor.company_id, None):
        return False
    return True


def profile_company_admin_invites(actor: Actor, resource: Resource) -> bool:
    return (
        actor.is_company_admin
        and resource.company_id == actor.company_id
        and (resource.role or UserRoleEnum.user) in ASSIGNABLE_BY_COMPANY_ADMIN
    )


# --- campaigns and audience requests ---------------------------------------

# The only status change an owner may make on their own campaign.
OWNER_CAMPAIGN_TRANSITIONS = frozenset({("draft", "submitted")})


def _status_value(value) -> str:
    return getattr(value, "value", value)


def campaign_owner_update(actor: Actor, resource: Resource) -> bool:
    if not is_owner(actor, resource):
        return False
    if "status" not in resource.changes:
        return True
    return (resource.state, _status_value(resource.changes["status"])) in OWNER_CAMPAIGN_TRANSITIONS


def request_owner_update(actor: Actor, resource: Resource) -> bool:
    return is_owner(actor, resource) and "status" not in resource.changes and resource.state == "pending"


# --- companies ---------------------------------------------------------------


def company_admin_keeps_account_id(actor: Actor, resource: Resource) -> bool:
    return admin_of_row_company(actor, resource) and "account_id" not in resource.changes


RULES: tuple[Rule, ...] = (
    # user profiles
    Rule("profile_read_self", EntityEnum.user_profile, READ, profile_is_self),
    Rule("profile_read_company_peer", EntityEnum.user_profile, READ, member_of_row_company),
    Rule("profile_create_self_signup", EntityEnum.user_profile, CREATE, profile_self_signup),
    Rule("profile_create_company_admin_invite", EntityEnum.user_profile, CREATE, profile_company_admin_invites),
    Rule("profile_update_self_name", EntityEnum.user_profile, UPDATE, profile_self_name_only),
    Rule("profile_update_company_admin", EntityEnum.user_profile, UPDATE, profile_company_admin_manages),
    Rule("profile_delete_company_admin", EntityEnum.user_profile, DELETE, company_admin_over_member),
    Rule("profile_super_admin", EntityEnum.user_profile, ANY, super_admin),
    # companies
    Rule("company_read_member", EntityEnum.company, READ, member_of_row_company),
    Rule("company_update_admin_keeps_account_id", EntityEnum.company, UPDATE, company_admin_keeps_account_id),
    Rule("company_super_admin", EntityEnum.company, ANY, super_admin),
    # company account ids
    Rule("account_id_read_member", EntityEnum.company_account_id, READ, member_of_row_company),
    Rule("account_id_write_company_admin", EntityEnum.company_account_id, WRITE, admin_of_row_company),
    Rule("account_id_super_admin", EntityEnum.company_account_id, ANY, super_admin),
    # campaigns
    Rule("campaign_owner", EntityEnum.campaign, READ | CREATE | DELETE, is_owner),
    Rule("campaign_owner_update", EntityEnum.campaign, UPDATE, campaign_owner_update),
    Rule("campaign_company_admin", EntityEnum.campaign, ANY, admin_of_owner_company),
    Rule("campaign_super_admin", EntityEnum.campaign, ANY, super_admin),
    # audience requests
    Rule("audience_request_owner", EntityEnum.audience_request, READ | CREATE | DELETE, is_owner),
    Rule("audience_request_owner_update_pending", EntityEnum.audience_request, UPDATE, request_owner_update),
    Rule("audience_request_company_admin", EntityEnum.audience_request, ANY, admin_of_owner_company),
    Rule("audience_request_super_admin", EntityEnum.audience_request, ANY, super_admin),
    # comments: visibility follows the campaign, edits follow the author
    Rule("comment_campaign_owner", EntityEnum.campaign_comment, READ | CREATE, is_parent_owner),
    Rule(
        "comment_campaign_company_member",
        EntityEnum.campaign_comment,
        READ | CREATE,
        member_of_parent_owner_company,
    ),
    Rule("comment_author", EntityEnum.campaign_comment, UPDATE | DELETE, is_owner),
    Rule("comment_author_company_admin", EntityEnum.campaign_comment, UPDATE | DELETE, admin_of_owner_company),
    Rule("comment_super_admin", EntityEnum.campaign_comment, ANY, super_admin),
    # audit trail: read-only, mirrors campaign read
    Rule("workflow_history_campaign_owner", EntityEnum.workflow_history, READ, is_parent_owner),
    Rule(
        "workflow_history_campaign_company_admin",
        EntityEnum.workflow_history,
        READ,
        admin_of_parent_owner_company,
    ),
    Rule("workflow_history_super_admin", EntityEnum.workflow_history, READ, super_admin),
    Rule("activity_log_campaign_owner", EntityEnum.activity_log, READ, is_parent_owner),
    Rule("activity_log_campaign_company_admin", EntityEnum.activity_log, READ, admin_of_parent_owner_company),
    Rule("activity_log_super_admin", EntityEnum.activity_log, READ, super_admin),
    # notifications
    Rule("notification_owner", EntityEnum.notification, ANY, is_owner),
    Rule("notification_create_company_admin", EntityEnum.notification, CREATE, admin_of_owner_company),
    Rule("notification_super_admin", EntityEnum.notification, ANY, super_admin),
    # audience catalog
    Rule("audience_read_authenticated", EntityEnum.audience, READ, authenticated),
    Rule("audience_super_admin", EntityEnum.audience, ANY, super_admin),
    # advertiser accounts
    Rule("advertiser_account_owner", EntityEnum.advertiser_account, ANY, is_owner),
    Rule("advertiser_account_super_admin", EntityEnum.advertiser_account, ANY, super_admin),
)


def rules_for(entity: EntityEnum, operation: OperationEnum) -> list[Rule]:
    return [rule for rule in RULES if rule.entity == entity and operation in rule.operations]

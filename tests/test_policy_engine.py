from uuid import uuid4

import pytest

from boost_portal.db.enums import OperationEnum, UserRoleEnum
from boost_portal.errors import PermissionDeniedError
from boost_portal.policy.context import Actor, EntityEnum, Resource
from boost_portal.policy.engine import authorize, can, explain, policy_table, visible
from boost_portal.policy.rules import RULES

COMPANY = uuid4()
OTHER_COMPANY = uuid4()

ADMIN = Actor(id="admin", email="admin@acme.test", role=UserRoleEnum.admin, company_id=COMPANY, has_profile=True)
MEMBER = Actor(id="member", email="member@acme.test", company_id=COMPANY, has_profile=True)
OUTSIDER = Actor(id="outsider", email="out@other.test", company_id=OTHER_COMPANY, has_profile=True)
LIMBO = Actor(id="limbo", email="limbo@nowhere.test", has_profile=True)
SUPER = Actor(
    id="super",
    email="ops@boostdata.io",
    role=UserRoleEnum.super_admin,
    is_super_admin=True,
    has_profile=True,
)


def _profile(user_id, company_id=COMPANY, role=UserRoleEnum.user, changes=None):
    return Resource(
        entity=EntityEnum.user_profile,
        id=user_id,
        owner_id=user_id,
        company_id=company_id,
        role=role,
        changes=changes or {},
    )


def _campaign(owner_id="member", owner_company_id=COMPANY, state="draft", changes=None):
    return Resource(
        entity=EntityEnum.campaign,
        id=uuid4(),
        owner_id=owner_id,
        owner_company_id=owner_company_id,
        state=state,
        changes=changes or {},
    )


def test_company_admin_cannot_elevate_member_to_super_admin():
    resource = _profile("member", changes={"role": UserRoleEnum.super_admin})

    decision = explain(ADMIN, OperationEnum.update, resource)

    assert decision.allowed is False
    assert decision.matched_rule is None
    assert {item.rule for item in decision.evaluations} == {
        "profile_update_self_name",
        "profile_update_company_admin",
        "profile_super_admin",
    }
    assert [item.allowed for item in decision.evaluations] == [False, False, False]


def test_company_admin_can_promote_member_but_user_cannot_change_peer_role():
    resource = _profile("peer", changes={"role": UserRoleEnum.admin})

    assert can(ADMIN, OperationEnum.update, resource) is True
    assert can(MEMBER, OperationEnum.update, resource) is False
    assert can(SUPER, OperationEnum.update, resource) is True


def test_company_admin_cannot_touch_super_admin_target():
    target = _profile("ops", role=UserRoleEnum.super_admin, changes={"role": UserRoleEnum.user})

    assert can(ADMIN, OperationEnum.update, target) is False
    assert can(ADMIN, OperationEnum.delete, _profile("ops", role=UserRoleEnum.super_admin)) is False
    assert can(SUPER, OperationEnum.update, target) is True


def test_self_update_is_limited_to_name():
    assert can(MEMBER, OperationEnum.update, _profile("member", changes={"name": "New name"})) is True
    assert can(MEMBER, OperationEnum.update, _profile("member", changes={"role": UserRoleEnum.admin})) is False
    assert can(MEMBER, OperationEnum.update, _profile("member", changes={"role": UserRoleEnum.super_admin})) is False
    assert can(MEMBER, OperationEnum.update, _profile("member", changes={"company_id": None})) is False
    assert can(MEMBER, OperationEnum.update, _profile("member", changes={"name": "X", "email": "x@y.test"})) is False


def test_company_admin_cannot_move_member_into_another_company_or_change_email():
    moved_out = _profile("peer", changes={"company_id": OTHER_COMPANY})
    removed = _profile("peer", changes={"company_id": None})

    assert can(ADMIN, OperationEnum.update, moved_out) is False
    assert can(ADMIN, OperationEnum.update, removed) is True
    assert can(ADMIN, OperationEnum.update, _profile("peer", changes={"email": "x@y.test"})) is False


def test_limbo_profile_reads_only_itself():
    assert can(LIMBO, OperationEnum.read, _profile("limbo", company_id=None)) is True
    assert can(LIMBO, OperationEnum.read, _profile("other-limbo", company_id=None)) is False
    assert can(LIMBO, OperationEnum.read, _profile("member")) is False
    # Two unassigned profiles are not "peers" of a null company.
    assert can(MEMBER, OperationEnum.read, _profile("other-limbo", company_id=None)) is False


def test_account_id_insert_denied_for_user_allowed_for_admin_and_super_admin():
    record = Resource(entity=EntityEnum.company_account_id, company_id=COMPANY)

    assert can(MEMBER, OperationEnum.create, record) is False
    assert can(ADMIN, OperationEnum.create, record) is True
    assert can(SUPER, OperationEnum.create, record) is True
    assert can(MEMBER, OperationEnum.read, record) is True
    assert can(OUTSIDER, OperationEnum.read, record) is False


def test_company_update_by_admin_must_keep_account_id():
    rename = Resource(entity=EntityEnum.company, id=COMPANY, company_id=COMPANY, changes={"name": "New"})
    new_account = Resource(entity=EntityEnum.company, id=COMPANY, company_id=COMPANY, changes={"account_id": "act_9"})

    assert can(ADMIN, OperationEnum.update, rename) is True
    assert can(ADMIN, OperationEnum.update, new_account) is False
    assert can(ADMIN, OperationEnum.create, Resource(entity=EntityEnum.company)) is False
    assert can(SUPER, OperationEnum.delete, Resource(entity=EntityEnum.company, id=COMPANY, company_id=COMPANY)) is True


def test_campaign_owner_may_only_submit_drafts():
    assert can(MEMBER, OperationEnum.update, _campaign(state="draft", changes={"status": "submitted"})) is True
    to_review = {"status": "pending_review"}
    assert can(MEMBER, OperationEnum.update, _campaign(state="submitted", changes=to_review)) is False
    assert can(MEMBER, OperationEnum.update, _campaign(state="submitted", changes={"name": "Renamed"})) is True
    assert can(ADMIN, OperationEnum.update, _campaign(state="submitted", changes=to_review)) is True


def test_campaign_visibility_follows_owner_company():
    campaign = _campaign()

    assert can(MEMBER, OperationEnum.read, campaign) is True
    assert can(ADMIN, OperationEnum.read, campaign) is True
    assert can(OUTSIDER, OperationEnum.read, campaign) is False
    peer = Actor(id="peer", email="peer@acme.test", company_id=COMPANY, has_profile=True)
    assert can(peer, OperationEnum.read, campaign) is False


def test_audience_request_owner_updates_only_pending_without_status():
    def request(state, changes):
        return Resource(
            entity=EntityEnum.audience_request,
            owner_id="member",
            owner_company_id=COMPANY,
            state=state,
            changes=changes,
        )

    pending = request("pending", {"notes": "x"})
    reviewed = request("reviewed", {"notes": "x"})
    status_change = request("pending", {"status": "approved"})

    assert can(MEMBER, OperationEnum.update, pending) is True
    assert can(MEMBER, OperationEnum.update, reviewed) is False
    assert can(MEMBER, OperationEnum.update, status_change) is False
    assert can(ADMIN, OperationEnum.update, status_change) is True


def test_comments_follow_campaign_for_read_and_author_for_edit():
    comment = Resource(
        entity=EntityEnum.campaign_comment,
        owner_id="peer",
        owner_company_id=COMPANY,
        parent_owner_id="member",
        parent_owner_company_id=COMPANY,
    )

    assert can(MEMBER, OperationEnum.read, comment) is True
    assert can(MEMBER, OperationEnum.update, comment) is False
    assert can(ADMIN, OperationEnum.delete, comment) is True
    assert can(OUTSIDER, OperationEnum.create, comment) is False


def test_audit_trail_is_read_only():
    history = Resource(entity=EntityEnum.workflow_history, parent_owner_id="member", parent_owner_company_id=COMPANY)

    assert can(MEMBER, OperationEnum.read, history) is True
    assert can(ADMIN, OperationEnum.read, history) is True
    for operation in (OperationEnum.create, OperationEnum.update, OperationEnum.delete):
        assert can(SUPER, operation, history) is False


def test_notifications_private_to_recipient():
    notification = Resource(entity=EntityEnum.notification, owner_id="member", owner_company_id=COMPANY)

    assert can(ADMIN, OperationEnum.create, notification) is True
    assert can(ADMIN, OperationEnum.read, notification) is False
    assert can(OUTSIDER, OperationEnum.create, notification) is False
    assert can(MEMBER, OperationEnum.update, notification) is True


def test_audience_catalog_read_by_anyone_written_by_super_admin():
    audience = Resource(entity=EntityEnum.audience, id=uuid4())

    assert can(LIMBO, OperationEnum.read, audience) is True
    assert can(ADMIN, OperationEnum.create, audience) is False
    assert can(SUPER, OperationEnum.create, audience) is True


def test_authorize_raises_with_evaluated_rules():
    with pytest.raises(PermissionDeniedError) as excinfo:
        authorize(MEMBER, OperationEnum.create, Resource(entity=EntityEnum.company_account_id, company_id=COMPANY))

    payload = excinfo.value.to_payload()
    assert payload["entity"] == "company_account_id"
    assert payload["operation"] == "create"
    assert payload["actor"]["id"] == "member"
    assert [item["rule"] for item in payload["rules"]] == [
        "account_id_write_company_admin",
        "account_id_super_admin",
    ]
    assert all(item["allowed"] is False for item in payload["rules"])


def test_visible_filters_rows():
    rows = ["member", "limbo", "peer"]
    kept = visible(MEMBER, rows, lambda user_id: _profile(user_id, company_id=None if user_id == "limbo" else COMPANY))
    assert kept == ["member", "peer"]


def test_every_entity_has_a_read_rule_and_table_is_listed():
    read_entities = {rule.entity for rule in RULES if OperationEnum.read in rule.operations}
    assert read_entities == set(EntityEnum)

    table = policy_table()
    assert {"entity": "campaign", "operation": "update", "rule": "campaign_owner_update"} in table
    assert {"entity": "campaign", "operation": "update", "rule": "campaign_owner"} not in table

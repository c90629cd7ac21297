from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import select

from boost_portal.db.enums import ActivityActionEnum, CampaignStatusEnum, UserRoleEnum
from boost_portal.db.models import CampaignActivityLog, CampaignWorkflowHistory, Notification, as_utc
from boost_portal.db.repositories.audit import AuditRepository
from boost_portal.errors import InvalidRequestError, PermissionDeniedError
from boost_portal.services.campaign_workflow import (
    TERMINAL_STATES,
    CampaignWorkflowService,
    allowed_targets,
    is_valid_transition,
)

S = CampaignStatusEnum


@pytest.fixture()
def team(seed):
    company = seed.company()
    seed.profile("alice", company=company, role=UserRoleEnum.admin)
    seed.profile("bob", company=company)
    seed.profile("cora", company=company)
    outsider_company = seed.company("Globex")
    seed.profile("olga", company=outsider_company, role=UserRoleEnum.admin)
    return company


def _history(session, campaign):
    stmt = (
        select(CampaignWorkflowHistory)
        .where(CampaignWorkflowHistory.campaign_id == campaign.id)
        .order_by(CampaignWorkflowHistory.created_at.asc())
    )
    return list(session.scalars(stmt).all())


def _activity(session, campaign):
    stmt = (
        select(CampaignActivityLog)
        .where(CampaignActivityLog.campaign_id == campaign.id)
        .order_by(CampaignActivityLog.created_at.asc())
    )
    return list(session.scalars(stmt).all())


def test_transition_graph():
    assert allowed_targets(S.draft) == {S.submitted, S.failed}
    assert allowed_targets(S.paused) == {S.completed, S.in_progress, S.failed}
    assert TERMINAL_STATES == {S.completed, S.failed}
    assert is_valid_transition(S.live, S.failed) is True
    assert is_valid_transition(S.draft, S.draft) is False
    assert is_valid_transition(S.draft, S.approved) is False
    assert is_valid_transition(S.completed, S.failed) is False
    assert is_valid_transition(S.approved, S.submitted) is False


def test_create_writes_created_activity_and_no_history(team, seed, db_session):
    service = CampaignWorkflowService(db_session)

    campaign = service.create_campaign(seed.actor("bob"), name="Spring launch", budget=Decimal("1500"))

    assert campaign.client_id == "bob"
    assert campaign.status == S.draft
    assert _history(db_session, campaign) == []
    activity = _activity(db_session, campaign)
    assert [entry.action_type for entry in activity] == [ActivityActionEnum.created]
    assert activity[0].new_values == {"status": "draft", "name": "Spring launch"}


def test_member_cannot_create_campaign_for_peer(team, seed, db_session):
    with pytest.raises(PermissionDeniedError):
        CampaignWorkflowService(db_session).create_campaign(seed.actor("bob"), client_id="cora", name="Not mine")


def test_admin_can_create_campaign_for_member(team, seed, db_session):
    campaign = CampaignWorkflowService(db_session).create_campaign(
        seed.actor("alice"), client_id="bob", name="On behalf"
    )

    assert campaign.client_id == "bob"


def test_submit_review_approve_records_three_ordered_history_rows(team, seed, db_session):
    service = CampaignWorkflowService(db_session)
    campaign = service.create_campaign(seed.actor("bob"), name="Spring launch")

    service.transition(seed.actor("bob"), campaign, S.submitted)
    service.transition(seed.actor("alice"), campaign, S.pending_review, notes="Looks complete")
    service.transition(seed.actor("alice"), campaign, S.approved)

    history = _history(db_session, campaign)
    assert [(entry.from_status, entry.to_status) for entry in history] == [
        (S.draft, S.submitted),
        (S.submitted, S.pending_review),
        (S.pending_review, S.approved),
    ]
    stamps = [as_utc(entry.created_at) for entry in history]
    assert stamps[0] < stamps[1] < stamps[2]
    assert history[1].notes == "Looks complete"
    assert campaign.status == S.approved
    assert campaign.approved_at is not None

    activity = _activity(db_session, campaign)
    assert [entry.action_type for entry in activity] == [
        ActivityActionEnum.created,
        ActivityActionEnum.status_changed,
        ActivityActionEnum.status_changed,
        ActivityActionEnum.status_changed,
    ]
    activity_stamps = [as_utc(entry.created_at) for entry in activity]
    assert activity_stamps == sorted(activity_stamps)
    assert len(set(activity_stamps + stamps)) == len(activity_stamps) + len(stamps)


def test_owner_can_only_submit(team, seed, db_session):
    service = CampaignWorkflowService(db_session)
    campaign = service.create_campaign(seed.actor("bob"), name="Spring launch")
    service.transition(seed.actor("bob"), campaign, S.submitted)

    with pytest.raises(PermissionDeniedError):
        service.transition(seed.actor("bob"), campaign, S.pending_review)

    db_session.refresh(campaign)
    assert campaign.status == S.submitted
    assert len(_history(db_session, campaign)) == 1


def test_outsider_admin_cannot_transition(team, seed, db_session):
    service = CampaignWorkflowService(db_session)
    campaign = service.create_campaign(seed.actor("bob"), name="Spring launch")

    with pytest.raises(PermissionDeniedError):
        service.transition(seed.actor("olga"), campaign, S.submitted)


def test_invalid_transition_is_rejected_before_authorization(team, seed, db_session):
    service = CampaignWorkflowService(db_session)
    campaign = service.create_campaign(seed.actor("bob"), name="Spring launch")

    with pytest.raises(InvalidRequestError) as excinfo:
        service.transition(seed.actor("alice"), campaign, S.approved)

    assert excinfo.value.field == "status"
    assert _history(db_session, campaign) == []


def test_failed_is_terminal(team, seed, db_session):
    service = CampaignWorkflowService(db_session)
    campaign = service.create_campaign(seed.actor("bob"), name="Spring launch")
    service.transition(seed.actor("alice"), campaign, S.failed, notes="Budget pulled")

    with pytest.raises(InvalidRequestError):
        service.transition(seed.actor("alice"), campaign, S.submitted)


def test_notify_client_creates_notification_for_owner(team, seed, db_session):
    service = CampaignWorkflowService(db_session)
    campaign = service.create_campaign(seed.actor("bob"), name="Spring launch")
    service.transition(seed.actor("bob"), campaign, S.submitted, notify_client=True)
    service.transition(seed.actor("alice"), campaign, S.pending_review, notify_client=True)

    notifications = list(db_session.scalars(select(Notification)).all())
    assert len(notifications) == 1
    assert notifications[0].user_id == "bob"
    assert notifications[0].title == 'Update on your campaign "Spring launch"'
    assert notifications[0].message == "Status changed to pending review"


def test_update_records_old_and_new_values(team, seed, db_session):
    service = CampaignWorkflowService(db_session)
    campaign = service.create_campaign(seed.actor("bob"), name="Spring launch", budget=Decimal("100"))

    service.update_campaign(seed.actor("bob"), campaign, name="Summer launch", budget=Decimal("250"))

    updated = _activity(db_session, campaign)[-1]
    assert updated.action_type == ActivityActionEnum.updated
    assert updated.old_values["name"] == "Spring launch"
    assert Decimal(updated.old_values["budget"]) == Decimal("100")
    assert updated.new_values == {"name": "Summer launch", "budget": "250"}


def test_update_rejects_unknown_fields_and_bad_dates(team, seed, db_session):
    service = CampaignWorkflowService(db_session)
    campaign = service.create_campaign(seed.actor("bob"), name="Spring launch")

    with pytest.raises(InvalidRequestError):
        service.update_campaign(seed.actor("bob"), campaign, status=S.live)
    with pytest.raises(InvalidRequestError):
        service.update_campaign(
            seed.actor("bob"), campaign, start_date=date(2026, 5, 10), end_date=date(2026, 5, 1)
        )


def test_archive_hides_and_freezes_campaign(team, seed, db_session):
    service = CampaignWorkflowService(db_session)
    campaign = service.create_campaign(seed.actor("bob"), name="Spring launch")

    service.archive_campaign(seed.actor("bob"), campaign)

    assert campaign.archived is True
    assert _activity(db_session, campaign)[-1].action_type == ActivityActionEnum.archived
    with pytest.raises(InvalidRequestError):
        service.transition(seed.actor("alice"), campaign, S.submitted)


def test_company_member_can_comment_on_peer_campaign(team, seed, db_session):
    service = CampaignWorkflowService(db_session)
    campaign = service.create_campaign(seed.actor("bob"), name="Spring launch")

    comment = service.add_comment(seed.actor("cora"), campaign, "  Can we add CTV?  ")
    reply = service.add_comment(seed.actor("bob"), campaign, "Yes", parent_comment_id=comment.id)

    assert comment.content == "Can we add CTV?"
    assert reply.parent_comment_id == comment.id
    activity = _activity(db_session, campaign)
    assert [entry.action_type for entry in activity][-2:] == [
        ActivityActionEnum.comment_added,
        ActivityActionEnum.comment_added,
    ]
    with pytest.raises(PermissionDeniedError):
        service.add_comment(seed.actor("olga"), campaign, "Hello from outside")


def test_audit_trail_visibility_follows_campaign(team, seed, db_session):
    service = CampaignWorkflowService(db_session)
    campaign = service.create_campaign(seed.actor("bob"), name="Spring launch")
    service.transition(seed.actor("bob"), campaign, S.submitted)
    audit = AuditRepository(db_session)

    assert len(audit.list_history(seed.actor("bob"), campaign)) == 1
    assert len(audit.list_history(seed.actor("alice"), campaign)) == 1
    assert audit.list_history(seed.actor("cora"), campaign) == []
    assert audit.list_activity(seed.actor("olga"), campaign) == []
    assert len(audit.list_activity(seed.actor("ops", email="ops@boostdata.io"), campaign)) == 2

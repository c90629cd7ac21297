"""Campaign status machine and the audit trail written alongside every campaign change."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from boost_portal.db.enums import ActivityActionEnum, CampaignStatusEnum, OperationEnum
from boost_portal.db.models import Campaign, CampaignComment, Notification, utcnow
from boost_portal.db.repositories.audit import AuditRepository
from boost_portal.db.repositories.campaigns import CampaignsRepository
from boost_portal.db.repositories.comments import CampaignCommentsRepository
from boost_portal.errors import InvalidRequestError, NotFoundError
from boost_portal.policy.context import Actor

logger = logging.getLogger("services.campaign_workflow")

S = CampaignStatusEnum

# Forward chain plus the single documented back edge (paused -> in_progress).
TRANSITIONS: dict[CampaignStatusEnum, frozenset[CampaignStatusEnum]] = {
    S.draft: frozenset({S.submitted}),
    S.submitted: frozenset({S.pending_review}),
    S.pending_review: frozenset({S.approved}),
    S.approved: frozenset({S.in_progress}),
    S.in_progress: frozenset({S.waiting_on_client}),
    S.waiting_on_client: frozenset({S.delivered}),
    S.delivered: frozenset({S.live}),
    S.live: frozenset({S.paused}),
    S.paused: frozenset({S.completed, S.in_progress}),
    S.completed: frozenset(),
    S.failed: frozenset(),
}
TERMINAL_STATES = frozenset(status for status, targets in TRANSITIONS.items() if not targets)

EDITABLE_FIELDS = ("name", "audiences", "platforms", "budget", "start_date", "end_date")


def allowed_targets(status: CampaignStatusEnum) -> frozenset[CampaignStatusEnum]:
    if status in TERMINAL_STATES:
        return frozenset()
    return TRANSITIONS[status] | {S.failed}


def is_valid_transition(from_status: CampaignStatusEnum, to_status: CampaignStatusEnum) -> bool:
    return to_status in allowed_targets(from_status)


def _audit_value(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, date):
        return value.isoformat()
    return value


def _validate_dates(start_date: Optional[date], end_date: Optional[date]) -> None:
    if start_date and end_date and end_date < start_date:
        raise InvalidRequestError("end_date must not be before start_date", field="end_date")


class CampaignWorkflowService:
    def __init__(self, session: Session) -> None:
        self.session = session
        self.campaigns = CampaignsRepository(session)
        self.audit = AuditRepository(session)

    def create_campaign(
        self,
        actor: Actor,
        *,
        client_id: Optional[str] = None,
        request_id=None,
        status: CampaignStatusEnum = S.draft,
        commit: bool = True,
        **fields,
    ) -> Campaign:
        _validate_dates(fields.get("start_date"), fields.get("end_date"))
        campaign = Campaign(client_id=client_id or actor.id, status=status, request_id=request_id, **fields)
        self.campaigns.authorize(actor, OperationEnum.create, campaign)
        self.session.add(campaign)
        self.session.flush()
        self.audit.add_activity(
            campaign_id=campaign.id,
            user_id=actor.id,
            action_type=ActivityActionEnum.created,
            action_details=f'Campaign "{campaign.name}" created',
            new_values={"status": campaign.status.value, "name": campaign.name},
        )
        if status != S.draft:
            # Campaigns born past draft (approved requests) still record how they got there.
            self.audit.add_history(
                campaign_id=campaign.id,
                user_id=actor.id,
                from_status=S.draft,
                to_status=status,
                notes="Created from approved audience request" if request_id else None,
            )
        if commit:
            self.campaigns.commit()
            self.session.refresh(campaign)
        logger.info("Campaign created", extra={"campaign_id": str(campaign.id), "by": actor.id})
        return campaign

    def update_campaign(self, actor: Actor, campaign: Campaign, **fields) -> Campaign:
        unknown = set(fields) - set(EDITABLE_FIELDS)
        if unknown:
            raise InvalidRequestError(f"Fields not editable: {', '.join(sorted(unknown))}")
        changes = {key: value for key, value in fields.items() if getattr(campaign, key) != value}
        if not changes:
            return campaign
        if campaign.archived:
            raise InvalidRequestError("Archived campaigns cannot be edited")
        _validate_dates(changes.get("start_date", campaign.start_date), changes.get("end_date", campaign.end_date))
        self.campaigns.authorize(actor, OperationEnum.update, campaign, changes)
        old_values = {key: _audit_value(getattr(campaign, key)) for key in changes}
        for key, value in changes.items():
            setattr(campaign, key, value)
        self.audit.add_activity(
            campaign_id=campaign.id,
            user_id=actor.id,
            action_type=ActivityActionEnum.updated,
            action_details=f"Updated {', '.join(sorted(changes))}",
            old_values=old_values,
            new_values={key: _audit_value(value) for key, value in changes.items()},
        )
        self.campaigns.commit()
        self.session.refresh(campaign)
        return campaign

    def archive_campaign(self, actor: Actor, campaign: Campaign) -> Campaign:
        if campaign.archived:
            return campaign
        self.campaigns.authorize(actor, OperationEnum.delete, campaign)
        campaign.archived = True
        self.audit.add_activity(
            campaign_id=campaign.id,
            user_id=actor.id,
            action_type=ActivityActionEnum.archived,
            action_details="Campaign archived",
            old_values={"archived": False},
            new_values={"archived": True},
        )
        self.campaigns.commit()
        self.session.refresh(campaign)
        return campaign

    def transition(
        self,
        actor: Actor,
        campaign: Campaign,
        target: CampaignStatusEnum,
        notes: Optional[str] = None,
        notify_client: bool = False,
    ) -> Campaign:
        if campaign.archived:
            raise InvalidRequestError("Archived campaigns cannot change status")
        source = campaign.status
        if not is_valid_transition(source, target):
            raise InvalidRequestError(
                f"Invalid status transition {source.value} -> {target.value}", field="status"
            )
        self.campaigns.authorize(actor, OperationEnum.update, campaign, {"status": target})

        campaign.status = target
        if target == S.approved:
            campaign.approved_at = utcnow()
        self.audit.add_history(
            campaign_id=campaign.id,
            user_id=actor.id,
            from_status=source,
            to_status=target,
            notes=notes,
        )
        self.audit.add_activity(
            campaign_id=campaign.id,
            user_id=actor.id,
            action_type=ActivityActionEnum.status_changed,
            action_details=notes or f"Status changed from {source.value} to {target.value}",
            old_values={"status": source.value},
            new_values={"status": target.value},
        )
        if notify_client and campaign.client_id != actor.id:
            self.session.add(
                Notification(
                    user_id=campaign.client_id,
                    title=f'Update on your campaign "{campaign.name}"',
                    message=notes or f"Status changed to {target.value.replace('_', ' ')}",
                )
            )
        self.campaigns.commit()
        self.session.refresh(campaign)
        logger.info(
            "Campaign status changed",
            extra={
                "campaign_id": str(campaign.id),
                "from_status": source.value,
                "to_status": target.value,
                "by": actor.id,
            },
        )
        return campaign

    def add_comment(
        self,
        actor: Actor,
        campaign: Campaign,
        content: str,
        parent_comment_id=None,
    ) -> CampaignComment:
        content = (content or "").strip()
        if not content:
            raise InvalidRequestError("content is required", field="content")
        comments = CampaignCommentsRepository(self.session)
        if parent_comment_id is not None:
            parent = comments.get(actor, parent_comment_id)
            if parent is None or parent.campaign_id != campaign.id:
                raise NotFoundError("Parent comment not found")
        comment = comments.build(actor, campaign, content, parent_comment_id)
        self.session.add(comment)
        self.session.flush()
        self.audit.add_activity(
            campaign_id=campaign.id,
            user_id=actor.id,
            action_type=ActivityActionEnum.comment_added,
            action_details=content[:200],
            new_values={"comment_id": str(comment.id)},
        )
        comments.commit()
        self.session.refresh(comment)
        return comment

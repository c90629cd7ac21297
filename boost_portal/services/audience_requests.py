from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session

from boost_portal.db.enums import AudienceRequestStatusEnum, CampaignStatusEnum, OperationEnum
from boost_portal.db.models import AudienceRequest, Campaign, Notification
from boost_portal.db.repositories.audience_requests import AudienceRequestsRepository
from boost_portal.errors import InvalidRequestError
from boost_portal.policy.context import Actor
from boost_portal.services.campaign_workflow import CampaignWorkflowService

logger = logging.getLogger("services.audience_requests")

R = AudienceRequestStatusEnum

FINAL_STATES = frozenset({R.approved, R.rejected})


def submit_request(session: Session, actor: Actor, **fields) -> AudienceRequest:
    start_date, end_date = fields.get("start_date"), fields.get("end_date")
    if start_date and end_date and end_date < start_date:
        raise InvalidRequestError("end_date must not be before start_date", field="end_date")
    repo = AudienceRequestsRepository(session)
    return repo.create(actor, client_id=actor.id, status=R.pending, **fields)


def review_request(
    session: Session,
    actor: Actor,
    request: AudienceRequest,
    status: AudienceRequestStatusEnum,
    notes: Optional[str] = None,
) -> tuple[AudienceRequest, Optional[Campaign]]:
    """Move a request to reviewed/approved/rejected; approval creates the campaign."""
    if request.status in FINAL_STATES:
        raise InvalidRequestError(f"Request is already {request.status.value}", field="status")
    if status == R.pending or status == request.status:
        raise InvalidRequestError(f"Cannot move request from {request.status.value} to {status.value}", field="status")

    repo = AudienceRequestsRepository(session)
    changes = {"status": status}
    if notes is not None:
        changes["notes"] = notes
    repo.authorize(actor, OperationEnum.update, request, changes)

    campaign = None
    if status == R.approved:
        campaign = CampaignWorkflowService(session).create_campaign(
            actor,
            client_id=request.client_id,
            request_id=request.id,
            status=CampaignStatusEnum.submitted,
            commit=False,
            name=_campaign_name(request),
            audiences=list(request.audiences or []),
            platforms=dict(request.platforms or {}),
            budget=request.budget,
            start_date=request.start_date,
            end_date=request.end_date,
        )
        request.campaign_id = campaign.id

    request.status = status
    if notes is not None:
        request.notes = notes
    if request.client_id != actor.id:
        session.add(
            Notification(
                user_id=request.client_id,
                title=f"Audience request {status.value}",
                message=notes or f"Your audience request was {status.value}.",
            )
        )
    repo.commit()
    session.refresh(request)
    if campaign is not None:
        session.refresh(campaign)
    logger.info(
        "Audience request reviewed",
        extra={"request_id": str(request.id), "status": status.value, "by": actor.id},
    )
    return request, campaign


def _campaign_name(request: AudienceRequest) -> str:
    names = [item.get("name") for item in request.audiences or [] if isinstance(item, dict) and item.get("name")]
    if names:
        return f"Campaign: {', '.join(names[:3])}"
    return f"Campaign from request {str(request.id)[:8]}"

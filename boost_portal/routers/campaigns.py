from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from boost_portal.auth.dependencies import get_current_actor
from boost_portal.db.deps import get_session
from boost_portal.db.enums import CampaignStatusEnum
from boost_portal.db.repositories.audit import AuditRepository
from boost_portal.db.repositories.campaigns import CampaignsRepository
from boost_portal.db.repositories.comments import CampaignCommentsRepository
from boost_portal.policy.context import Actor
from boost_portal.schemas.campaigns import (
    ActivityLogResponse,
    CampaignCreate,
    CampaignResponse,
    CampaignStatusChange,
    CampaignUpdate,
    CommentCreate,
    CommentResponse,
    CommentUpdate,
    WorkflowHistoryResponse,
)
from boost_portal.services.campaign_workflow import CampaignWorkflowService

router = APIRouter(tags=["campaigns"])

NON_NULLABLE_FIELDS = ("name", "audiences", "platforms", "budget")


def _get_campaign_or_404(session: Session, actor: Actor, campaign_id: UUID):
    campaign = CampaignsRepository(session).get(actor, campaign_id)
    if not campaign:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Campaign not found")
    return campaign


@router.get("/campaigns", response_model=List[CampaignResponse])
def list_campaigns(
    status_filter: Optional[CampaignStatusEnum] = Query(default=None, alias="status"),
    client_id: Optional[str] = None,
    include_archived: bool = False,
    limit: int = 50,
    offset: int = 0,
    actor: Actor = Depends(get_current_actor),
    session: Session = Depends(get_session),
):
    return CampaignsRepository(session).list(
        actor,
        status=status_filter,
        client_id=client_id,
        include_archived=include_archived,
        limit=limit,
        offset=offset,
    )


@router.post("/campaigns", response_model=CampaignResponse, status_code=status.HTTP_201_CREATED)
def create_campaign(
    payload: CampaignCreate,
    actor: Actor = Depends(get_current_actor),
    session: Session = Depends(get_session),
):
    fields = payload.model_dump()
    client_id = fields.pop("client_id", None)
    return CampaignWorkflowService(session).create_campaign(actor, client_id=client_id, **fields)


@router.get("/campaigns/{campaign_id}", response_model=CampaignResponse)
def get_campaign(campaign_id: UUID, actor: Actor = Depends(get_current_actor), session: Session = Depends(get_session)):
    return _get_campaign_or_404(session, actor, campaign_id)


@router.patch("/campaigns/{campaign_id}", response_model=CampaignResponse)
def update_campaign(
    campaign_id: UUID,
    payload: CampaignUpdate,
    actor: Actor = Depends(get_current_actor),
    session: Session = Depends(get_session),
):
    campaign = _get_campaign_or_404(session, actor, campaign_id)
    fields = payload.model_dump(exclude_unset=True)
    for key in NON_NULLABLE_FIELDS:
        if key in fields and fields[key] is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"{key} cannot be null")
    return CampaignWorkflowService(session).update_campaign(actor, campaign, **fields)


@router.delete("/campaigns/{campaign_id}", response_model=CampaignResponse)
def archive_campaign(
    campaign_id: UUID,
    actor: Actor = Depends(get_current_actor),
    session: Session = Depends(get_session),
):
    campaign = _get_campaign_or_404(session, actor, campaign_id)
    return CampaignWorkflowService(session).archive_campaign(actor, campaign)


@router.post("/campaigns/{campaign_id}/status", response_model=CampaignResponse)
def change_campaign_status(
    campaign_id: UUID,
    payload: CampaignStatusChange,
    actor: Actor = Depends(get_current_actor),
    session: Session = Depends(get_session),
):
    campaign = _get_campaign_or_404(session, actor, campaign_id)
    return CampaignWorkflowService(session).transition(
        actor,
        campaign,
        payload.status,
        notes=payload.notes,
        notify_client=payload.notify_client,
    )


@router.get("/campaigns/{campaign_id}/history", response_model=List[WorkflowHistoryResponse])
def list_campaign_history(
    campaign_id: UUID,
    actor: Actor = Depends(get_current_actor),
    session: Session = Depends(get_session),
):
    campaign = _get_campaign_or_404(session, actor, campaign_id)
    return AuditRepository(session).list_history(actor, campaign)


@router.get("/campaigns/{campaign_id}/activity", response_model=List[ActivityLogResponse])
def list_campaign_activity(
    campaign_id: UUID,
    actor: Actor = Depends(get_current_actor),
    session: Session = Depends(get_session),
):
    campaign = _get_campaign_or_404(session, actor, campaign_id)
    return AuditRepository(session).list_activity(actor, campaign)


def _get_thread_campaign_or_404(session: Session, actor: Actor, campaign_id: UUID):
    # Company members may comment on peers' campaigns they cannot otherwise open.
    campaign = CampaignsRepository(session).get_row(campaign_id)
    if campaign is None or not CampaignCommentsRepository(session).may_join_thread(actor, campaign):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Campaign not found")
    return campaign


@router.get("/campaigns/{campaign_id}/comments", response_model=List[CommentResponse])
def list_comments(
    campaign_id: UUID,
    actor: Actor = Depends(get_current_actor),
    session: Session = Depends(get_session),
):
    campaign = _get_thread_campaign_or_404(session, actor, campaign_id)
    return CampaignCommentsRepository(session).list_for_campaign(actor, campaign)


@router.post(
    "/campaigns/{campaign_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_comment(
    campaign_id: UUID,
    payload: CommentCreate,
    actor: Actor = Depends(get_current_actor),
    session: Session = Depends(get_session),
):
    campaign = _get_thread_campaign_or_404(session, actor, campaign_id)
    return CampaignWorkflowService(session).add_comment(
        actor, campaign, payload.content, parent_comment_id=payload.parent_comment_id
    )


def _get_comment_or_404(repo: CampaignCommentsRepository, actor: Actor, comment_id: UUID):
    comment = repo.get(actor, comment_id)
    if not comment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found")
    return comment


@router.patch("/comments/{comment_id}", response_model=CommentResponse)
def update_comment(
    comment_id: UUID,
    payload: CommentUpdate,
    actor: Actor = Depends(get_current_actor),
    session: Session = Depends(get_session),
):
    repo = CampaignCommentsRepository(session)
    comment = _get_comment_or_404(repo, actor, comment_id)
    return repo.update(actor, comment, content=payload.content.strip())


@router.delete("/comments/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_comment(
    comment_id: UUID,
    actor: Actor = Depends(get_current_actor),
    session: Session = Depends(get_session),
):
    repo = CampaignCommentsRepository(session)
    comment = _get_comment_or_404(repo, actor, comment_id)
    repo.delete(actor, comment)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

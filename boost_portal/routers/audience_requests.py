from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from boost_portal.auth.dependencies import get_current_actor
from boost_portal.db.deps import get_session
from boost_portal.db.enums import AudienceRequestStatusEnum
from boost_portal.db.repositories.audience_requests import AudienceRequestsRepository
from boost_portal.policy.context import Actor
from boost_portal.schemas.audience_requests import (
    AudienceRequestCreate,
    AudienceRequestResponse,
    AudienceRequestReview,
    AudienceRequestReviewResponse,
)
from boost_portal.schemas.campaigns import CampaignResponse
from boost_portal.services import audience_requests as requests_service

router = APIRouter(prefix="/audience-requests", tags=["audience-requests"])


def _get_request_or_404(session: Session, actor: Actor, request_id: UUID):
    request = AudienceRequestsRepository(session).get(actor, request_id)
    if not request:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Audience request not found")
    return request


@router.get("", response_model=List[AudienceRequestResponse])
def list_requests(
    status_filter: Optional[AudienceRequestStatusEnum] = Query(default=None, alias="status"),
    limit: int = 50,
    offset: int = 0,
    actor: Actor = Depends(get_current_actor),
    session: Session = Depends(get_session),
):
    return AudienceRequestsRepository(session).list(actor, status=status_filter, limit=limit, offset=offset)


@router.post("", response_model=AudienceRequestResponse, status_code=status.HTTP_201_CREATED)
def create_request(
    payload: AudienceRequestCreate,
    actor: Actor = Depends(get_current_actor),
    session: Session = Depends(get_session),
):
    return requests_service.submit_request(session, actor, **payload.model_dump())


@router.get("/{request_id}", response_model=AudienceRequestResponse)
def get_request(request_id: UUID, actor: Actor = Depends(get_current_actor), session: Session = Depends(get_session)):
    return _get_request_or_404(session, actor, request_id)


@router.post("/{request_id}/review", response_model=AudienceRequestReviewResponse)
def review_request(
    request_id: UUID,
    payload: AudienceRequestReview,
    actor: Actor = Depends(get_current_actor),
    session: Session = Depends(get_session),
):
    request = _get_request_or_404(session, actor, request_id)
    request, campaign = requests_service.review_request(
        session, actor, request, payload.status, notes=payload.notes
    )
    return AudienceRequestReviewResponse(
        request=AudienceRequestResponse.model_validate(request),
        campaign=CampaignResponse.model_validate(campaign) if campaign else None,
    )

from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from boost_portal.auth.dependencies import get_current_actor
from boost_portal.db.deps import get_session
from boost_portal.db.repositories.audiences import AudiencesRepository
from boost_portal.policy.context import Actor
from boost_portal.schemas.catalog import AudienceCreate, AudienceResponse, AudienceUpdate

router = APIRouter(prefix="/audiences", tags=["audiences"])

REQUIRED_FIELDS = ("name", "category", "tags")


@router.get("", response_model=List[AudienceResponse])
def search_audiences(
    q: Optional[str] = Query(default=None, max_length=200),
    category: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
    actor: Actor = Depends(get_current_actor),
    session: Session = Depends(get_session),
):
    return AudiencesRepository(session).search(actor, query=q, category=category, limit=limit, offset=offset)


@router.post("", response_model=AudienceResponse, status_code=status.HTTP_201_CREATED)
def create_audience(
    payload: AudienceCreate,
    actor: Actor = Depends(get_current_actor),
    session: Session = Depends(get_session),
):
    return AudiencesRepository(session).create(actor, **payload.model_dump())


def _get_audience_or_404(repo: AudiencesRepository, actor: Actor, audience_id: UUID):
    audience = repo.get(actor, audience_id)
    if not audience:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Audience not found")
    return audience


@router.patch("/{audience_id}", response_model=AudienceResponse)
def update_audience(
    audience_id: UUID,
    payload: AudienceUpdate,
    actor: Actor = Depends(get_current_actor),
    session: Session = Depends(get_session),
):
    repo = AudiencesRepository(session)
    audience = _get_audience_or_404(repo, actor, audience_id)
    fields = payload.model_dump(exclude_unset=True)
    for key in REQUIRED_FIELDS:
        if key in fields and fields[key] is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"{key} cannot be null")
    return repo.update(actor, audience, **fields)


@router.delete("/{audience_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_audience(
    audience_id: UUID,
    actor: Actor = Depends(get_current_actor),
    session: Session = Depends(get_session),
):
    repo = AudiencesRepository(session)
    audience = _get_audience_or_404(repo, actor, audience_id)
    repo.delete(actor, audience)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

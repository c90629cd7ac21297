from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from boost_portal.auth.dependencies import get_current_actor
from boost_portal.db.deps import get_session
from boost_portal.db.repositories.advertiser_accounts import AdvertiserAccountsRepository
from boost_portal.policy.context import Actor
from boost_portal.schemas.catalog import (
    AdvertiserAccountCreate,
    AdvertiserAccountResponse,
    AdvertiserAccountUpdate,
)

router = APIRouter(prefix="/advertiser-accounts", tags=["advertiser-accounts"])


@router.get("", response_model=List[AdvertiserAccountResponse])
def list_advertiser_accounts(
    platform: Optional[str] = None,
    actor: Actor = Depends(get_current_actor),
    session: Session = Depends(get_session),
):
    return AdvertiserAccountsRepository(session).list(actor, platform=platform)


@router.post("", response_model=AdvertiserAccountResponse, status_code=status.HTTP_201_CREATED)
def create_advertiser_account(
    payload: AdvertiserAccountCreate,
    actor: Actor = Depends(get_current_actor),
    session: Session = Depends(get_session),
):
    return AdvertiserAccountsRepository(session).create(actor, user_id=actor.id, **payload.model_dump())


def _get_account_or_404(repo: AdvertiserAccountsRepository, actor: Actor, account_id: UUID):
    account = repo.get(actor, account_id)
    if not account:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Advertiser account not found")
    return account


@router.patch("/{account_id}", response_model=AdvertiserAccountResponse)
def update_advertiser_account(
    account_id: UUID,
    payload: AdvertiserAccountUpdate,
    actor: Actor = Depends(get_current_actor),
    session: Session = Depends(get_session),
):
    repo = AdvertiserAccountsRepository(session)
    account = _get_account_or_404(repo, actor, account_id)
    fields = {key: value for key, value in payload.model_dump(exclude_unset=True).items() if value is not None}
    return repo.update(actor, account, **fields)


@router.delete("/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_advertiser_account(
    account_id: UUID,
    actor: Actor = Depends(get_current_actor),
    session: Session = Depends(get_session),
):
    repo = AdvertiserAccountsRepository(session)
    account = _get_account_or_404(repo, actor, account_id)
    repo.delete(actor, account)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

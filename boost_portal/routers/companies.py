from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from boost_portal.auth.dependencies import get_current_actor
from boost_portal.db.deps import get_session
from boost_portal.db.repositories.account_ids import CompanyAccountIdsRepository
from boost_portal.db.repositories.companies import CompaniesRepository
from boost_portal.db.repositories.users import UserProfilesRepository
from boost_portal.policy.context import Actor
from boost_portal.schemas.companies import (
    CompanyAccountIdCreate,
    CompanyAccountIdResponse,
    CompanyAccountIdUpdate,
    CompanyCreate,
    CompanyResponse,
    CompanyUpdate,
)
from boost_portal.schemas.users import UserProfileResponse

router = APIRouter(tags=["companies"])


def _get_company_or_404(session: Session, actor: Actor, company_id: UUID):
    company = CompaniesRepository(session).get(actor, company_id)
    if not company:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Company not found")
    return company


@router.get("/companies", response_model=List[CompanyResponse])
def list_companies(
    limit: int = 100,
    offset: int = 0,
    actor: Actor = Depends(get_current_actor),
    session: Session = Depends(get_session),
):
    return CompaniesRepository(session).list(actor, limit=limit, offset=offset)


@router.post("/companies", response_model=CompanyResponse, status_code=status.HTTP_201_CREATED)
def create_company(
    payload: CompanyCreate,
    actor: Actor = Depends(get_current_actor),
    session: Session = Depends(get_session),
):
    return CompaniesRepository(session).create(actor, name=payload.name, account_id=payload.account_id)


@router.get("/companies/{company_id}", response_model=CompanyResponse)
def get_company(company_id: UUID, actor: Actor = Depends(get_current_actor), session: Session = Depends(get_session)):
    return _get_company_or_404(session, actor, company_id)


@router.patch("/companies/{company_id}", response_model=CompanyResponse)
def update_company(
    company_id: UUID,
    payload: CompanyUpdate,
    actor: Actor = Depends(get_current_actor),
    session: Session = Depends(get_session),
):
    company = _get_company_or_404(session, actor, company_id)
    fields = payload.model_dump(exclude_unset=True)
    if fields.get("name") is not None:
        fields["name"] = fields["name"].strip()
    elif "name" in fields:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="name cannot be null")
    return CompaniesRepository(session).update(actor, company, **fields)


@router.delete("/companies/{company_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_company(
    company_id: UUID,
    actor: Actor = Depends(get_current_actor),
    session: Session = Depends(get_session),
):
    company = _get_company_or_404(session, actor, company_id)
    CompaniesRepository(session).delete(actor, company)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/companies/{company_id}/members", response_model=List[UserProfileResponse])
def list_company_members(
    company_id: UUID,
    actor: Actor = Depends(get_current_actor),
    session: Session = Depends(get_session),
):
    _get_company_or_404(session, actor, company_id)
    return UserProfilesRepository(session).list(actor, company_id=company_id)


@router.get("/companies/{company_id}/account-ids", response_model=List[CompanyAccountIdResponse])
def list_account_ids(
    company_id: UUID,
    include_inactive: bool = False,
    actor: Actor = Depends(get_current_actor),
    session: Session = Depends(get_session),
):
    return CompanyAccountIdsRepository(session).list_for_company(
        actor, company_id, include_inactive=include_inactive
    )


@router.post(
    "/companies/{company_id}/account-ids",
    response_model=CompanyAccountIdResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_account_id(
    company_id: UUID,
    payload: CompanyAccountIdCreate,
    actor: Actor = Depends(get_current_actor),
    session: Session = Depends(get_session),
):
    if CompaniesRepository(session).get_row(company_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Company not found")
    return CompanyAccountIdsRepository(session).create(actor, company_id, **payload.model_dump())


def _get_account_id_or_404(repo: CompanyAccountIdsRepository, actor: Actor, record_id: UUID):
    record = repo.get(actor, record_id)
    if not record:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Account id not found")
    return record


@router.patch("/account-ids/{record_id}", response_model=CompanyAccountIdResponse)
def update_account_id(
    record_id: UUID,
    payload: CompanyAccountIdUpdate,
    actor: Actor = Depends(get_current_actor),
    session: Session = Depends(get_session),
):
    repo = CompanyAccountIdsRepository(session)
    record = _get_account_id_or_404(repo, actor, record_id)
    fields = {key: value for key, value in payload.model_dump(exclude_unset=True).items() if value is not None}
    return repo.update(actor, record, **fields)


@router.delete("/account-ids/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_account_id(
    record_id: UUID,
    actor: Actor = Depends(get_current_actor),
    session: Session = Depends(get_session),
):
    repo = CompanyAccountIdsRepository(session)
    record = _get_account_id_or_404(repo, actor, record_id)
    repo.delete(actor, record)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

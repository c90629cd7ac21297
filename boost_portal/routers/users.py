from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from boost_portal.auth.dependencies import get_current_actor, get_current_principal
from boost_portal.auth.resolution import Principal
from boost_portal.db.deps import get_session
from boost_portal.db.repositories.users import UserProfilesRepository
from boost_portal.policy.context import Actor
from boost_portal.schemas.users import (
    InviteUserRequest,
    InviteUserResponse,
    SignupRequest,
    UserProfileResponse,
    UserProfileUpdateRequest,
)
from boost_portal.services import profiles as profiles_service
from boost_portal.services.identity_provider import ClerkAdminClient

router = APIRouter(prefix="/users", tags=["users"])


def identity_client_factory() -> ClerkAdminClient:
    return ClerkAdminClient.from_settings()


def _get_profile_or_404(repo: UserProfilesRepository, actor: Actor, user_id: str):
    profile = repo.get(actor, user_id)
    if not profile:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return profile


@router.get("/me", response_model=UserProfileResponse)
def get_me(actor: Actor = Depends(get_current_actor), session: Session = Depends(get_session)):
    profile = UserProfilesRepository(session).get_row(actor.id)
    if not profile:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Profile not found. Complete signup with POST /users/me.",
        )
    return profile


@router.post("/me", response_model=UserProfileResponse)
def complete_signup(
    payload: SignupRequest,
    response: Response,
    principal: Principal = Depends(get_current_principal),
    actor: Actor = Depends(get_current_actor),
    session: Session = Depends(get_session),
):
    if not actor.has_profile:
        response.status_code = status.HTTP_201_CREATED
    return profiles_service.ensure_profile(session, actor, principal, name=payload.name)


@router.get("", response_model=List[UserProfileResponse])
def list_users(
    company_id: Optional[UUID] = None,
    limit: int = 100,
    offset: int = 0,
    actor: Actor = Depends(get_current_actor),
    session: Session = Depends(get_session),
):
    return UserProfilesRepository(session).list(actor, company_id=company_id, limit=limit, offset=offset)


@router.post("/invite", response_model=InviteUserResponse, status_code=status.HTTP_201_CREATED)
def invite_user(
    payload: InviteUserRequest,
    actor: Actor = Depends(get_current_actor),
    session: Session = Depends(get_session),
):
    result = profiles_service.invite_user(
        session,
        actor,
        email=payload.email,
        name=payload.name,
        role=payload.role,
        company_id=payload.company_id,
        client_factory=identity_client_factory,
    )
    return InviteUserResponse(
        user=UserProfileResponse.model_validate(result.profile),
        created=result.created,
        invitation_sent=result.invitation_sent,
    )


@router.get("/{user_id}", response_model=UserProfileResponse)
def get_user(user_id: str, actor: Actor = Depends(get_current_actor), session: Session = Depends(get_session)):
    return _get_profile_or_404(UserProfilesRepository(session), actor, user_id)


@router.patch("/{user_id}", response_model=UserProfileResponse)
def update_user(
    user_id: str,
    payload: UserProfileUpdateRequest,
    actor: Actor = Depends(get_current_actor),
    session: Session = Depends(get_session),
):
    profile = _get_profile_or_404(UserProfilesRepository(session), actor, user_id)
    fields = payload.model_dump(exclude_unset=True)
    if "name" in fields and fields["name"] is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="name cannot be null")
    if "role" in fields and fields["role"] is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="role cannot be null")
    return profiles_service.update_profile(session, actor, profile, **fields)


@router.post("/{user_id}/remove", response_model=UserProfileResponse)
def remove_user_from_company(
    user_id: str,
    actor: Actor = Depends(get_current_actor),
    session: Session = Depends(get_session),
):
    profile = _get_profile_or_404(UserProfilesRepository(session), actor, user_id)
    return profiles_service.remove_from_company(session, actor, profile)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: str, actor: Actor = Depends(get_current_actor), session: Session = Depends(get_session)):
    profile = _get_profile_or_404(UserProfilesRepository(session), actor, user_id)
    profiles_service.delete_profile(session, actor, profile)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

"""Profile lifecycle: signup bootstrap, invitations, role/company changes and removal."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from boost_portal.auth.resolution import Principal, is_super_admin
from boost_portal.config import settings
from boost_portal.db.enums import OperationEnum, UserRoleEnum
from boost_portal.db.models import UserProfile
from boost_portal.db.repositories.companies import CompaniesRepository
from boost_portal.db.repositories.users import UserProfilesRepository
from boost_portal.errors import (
    ConflictError,
    IdentityProviderConfigError,
    IdentityProviderError,
    InvalidRequestError,
    LastAdminError,
    NotFoundError,
)
from boost_portal.policy.context import Actor, EntityEnum, Resource
from boost_portal.policy.engine import authorize
from boost_portal.services.identity_provider import ClerkAdminClient

logger = logging.getLogger("services.profiles")


@dataclass
class InviteResult:
    profile: UserProfile
    created: bool
    invitation_sent: bool


def default_name(email: str) -> str:
    return email.split("@", 1)[0]


def initial_role(
    repo: UserProfilesRepository,
    *,
    email: str,
    company_id: Optional[UUID],
    requested_role: Optional[UserRoleEnum] = None,
) -> UserRoleEnum:
    """Role for a profile about to join ``company_id``.

    Super-admin email wins, then the first member of a company becomes its admin,
    otherwise the requested role (``user`` by default). Must run inside the
    inserting transaction; the company row is locked so two concurrent first
    members cannot both see an empty company.
    """
    if is_super_admin(email):
        return UserRoleEnum.super_admin
    if requested_role == UserRoleEnum.super_admin:
        raise InvalidRequestError(
            f"super_admin is reserved for @{settings.SUPER_ADMIN_EMAIL_DOMAIN} accounts", field="role"
        )
    if company_id is None:
        return UserRoleEnum.user
    if repo.lock_company(company_id) is None:
        raise NotFoundError("Company not found")
    if repo.count_members(company_id) == 0:
        logger.info("First company member promoted to admin", extra={"company_id": str(company_id)})
        return UserRoleEnum.admin
    return requested_role or UserRoleEnum.user


def create_profile(
    session: Session,
    *,
    user_id: str,
    email: str,
    name: str,
    company_id: Optional[UUID] = None,
    requested_role: Optional[UserRoleEnum] = None,
) -> UserProfile:
    repo = UserProfilesRepository(session)
    role = initial_role(repo, email=email, company_id=company_id, requested_role=requested_role)
    profile = repo.insert(user_id=user_id, email=email, name=name, role=role, company_id=company_id)
    repo.commit()
    session.refresh(profile)
    logger.info(
        "Profile created",
        extra={"sub": user_id, "role": role.value, "company_id": str(company_id) if company_id else None},
    )
    return profile


def ensure_profile(session: Session, actor: Actor, principal: Principal, name: Optional[str] = None) -> UserProfile:
    """Signup hook: create the caller's own profile on first use, unassigned to any company."""
    repo = UserProfilesRepository(session)
    existing = repo.get_row(principal.id)
    if existing is not None:
        return existing
    authorize(
        actor,
        OperationEnum.create,
        Resource(entity=EntityEnum.user_profile, id=principal.id, owner_id=principal.id),
    )
    return create_profile(
        session,
        user_id=principal.id,
        email=principal.email,
        name=(name or "").strip() or default_name(principal.email),
    )


def _require(value: Optional[str], field: str) -> str:
    if value is None or not str(value).strip():
        raise InvalidRequestError(f"{field} is required", field=field)
    return str(value).strip()


def invite_user(
    session: Session,
    actor: Actor,
    *,
    email: Optional[str],
    name: Optional[str],
    role: Optional[UserRoleEnum],
    company_id: Optional[UUID],
    client_factory: Callable[[], ClerkAdminClient] = ClerkAdminClient.from_settings,
) -> InviteResult:
    email = _require(email, "email").lower()
    name = _require(name, "name")
    if role is None:
        raise InvalidRequestError("role is required", field="role")
    if company_id is None:
        raise InvalidRequestError("company_id is required", field="company_id")

    if CompaniesRepository(session).get(actor, company_id) is None:
        raise NotFoundError("Company not found")
    authorize(
        actor,
        OperationEnum.create,
        Resource(entity=EntityEnum.user_profile, company_id=company_id, role=role),
    )

    repo = UserProfilesRepository(session)
    existing = repo.get_by_email(email)
    if existing is not None:
        if existing.company_id == company_id:
            raise ConflictError("User is already a member of this company")
        if existing.company_id is not None:
            raise ConflictError("User is already a member of another company")
        existing.role = initial_role(repo, email=existing.email, company_id=company_id, requested_role=role)
        existing.company_id = company_id
        repo.commit()
        session.refresh(existing)
        logger.info("Unassigned user added to company", extra={"sub": existing.id, "company_id": str(company_id)})
        return InviteResult(profile=existing, created=False, invitation_sent=False)

    # Raises before any write when the identity provider is not configured.
    client = client_factory()
    identity = client.find_user_by_email(email) or client.create_user(email=email, name=name)
    if repo.get_row(identity.id) is not None:
        raise ConflictError("User is already a member of another company")
    profile = create_profile(
        session,
        user_id=identity.id,
        email=email,
        name=name,
        company_id=company_id,
        requested_role=role,
    )

    invitation_sent = True
    try:
        client.send_invitation(
            email=email,
            redirect_url=settings.SITE_URL,
            metadata={"company_id": str(company_id), "invited_by": actor.id},
        )
    except (IdentityProviderError, IdentityProviderConfigError) as exc:
        invitation_sent = False
        logger.warning(
            "Invitation email failed; profile kept",
            extra={"sub": profile.id, "error": str(exc)},
        )
    return InviteResult(profile=profile, created=True, invitation_sent=invitation_sent)


def _guard_last_admin(
    repo: UserProfilesRepository,
    actor: Actor,
    profile: UserProfile,
    *,
    new_role: Optional[UserRoleEnum],
    new_company_id: Optional[UUID],
    deleting: bool = False,
) -> None:
    if actor.is_super_admin or profile.role != UserRoleEnum.admin or profile.company_id is None:
        return
    keeps_admin = not deleting and new_role == UserRoleEnum.admin and new_company_id == profile.company_id
    if keeps_admin:
        return
    if repo.count_admins(profile.company_id) <= 1:
        raise LastAdminError("A company must keep at least one admin")


def update_profile(session: Session, actor: Actor, profile: UserProfile, **fields) -> UserProfile:
    repo = UserProfilesRepository(session)
    changes = {key: value for key, value in fields.items() if getattr(profile, key) != value}
    if not changes:
        return profile
    authorize(actor, OperationEnum.update, repo.snapshot(profile, changes))
    new_role = changes.get("role", profile.role)
    if new_role == UserRoleEnum.super_admin and not is_super_admin(profile.email):
        raise InvalidRequestError(
            f"super_admin is reserved for @{settings.SUPER_ADMIN_EMAIL_DOMAIN} accounts", field="role"
        )
    _guard_last_admin(
        repo,
        actor,
        profile,
        new_role=new_role,
        new_company_id=changes.get("company_id", profile.company_id),
    )
    repo.apply(profile, changes)
    repo.commit()
    session.refresh(profile)
    logger.info("Profile updated", extra={"sub": profile.id, "by": actor.id, "fields": sorted(changes)})
    return profile


def remove_from_company(session: Session, actor: Actor, profile: UserProfile) -> UserProfile:
    """Detach the user from their company; the login stays valid but unassigned."""
    if profile.company_id is None:
        raise InvalidRequestError("User is not a member of any company", field="company_id")
    changes: dict = {"company_id": None}
    if profile.role == UserRoleEnum.admin:
        changes["role"] = UserRoleEnum.user
    repo = UserProfilesRepository(session)
    authorize(actor, OperationEnum.update, repo.snapshot(profile, changes))
    _guard_last_admin(repo, actor, profile, new_role=profile.role, new_company_id=None)
    previous_company = profile.company_id
    for key, value in changes.items():
        setattr(profile, key, value)
    repo.commit()
    session.refresh(profile)
    logger.info(
        "User removed from company",
        extra={"sub": profile.id, "by": actor.id, "company_id": str(previous_company)},
    )
    return profile


def delete_profile(session: Session, actor: Actor, profile: UserProfile) -> None:
    repo = UserProfilesRepository(session)
    authorize(actor, OperationEnum.delete, repo.snapshot(profile))
    _guard_last_admin(repo, actor, profile, new_role=None, new_company_id=None, deleting=True)
    repo.delete(profile)
    repo.commit()
    logger.info("Profile deleted", extra={"sub": profile.id, "by": actor.id})

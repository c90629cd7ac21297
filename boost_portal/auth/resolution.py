"""Role and company lookups for the caller.

These read the profile row directly through the session and never go through
the policy engine; the engine consumes their result. Each call is a single
primary-key lookup with no caching across requests.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from boost_portal.config import settings
from boost_portal.db.enums import UserRoleEnum
from boost_portal.db.models import UserProfile
from boost_portal.policy.context import Actor

logger = logging.getLogger("auth.resolution")


@dataclass(frozen=True)
class Principal:
    id: str
    email: str


def _profile_row(session: Session, principal_id: str) -> Optional[tuple[UserRoleEnum, Optional[UUID]]]:
    stmt = select(UserProfile.role, UserProfile.company_id).where(UserProfile.id == principal_id)
    row = session.execute(stmt).first()
    if row is None:
        return None
    return row.role, row.company_id


def resolve_company_id(session: Session, principal_id: str) -> Optional[UUID]:
    row = _profile_row(session, principal_id)
    return row[1] if row else None


def resolve_role(session: Session, principal_id: str) -> UserRoleEnum:
    row = _profile_row(session, principal_id)
    return row[0] if row else UserRoleEnum.user


def is_company_admin(session: Session, principal_id: str) -> bool:
    row = _profile_row(session, principal_id)
    if row is None:
        return False
    role, company_id = row
    return role == UserRoleEnum.admin and company_id is not None


def is_super_admin(email: Optional[str]) -> bool:
    if not email:
        return False
    return email.strip().lower().endswith(f"@{settings.SUPER_ADMIN_EMAIL_DOMAIN}")


def resolve_actor(session: Session, principal: Principal) -> Actor:
    row = _profile_row(session, principal.id)
    super_admin = is_super_admin(principal.email)
    if row is None:
        logger.debug("No profile for principal", extra={"sub": principal.id})
        role, company_id = UserRoleEnum.user, None
    else:
        role, company_id = row
    if super_admin:
        role = UserRoleEnum.super_admin
    elif role == UserRoleEnum.super_admin:
        # A stored super_admin role without the trusted identity email grants nothing extra.
        logger.warning("Stored super_admin role ignored", extra={"sub": principal.id})
        role = UserRoleEnum.user
    return Actor(
        id=principal.id,
        email=principal.email,
        role=role,
        company_id=company_id,
        is_super_admin=super_admin,
        has_profile=row is not None,
    )

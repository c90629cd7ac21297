from __future__ import annotations

from typing import Any, List, Optional
from uuid import UUID

from sqlalchemy import func, or_, select

from boost_portal.db.enums import UserRoleEnum
from boost_portal.db.models import Company, UserProfile
from boost_portal.db.repositories.base import Repository
from boost_portal.policy.context import Actor, EntityEnum, Resource


class UserProfilesRepository(Repository):
    conflict_message = "A user with this email already exists"

    def snapshot(self, profile: UserProfile, changes: Optional[dict[str, Any]] = None) -> Resource:
        return Resource(
            entity=EntityEnum.user_profile,
            id=profile.id,
            owner_id=profile.id,
            company_id=profile.company_id,
            role=profile.role,
            changes=changes or {},
        )

    def get_row(self, user_id: str) -> Optional[UserProfile]:
        return self.session.get(UserProfile, user_id)

    def get_by_email(self, email: str) -> Optional[UserProfile]:
        stmt = select(UserProfile).where(func.lower(UserProfile.email) == email.strip().lower())
        return self.session.scalars(stmt).first()

    def get(self, actor: Actor, user_id: str) -> Optional[UserProfile]:
        profile = self.get_row(user_id)
        if profile is None or not self.readable(actor, profile):
            return None
        return profile

    def list(
        self,
        actor: Actor,
        company_id: Optional[UUID] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[UserProfile]:
        stmt = select(UserProfile).order_by(UserProfile.created_at.asc(), UserProfile.id.asc())
        if company_id is not None:
            stmt = stmt.where(UserProfile.company_id == company_id)
        if not actor.is_super_admin:
            scope = [UserProfile.id == actor.id]
            if actor.company_id is not None:
                scope.append(UserProfile.company_id == actor.company_id)
            stmt = stmt.where(or_(*scope))
        rows = list(self.session.scalars(stmt.limit(limit).offset(offset)).all())
        return self.filter_readable(actor, rows)

    def count_members(self, company_id: UUID) -> int:
        stmt = select(func.count()).select_from(UserProfile).where(UserProfile.company_id == company_id)
        return int(self.session.scalar(stmt) or 0)

    def count_admins(self, company_id: UUID) -> int:
        stmt = (
            select(func.count())
            .select_from(UserProfile)
            .where(UserProfile.company_id == company_id, UserProfile.role == UserRoleEnum.admin)
        )
        return int(self.session.scalar(stmt) or 0)

    def lock_company(self, company_id: UUID) -> Optional[Company]:
        # Serializes concurrent first-member inserts on PostgreSQL; SQLite ignores FOR UPDATE.
        stmt = select(Company).where(Company.id == company_id).with_for_update()
        return self.session.scalars(stmt).first()

    def insert(self, *, user_id: str, email: str, name: str, role: UserRoleEnum, company_id: Optional[UUID]):
        profile = UserProfile(id=user_id, email=email, name=name, role=role, company_id=company_id)
        self.session.add(profile)
        return profile

    def apply(self, profile: UserProfile, changes: dict[str, Any]) -> UserProfile:
        for key, value in changes.items():
            setattr(profile, key, value)
        return profile

    def delete(self, profile: UserProfile) -> None:
        self.session.delete(profile)

from __future__ import annotations

from typing import Any, List, Optional
from uuid import UUID

from sqlalchemy import delete, select, update

from boost_portal.db.enums import OperationEnum
from boost_portal.db.models import Company, CompanyAccountId, UserProfile
from boost_portal.db.repositories.base import Repository, changed_fields
from boost_portal.policy.context import Actor, EntityEnum, Resource


class CompaniesRepository(Repository):
    conflict_message = "A company with this name already exists"

    def snapshot(self, company: Company, changes: Optional[dict[str, Any]] = None) -> Resource:
        return Resource(entity=EntityEnum.company, id=company.id, company_id=company.id, changes=changes or {})

    def get_row(self, company_id: UUID) -> Optional[Company]:
        return self.session.get(Company, company_id)

    def get(self, actor: Actor, company_id: UUID) -> Optional[Company]:
        company = self.get_row(company_id)
        if company is None or not self.readable(actor, company):
            return None
        return company

    def list(self, actor: Actor, limit: int = 100, offset: int = 0) -> List[Company]:
        stmt = select(Company).order_by(Company.name.asc())
        if not actor.is_super_admin:
            if actor.company_id is None:
                return []
            stmt = stmt.where(Company.id == actor.company_id)
        rows = list(self.session.scalars(stmt.limit(limit).offset(offset)).all())
        return self.filter_readable(actor, rows)

    def create(self, actor: Actor, name: str, account_id: Optional[str] = None) -> Company:
        company = Company(name=name.strip(), account_id=account_id)
        self.authorize(actor, OperationEnum.create, company)
        return self.save(company)

    def update(self, actor: Actor, company: Company, **fields) -> Company:
        changes = changed_fields(company, fields)
        if not changes:
            return company
        self.authorize(actor, OperationEnum.update, company, changes)
        for key, value in changes.items():
            setattr(company, key, value)
        self.commit()
        self.session.refresh(company)
        return company

    def delete(self, actor: Actor, company: Company) -> None:
        self.authorize(actor, OperationEnum.delete, company)
        # Members fall back to limbo; account ids go with the company.
        self.session.execute(
            update(UserProfile).where(UserProfile.company_id == company.id).values(company_id=None)
        )
        self.session.execute(delete(CompanyAccountId).where(CompanyAccountId.company_id == company.id))
        self.session.delete(company)
        self.commit()

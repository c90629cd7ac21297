from __future__ import annotations

from typing import Any, List, Optional
from uuid import UUID

from sqlalchemy import select

from boost_portal.db.enums import OperationEnum
from boost_portal.db.models import CompanyAccountId
from boost_portal.db.repositories.base import Repository, changed_fields
from boost_portal.policy.context import Actor, EntityEnum, Resource


class CompanyAccountIdsRepository(Repository):
    conflict_message = "This platform account id is already registered for the company"

    def snapshot(self, record: CompanyAccountId, changes: Optional[dict[str, Any]] = None) -> Resource:
        return Resource(
            entity=EntityEnum.company_account_id,
            id=record.id,
            company_id=record.company_id,
            changes=changes or {},
        )

    def get(self, actor: Actor, record_id: UUID) -> Optional[CompanyAccountId]:
        record = self.session.get(CompanyAccountId, record_id)
        if record is None or not self.readable(actor, record):
            return None
        return record

    def list_for_company(
        self,
        actor: Actor,
        company_id: UUID,
        include_inactive: bool = False,
    ) -> List[CompanyAccountId]:
        stmt = (
            select(CompanyAccountId)
            .where(CompanyAccountId.company_id == company_id)
            .order_by(CompanyAccountId.platform.asc(), CompanyAccountId.created_at.asc())
        )
        if not include_inactive:
            stmt = stmt.where(CompanyAccountId.is_active.is_(True))
        return self.filter_readable(actor, list(self.session.scalars(stmt).all()))

    def create(self, actor: Actor, company_id: UUID, **fields) -> CompanyAccountId:
        record = CompanyAccountId(company_id=company_id, **fields)
        self.authorize(actor, OperationEnum.create, record)
        return self.save(record)

    def update(self, actor: Actor, record: CompanyAccountId, **fields) -> CompanyAccountId:
        changes = changed_fields(record, fields)
        if not changes:
            return record
        self.authorize(actor, OperationEnum.update, record, changes)
        for key, value in changes.items():
            setattr(record, key, value)
        self.commit()
        self.session.refresh(record)
        return record

    def delete(self, actor: Actor, record: CompanyAccountId) -> None:
        self.authorize(actor, OperationEnum.delete, record)
        self.session.delete(record)
        self.commit()

from __future__ import annotations

from typing import Any, List, Optional
from uuid import UUID

from sqlalchemy import or_, select

from boost_portal.db.enums import OperationEnum
from boost_portal.db.models import Audience
from boost_portal.db.repositories.base import Repository, changed_fields
from boost_portal.policy.context import Actor, EntityEnum, Resource


class AudiencesRepository(Repository):
    def snapshot(self, audience: Audience, changes: Optional[dict[str, Any]] = None) -> Resource:
        return Resource(entity=EntityEnum.audience, id=audience.id, changes=changes or {})

    def get(self, actor: Actor, audience_id: UUID) -> Optional[Audience]:
        audience = self.session.get(Audience, audience_id)
        if audience is None or not self.readable(actor, audience):
            return None
        return audience

    def search(
        self,
        actor: Actor,
        query: Optional[str] = None,
        category: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Audience]:
        stmt = select(Audience).order_by(Audience.name.asc())
        if query:
            pattern = f"%{query.strip().lower()}%"
            stmt = stmt.where(
                or_(
                    Audience.name.ilike(pattern),
                    Audience.description.ilike(pattern),
                    Audience.subcategory.ilike(pattern),
                    Audience.data_supplier.ilike(pattern),
                )
            )
        if category:
            stmt = stmt.where(Audience.category == category)
        rows = list(self.session.scalars(stmt.limit(limit).offset(offset)).all())
        return self.filter_readable(actor, rows)

    def create(self, actor: Actor, **fields) -> Audience:
        audience = Audience(**fields)
        self.authorize(actor, OperationEnum.create, audience)
        return self.save(audience)

    def update(self, actor: Actor, audience: Audience, **fields) -> Audience:
        changes = changed_fields(audience, fields)
        if not changes:
            return audience
        self.authorize(actor, OperationEnum.update, audience, changes)
        for key, value in changes.items():
            setattr(audience, key, value)
        self.commit()
        self.session.refresh(audience)
        return audience

    def delete(self, actor: Actor, audience: Audience) -> None:
        self.authorize(actor, OperationEnum.delete, audience)
        self.session.delete(audience)
        self.commit()

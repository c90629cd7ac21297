from __future__ import annotations

from typing import Any, List, Optional
from uuid import UUID

from sqlalchemy import Select, or_, select

from boost_portal.auth.resolution import resolve_company_id
from boost_portal.db.enums import OperationEnum
from boost_portal.db.models import UserProfile
from boost_portal.db.repositories.base import Repository, changed_fields
from boost_portal.policy.context import Actor, EntityEnum, Resource
from boost_portal.policy.engine import can

_UNSET: Any = object()


class OwnedRepository(Repository):
    """Rows owned by a single profile; access depends on the owner and the owner's company."""

    model: Any
    owner_attr: str
    entity: EntityEnum
    # Whether the read rule lets an admin of the owner's company see the row.
    company_admin_reads = True

    def owner_column(self):
        return getattr(self.model, self.owner_attr)

    def snapshot(self, obj: Any, changes: Optional[dict[str, Any]] = None, owner_company_id: Any = _UNSET) -> Resource:
        owner_id = getattr(obj, self.owner_attr)
        if owner_company_id is _UNSET:
            owner_company_id = resolve_company_id(self.session, owner_id) if owner_id else None
        status = getattr(obj, "status", None)
        return Resource(
            entity=self.entity,
            id=obj.id,
            owner_id=owner_id,
            owner_company_id=owner_company_id,
            state=getattr(status, "value", status),
            changes=changes or {},
        )

    def get_row(self, obj_id: UUID):
        return self.session.get(self.model, obj_id)

    def get(self, actor: Actor, obj_id: UUID):
        obj = self.get_row(obj_id)
        if obj is None or not self.readable(actor, obj):
            return None
        return obj

    def scoped_select(self, actor: Actor) -> Select:
        stmt = select(self.model, UserProfile.company_id).outerjoin(
            UserProfile, UserProfile.id == self.owner_column()
        )
        if not actor.is_super_admin:
            scope = [self.owner_column() == actor.id]
            if self.company_admin_reads and actor.is_company_admin:
                scope.append(UserProfile.company_id == actor.company_id)
            stmt = stmt.where(or_(*scope))
        return stmt

    def run_scoped(self, actor: Actor, stmt: Select) -> List[Any]:
        rows = []
        for obj, owner_company_id in self.session.execute(stmt).all():
            if can(actor, OperationEnum.read, self.snapshot(obj, owner_company_id=owner_company_id)):
                rows.append(obj)
        return rows

    def create(self, actor: Actor, **fields):
        obj = self.model(**fields)
        self.authorize(actor, OperationEnum.create, obj)
        return self.save(obj)

    def update(self, actor: Actor, obj: Any, **fields):
        changes = changed_fields(obj, fields)
        if not changes:
            return obj
        self.authorize(actor, OperationEnum.update, obj, changes)
        for key, value in changes.items():
            setattr(obj, key, value)
        self.commit()
        self.session.refresh(obj)
        return obj

    def delete(self, actor: Actor, obj: Any) -> None:
        self.authorize(actor, OperationEnum.delete, obj)
        self.session.delete(obj)
        self.commit()

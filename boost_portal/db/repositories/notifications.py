from __future__ import annotations

from typing import List

from sqlalchemy import update

from boost_portal.db.models import Notification
from boost_portal.db.repositories.owned import OwnedRepository
from boost_portal.policy.context import Actor, EntityEnum


class NotificationsRepository(OwnedRepository):
    model = Notification
    owner_attr = "user_id"
    entity = EntityEnum.notification
    company_admin_reads = False

    def list(self, actor: Actor, unread_only: bool = False, limit: int = 50, offset: int = 0) -> List[Notification]:
        # Notifications are private to the recipient, so even admins only list their own.
        stmt = self.scoped_select(actor).where(Notification.user_id == actor.id)
        if unread_only:
            stmt = stmt.where(Notification.read.is_(False))
        stmt = stmt.order_by(Notification.created_at.desc()).limit(limit).offset(offset)
        return self.run_scoped(actor, stmt)

    def mark_all_read(self, actor: Actor) -> int:
        result = self.session.execute(
            update(Notification)
            .where(Notification.user_id == actor.id, Notification.read.is_(False))
            .values(read=True)
        )
        self.session.commit()
        return result.rowcount or 0

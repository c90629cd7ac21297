from __future__ import annotations

from typing import List, Optional

from boost_portal.db.enums import AudienceRequestStatusEnum
from boost_portal.db.models import AudienceRequest
from boost_portal.db.repositories.owned import OwnedRepository
from boost_portal.policy.context import Actor, EntityEnum


class AudienceRequestsRepository(OwnedRepository):
    model = AudienceRequest
    owner_attr = "client_id"
    entity = EntityEnum.audience_request

    def list(
        self,
        actor: Actor,
        status: Optional[AudienceRequestStatusEnum] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[AudienceRequest]:
        stmt = self.scoped_select(actor).order_by(AudienceRequest.created_at.desc(), AudienceRequest.id.asc())
        if status is not None:
            stmt = stmt.where(AudienceRequest.status == status)
        return self.run_scoped(actor, stmt.limit(limit).offset(offset))

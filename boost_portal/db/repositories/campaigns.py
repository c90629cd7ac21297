from __future__ import annotations

from typing import List, Optional

from boost_portal.db.enums import CampaignStatusEnum
from boost_portal.db.models import Campaign
from boost_portal.db.repositories.owned import OwnedRepository
from boost_portal.policy.context import Actor, EntityEnum


class CampaignsRepository(OwnedRepository):
    model = Campaign
    owner_attr = "client_id"
    entity = EntityEnum.campaign

    def list(
        self,
        actor: Actor,
        status: Optional[CampaignStatusEnum] = None,
        client_id: Optional[str] = None,
        include_archived: bool = False,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Campaign]:
        stmt = self.scoped_select(actor).order_by(Campaign.created_at.desc(), Campaign.id.asc())
        if status is not None:
            stmt = stmt.where(Campaign.status == status)
        if client_id is not None:
            stmt = stmt.where(Campaign.client_id == client_id)
        if not include_archived:
            stmt = stmt.where(Campaign.archived.is_(False))
        return self.run_scoped(actor, stmt.limit(limit).offset(offset))

from __future__ import annotations

from typing import List

from boost_portal.db.models import AdvertiserAccount
from boost_portal.db.repositories.owned import OwnedRepository
from boost_portal.policy.context import Actor, EntityEnum


class AdvertiserAccountsRepository(OwnedRepository):
    model = AdvertiserAccount
    owner_attr = "user_id"
    entity = EntityEnum.advertiser_account
    company_admin_reads = False

    def list(self, actor: Actor, platform: str | None = None) -> List[AdvertiserAccount]:
        stmt = self.scoped_select(actor).order_by(AdvertiserAccount.platform.asc(), AdvertiserAccount.created_at.asc())
        if platform:
            stmt = stmt.where(AdvertiserAccount.platform == platform)
        return self.run_scoped(actor, stmt)

from __future__ import annotations

from typing import Any, List, Optional
from uuid import UUID

from sqlalchemy import select

from boost_portal.auth.resolution import resolve_company_id
from boost_portal.db.models import Campaign, CampaignComment
from boost_portal.db.enums import OperationEnum
from boost_portal.db.repositories.base import Repository, changed_fields
from boost_portal.policy.context import Actor, EntityEnum, Resource
from boost_portal.policy.engine import can


class CampaignCommentsRepository(Repository):
    def snapshot(
        self,
        comment: CampaignComment,
        changes: Optional[dict[str, Any]] = None,
        campaign: Optional[Campaign] = None,
    ) -> Resource:
        if campaign is None:
            campaign = self.session.get(Campaign, comment.campaign_id)
        campaign_owner = campaign.client_id if campaign else None
        return Resource(
            entity=EntityEnum.campaign_comment,
            id=comment.id,
            owner_id=comment.user_id,
            owner_company_id=resolve_company_id(self.session, comment.user_id) if comment.user_id else None,
            parent_owner_id=campaign_owner,
            parent_owner_company_id=resolve_company_id(self.session, campaign_owner) if campaign_owner else None,
            changes=changes or {},
        )

    def get(self, actor: Actor, comment_id: UUID) -> Optional[CampaignComment]:
        comment = self.session.get(CampaignComment, comment_id)
        if comment is None or not self.readable(actor, comment):
            return None
        return comment

    def list_for_campaign(self, actor: Actor, campaign: Campaign) -> List[CampaignComment]:
        stmt = (
            select(CampaignComment)
            .where(CampaignComment.campaign_id == campaign.id)
            .order_by(CampaignComment.created_at.asc(), CampaignComment.id.asc())
        )
        rows = list(self.session.scalars(stmt).all())
        return [row for row in rows if self.readable_in(actor, row, campaign)]

    def readable_in(self, actor: Actor, comment: CampaignComment, campaign: Campaign) -> bool:
        return can(actor, OperationEnum.read, self.snapshot(comment, campaign=campaign))

    def may_join_thread(self, actor: Actor, campaign: Campaign) -> bool:
        prospective = CampaignComment(campaign_id=campaign.id, user_id=actor.id)
        return can(actor, OperationEnum.create, self.snapshot(prospective, campaign=campaign))

    def build(self, actor: Actor, campaign: Campaign, content: str, parent_comment_id: Optional[UUID]):
        comment = CampaignComment(
            campaign_id=campaign.id,
            user_id=actor.id,
            content=content,
            parent_comment_id=parent_comment_id,
        )
        self.authorize(actor, OperationEnum.create, comment)
        return comment

    def update(self, actor: Actor, comment: CampaignComment, **fields) -> CampaignComment:
        changes = changed_fields(comment, fields)
        if not changes:
            return comment
        self.authorize(actor, OperationEnum.update, comment, changes)
        for key, value in changes.items():
            setattr(comment, key, value)
        self.commit()
        self.session.refresh(comment)
        return comment

    def delete(self, actor: Actor, comment: CampaignComment) -> None:
        self.authorize(actor, OperationEnum.delete, comment)
        # Replies go with the comment they answer.
        levels: list[list[CampaignComment]] = [[comment]]
        while levels[-1]:
            parent_ids = [item.id for item in levels[-1]]
            stmt = select(CampaignComment).where(CampaignComment.parent_comment_id.in_(parent_ids))
            levels.append(list(self.session.scalars(stmt).all()))
        for level in reversed(levels):
            for item in level:
                self.session.delete(item)
            self.session.flush()
        self.commit()

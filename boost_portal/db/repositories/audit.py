from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, List, Optional
from uuid import UUID

from sqlalchemy import func, select

from boost_portal.auth.resolution import resolve_company_id
from boost_portal.db.enums import ActivityActionEnum, CampaignStatusEnum, OperationEnum
from boost_portal.db.models import (
    Campaign,
    CampaignActivityLog,
    CampaignWorkflowHistory,
    as_utc,
    utcnow,
)
from boost_portal.policy.context import Actor, EntityEnum, Resource
from boost_portal.policy.engine import can


class AuditRepository:
    """Append-only campaign audit trail.

    Writes happen only from the workflow service inside the caller's transaction;
    nothing here commits, updates or deletes. Timestamps are strictly increasing
    per campaign across both tables so the trail orders deterministically.
    """

    def __init__(self, session) -> None:
        self.session = session

    def _latest_timestamp(self, campaign_id: UUID) -> Optional[datetime]:
        latest_history = self.session.scalar(
            select(func.max(CampaignWorkflowHistory.created_at)).where(
                CampaignWorkflowHistory.campaign_id == campaign_id
            )
        )
        latest_activity = self.session.scalar(
            select(func.max(CampaignActivityLog.created_at)).where(CampaignActivityLog.campaign_id == campaign_id)
        )
        candidates = [as_utc(value) for value in (latest_history, latest_activity) if value is not None]
        return max(candidates) if candidates else None

    def next_timestamp(self, campaign_id: UUID) -> datetime:
        now = utcnow()
        latest = self._latest_timestamp(campaign_id)
        if latest is not None and now <= latest:
            return latest + timedelta(microseconds=1)
        return now

    def add_history(
        self,
        *,
        campaign_id: UUID,
        user_id: Optional[str],
        from_status: Optional[CampaignStatusEnum],
        to_status: CampaignStatusEnum,
        notes: Optional[str] = None,
    ) -> CampaignWorkflowHistory:
        entry = CampaignWorkflowHistory(
            campaign_id=campaign_id,
            user_id=user_id,
            from_status=from_status,
            to_status=to_status,
            notes=notes,
            created_at=self.next_timestamp(campaign_id),
        )
        self.session.add(entry)
        self.session.flush()
        return entry

    def add_activity(
        self,
        *,
        campaign_id: UUID,
        user_id: Optional[str],
        action_type: ActivityActionEnum,
        action_details: Optional[str] = None,
        old_values: Optional[dict[str, Any]] = None,
        new_values: Optional[dict[str, Any]] = None,
    ) -> CampaignActivityLog:
        entry = CampaignActivityLog(
            campaign_id=campaign_id,
            user_id=user_id,
            action_type=action_type,
            action_details=action_details,
            old_values=old_values,
            new_values=new_values,
            created_at=self.next_timestamp(campaign_id),
        )
        self.session.add(entry)
        self.session.flush()
        return entry

    def _parent_snapshot(self, entity: EntityEnum, campaign: Campaign, entry_id: Any) -> Resource:
        return Resource(
            entity=entity,
            id=entry_id,
            parent_owner_id=campaign.client_id,
            parent_owner_company_id=resolve_company_id(self.session, campaign.client_id),
        )

    def list_history(self, actor: Actor, campaign: Campaign) -> List[CampaignWorkflowHistory]:
        stmt = (
            select(CampaignWorkflowHistory)
            .where(CampaignWorkflowHistory.campaign_id == campaign.id)
            .order_by(CampaignWorkflowHistory.created_at.asc())
        )
        rows = list(self.session.scalars(stmt).all())
        return [
            row
            for row in rows
            if can(actor, OperationEnum.read, self._parent_snapshot(EntityEnum.workflow_history, campaign, row.id))
        ]

    def list_activity(self, actor: Actor, campaign: Campaign) -> List[CampaignActivityLog]:
        stmt = (
            select(CampaignActivityLog)
            .where(CampaignActivityLog.campaign_id == campaign.id)
            .order_by(CampaignActivityLog.created_at.asc())
        )
        rows = list(self.session.scalars(stmt).all())
        return [
            row
            for row in rows
            if can(actor, OperationEnum.read, self._parent_snapshot(EntityEnum.activity_log, campaign, row.id))
        ]

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from boost_portal.db.enums import AudienceRequestStatusEnum
from boost_portal.schemas.campaigns import CampaignResponse, Platforms


class AudienceRequestCreate(BaseModel):
    audiences: List[dict[str, Any]] = Field(min_length=1)
    platforms: Platforms = Field(default_factory=Platforms)
    budget: Decimal = Field(default=Decimal("0"), ge=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    notes: Optional[str] = None


class AudienceRequestReview(BaseModel):
    status: AudienceRequestStatusEnum
    notes: Optional[str] = None


class AudienceRequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    campaign_id: Optional[UUID] = None
    client_id: str
    audiences: List[Any]
    platforms: dict[str, Any]
    budget: Decimal
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    notes: Optional[str] = None
    status: AudienceRequestStatusEnum
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AudienceRequestReviewResponse(BaseModel):
    request: AudienceRequestResponse
    campaign: Optional[CampaignResponse] = None

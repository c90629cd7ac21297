from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from boost_portal.db.enums import ActivityActionEnum, CampaignStatusEnum


class Platforms(BaseModel):
    social: List[str] = Field(default_factory=list)
    programmatic: List[str] = Field(default_factory=list)


class CampaignCreate(BaseModel):
    name: str = Field(min_length=1, max_length=300)
    client_id: Optional[str] = None
    audiences: List[dict[str, Any]] = Field(default_factory=list)
    platforms: Platforms = Field(default_factory=Platforms)
    budget: Decimal = Field(default=Decimal("0"), ge=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class CampaignUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=300)
    audiences: Optional[List[dict[str, Any]]] = None
    platforms: Optional[Platforms] = None
    budget: Optional[Decimal] = Field(default=None, ge=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class CampaignStatusChange(BaseModel):
    status: CampaignStatusEnum
    notes: Optional[str] = None
    notify_client: bool = False


class CampaignResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    client_id: str
    audiences: List[Any]
    platforms: dict[str, Any]
    budget: Decimal
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: CampaignStatusEnum
    archived: bool
    approved_at: Optional[datetime] = None
    request_id: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class WorkflowHistoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    campaign_id: UUID
    user_id: Optional[str] = None
    from_status: Optional[CampaignStatusEnum] = None
    to_status: CampaignStatusEnum
    notes: Optional[str] = None
    created_at: datetime


class ActivityLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    campaign_id: UUID
    user_id: Optional[str] = None
    action_type: ActivityActionEnum
    action_details: Optional[str] = None
    old_values: Optional[dict[str, Any]] = None
    new_values: Optional[dict[str, Any]] = None
    created_at: datetime


class CommentCreate(BaseModel):
    content: str = Field(min_length=1, max_length=5000)
    parent_comment_id: Optional[UUID] = None


class CommentUpdate(BaseModel):
    content: str = Field(min_length=1, max_length=5000)


class CommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    campaign_id: UUID
    user_id: str
    parent_comment_id: Optional[UUID] = None
    content: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class AudienceCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    category: str = Field(min_length=1)
    subcategory: Optional[str] = None
    data_supplier: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    reach: Optional[int] = Field(default=None, ge=0)
    cpm: Optional[Decimal] = Field(default=None, ge=0)


class AudienceUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    category: Optional[str] = Field(default=None, min_length=1)
    subcategory: Optional[str] = None
    data_supplier: Optional[str] = None
    tags: Optional[List[str]] = None
    reach: Optional[int] = Field(default=None, ge=0)
    cpm: Optional[Decimal] = Field(default=None, ge=0)


class AudienceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: Optional[str] = None
    category: str
    subcategory: Optional[str] = None
    data_supplier: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    reach: Optional[int] = None
    cpm: Optional[Decimal] = None


class NotificationCreate(BaseModel):
    user_id: str
    title: str = Field(min_length=1)
    message: str = Field(min_length=1)


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: str
    title: str
    message: str
    read: bool
    created_at: Optional[datetime] = None


class AdvertiserAccountCreate(BaseModel):
    platform: str = Field(min_length=1)
    advertiser_name: str = Field(min_length=1)
    advertiser_id: str = Field(min_length=1)


class AdvertiserAccountUpdate(BaseModel):
    platform: Optional[str] = Field(default=None, min_length=1)
    advertiser_name: Optional[str] = Field(default=None, min_length=1)
    advertiser_id: Optional[str] = Field(default=None, min_length=1)


class AdvertiserAccountResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: str
    platform: str
    advertiser_name: str
    advertiser_id: str
    created_at: Optional[datetime] = None

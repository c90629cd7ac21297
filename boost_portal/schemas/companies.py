from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class CompanyCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    account_id: Optional[str] = None


class CompanyUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    account_id: Optional[str] = None


class CompanyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    account_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CompanyAccountIdCreate(BaseModel):
    platform: str = Field(min_length=1)
    account_id: str = Field(min_length=1)
    account_name: Optional[str] = None
    is_active: bool = True


class CompanyAccountIdUpdate(BaseModel):
    platform: Optional[str] = Field(default=None, min_length=1)
    account_id: Optional[str] = Field(default=None, min_length=1)
    account_name: Optional[str] = None
    is_active: Optional[bool] = None


class CompanyAccountIdResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    company_id: UUID
    platform: str
    account_id: str
    account_name: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None

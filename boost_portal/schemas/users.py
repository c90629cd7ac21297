from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from boost_portal.db.enums import UserRoleEnum


class UserProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    name: str
    role: UserRoleEnum
    company_id: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SignupRequest(BaseModel):
    name: Optional[str] = Field(default=None, max_length=200)


class UserProfileUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    role: Optional[UserRoleEnum] = None
    company_id: Optional[UUID] = None


class InviteUserRequest(BaseModel):
    email: EmailStr
    name: str = Field(min_length=1, max_length=200)
    role: UserRoleEnum = UserRoleEnum.user
    company_id: UUID


class InviteUserResponse(BaseModel):
    user: UserProfileResponse
    created: bool
    invitation_sent: bool

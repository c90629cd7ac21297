from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID, uuid4

import sqlalchemy as sa
from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from boost_portal.db.base import Base
from boost_portal.db.enums import (
    ActivityActionEnum,
    AudienceRequestStatusEnum,
    CampaignStatusEnum,
    UserRoleEnum,
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def _default_platforms() -> dict[str, list[str]]:
    return {"social": [], "programmatic": []}


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False
    )


class Company(TimestampMixin, Base):
    __tablename__ = "companies"

    id: Mapped[UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    account_id: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class UserProfile(TimestampMixin, Base):
    __tablename__ = "users"

    # Identity provider user id.
    id: Mapped[str] = mapped_column(Text, primary_key=True)
    email: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    role: Mapped[UserRoleEnum] = mapped_column(
        Enum(UserRoleEnum, name="user_role", native_enum=False),
        nullable=False,
        default=UserRoleEnum.user,
        server_default=UserRoleEnum.user.value,
    )
    company_id: Mapped[Optional[UUID]] = mapped_column(
        ForeignKey("companies.id", ondelete="SET NULL"), nullable=True, index=True
    )


class CompanyAccountId(TimestampMixin, Base):
    __tablename__ = "company_account_ids"
    __table_args__ = (
        UniqueConstraint("company_id", "platform", "account_id", name="uq_company_account_ids_platform_account"),
    )

    id: Mapped[UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid4)
    company_id: Mapped[UUID] = mapped_column(ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    platform: Mapped[str] = mapped_column(Text, nullable=False)
    account_id: Mapped[str] = mapped_column(Text, nullable=False)
    account_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=sa.true())


class AudienceRequest(TimestampMixin, Base):
    __tablename__ = "audience_requests"

    id: Mapped[UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid4)
    campaign_id: Mapped[Optional[UUID]] = mapped_column(
        ForeignKey(
            "campaigns.id",
            ondelete="SET NULL",
            use_alter=True,
            name="fk_audience_requests_campaign_id",
        ),
        nullable=True,
    )
    client_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    audiences: Mapped[list[Any]] = mapped_column(sa.JSON, nullable=False, default=list)
    platforms: Mapped[dict[str, Any]] = mapped_column(sa.JSON, nullable=False, default=_default_platforms)
    budget: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0"))
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[AudienceRequestStatusEnum] = mapped_column(
        Enum(AudienceRequestStatusEnum, name="audience_request_status", native_enum=False),
        nullable=False,
        default=AudienceRequestStatusEnum.pending,
        server_default=AudienceRequestStatusEnum.pending.value,
    )


class Campaign(TimestampMixin, Base):
    __tablename__ = "campaigns"

    id: Mapped[UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    client_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    audiences: Mapped[list[Any]] = mapped_column(sa.JSON, nullable=False, default=list)
    platforms: Mapped[dict[str, Any]] = mapped_column(sa.JSON, nullable=False, default=_default_platforms)
    budget: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0"))
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    status: Mapped[CampaignStatusEnum] = mapped_column(
        Enum(CampaignStatusEnum, name="campaign_status", native_enum=False),
        nullable=False,
        default=CampaignStatusEnum.draft,
        server_default=CampaignStatusEnum.draft.value,
    )
    archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=sa.false())
    approved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    request_id: Mapped[Optional[UUID]] = mapped_column(
        ForeignKey("audience_requests.id", ondelete="SET NULL"), nullable=True
    )


class Audience(TimestampMixin, Base):
    __tablename__ = "audiences"

    id: Mapped[UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(Text, nullable=False)
    subcategory: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    data_supplier: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    tags: Mapped[list[str]] = mapped_column(sa.JSON, nullable=False, default=list)
    reach: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    cpm: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)


class CampaignComment(TimestampMixin, Base):
    __tablename__ = "campaign_comments"

    id: Mapped[UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid4)
    campaign_id: Mapped[UUID] = mapped_column(
        ForeignKey("campaigns.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    parent_comment_id: Mapped[Optional[UUID]] = mapped_column(
        ForeignKey("campaign_comments.id", ondelete="CASCADE"), nullable=True
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)


class CampaignWorkflowHistory(Base):
    __tablename__ = "campaign_workflow_history"

    id: Mapped[UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid4)
    campaign_id: Mapped[UUID] = mapped_column(
        ForeignKey("campaigns.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[Optional[str]] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    from_status: Mapped[Optional[CampaignStatusEnum]] = mapped_column(
        Enum(CampaignStatusEnum, name="campaign_status", native_enum=False), nullable=True
    )
    to_status: Mapped[CampaignStatusEnum] = mapped_column(
        Enum(CampaignStatusEnum, name="campaign_status", native_enum=False), nullable=False
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)


class CampaignActivityLog(Base):
    __tablename__ = "campaign_activity_log"

    id: Mapped[UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid4)
    campaign_id: Mapped[UUID] = mapped_column(
        ForeignKey("campaigns.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[Optional[str]] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    action_type: Mapped[ActivityActionEnum] = mapped_column(
        Enum(ActivityActionEnum, name="activity_action", native_enum=False), nullable=False
    )
    action_details: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    old_values: Mapped[Optional[dict[str, Any]]] = mapped_column(sa.JSON, nullable=True)
    new_values: Mapped[Optional[dict[str, Any]]] = mapped_column(sa.JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)


class Notification(Base):
    __tablename__ = "notifications"

    id: Mapped[UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid4)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=sa.false())
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )


class AdvertiserAccount(TimestampMixin, Base):
    __tablename__ = "advertiser_accounts"

    id: Mapped[UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid4)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    platform: Mapped[str] = mapped_column(Text, nullable=False)
    advertiser_name: Mapped[str] = mapped_column(Text, nullable=False)
    advertiser_id: Mapped[str] = mapped_column(Text, nullable=False)

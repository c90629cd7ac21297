from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional
from uuid import UUID

from boost_portal.db.enums import UserRoleEnum


class EntityEnum(str, Enum):
    user_profile = "user_profile"
    company = "company"
    company_account_id = "company_account_id"
    campaign = "campaign"
    audience_request = "audience_request"
    campaign_comment = "campaign_comment"
    workflow_history = "workflow_history"
    activity_log = "activity_log"
    notification = "notification"
    audience = "audience"
    advertiser_account = "advertiser_account"


@dataclass(frozen=True)
class Actor:
    """The caller as seen by the policy engine, resolved once per request."""

    id: str
    email: str
    role: UserRoleEnum = UserRoleEnum.user
    company_id: Optional[UUID] = None
    is_super_admin: bool = False
    has_profile: bool = False

    @property
    def is_company_admin(self) -> bool:
        return self.role == UserRoleEnum.admin and self.company_id is not None

    def describe(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "role": self.role.value,
            "company_id": str(self.company_id) if self.company_id else None,
            "is_super_admin": self.is_super_admin,
        }


_EMPTY: Mapping[str, Any] = MappingProxyType({})


@dataclass(frozen=True)
class Resource:
    """Snapshot of the row an operation targets.

    ``owner_id``/``owner_company_id`` describe the owning profile (campaign client,
    comment author, notification recipient). ``parent_owner_*`` describe the owner
    of the campaign a comment or audit record hangs off. ``company_id`` and
    ``role`` are the row's own columns for companies, account ids and profiles;
    ``state`` is the current workflow status of campaigns and requests.
    ``changes`` holds only the fields an update actually modifies.
    """

    entity: EntityEnum
    id: Any = None
    owner_id: Optional[str] = None
    owner_company_id: Optional[UUID] = None
    parent_owner_id: Optional[str] = None
    parent_owner_company_id: Optional[UUID] = None
    company_id: Optional[UUID] = None
    role: Optional[UserRoleEnum] = None
    state: Optional[str] = None
    changes: Mapping[str, Any] = field(default_factory=lambda: _EMPTY)

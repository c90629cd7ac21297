from enum import Enum


class UserRoleEnum(str, Enum):
    user = "user"
    admin = "admin"
    super_admin = "super_admin"


class CampaignStatusEnum(str, Enum):
    draft = "draft"
    submitted = "submitted"
    pending_review = "pending_review"
    approved = "approved"
    in_progress = "in_progress"
    waiting_on_client = "waiting_on_client"
    delivered = "delivered"
    live = "live"
    paused = "paused"
    completed = "completed"
    failed = "failed"


class AudienceRequestStatusEnum(str, Enum):
    pending = "pending"
    reviewed = "reviewed"
    approved = "approved"
    rejected = "rejected"


class ActivityActionEnum(str, Enum):
    created = "created"
    updated = "updated"
    status_changed = "status_changed"
    comment_added = "comment_added"
    archived = "archived"


class OperationEnum(str, Enum):
    create = "create"
    read = "read"
    update = "update"
    delete = "delete"

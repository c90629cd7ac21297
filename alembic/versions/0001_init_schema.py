"""Initial schema"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_init_schema"
down_revision = None
branch_labels = None
depends_on = None

USER_ROLES = ("user", "admin", "super_admin")
CAMPAIGN_STATUSES = (
    "draft",
    "submitted",
    "pending_review",
    "approved",
    "in_progress",
    "waiting_on_client",
    "delivered",
    "live",
    "paused",
    "completed",
    "failed",
)
REQUEST_STATUSES = ("pending", "reviewed", "approved", "rejected")
ACTIVITY_ACTIONS = ("created", "updated", "status_changed", "comment_added", "archived")


def _enum(name: str, values: tuple[str, ...]) -> sa.Enum:
    return sa.Enum(*values, name=name, native_enum=False)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "companies",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False, unique=True),
        sa.Column("account_id", sa.Text(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "users",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("email", sa.Text(), nullable=False, unique=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("role", _enum("user_role", USER_ROLES), nullable=False, server_default="user"),
        sa.Column("company_id", sa.Uuid(), sa.ForeignKey("companies.id", ondelete="SET NULL"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_users_company_id", "users", ["company_id"])

    op.create_table(
        "company_account_ids",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("company_id", sa.Uuid(), sa.ForeignKey("companies.id", ondelete="CASCADE"), nullable=False),
        sa.Column("platform", sa.Text(), nullable=False),
        sa.Column("account_id", sa.Text(), nullable=False),
        sa.Column("account_name", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.UniqueConstraint("company_id", "platform", "account_id", name="uq_company_account_ids_platform_account"),
    )

    # campaigns and audience_requests reference each other; the request -> campaign key is added afterwards.
    op.create_table(
        "audience_requests",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("campaign_id", sa.Uuid(), nullable=True),
        sa.Column("client_id", sa.Text(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("audiences", sa.JSON(), nullable=False),
        sa.Column("platforms", sa.JSON(), nullable=False),
        sa.Column("budget", sa.Numeric(14, 2), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column(
            "status", _enum("audience_request_status", REQUEST_STATUSES), nullable=False, server_default="pending"
        ),
        *_timestamps(),
    )
    op.create_index("ix_audience_requests_client_id", "audience_requests", ["client_id"])

    op.create_table(
        "campaigns",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("client_id", sa.Text(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("audiences", sa.JSON(), nullable=False),
        sa.Column("platforms", sa.JSON(), nullable=False),
        sa.Column("budget", sa.Numeric(14, 2), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("status", _enum("campaign_status", CAMPAIGN_STATUSES), nullable=False, server_default="draft"),
        sa.Column("archived", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "request_id", sa.Uuid(), sa.ForeignKey("audience_requests.id", ondelete="SET NULL"), nullable=True
        ),
        *_timestamps(),
    )
    op.create_index("ix_campaigns_client_id", "campaigns", ["client_id"])

    with op.batch_alter_table("audience_requests") as batch:
        batch.create_foreign_key(
            "fk_audience_requests_campaign_id", "campaigns", ["campaign_id"], ["id"], ondelete="SET NULL"
        )

    op.create_table(
        "audiences",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.Text(), nullable=False),
        sa.Column("subcategory", sa.Text(), nullable=True),
        sa.Column("data_supplier", sa.Text(), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("reach", sa.Integer(), nullable=True),
        sa.Column("cpm", sa.Numeric(10, 2), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "campaign_comments",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("campaign_id", sa.Uuid(), sa.ForeignKey("campaigns.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Text(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "parent_comment_id",
            sa.Uuid(),
            sa.ForeignKey("campaign_comments.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column("content", sa.Text(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_campaign_comments_campaign_id", "campaign_comments", ["campaign_id"])

    op.create_table(
        "campaign_workflow_history",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("campaign_id", sa.Uuid(), sa.ForeignKey("campaigns.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Text(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("from_status", _enum("campaign_status", CAMPAIGN_STATUSES), nullable=True),
        sa.Column("to_status", _enum("campaign_status", CAMPAIGN_STATUSES), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_campaign_workflow_history_campaign_id", "campaign_workflow_history", ["campaign_id"])

    op.create_table(
        "campaign_activity_log",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("campaign_id", sa.Uuid(), sa.ForeignKey("campaigns.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Text(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("action_type", _enum("activity_action", ACTIVITY_ACTIONS), nullable=False),
        sa.Column("action_details", sa.Text(), nullable=True),
        sa.Column("old_values", sa.JSON(), nullable=True),
        sa.Column("new_values", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_campaign_activity_log_campaign_id", "campaign_activity_log", ["campaign_id"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Text(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])

    op.create_table(
        "advertiser_accounts",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Text(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("platform", sa.Text(), nullable=False),
        sa.Column("advertiser_name", sa.Text(), nullable=False),
        sa.Column("advertiser_id", sa.Text(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_advertiser_accounts_user_id", "advertiser_accounts", ["user_id"])


def downgrade() -> None:
    op.drop_table("advertiser_accounts")
    op.drop_table("notifications")
    op.drop_table("campaign_activity_log")
    op.drop_table("campaign_workflow_history")
    op.drop_table("campaign_comments")
    op.drop_table("audiences")
    with op.batch_alter_table("audience_requests") as batch:
        batch.drop_constraint("fk_audience_requests_campaign_id", type_="foreignkey")
    op.drop_table("campaigns")
    op.drop_table("audience_requests")
    op.drop_table("company_account_ids")
    op.drop_table("users")
    op.drop_table("companies")

"""Create ledger, session, settlement and budget tables.

Revision ID: a0c1d2e3f4b5
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision = "a0c1d2e3f4b5"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.Column(
            "modified_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
    ]


def upgrade():
    """Create the six tables of the credit ledger.

    principal_balance carries a CHECK keeping balance_seconds non-negative.
    """
    op.create_table(
        "principal_balance",
        sa.Column("principal_id", sa.String(128), primary_key=True),
        sa.Column("balance_seconds", sa.Integer(), nullable=False),
        sa.Column("last_activity_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.CheckConstraint("balance_seconds >= 0", name="ck_principal_balance_non_negative"),
    )

    op.create_table(
        "usage_session",
        sa.Column("session_id", sa.String(128), primary_key=True),
        sa.Column("principal_id", sa.String(128), nullable=False),
        sa.Column("service_type", sa.String(32), nullable=False),
        sa.Column("state", sa.String(64), nullable=False, server_default="active"),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("ended_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_activity_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("seconds_consumed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("version", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_index(
        "idx_usage_session_principal_state", "usage_session", ["principal_id", "state"]
    )

    op.create_table(
        "ledger_entry",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("principal_id", sa.String(128), nullable=False),
        sa.Column("action", sa.String(32), nullable=False),
        sa.Column("seconds_delta", sa.Integer(), nullable=False),
        sa.Column("requested_seconds", sa.Integer(), nullable=False),
        sa.Column("balance_before", sa.Integer(), nullable=False),
        sa.Column("balance_after", sa.Integer(), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("service_type", sa.String(32), nullable=True),
        sa.Column("session_id", sa.String(128), nullable=True),
        sa.Column("source_event_id", sa.String(255), nullable=True),
    )
    op.create_index(
        "idx_ledger_entry_principal_timestamp", "ledger_entry", ["principal_id", "timestamp"]
    )
    op.create_index("idx_ledger_entry_session_id", "ledger_entry", ["session_id"])

    # Primary key on event_id makes settlement exactly-once
    op.create_table(
        "settlement_event",
        sa.Column("event_id", sa.String(255), primary_key=True),
        sa.Column("principal_id", sa.String(128), nullable=False),
        sa.Column("seconds_credited", sa.Integer(), nullable=False),
        sa.Column("amount_paid", sa.Integer(), nullable=False),
        sa.Column("currency", sa.String(8), nullable=True),
        sa.Column("hours_purchased", sa.Integer(), nullable=True),
        sa.Column("reference", sa.String(255), nullable=True),
        sa.Column("customer_reference", sa.String(255), nullable=True),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("idx_settlement_event_principal_id", "settlement_event", ["principal_id"])

    op.create_table(
        "budget_config",
        sa.Column("principal_id", sa.String(128), primary_key=True),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("spend_limit_seconds", sa.Integer(), nullable=False),
        sa.Column("warning_threshold_percent", sa.Integer(), nullable=False, server_default="80"),
        sa.Column("period_days", sa.Integer(), nullable=False, server_default="30"),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "budget_alert",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("principal_id", sa.String(128), nullable=False),
        sa.Column("alert_type", sa.String(32), nullable=False),
        sa.Column("current_spend", sa.Integer(), nullable=False),
        sa.Column("threshold", sa.Integer(), nullable=False),
        sa.Column("window_days", sa.Integer(), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "idx_budget_alert_principal_timestamp", "budget_alert", ["principal_id", "timestamp"]
    )


def downgrade():
    """Drop all ledger tables."""
    op.drop_table("budget_alert")
    op.drop_table("budget_config")
    op.drop_table("settlement_event")
    op.drop_table("ledger_entry")
    op.drop_table("usage_session")
    op.drop_table("principal_balance")

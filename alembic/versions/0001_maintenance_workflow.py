"""maintenance workflow schema

Revision ID: 0001_maintenance_workflow
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers
revision: str = "0001_maintenance_workflow"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

STATUSES = ["Requested", "On-going", "For Verification", "Completed", "Cancelled"]
PRIORITIES = ["Critical", "Urgent", "Mild"]


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(150), nullable=False),
        sa.Column("first_name", sa.String(150), nullable=False, server_default=""),
        sa.Column("last_name", sa.String(150), nullable=False, server_default=""),
        sa.Column("role", sa.SmallInteger, nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index(op.f("ix_accounts_username"), "accounts", ["username"], unique=True)
    op.create_index(op.f("ix_accounts_role"), "accounts", ["role"], unique=False)

    # catálogo
    statuses = op.create_table(
        "maintenance_statuses",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(50), nullable=False, unique=True),
    )
    priorities = op.create_table(
        "maintenance_priorities",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(50), nullable=False, unique=True),
    )
    op.bulk_insert(statuses, [{"name": n} for n in STATUSES])
    op.bulk_insert(priorities, [{"name": n} for n in PRIORITIES])

    op.create_table(
        "maintenance_tickets",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("details", sa.Text, nullable=True),
        sa.Column("priority_id", sa.Integer, sa.ForeignKey("maintenance_priorities.id"), nullable=True),
        sa.Column("status_id", sa.Integer, sa.ForeignKey("maintenance_statuses.id"), nullable=False),
        sa.Column("created_by", sa.Integer, sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("assigned_to", sa.Integer, sa.ForeignKey("accounts.id"), nullable=True),
        sa.Column("due_date", sa.Date, nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("remarks", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    for column in ("status_id", "created_by", "assigned_to", "created_at"):
        op.create_index(op.f(f"ix_maintenance_tickets_{column}"), "maintenance_tickets", [column], unique=False)

    # log de eventos (append-only)
    op.create_table(
        "maintenance_events",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("ticket_id", sa.Integer, sa.ForeignKey("maintenance_tickets.id"), nullable=False),
        sa.Column("event_type", sa.String(50), nullable=False),
        sa.Column("actor_id", sa.Integer, sa.ForeignKey("accounts.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(op.f("ix_maintenance_events_event_type"), "maintenance_events", ["event_type"], unique=False)
    op.create_index(op.f("ix_maintenance_events_actor_id"), "maintenance_events", ["actor_id"], unique=False)
    op.create_index(op.f("ix_maintenance_events_created_at"), "maintenance_events", ["created_at"], unique=False)
    op.create_index(
        "ix_maintenance_events_ticket_id_created_at", "maintenance_events",
        ["ticket_id", "created_at"], unique=False,
    )

    op.create_table(
        "maintenance_attachments",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("ticket_id", sa.Integer, sa.ForeignKey("maintenance_tickets.id"), nullable=False),
        sa.Column("event_id", sa.Integer, sa.ForeignKey("maintenance_events.id"), nullable=True),
        sa.Column("uploaded_by", sa.Integer, sa.ForeignKey("accounts.id"), nullable=True),
        sa.Column("file_path", sa.String(1000), nullable=False),
        sa.Column("file_name", sa.String(500), nullable=False),
        sa.Column("file_type", sa.String(150), nullable=True),
        sa.Column("file_size", sa.Integer, nullable=True),
        sa.Column("folder", sa.String(150), nullable=True),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    for column in ("ticket_id", "event_id", "uploaded_by"):
        op.create_index(
            op.f(f"ix_maintenance_attachments_{column}"), "maintenance_attachments", [column], unique=False,
        )

    # marcadores de leitura
    op.create_table(
        "notification_reads",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("account_id", sa.Integer, sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("notification_type", sa.String(30), nullable=False),
        sa.Column("notification_id", sa.Integer, nullable=False),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint(
            "account_id", "notification_type", "notification_id",
            name="uq_notification_reads_account_type_id",
        ),
    )
    op.create_index(op.f("ix_notification_reads_account_id"), "notification_reads", ["account_id"], unique=False)


def downgrade() -> None:
    op.drop_table("notification_reads")
    op.drop_table("maintenance_attachments")
    op.drop_table("maintenance_events")
    op.drop_table("maintenance_tickets")
    op.drop_table("maintenance_priorities")
    op.drop_table("maintenance_statuses")
    op.drop_table("accounts")

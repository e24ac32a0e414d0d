"""create cash register, audit log and idempotency tables

Revision ID: 3c4d5e6f7a8b
Revises: 2b3c4d5e6f7a
Create Date: 2026-10-18 09:20:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "3c4d5e6f7a8b"
down_revision = "2b3c4d5e6f7a"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "daily_cash",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("gym_id", sa.String(length=36), nullable=False),
        sa.Column("day", sa.Date(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="open"),
        sa.Column("opening_amount", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_income", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_expense", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("membership_income", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("other_income", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("opened_by", sa.String(length=255), nullable=True),
        sa.Column("closed_by", sa.String(length=255), nullable=True),
        sa.Column("closed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=True,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=True,
        ),
        sa.ForeignKeyConstraint(["gym_id"], ["gyms.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("gym_id", "day", name="uq_daily_cash_gym_day"),
    )
    op.create_index(op.f("ix_daily_cash_gym_id"), "daily_cash", ["gym_id"], unique=False)

    op.create_table(
        "cash_transactions",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("gym_id", sa.String(length=36), nullable=False),
        sa.Column("daily_cash_id", sa.String(length=36), nullable=False),
        sa.Column("category", sa.String(length=20), nullable=False, server_default="membership"),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=False),
        sa.Column("payment_method", sa.String(length=20), nullable=False),
        sa.Column("member_id", sa.String(length=36), nullable=True),
        sa.Column("charge_ids", sa.JSON(), nullable=False, server_default="[]"),
        sa.Column("operator_id", sa.String(length=255), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=True,
        ),
        sa.ForeignKeyConstraint(["gym_id"], ["gyms.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["daily_cash_id"], ["daily_cash.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_cash_transactions_gym_id"), "cash_transactions", ["gym_id"], unique=False
    )
    op.create_index(
        op.f("ix_cash_transactions_daily_cash_id"),
        "cash_transactions",
        ["daily_cash_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_cash_transactions_member_id"), "cash_transactions", ["member_id"], unique=False
    )

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("gym_id", sa.String(length=36), nullable=False),
        sa.Column("resource_type", sa.String(length=50), nullable=False),
        sa.Column("resource_id", sa.String(length=36), nullable=False),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column("changes", sa.JSON(), nullable=False, server_default="{}"),
        sa.Column("actor_type", sa.String(length=50), nullable=False),
        sa.Column("actor_id", sa.String(length=255), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=True,
        ),
        sa.ForeignKeyConstraint(["gym_id"], ["gyms.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_audit_logs_gym_id"), "audit_logs", ["gym_id"], unique=False)
    op.create_index(
        op.f("ix_audit_logs_resource_type"), "audit_logs", ["resource_type"], unique=False
    )
    op.create_index(op.f("ix_audit_logs_resource_id"), "audit_logs", ["resource_id"], unique=False)
    op.create_index(op.f("ix_audit_logs_action"), "audit_logs", ["action"], unique=False)

    op.create_table(
        "idempotency_records",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("gym_id", sa.String(length=36), nullable=False),
        sa.Column("idempotency_key", sa.String(length=255), nullable=False),
        sa.Column("request_method", sa.String(length=10), nullable=False),
        sa.Column("request_path", sa.String(length=500), nullable=False),
        sa.Column("response_status", sa.Integer(), nullable=True),
        sa.Column("response_body", sa.JSON(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=True,
        ),
        sa.ForeignKeyConstraint(["gym_id"], ["gyms.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("gym_id", "idempotency_key", name="uq_gym_idempotency_key"),
    )
    op.create_index(
        op.f("ix_idempotency_records_gym_id"), "idempotency_records", ["gym_id"], unique=False
    )
    op.create_index(
        op.f("ix_idempotency_records_idempotency_key"),
        "idempotency_records",
        ["idempotency_key"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_idempotency_records_idempotency_key"), table_name="idempotency_records")
    op.drop_index(op.f("ix_idempotency_records_gym_id"), table_name="idempotency_records")
    op.drop_table("idempotency_records")
    op.drop_index(op.f("ix_audit_logs_action"), table_name="audit_logs")
    op.drop_index(op.f("ix_audit_logs_resource_id"), table_name="audit_logs")
    op.drop_index(op.f("ix_audit_logs_resource_type"), table_name="audit_logs")
    op.drop_index(op.f("ix_audit_logs_gym_id"), table_name="audit_logs")
    op.drop_table("audit_logs")
    op.drop_index(op.f("ix_cash_transactions_member_id"), table_name="cash_transactions")
    op.drop_index(op.f("ix_cash_transactions_daily_cash_id"), table_name="cash_transactions")
    op.drop_index(op.f("ix_cash_transactions_gym_id"), table_name="cash_transactions")
    op.drop_table("cash_transactions")
    op.drop_index(op.f("ix_daily_cash_gym_id"), table_name="daily_cash")
    op.drop_table("daily_cash")

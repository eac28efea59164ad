"""create subscriptions table

Revision ID: 202510010001
Revises:
Create Date: 2025-10-01 09:00:00
"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa


revision: str = "202510010001"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "subscriptions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("service_name", sa.String(length=255), nullable=False),
        sa.Column("price", sa.BigInteger(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("price >= 0", name="ck_subscriptions_price_nonnegative"),
        sa.CheckConstraint("end_date IS NULL OR end_date >= start_date", name="ck_subscriptions_period"),
    )
    op.create_index(
        "ix_subscriptions_user_service_start",
        "subscriptions",
        ["user_id", "service_name", "start_date"],
    )
    op.create_index("ix_subscriptions_start_date", "subscriptions", ["start_date"])


def downgrade() -> None:
    op.drop_index("ix_subscriptions_start_date", table_name="subscriptions")
    op.drop_index("ix_subscriptions_user_service_start", table_name="subscriptions")
    op.drop_table("subscriptions")

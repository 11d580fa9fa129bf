"""alerts and price_history

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "alerts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("coin_id", sa.String(), nullable=False),
        sa.Column("coin_name", sa.String(), nullable=False),
        sa.Column("target_price", sa.Numeric(28, 8), nullable=False),
        sa.Column("condition", sa.String(5), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("triggered_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("condition IN ('above', 'below')", name="ck_alerts_condition"),
    )
    op.create_index("ix_alerts_id", "alerts", ["id"])
    op.create_index("ix_alerts_coin_id", "alerts", ["coin_id"])
    op.create_index("ix_alerts_email", "alerts", ["email"])
    op.create_index("ix_alerts_is_active", "alerts", ["is_active"])

    op.create_table(
        "price_history",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("coin_id", sa.String(), nullable=False),
        sa.Column("price", sa.Numeric(28, 8), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_price_history_id", "price_history", ["id"])
    op.create_index("ix_price_history_coin_timestamp", "price_history", ["coin_id", "timestamp"])


def downgrade() -> None:
    op.drop_table("price_history")
    op.drop_table("alerts")

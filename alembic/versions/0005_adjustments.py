from alembic import op
import sqlalchemy as sa


revision = "0005_adjustments"
down_revision = "0004_powder_purchases"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "adjustments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("type", sa.String(10), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.current_timestamp()),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.CheckConstraint("type IN ('cash', 'powder')", name="ck_adjustments_type"),
    )
    op.create_index("ix_adjustments_user_id", "adjustments", ["user_id"])
    op.create_index("ix_adjustments_date", "adjustments", ["date"])


def downgrade() -> None:
    op.drop_index("ix_adjustments_date", table_name="adjustments")
    op.drop_index("ix_adjustments_user_id", table_name="adjustments")
    op.drop_table("adjustments")

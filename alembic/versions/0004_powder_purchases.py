from alembic import op
import sqlalchemy as sa


revision = "0004_powder_purchases"
down_revision = "0003_credit_and_staff_columns"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "powder_purchases",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("purchase_date", sa.Date(), nullable=False),
        sa.Column("supplier_name", sa.String(255), nullable=True),
        sa.Column("packets_purchased", sa.Float(), nullable=False, server_default="0"),
        sa.Column("cost_per_packet", sa.Float(), nullable=False, server_default="63"),
        sa.Column("total_cost", sa.Float(), nullable=False),
        sa.Column("payment_method", sa.String(20), nullable=True),
        sa.Column("invoice_number", sa.String(100), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.current_timestamp()),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.CheckConstraint(
            "payment_method IN ('cash', 'credit', 'bank_transfer')",
            name="ck_powder_purchases_payment_method",
        ),
    )
    op.create_index("ix_powder_purchases_user_id", "powder_purchases", ["user_id"])
    op.create_index("ix_powder_purchases_purchase_date", "powder_purchases", ["purchase_date"])


def downgrade() -> None:
    op.drop_index("ix_powder_purchases_purchase_date", table_name="powder_purchases")
    op.drop_index("ix_powder_purchases_user_id", table_name="powder_purchases")
    op.drop_table("powder_purchases")

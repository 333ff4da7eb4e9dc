from alembic import op
import sqlalchemy as sa


revision = "0006_credit_payments"
down_revision = "0005_adjustments"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "credit_payments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("creditor_name", sa.String(255), nullable=False),
        sa.Column("payment_date", sa.Date(), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.current_timestamp()),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.CheckConstraint("amount > 0", name="ck_credit_payments_amount_positive"),
    )
    op.create_index("ix_credit_payments_user_id", "credit_payments", ["user_id"])
    op.create_index("ix_credit_payments_creditor_name", "credit_payments", ["creditor_name"])
    op.create_index("ix_credit_payments_payment_date", "credit_payments", ["payment_date"])


def downgrade() -> None:
    op.drop_index("ix_credit_payments_payment_date", table_name="credit_payments")
    op.drop_index("ix_credit_payments_creditor_name", table_name="credit_payments")
    op.drop_index("ix_credit_payments_user_id", table_name="credit_payments")
    op.drop_table("credit_payments")

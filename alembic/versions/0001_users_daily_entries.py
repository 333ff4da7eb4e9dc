from alembic import op
import sqlalchemy as sa


revision = "0001_users_daily_entries"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="user"),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.current_timestamp()),
        sa.UniqueConstraint("username", name="uq_users_username"),
    )
    op.create_index("ix_users_username", "users", ["username"])

    op.create_table(
        "daily_entries",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("group_name", sa.String(255), nullable=True),
        sa.Column("cash_in_hand", sa.Float(), nullable=False, server_default="0"),
        sa.Column("credits", sa.Float(), nullable=False, server_default="0"),
        sa.Column("waiter_expense", sa.Float(), nullable=False, server_default="0"),
        sa.Column("servers_expense", sa.Float(), nullable=False, server_default="0"),
        sa.Column("bookkeeping_expense", sa.Float(), nullable=False, server_default="0"),
        sa.Column("other_expenses", sa.Float(), nullable=False, server_default="0"),
        sa.Column("packets_used", sa.Float(), nullable=False, server_default="0"),
        sa.Column("cups_used", sa.Float(), nullable=False, server_default="0"),
        sa.Column("powder_cost", sa.Float(), nullable=False, server_default="0"),
        sa.Column("profit", sa.Float(), nullable=False, server_default="0"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.current_timestamp()),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("user_id", "date", name="uq_daily_entries_user_date"),
    )
    op.create_index("ix_daily_entries_user_id", "daily_entries", ["user_id"])
    op.create_index("ix_daily_entries_date", "daily_entries", ["date"])


def downgrade() -> None:
    op.drop_index("ix_daily_entries_date", table_name="daily_entries")
    op.drop_index("ix_daily_entries_user_id", table_name="daily_entries")
    op.drop_table("daily_entries")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")

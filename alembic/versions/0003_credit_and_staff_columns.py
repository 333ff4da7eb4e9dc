from alembic import op
import sqlalchemy as sa


revision = "0003_credit_and_staff_columns"
down_revision = "0002_opening_balance"
branch_labels = None
depends_on = None


def upgrade() -> None:
    with op.batch_alter_table("daily_entries") as batch:
        batch.add_column(sa.Column("credit_entries", sa.Text(), nullable=False, server_default="[]"))
        batch.add_column(sa.Column("bookkeeper_name", sa.String(255), nullable=True))
        batch.add_column(sa.Column("waiter_name", sa.String(255), nullable=True))
        batch.add_column(sa.Column("servers_names", sa.Text(), nullable=False, server_default="[]"))
        batch.add_column(sa.Column("additional_payments", sa.Text(), nullable=False, server_default="[]"))


def downgrade() -> None:
    with op.batch_alter_table("daily_entries") as batch:
        batch.drop_column("additional_payments")
        batch.drop_column("servers_names")
        batch.drop_column("waiter_name")
        batch.drop_column("bookkeeper_name")
        batch.drop_column("credit_entries")

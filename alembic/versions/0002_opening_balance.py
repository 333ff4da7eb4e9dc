from alembic import op
import sqlalchemy as sa


revision = "0002_opening_balance"
down_revision = "0001_users_daily_entries"
branch_labels = None
depends_on = None


def upgrade() -> None:
    with op.batch_alter_table("daily_entries") as batch:
        batch.add_column(sa.Column("opening_cash", sa.Float(), nullable=False, server_default="0"))
        batch.add_column(sa.Column("opening_packets", sa.Float(), nullable=False, server_default="0"))
        batch.add_column(sa.Column("opening_cups", sa.Float(), nullable=False, server_default="0"))
        batch.add_column(sa.Column("opening_notes", sa.Text(), nullable=True))


def downgrade() -> None:
    with op.batch_alter_table("daily_entries") as batch:
        batch.drop_column("opening_notes")
        batch.drop_column("opening_cups")
        batch.drop_column("opening_packets")
        batch.drop_column("opening_cash")

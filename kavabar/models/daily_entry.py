from datetime import datetime
from sqlalchemy import Column, Integer, String, Float, Date, DateTime, Text, ForeignKey, UniqueConstraint

from kavabar.models.base import Base


class DailyEntry(Base):
    __tablename__ = "daily_entries"
    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_daily_entries_user_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    group_name = Column(String(255), nullable=True)

    # Income
    cash_in_hand = Column(Float, nullable=False, default=0)
    credits = Column(Float, nullable=False, default=0)  # sum of credit_entries amounts

    # Expense components
    waiter_expense = Column(Float, nullable=False, default=0)
    servers_expense = Column(Float, nullable=False, default=0)
    bookkeeping_expense = Column(Float, nullable=False, default=0)
    other_expenses = Column(Float, nullable=False, default=0)

    # Powder usage
    packets_used = Column(Float, nullable=False, default=0)
    cups_used = Column(Float, nullable=False, default=0)

    # Derived on every write that touches their inputs
    powder_cost = Column(Float, nullable=False, default=0)
    profit = Column(Float, nullable=False, default=0)

    notes = Column(Text, nullable=True)

    # Opening balance snapshot
    opening_cash = Column(Float, nullable=False, default=0)
    opening_packets = Column(Float, nullable=False, default=0)
    opening_cups = Column(Float, nullable=False, default=0)
    opening_notes = Column(Text, nullable=True)

    # JSON text: [{"name": ..., "amount": ...}, ...]
    credit_entries = Column(Text, nullable=False, default="[]")

    # Staff on shift
    bookkeeper_name = Column(String(255), nullable=True)
    waiter_name = Column(String(255), nullable=True)
    servers_names = Column(Text, nullable=False, default="[]")
    additional_payments = Column(Text, nullable=False, default="[]")

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

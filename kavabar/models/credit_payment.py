from datetime import datetime
from sqlalchemy import CheckConstraint, Column, Integer, String, Float, Date, DateTime, Text, ForeignKey

from kavabar.models.base import Base


class CreditPayment(Base):
    __tablename__ = "credit_payments"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_credit_payments_amount_positive"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Matches the name used in daily entry credit line items
    creditor_name = Column(String(255), nullable=False, index=True)
    payment_date = Column(Date, nullable=False, index=True)

    # Payment amount collected, always positive
    amount = Column(Float, nullable=False)

    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

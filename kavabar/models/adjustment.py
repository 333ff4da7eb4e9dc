from datetime import datetime
from sqlalchemy import CheckConstraint, Column, Integer, String, Float, Date, DateTime, Text, ForeignKey

from kavabar.models.base import Base


class Adjustment(Base):
    __tablename__ = "adjustments"
    __table_args__ = (
        CheckConstraint("type IN ('cash', 'powder')", name="ck_adjustments_type"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)

    # "cash" or "powder"
    type = Column(String(10), nullable=False)

    # Signed: currency for cash, cup-equivalents (packets * 8 + cups) for powder
    amount = Column(Float, nullable=False)

    # Reason for the correction
    notes = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

from datetime import datetime
from sqlalchemy import CheckConstraint, Column, Integer, String, Float, Date, DateTime, Text, ForeignKey

from kavabar.models.base import Base


class PowderPurchase(Base):
    __tablename__ = "powder_purchases"
    __table_args__ = (
        CheckConstraint(
            "payment_method IN ('cash', 'credit', 'bank_transfer')",
            name="ck_powder_purchases_payment_method",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    purchase_date = Column(Date, nullable=False, index=True)
    supplier_name = Column(String(255), nullable=True)
    packets_purchased = Column(Float, nullable=False, default=0)
    cost_per_packet = Column(Float, nullable=False)

    # packets_purchased * cost_per_packet
    total_cost = Column(Float, nullable=False)

    # "cash", "credit" or "bank_transfer"
    payment_method = Column(String(20), nullable=True)
    invoice_number = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

from .base import Base
from .user import User
from .daily_entry import DailyEntry
from .powder_purchase import PowderPurchase
from .adjustment import Adjustment
from .credit_payment import CreditPayment

__all__ = ["Base", "User", "DailyEntry", "PowderPurchase", "Adjustment", "CreditPayment"]

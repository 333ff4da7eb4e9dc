"""
Service for the powder stock balance.

Stock is never stored; it is what was bought, plus powder adjustments,
minus what the daily entries report as used. Everything is summed in
cup-equivalents and turned back into packets + cups at the end.
"""
import logging
from datetime import date
from typing import Optional, TypedDict

from sqlalchemy import func
from sqlalchemy.exc import OperationalError, ProgrammingError
from sqlalchemy.orm import Session

from kavabar.core.errors import ValidationError
from kavabar.core.scope import Scope
from kavabar.core.units import CUPS_PER_PACKET, to_cups, to_packets_and_cups
from kavabar.models.adjustment import Adjustment
from kavabar.models.daily_entry import DailyEntry
from kavabar.models.powder_purchase import PowderPurchase

logger = logging.getLogger(__name__)


class PacketsAndCups(TypedDict):
    packets: int
    cups: float


class InventorySummary(TypedDict):
    """Structure for the inventory balance."""
    total_purchased_packets: float
    total_purchased_cups: float
    total_used_from_packets: float
    total_used_from_cups: float
    total_used_cups_converted: float
    total_powder_adjustments: float
    remaining_cups_balance: float
    formatted: PacketsAndCups
    is_deficit: bool


def reconcile_inventory(
    purchased_packets: float,
    used_packets: float,
    used_cups: float,
    adjustment_cups: float,
) -> InventorySummary:
    """
    Balance = purchased + adjustments - used, all in cups.

    A negative balance is reported as is (``is_deficit``), never clamped.
    """
    purchased_cups = purchased_packets * CUPS_PER_PACKET
    total_used = to_cups(used_packets, used_cups)
    balance = purchased_cups + adjustment_cups - total_used
    packets, cups = to_packets_and_cups(balance)

    return {
        "total_purchased_packets": purchased_packets,
        "total_purchased_cups": purchased_cups,
        "total_used_from_packets": used_packets,
        "total_used_from_cups": used_cups,
        "total_used_cups_converted": total_used,
        "total_powder_adjustments": adjustment_cups,
        "remaining_cups_balance": balance,
        "formatted": {"packets": packets, "cups": cups},
        "is_deficit": balance < 0,
    }


def _powder_adjustment_total(db: Session, scope: Scope, start_date, end_date) -> float:
    query = scope.apply(
        db.query(func.coalesce(func.sum(Adjustment.amount), 0)).filter(Adjustment.type == "powder"),
        Adjustment.user_id,
    )
    if start_date:
        query = query.filter(Adjustment.date >= start_date)
    if end_date:
        query = query.filter(Adjustment.date <= end_date)
    try:
        return float(query.scalar())
    except (OperationalError, ProgrammingError) as exc:
        db.rollback()
        logger.warning("adjustments unavailable, inventory computed without them: %s", exc.orig)
        return 0.0


def get_inventory_summary(
    db: Session,
    scope: Scope,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> InventorySummary:
    """
    Current powder balance for everything visible under ``scope``.

    Args:
        db: Database session
        scope: Owners whose records count
        start_date: Optional lower bound on purchase/entry/adjustment dates
        end_date: Optional upper bound

    Raises:
        ValidationError: If start_date > end_date
    """
    if start_date and end_date and start_date > end_date:
        raise ValidationError("start_date must be <= end_date")

    purchase_query = scope.apply(
        db.query(func.coalesce(func.sum(PowderPurchase.packets_purchased), 0)),
        PowderPurchase.user_id,
    )
    usage_query = scope.apply(
        db.query(
            func.coalesce(func.sum(DailyEntry.packets_used), 0),
            func.coalesce(func.sum(DailyEntry.cups_used), 0),
        ),
        DailyEntry.user_id,
    )
    if start_date:
        purchase_query = purchase_query.filter(PowderPurchase.purchase_date >= start_date)
        usage_query = usage_query.filter(DailyEntry.date >= start_date)
    if end_date:
        purchase_query = purchase_query.filter(PowderPurchase.purchase_date <= end_date)
        usage_query = usage_query.filter(DailyEntry.date <= end_date)

    purchased_packets = float(purchase_query.scalar())
    used_packets, used_cups = usage_query.one()
    adjustment_cups = _powder_adjustment_total(db, scope, start_date, end_date)

    return reconcile_inventory(purchased_packets, float(used_packets), float(used_cups), adjustment_cups)

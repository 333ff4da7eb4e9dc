"""
Service for period summaries (cashflow and daily/weekly/monthly reports).

Income, expenses, powder usage and profit come from the daily entries.
Powder purchases are summed separately: they are the cash actually spent on
stock, while an entry's ``powder_cost`` values what was used that day.
Cash adjustments shift the net cashflow; powder adjustments are reported
alongside but do not touch cash.
"""
import logging
from calendar import monthrange
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Tuple, TypedDict

from sqlalchemy.exc import OperationalError, ProgrammingError
from sqlalchemy.orm import Session

from kavabar.core.entry_math import EXPENSE_FIELDS
from kavabar.core.errors import ValidationError
from kavabar.core.scope import Scope
from kavabar.core.serialization_helpers import serialize_date
from kavabar.models.adjustment import Adjustment
from kavabar.models.daily_entry import DailyEntry
from kavabar.models.powder_purchase import PowderPurchase

logger = logging.getLogger(__name__)

PERIODS = ("daily", "weekly", "monthly")

# Columns summed per day and over the whole window
DAY_COLUMNS = (
    "cash_in_hand",
    "credits",
    "waiter_expense",
    "servers_expense",
    "bookkeeping_expense",
    "other_expenses",
    "operational_expenses",
    "powder_cost",
    "profit",
    "packets_used",
    "cups_used",
    "packets_purchased",
    "purchase_cost",
    "cash_adjustments",
    "powder_adjustments",
    "income",
    "expenses",
    "net_cashflow",
)


class DayBreakdown(TypedDict, total=False):
    """One row per date that has an entry, a purchase or an adjustment."""
    date: str
    entries_count: int
    cash_in_hand: float
    credits: float
    waiter_expense: float
    servers_expense: float
    bookkeeping_expense: float
    other_expenses: float
    operational_expenses: float
    powder_cost: float
    profit: float
    packets_used: float
    cups_used: float
    packets_purchased: float
    purchase_cost: float
    cash_adjustments: float
    powder_adjustments: float
    income: float
    expenses: float
    net_cashflow: float


class PeriodSummary(TypedDict):
    period: str
    start_date: str
    end_date: str
    income: Dict[str, float]
    expenses: Dict[str, float]
    usage: Dict[str, float]
    purchases: Dict[str, float]
    adjustments: Dict[str, float]
    profit: float
    net_cashflow: float
    totals: Dict[str, float]
    entries: List[DayBreakdown]


def period_bounds(period: str, anchor: date) -> Tuple[date, date]:
    """
    Window containing ``anchor``: the day itself, its Monday-Sunday week or
    its calendar month.
    """
    if period == "daily":
        return anchor, anchor
    if period == "weekly":
        start = anchor - timedelta(days=anchor.weekday())
        return start, start + timedelta(days=6)
    if period == "monthly":
        last_day = monthrange(anchor.year, anchor.month)[1]
        return anchor.replace(day=1), anchor.replace(day=last_day)
    raise ValidationError(f"Invalid period '{period}'. Must be one of: {', '.join(PERIODS)}")


def resolve_window(
    period: str,
    anchor: Optional[date] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> Tuple[date, date]:
    if period not in PERIODS:
        raise ValidationError(f"Invalid period '{period}'. Must be one of: {', '.join(PERIODS)}")
    if start_date or end_date:
        if not (start_date and end_date):
            raise ValidationError("start_date and end_date must be given together")
        if start_date > end_date:
            raise ValidationError("start_date must be <= end_date")
        return start_date, end_date
    return period_bounds(period, anchor or date.today())


def _empty_day(day: str) -> Dict[str, Any]:
    row: Dict[str, Any] = {"date": day, "entries_count": 0}
    row.update({column: 0.0 for column in DAY_COLUMNS})
    return row


def _adjustments_or_empty(db: Session, scope: Scope, start: date, end: date) -> List[Adjustment]:
    query = scope.apply(db.query(Adjustment), Adjustment.user_id).filter(
        Adjustment.date >= start, Adjustment.date <= end
    )
    try:
        return query.order_by(Adjustment.date.desc()).all()
    except (OperationalError, ProgrammingError) as exc:
        db.rollback()
        logger.warning("adjustments unavailable, summary computed without them: %s", exc.orig)
        return []


def summarize_period(
    entries: List[DailyEntry],
    purchases: List[PowderPurchase],
    adjustments: List[Adjustment],
) -> Tuple[Dict[str, float], List[DayBreakdown]]:
    """
    Fold records into per-day rows and window totals.

    Every total is the sum of the same column over the day rows, so the
    breakdown always adds up to the summary.
    """
    days: Dict[str, Dict[str, Any]] = {}

    def day_row(value) -> Dict[str, Any]:
        key = serialize_date(value)
        if key not in days:
            days[key] = _empty_day(key)
        return days[key]

    for entry in entries:
        row = day_row(entry.date)
        row["entries_count"] += 1
        row["cash_in_hand"] += entry.cash_in_hand or 0
        row["credits"] += entry.credits or 0
        for field in EXPENSE_FIELDS:
            row[field] += getattr(entry, field) or 0
        row["powder_cost"] += entry.powder_cost or 0
        row["profit"] += entry.profit or 0
        row["packets_used"] += entry.packets_used or 0
        row["cups_used"] += entry.cups_used or 0

    for purchase in purchases:
        row = day_row(purchase.purchase_date)
        row["packets_purchased"] += purchase.packets_purchased or 0
        row["purchase_cost"] += purchase.total_cost or 0

    for adjustment in adjustments:
        row = day_row(adjustment.date)
        if adjustment.type == "cash":
            row["cash_adjustments"] += adjustment.amount or 0
        elif adjustment.type == "powder":
            row["powder_adjustments"] += adjustment.amount or 0

    for row in days.values():
        row["operational_expenses"] = sum(row[field] for field in EXPENSE_FIELDS)
        row["income"] = row["cash_in_hand"] + row["credits"]
        row["expenses"] = row["purchase_cost"] + row["operational_expenses"]
        row["net_cashflow"] = row["income"] - row["expenses"] + row["cash_adjustments"]

    breakdown = sorted(days.values(), key=lambda r: r["date"], reverse=True)
    totals = {column: sum(row[column] for row in breakdown) for column in DAY_COLUMNS}
    totals["entries_count"] = sum(row["entries_count"] for row in breakdown)
    return totals, breakdown


def get_period_summary(
    db: Session,
    scope: Scope,
    period: str = "monthly",
    anchor: Optional[date] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> PeriodSummary:
    """
    Cashflow and profit summary for one window.

    The window comes from ``start_date``/``end_date`` when given, otherwise
    from ``period`` around ``anchor`` (today by default).
    """
    start, end = resolve_window(period, anchor, start_date, end_date)

    entries = (
        scope.apply(db.query(DailyEntry), DailyEntry.user_id)
        .filter(DailyEntry.date >= start, DailyEntry.date <= end)
        .all()
    )
    purchases = (
        scope.apply(db.query(PowderPurchase), PowderPurchase.user_id)
        .filter(PowderPurchase.purchase_date >= start, PowderPurchase.purchase_date <= end)
        .all()
    )
    adjustments = _adjustments_or_empty(db, scope, start, end)

    totals, breakdown = summarize_period(entries, purchases, adjustments)

    return {
        "period": period,
        "start_date": serialize_date(start),
        "end_date": serialize_date(end),
        "income": {
            "total_cash_in_hand": totals["cash_in_hand"],
            "total_credits": totals["credits"],
            "total": totals["income"],
        },
        "expenses": {
            "powder_purchases": totals["purchase_cost"],
            "operational_expenses": totals["operational_expenses"],
            "waiter": totals["waiter_expense"],
            "servers": totals["servers_expense"],
            "bookkeeping": totals["bookkeeping_expense"],
            "other": totals["other_expenses"],
            "total": totals["expenses"],
        },
        "usage": {
            "powder_cost": totals["powder_cost"],
            "packets_used": totals["packets_used"],
            "cups_used": totals["cups_used"],
        },
        "purchases": {
            "packets_purchased": totals["packets_purchased"],
            "total_cost": totals["purchase_cost"],
        },
        "adjustments": {
            "cash": totals["cash_adjustments"],
            "powder": totals["powder_adjustments"],
        },
        "profit": totals["profit"],
        "net_cashflow": totals["net_cashflow"],
        "totals": totals,
        "entries": breakdown,
    }

"""
Service for the creditors ledger.

Credits live as JSON line items inside each daily entry; payments collected
later are their own rows. Both are merged into one chronological list of
records with running totals, overall and per creditor.
"""
import logging
import math
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, TypedDict

from sqlalchemy.exc import OperationalError, ProgrammingError
from sqlalchemy.orm import Session

from kavabar.core.scope import Scope
from kavabar.core.serialization_helpers import load_json_list, serialize_date
from kavabar.models.credit_payment import CreditPayment
from kavabar.models.daily_entry import DailyEntry

logger = logging.getLogger(__name__)


class CreditorRecord(TypedDict):
    """One credit extended or one payment collected."""
    date: str
    creditor_name: str
    amount: float
    type: str  # "credit" or "payment"
    bookkeeper_name: Optional[str]
    group_name: Optional[str]
    notes: Optional[str]


class CreditorBalance(TypedDict):
    name: str
    total_credits: float
    total_payments: float
    outstanding_balance: float


class CreditLedger(TypedDict):
    records: List[CreditorRecord]
    total_credits: float
    total_payments: float
    outstanding_balance: float
    count: int
    unique_creditors: List[str]
    unique_groups: List[str]
    creditors: List[CreditorBalance]


def _date_key(value: Any) -> str:
    return value if isinstance(value, str) else serialize_date(value)


def _credit_records(entry: DailyEntry, creditor_filter: Optional[str], names: set) -> List[CreditorRecord]:
    try:
        items = load_json_list(entry.credit_entries)
    except ValueError:
        logger.warning("Skipping unreadable credit_entries for entry %s (%s)", entry.id, entry.date)
        return []

    records: List[CreditorRecord] = []
    for item in items:
        if not isinstance(item, dict):
            logger.warning("Skipping credit item %r on entry %s", item, entry.id)
            continue
        name = item.get("name")
        if not isinstance(name, str) or not name.strip():
            logger.warning("Skipping credit item without a usable name %r on entry %s", name, entry.id)
            continue
        try:
            amount = float(item.get("amount") or 0)
        except (TypeError, ValueError):
            amount = math.nan
        if not math.isfinite(amount):
            logger.warning("Skipping credit item with bad amount %r on entry %s", item.get("amount"), entry.id)
            continue

        names.add(name)
        # Credits are nested in entries, so the name filter runs here
        if creditor_filter and creditor_filter.lower() not in name.lower():
            continue

        records.append(
            {
                "date": _date_key(entry.date),
                "creditor_name": name,
                "amount": amount,
                "type": "credit",
                "bookkeeper_name": entry.bookkeeper_name or "N/A",
                "group_name": entry.group_name or "N/A",
                "notes": None,
            }
        )
    return records


def build_credit_ledger(
    entries: Iterable[DailyEntry],
    payments: Iterable[CreditPayment],
    creditor_name: Optional[str] = None,
) -> CreditLedger:
    """
    Merge entry credit items and payments into one ledger.

    ``payments`` are expected to be filtered by name already; ``entries``
    are filtered here. Records are sorted newest first; on the same date
    credits come before payments, each in the order given.
    """
    records: List[CreditorRecord] = []
    creditor_names: set = set()
    group_names: set = set()

    for entry in entries:
        if entry.group_name:
            group_names.add(entry.group_name)
        records.extend(_credit_records(entry, creditor_name, creditor_names))

    for payment in payments:
        if payment.creditor_name:
            creditor_names.add(payment.creditor_name)
        records.append(
            {
                "date": _date_key(payment.payment_date),
                "creditor_name": payment.creditor_name,
                "amount": float(payment.amount),
                "type": "payment",
                "bookkeeper_name": None,
                "group_name": None,
                "notes": payment.notes,
            }
        )

    # ISO dates sort chronologically as strings; sort() is stable
    records.sort(key=lambda r: r["date"], reverse=True)

    total_credits = 0.0
    total_payments = 0.0
    per_creditor: Dict[str, CreditorBalance] = {}
    for record in records:
        balance = per_creditor.setdefault(
            record["creditor_name"],
            {"name": record["creditor_name"], "total_credits": 0.0, "total_payments": 0.0, "outstanding_balance": 0.0},
        )
        if record["type"] == "credit":
            total_credits += record["amount"]
            balance["total_credits"] += record["amount"]
        else:
            total_payments += record["amount"]
            balance["total_payments"] += record["amount"]
    for balance in per_creditor.values():
        balance["outstanding_balance"] = balance["total_credits"] - balance["total_payments"]

    return {
        "records": records,
        "total_credits": total_credits,
        "total_payments": total_payments,
        "outstanding_balance": total_credits - total_payments,
        "count": len(records),
        "unique_creditors": sorted(creditor_names),
        "unique_groups": sorted(group_names),
        "creditors": [per_creditor[name] for name in sorted(per_creditor)],
    }


def query_credit_payments(
    db: Session,
    scope: Scope,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    creditor_name: Optional[str] = None,
) -> List[CreditPayment]:
    query = scope.apply(db.query(CreditPayment), CreditPayment.user_id)
    if start_date:
        query = query.filter(CreditPayment.payment_date >= start_date)
    if end_date:
        query = query.filter(CreditPayment.payment_date <= end_date)
    if creditor_name:
        query = query.filter(CreditPayment.creditor_name.ilike(f"%{creditor_name}%"))
    return query.order_by(CreditPayment.payment_date.desc(), CreditPayment.id.asc()).all()


def _payments_or_empty(db: Session, scope: Scope, start_date, end_date, creditor_name) -> List[CreditPayment]:
    try:
        return query_credit_payments(db, scope, start_date, end_date, creditor_name)
    except (OperationalError, ProgrammingError) as exc:
        db.rollback()
        logger.warning("credit_payments unavailable, ledger built from entries only: %s", exc.orig)
        return []


def get_creditors_report(
    db: Session,
    scope: Scope,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    creditor_name: Optional[str] = None,
    group_name: Optional[str] = None,
) -> CreditLedger:
    """Credit ledger for everything visible under ``scope``."""
    entries_query = scope.apply(db.query(DailyEntry), DailyEntry.user_id)
    if start_date:
        entries_query = entries_query.filter(DailyEntry.date >= start_date)
    if end_date:
        entries_query = entries_query.filter(DailyEntry.date <= end_date)
    if group_name:
        entries_query = entries_query.filter(DailyEntry.group_name.ilike(f"%{group_name}%"))
    entries = entries_query.order_by(DailyEntry.date.desc(), DailyEntry.id.asc()).all()

    payments = _payments_or_empty(db, scope, start_date, end_date, creditor_name)
    return build_credit_ledger(entries, payments, creditor_name)

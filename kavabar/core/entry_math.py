"""
Derived fields of a daily entry.

``ENTRY_FIELDS`` is the single list of writable entry columns and their
defaults. ``DERIVED_FIELDS`` says which inputs each derived column depends
on; ``recompute_derived`` only touches a derived column when one of its
inputs is part of the update, so a sparse patch leaves the others exactly as
stored.
"""
import math
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from kavabar.core.errors import ValidationError
from kavabar.core.units import powder_cost as _powder_cost

EXPENSE_FIELDS = ("waiter_expense", "servers_expense", "bookkeeping_expense", "other_expenses")

# Inputs of the cost/profit formulas; must be finite and >= 0
CALCULATOR_FIELDS = ("cash_in_hand", "credits") + EXPENSE_FIELDS + ("packets_used", "cups_used")

OPENING_FIELDS = ("opening_cash", "opening_packets", "opening_cups")

ENTRY_FIELDS: Dict[str, Any] = {
    "group_name": None,
    "cash_in_hand": 0,
    "credits": 0,
    "waiter_expense": 0,
    "servers_expense": 0,
    "bookkeeping_expense": 0,
    "other_expenses": 0,
    "packets_used": 0,
    "cups_used": 0,
    "notes": None,
    "opening_cash": 0,
    "opening_packets": 0,
    "opening_cups": 0,
    "opening_notes": None,
    "credit_entries": [],
    "bookkeeper_name": None,
    "waiter_name": None,
    "servers_names": [],
    "additional_payments": [],
}


def calculate_profit(
    cash_in_hand: float,
    credits: float,
    waiter: float,
    servers: float,
    bookkeeping: float,
    other: float,
    powder_cost: float,
) -> float:
    # Expenses are added, not subtracted; this matches the figures the bar
    # has always reported and is kept until the owners say otherwise.
    total_expenses = waiter + servers + bookkeeping + other
    return cash_in_hand + credits + total_expenses - powder_cost


def credit_total(credit_entries: List[Mapping[str, Any]]) -> float:
    return sum(float(item.get("amount") or 0) for item in credit_entries)


def _derive_credits(record: Mapping[str, Any]) -> float:
    return credit_total(record["credit_entries"])


def _derive_powder_cost(record: Mapping[str, Any]) -> float:
    return _powder_cost(record["packets_used"], record["cups_used"])


def _derive_profit(record: Mapping[str, Any]) -> float:
    return calculate_profit(
        record["cash_in_hand"],
        record["credits"],
        record["waiter_expense"],
        record["servers_expense"],
        record["bookkeeping_expense"],
        record["other_expenses"],
        record["powder_cost"],
    )


# Evaluated in order: later entries may depend on earlier derived fields
DERIVED_FIELDS: List[Tuple[str, Tuple[str, ...], Callable[[Mapping[str, Any]], float]]] = [
    ("credits", ("credit_entries",), _derive_credits),
    ("powder_cost", ("packets_used", "cups_used"), _derive_powder_cost),
    ("profit", ("powder_cost",) + CALCULATOR_FIELDS, _derive_profit),
]


def validate_numbers(values: Mapping[str, Any]) -> None:
    """Reject NaN/inf anywhere and negatives in the calculator inputs."""
    for field in CALCULATOR_FIELDS + OPENING_FIELDS:
        if field not in values or values[field] is None:
            continue
        value = values[field]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValidationError(f"{field} must be a number")
        if not math.isfinite(value):
            raise ValidationError(f"{field} must be a finite number")
        if field in CALCULATOR_FIELDS and value < 0:
            raise ValidationError(f"{field} cannot be negative")

    for item in values.get("credit_entries") or []:
        amount = item.get("amount")
        if isinstance(amount, bool) or not isinstance(amount, (int, float)) or not math.isfinite(amount):
            raise ValidationError("credit entry amount must be a finite number")
        if amount < 0:
            raise ValidationError("credit entry amount cannot be negative")
        if not str(item.get("name") or "").strip():
            raise ValidationError("credit entry name is required")


def recompute_derived(
    current: Mapping[str, Any],
    updates: Mapping[str, Any],
    full: bool = False,
) -> Dict[str, Any]:
    """
    Return the derived columns that change when ``updates`` is applied.

    ``current`` holds the stored values (or the defaults for a new entry).
    With ``full`` every derived column is recomputed; otherwise only those
    whose dependencies appear in ``updates``. An explicit ``credits`` value
    is ignored whenever ``credit_entries`` is supplied alongside it.
    """
    merged: Dict[str, Any] = dict(current)
    merged.update(updates)
    touched = set(updates)

    derived: Dict[str, Any] = {}
    for field, depends_on, compute in DERIVED_FIELDS:
        if field == "credits" and "credit_entries" not in touched:
            continue
        if full or touched.intersection(depends_on):
            merged[field] = compute(merged)
            derived[field] = merged[field]
            touched.add(field)
    return derived


def build_entry_values(
    current: Optional[Mapping[str, Any]],
    updates: Mapping[str, Any],
) -> Dict[str, Any]:
    """
    Values to write for an upsert.

    ``current=None`` means a new row: missing fields take their defaults and
    every derived column is computed. Otherwise only the supplied fields and
    the derived columns depending on them are returned.
    """
    unknown = set(updates) - set(ENTRY_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown entry fields: {', '.join(sorted(unknown))}")
    validate_numbers(updates)

    if current is None:
        base = {**ENTRY_FIELDS, "powder_cost": 0, "profit": 0}
        values = {**base, **updates}
        values.update(recompute_derived(base, updates, full=True))
        return values

    values = dict(updates)
    values.update(recompute_derived(current, updates))
    return values

"""
Daily entries: upsert by (owner, date), sparse patch and listing.

A create, a full replace and a patch all go through ``upsert_entry`` so the
column list and the derived-field rules live in one place
(``kavabar.core.entry_math``).
"""
import logging
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from kavabar.core.entry_math import ENTRY_FIELDS, build_entry_values
from kavabar.core.errors import ValidationError
from kavabar.core.scope import Scope
from kavabar.core.serialization_helpers import dump_json_list, load_json_list, serialize_date
from kavabar.models.daily_entry import DailyEntry

logger = logging.getLogger(__name__)

JSON_LIST_FIELDS = ("credit_entries", "servers_names", "additional_payments")


def _load_list_field(entry: DailyEntry, field: str) -> List[Any]:
    try:
        return load_json_list(getattr(entry, field))
    except ValueError:
        logger.warning("Unreadable %s on entry %s (%s)", field, entry.id, entry.date)
        return []


def entry_to_values(entry: DailyEntry) -> Dict[str, Any]:
    """Stored entry as plain values, JSON list columns parsed."""
    values = {field: getattr(entry, field) for field in ENTRY_FIELDS}
    for field in JSON_LIST_FIELDS:
        values[field] = _load_list_field(entry, field)
    values["powder_cost"] = entry.powder_cost
    values["profit"] = entry.profit
    return values


def serialize_entry(entry: DailyEntry) -> Dict[str, Any]:
    data = entry_to_values(entry)
    data.update(
        {
            "id": entry.id,
            "user_id": entry.user_id,
            "date": serialize_date(entry.date),
            "created_at": serialize_date(entry.created_at),
        }
    )
    return data


def _apply(entry: DailyEntry, values: Dict[str, Any]) -> None:
    for field, value in values.items():
        if field in JSON_LIST_FIELDS:
            value = dump_json_list(value)
        setattr(entry, field, value)


def get_entry(db: Session, owner_id: int, entry_date: date) -> Optional[DailyEntry]:
    return (
        db.query(DailyEntry)
        .filter(DailyEntry.user_id == owner_id, DailyEntry.date == entry_date)
        .first()
    )


def upsert_entry(
    db: Session,
    owner_id: int,
    entry_date: Optional[date],
    data: Dict[str, Any],
    partial: bool = False,
) -> Tuple[DailyEntry, bool]:
    """
    Create or update the entry of ``owner_id`` for ``entry_date``.

    With ``partial`` only the supplied fields change and derived columns are
    recomputed only when their inputs are among them; otherwise the entry is
    replaced, missing fields falling back to their defaults. Returns the
    stored row and whether it already existed.
    """
    if entry_date is None:
        raise ValidationError("Date is required")

    existing = get_entry(db, owner_id, entry_date)

    if existing is not None and partial:
        values = build_entry_values(entry_to_values(existing), data)
    else:
        # New row, or full replace of an existing one
        values = build_entry_values(None, data)

    if existing is None:
        entry = DailyEntry(user_id=owner_id, date=entry_date)
        db.add(entry)
    else:
        entry = existing

    _apply(entry, values)
    db.commit()
    db.refresh(entry)

    logger.info(
        "%s daily entry user=%s date=%s fields=%s",
        "Updated" if existing is not None else "Created",
        owner_id,
        entry_date,
        ",".join(sorted(data)) or "-",
    )
    return entry, existing is not None


def list_entries(
    db: Session,
    scope: Scope,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[DailyEntry]:
    query = scope.apply(db.query(DailyEntry), DailyEntry.user_id)
    if start_date:
        query = query.filter(DailyEntry.date >= start_date)
    if end_date:
        query = query.filter(DailyEntry.date <= end_date)
    return query.order_by(DailyEntry.date.desc(), DailyEntry.id.asc()).all()

import datetime
import json
from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session

from kavabar.core.database import get_db
from kavabar.core.deps import get_current_user
from kavabar.core.scope import resolve_owner, resolve_scope
from kavabar.models.user import User
from kavabar.services.entry_service import list_entries, serialize_entry, upsert_entry

router = APIRouter()


class CreditLineItem(BaseModel):
    name: str
    amount: float


def _parse_json_list(value: Any) -> Any:
    # The dashboard form sends list columns as JSON strings
    if isinstance(value, str):
        try:
            return json.loads(value) if value.strip() else []
        except json.JSONDecodeError as exc:
            raise ValueError(f"invalid JSON list: {exc.msg}") from exc
    return value


class EntryFields(BaseModel):
    group_name: Optional[str] = None
    cash_in_hand: Optional[float] = None
    credits: Optional[float] = None
    waiter_expense: Optional[float] = None
    servers_expense: Optional[float] = None
    bookkeeping_expense: Optional[float] = None
    other_expenses: Optional[float] = None
    packets_used: Optional[float] = None
    cups_used: Optional[float] = None
    notes: Optional[str] = None
    opening_cash: Optional[float] = None
    opening_packets: Optional[float] = None
    opening_cups: Optional[float] = None
    opening_notes: Optional[str] = None
    credit_entries: Optional[List[CreditLineItem]] = None
    bookkeeper_name: Optional[str] = None
    waiter_name: Optional[str] = None
    servers_names: Optional[List[str]] = None
    additional_payments: Optional[List[Dict[str, Any]]] = None

    @field_validator("credit_entries", "servers_names", "additional_payments", mode="before")
    @classmethod
    def parse_list_columns(cls, value):
        return _parse_json_list(value)


class EntryWrite(EntryFields):
    date: Optional[datetime.date] = None
    # Privileged callers may write another user's entry
    user_id: Optional[int] = None

    def field_values(self) -> Dict[str, Any]:
        """Fields the caller actually sent, nulls on numeric fields dropped."""
        values = self.model_dump(exclude_unset=True, exclude={"date", "user_id"})
        return {
            key: value
            for key, value in values.items()
            if value is not None or key in {"group_name", "notes", "opening_notes", "bookkeeper_name", "waiter_name"}
        }


@router.get("")
def get_entries(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    user_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """List daily entries, newest first. Regular users only see their own."""
    scope = resolve_scope(current_user, user_id)
    return [serialize_entry(e) for e in list_entries(db, scope, start_date, end_date)]


@router.post("")
def create_or_replace_entry(
    data: EntryWrite,
    response: Response,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Create the entry for a date, or replace it if one already exists."""
    owner_id = resolve_owner(db, current_user, data.user_id)
    entry, updated = upsert_entry(db, owner_id, data.date, data.field_values(), partial=False)
    response.status_code = status.HTTP_200_OK if updated else status.HTTP_201_CREATED
    return {**serialize_entry(entry), "updated": updated}


@router.patch("")
def patch_entry(
    data: EntryWrite,
    response: Response,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Update only the supplied fields of the entry for a date.
    If there is no entry yet it is created from the supplied fields and defaults.
    """
    owner_id = resolve_owner(db, current_user, data.user_id)
    entry, updated = upsert_entry(db, owner_id, data.date, data.field_values(), partial=True)
    response.status_code = status.HTTP_200_OK if updated else status.HTTP_201_CREATED
    return {**serialize_entry(entry), "updated": updated}

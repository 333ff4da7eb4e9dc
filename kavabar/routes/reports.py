from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from kavabar.core.database import get_db
from kavabar.core.deps import get_current_user
from kavabar.core.scope import resolve_scope
from kavabar.models.user import User
from kavabar.services.cashflow_service import get_period_summary

router = APIRouter()


@router.get("/cashflow")
def get_cashflow(
    period: str = "monthly",
    date: Optional[date] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    user_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Cashflow for a window: income, purchases and operating expenses,
    cash adjustments and the per-day breakdown. Defaults to the current month.
    """
    scope = resolve_scope(current_user, user_id)
    return get_period_summary(db, scope, period=period, anchor=date, start_date=start_date, end_date=end_date)


@router.get("/reports")
def get_report(
    period: str = "daily",
    date: Optional[date] = None,
    user_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Daily, weekly (Monday start) or monthly report around ``date`` (today by default)"""
    scope = resolve_scope(current_user, user_id)
    return get_period_summary(db, scope, period=period, anchor=date)

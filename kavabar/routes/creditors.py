from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from kavabar.core.database import get_db
from kavabar.core.deps import get_current_user
from kavabar.core.roles import CREDIT_ROLES
from kavabar.core.scope import resolve_scope
from kavabar.models.user import User
from kavabar.services.credit_ledger_service import get_creditors_report

router = APIRouter()


@router.get("")
def get_creditors(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    creditor_name: Optional[str] = None,
    group_name: Optional[str] = None,
    user_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Credits given (from daily entries) and payments collected, newest first,
    with totals and the outstanding balance overall and per creditor.
    """
    scope = resolve_scope(current_user, user_id, CREDIT_ROLES)
    return get_creditors_report(
        db,
        scope,
        start_date=start_date,
        end_date=end_date,
        creditor_name=creditor_name,
        group_name=group_name,
    )

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from kavabar.core.database import get_db
from kavabar.core.deps import get_current_user
from kavabar.core.scope import resolve_scope
from kavabar.models.user import User
from kavabar.services.inventory_service import get_inventory_summary

router = APIRouter()


@router.get("")
def get_inventory(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    user_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Powder on hand: purchases plus powder adjustments minus usage.
    Admins without a user_id get the balance across all users.
    """
    scope = resolve_scope(current_user, user_id)
    return get_inventory_summary(db, scope, start_date=start_date, end_date=end_date)

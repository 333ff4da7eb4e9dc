import logging
import math
import datetime
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from kavabar.core.database import get_db
from kavabar.core.deps import get_current_user
from kavabar.core.errors import ValidationError
from kavabar.core.scope import resolve_owner, resolve_scope
from kavabar.models.adjustment import Adjustment
from kavabar.models.user import User

router = APIRouter()
logger = logging.getLogger(__name__)

ADJUSTMENT_TYPES = {"cash", "powder"}


class AdjustmentCreate(BaseModel):
    date: Optional[datetime.date] = None
    type: Optional[str] = None
    # Signed; powder adjustments are in cups (packets * 8 + cups)
    amount: Optional[float] = None
    notes: Optional[str] = None
    user_id: Optional[int] = None


class AdjustmentResponse(BaseModel):
    id: int
    user_id: int
    date: datetime.date
    type: str
    amount: float
    notes: str
    created_at: datetime.datetime

    class Config:
        from_attributes = True


@router.get("", response_model=List[AdjustmentResponse])
def get_adjustments(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    user_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """List adjustments, newest first"""
    query = resolve_scope(current_user, user_id).apply(db.query(Adjustment), Adjustment.user_id)
    if start_date:
        query = query.filter(Adjustment.date >= start_date)
    if end_date:
        query = query.filter(Adjustment.date <= end_date)
    return query.order_by(Adjustment.date.desc(), Adjustment.created_at.desc(), Adjustment.id.desc()).all()


@router.post("", response_model=AdjustmentResponse, status_code=status.HTTP_201_CREATED)
def create_adjustment(
    data: AdjustmentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Record a manual cash or powder correction. A reason is required."""
    owner_id = resolve_owner(db, current_user, data.user_id)

    if data.date is None or data.type is None or data.amount is None:
        raise ValidationError("Missing required fields")
    if data.type not in ADJUSTMENT_TYPES:
        raise ValidationError("Invalid adjustment type. Must be 'cash' or 'powder'")
    if not math.isfinite(data.amount):
        raise ValidationError("Invalid amount value")
    if not data.notes or not data.notes.strip():
        raise ValidationError("A reason (notes) is required for every adjustment")

    adjustment = Adjustment(
        user_id=owner_id,
        date=data.date,
        type=data.type,
        amount=data.amount,
        notes=data.notes.strip(),
    )
    db.add(adjustment)
    db.commit()
    db.refresh(adjustment)
    logger.info("Created %s adjustment %s user=%s amount=%s", adjustment.type, adjustment.id, owner_id, adjustment.amount)
    return adjustment


@router.delete("")
def clear_adjustments(
    user_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Delete every adjustment visible to the caller (optionally one user's, for admins)"""
    query = resolve_scope(current_user, user_id).apply(db.query(Adjustment), Adjustment.user_id)
    deleted = query.delete(synchronize_session=False)
    db.commit()
    logger.info("Cleared %s adjustments (requested by user %s)", deleted, current_user.id)
    return {"success": True, "deleted": deleted}

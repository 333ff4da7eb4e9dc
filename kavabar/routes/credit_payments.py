import logging
import math
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from kavabar.core.database import get_db
from kavabar.core.deps import get_current_user
from kavabar.core.errors import NotFoundError, ValidationError
from kavabar.core.roles import CREDIT_ROLES
from kavabar.core.scope import ensure_owner, resolve_owner, resolve_scope
from kavabar.models.credit_payment import CreditPayment
from kavabar.models.user import User
from kavabar.services.credit_ledger_service import query_credit_payments

router = APIRouter()
logger = logging.getLogger(__name__)


class CreditPaymentCreate(BaseModel):
    creditor_name: Optional[str] = None
    payment_date: Optional[date] = None
    amount: Optional[float] = None
    notes: Optional[str] = None
    user_id: Optional[int] = None


class CreditPaymentResponse(BaseModel):
    id: int
    user_id: int
    creditor_name: str
    payment_date: date
    amount: float
    notes: Optional[str]

    class Config:
        from_attributes = True


@router.get("", response_model=List[CreditPaymentResponse])
def get_credit_payments(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    creditor_name: Optional[str] = None,
    user_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """List payments collected from creditors. Admins and managers see everyone's."""
    scope = resolve_scope(current_user, user_id, CREDIT_ROLES)
    return query_credit_payments(db, scope, start_date, end_date, creditor_name)


@router.post("", response_model=CreditPaymentResponse, status_code=status.HTTP_201_CREATED)
def register_payment(
    data: CreditPaymentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Register a payment against a creditor's outstanding credit"""
    owner_id = resolve_owner(db, current_user, data.user_id, CREDIT_ROLES)

    creditor_name = (data.creditor_name or "").strip()
    if not creditor_name or data.payment_date is None or data.amount is None:
        raise ValidationError("Creditor name, payment date, and amount are required")
    if not math.isfinite(data.amount):
        raise ValidationError("Amount must be a finite number")
    if data.amount <= 0:
        raise ValidationError("Amount must be greater than 0")

    payment = CreditPayment(
        user_id=owner_id,
        creditor_name=creditor_name,
        payment_date=data.payment_date,
        amount=data.amount,
        notes=data.notes,
    )
    db.add(payment)
    db.commit()
    db.refresh(payment)
    logger.info("Registered payment %s from %s amount=%s", payment.id, creditor_name, payment.amount)
    return payment


@router.delete("")
def delete_payment(
    id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Delete a payment; only its owner, an admin or a manager may do so"""
    payment = db.query(CreditPayment).filter(CreditPayment.id == id).first()
    if not payment:
        raise NotFoundError("Payment not found")
    ensure_owner(current_user, payment.user_id, CREDIT_ROLES)

    db.delete(payment)
    db.commit()
    logger.info("Deleted credit payment %s", id)
    return {"success": True}

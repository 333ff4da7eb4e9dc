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
from kavabar.core.scope import ensure_owner, resolve_owner, resolve_scope
from kavabar.core.units import PACKET_COST
from kavabar.models.powder_purchase import PowderPurchase
from kavabar.models.user import User

router = APIRouter()
logger = logging.getLogger(__name__)

PAYMENT_METHODS = {"cash", "credit", "bank_transfer"}


class PowderPurchaseCreate(BaseModel):
    purchase_date: date
    supplier_name: Optional[str] = None
    packets_purchased: float
    cost_per_packet: float = PACKET_COST
    payment_method: Optional[str] = None
    invoice_number: Optional[str] = None
    notes: Optional[str] = None
    user_id: Optional[int] = None


class PowderPurchaseUpdate(PowderPurchaseCreate):
    id: int


class PowderPurchaseResponse(BaseModel):
    id: int
    user_id: int
    purchase_date: date
    supplier_name: Optional[str]
    packets_purchased: float
    cost_per_packet: float
    total_cost: float
    payment_method: Optional[str]
    invoice_number: Optional[str]
    notes: Optional[str]

    class Config:
        from_attributes = True


def _validate_purchase(data: PowderPurchaseCreate) -> None:
    for field in ("packets_purchased", "cost_per_packet"):
        if not math.isfinite(getattr(data, field)):
            raise ValidationError(f"{field} must be a finite number")
    if data.packets_purchased <= 0:
        raise ValidationError("Packets purchased must be greater than 0")
    if data.cost_per_packet < 0:
        raise ValidationError("Cost per packet cannot be negative")
    if data.payment_method is not None and data.payment_method not in PAYMENT_METHODS:
        raise ValidationError(
            f"Invalid payment method. Must be one of: {', '.join(sorted(PAYMENT_METHODS))}"
        )


def _get_purchase_for_write(db: Session, purchase_id: int, current_user: User) -> PowderPurchase:
    purchase = db.query(PowderPurchase).filter(PowderPurchase.id == purchase_id).first()
    if not purchase:
        raise NotFoundError("Purchase not found")
    ensure_owner(current_user, purchase.user_id)
    return purchase


@router.get("", response_model=List[PowderPurchaseResponse])
def get_purchases(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    user_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """List powder purchases, newest first"""
    query = resolve_scope(current_user, user_id).apply(db.query(PowderPurchase), PowderPurchase.user_id)
    if start_date:
        query = query.filter(PowderPurchase.purchase_date >= start_date)
    if end_date:
        query = query.filter(PowderPurchase.purchase_date <= end_date)
    return query.order_by(PowderPurchase.purchase_date.desc(), PowderPurchase.id.desc()).all()


@router.post("", response_model=PowderPurchaseResponse, status_code=status.HTTP_201_CREATED)
def create_purchase(
    data: PowderPurchaseCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Record a powder purchase from a supplier"""
    owner_id = resolve_owner(db, current_user, data.user_id)
    _validate_purchase(data)

    purchase = PowderPurchase(
        user_id=owner_id,
        purchase_date=data.purchase_date,
        supplier_name=data.supplier_name,
        packets_purchased=data.packets_purchased,
        cost_per_packet=data.cost_per_packet,
        total_cost=data.packets_purchased * data.cost_per_packet,
        payment_method=data.payment_method,
        invoice_number=data.invoice_number,
        notes=data.notes,
    )
    db.add(purchase)
    db.commit()
    db.refresh(purchase)
    logger.info("Created powder purchase %s user=%s packets=%s", purchase.id, owner_id, purchase.packets_purchased)
    return purchase


@router.put("", response_model=PowderPurchaseResponse)
def update_purchase(
    data: PowderPurchaseUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Replace a purchase; total cost is recomputed"""
    purchase = _get_purchase_for_write(db, data.id, current_user)
    _validate_purchase(data)

    purchase.purchase_date = data.purchase_date
    purchase.supplier_name = data.supplier_name
    purchase.packets_purchased = data.packets_purchased
    purchase.cost_per_packet = data.cost_per_packet
    purchase.total_cost = data.packets_purchased * data.cost_per_packet
    purchase.payment_method = data.payment_method
    purchase.invoice_number = data.invoice_number
    purchase.notes = data.notes

    db.commit()
    db.refresh(purchase)
    logger.info("Updated powder purchase %s", purchase.id)
    return purchase


@router.delete("")
def delete_purchase(
    id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Delete a purchase by id"""
    purchase = _get_purchase_for_write(db, id, current_user)
    db.delete(purchase)
    db.commit()
    logger.info("Deleted powder purchase %s", id)
    return {"success": True}

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from kavabar.core.database import get_db
from kavabar.core.deps import require_admin, require_admin_or_manager
from kavabar.core.errors import NotFoundError, ScopeViolation, ValidationError
from kavabar.core.roles import Role
from kavabar.core.security import hash_password
from kavabar.models.daily_entry import DailyEntry
from kavabar.models.powder_purchase import PowderPurchase
from kavabar.models.user import User

router = APIRouter()
logger = logging.getLogger(__name__)

VALID_ROLES = {r.value for r in Role}

# The account seeded on first start; it cannot be deleted
DEFAULT_ADMIN_ID = 1


class UserCreate(BaseModel):
    username: str
    password: str
    role: str = Role.user.value


class UserUpdate(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None


class UserOut(BaseModel):
    id: int
    username: str
    role: str

    class Config:
        from_attributes = True


def _check_role(role: str) -> None:
    if role not in VALID_ROLES:
        raise ValidationError(f"Invalid role. Must be one of: {', '.join(sorted(VALID_ROLES))}")


@router.get("/users", response_model=List[UserOut])
def list_users(db: Session = Depends(get_db), user: User = Depends(require_admin_or_manager)):
    return db.query(User).order_by(User.username).all()


@router.post("/users", response_model=UserOut)
def create_user(data: UserCreate, db: Session = Depends(get_db), user: User = Depends(require_admin_or_manager)):
    _check_role(data.role)
    if user.role == Role.manager.value and data.role != Role.user.value:
        raise ScopeViolation("Managers can only create regular users")
    if db.query(User).filter(User.username == data.username).first():
        raise ValidationError("Username already exists")
    new_user = User(username=data.username, hashed_password=hash_password(data.password), role=data.role)
    db.add(new_user)
    db.commit()
    db.refresh(new_user)
    logger.info("User %s created with role %s", new_user.username, new_user.role)
    return new_user


@router.put("/users/{user_id}", response_model=UserOut)
def update_user(
    user_id: int,
    data: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    user_to_update = db.query(User).filter(User.id == user_id).first()
    if not user_to_update:
        raise NotFoundError("User not found")

    if user_to_update.id == current_user.id and data.role and data.role != Role.admin.value:
        raise ValidationError("Cannot change your own admin role")

    if data.username:
        existing = db.query(User).filter(User.username == data.username, User.id != user_id).first()
        if existing:
            raise ValidationError("Username already exists")
        user_to_update.username = data.username

    if data.password:
        user_to_update.hashed_password = hash_password(data.password)

    if data.role:
        _check_role(data.role)
        user_to_update.role = data.role

    db.commit()
    db.refresh(user_to_update)
    return user_to_update


@router.delete("/users/{user_id}")
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin_or_manager),
):
    if user_id == DEFAULT_ADMIN_ID:
        raise ValidationError("Cannot delete default admin user")

    user_to_delete = db.query(User).filter(User.id == user_id).first()
    if not user_to_delete:
        raise NotFoundError("User not found")

    if user_to_delete.id == current_user.id:
        raise ValidationError("Cannot delete yourself")
    if current_user.role == Role.manager.value and user_to_delete.role != Role.user.value:
        raise ScopeViolation("Managers can only delete regular users")

    db.delete(user_to_delete)
    db.commit()
    logger.info("User %s deleted", user_to_delete.username)
    return {"message": "User deleted successfully"}


@router.post("/system/reset")
def reset_entries(db: Session = Depends(get_db), current_user: User = Depends(require_admin)):
    """Clear all daily entries and powder purchases. Users and adjustments are kept."""
    entries = db.query(DailyEntry).delete(synchronize_session=False)
    purchases = db.query(PowderPurchase).delete(synchronize_session=False)
    db.commit()
    logger.warning("Reset by %s: %s entries and %s purchases deleted", current_user.username, entries, purchases)
    return {"message": "Database entries cleared successfully", "entries": entries, "purchases": purchases}

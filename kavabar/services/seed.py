import logging

from sqlalchemy.orm import Session

from kavabar.core.config import settings
from kavabar.core.roles import Role
from kavabar.core.security import hash_password
from kavabar.models.user import User

logger = logging.getLogger(__name__)


def seed_admin(db: Session) -> None:
    """Create the default admin account when there are no users yet."""
    if db.query(User).first():
        return
    user = User(
        username=settings.admin_username,
        hashed_password=hash_password(settings.admin_password),
        role=Role.admin.value,
    )
    db.add(user)
    db.commit()
    logger.info("Default admin user '%s' created", settings.admin_username)

"""
Row visibility: which owners' records a caller's query may touch.

Every list and report resolves one ``Scope`` up front and applies that same
object to each table it reads, so entries, purchases, adjustments and
payments are always filtered by the same rule.
"""
from dataclasses import dataclass
from typing import Iterable, Optional

from kavabar.core.errors import NotFoundError, ScopeViolation
from kavabar.core.roles import ADMIN_ROLES, Role
from kavabar.models.user import User


def is_privileged(user: User, privileged_roles: Iterable[Role] = ADMIN_ROLES) -> bool:
    return user.role in {r.value for r in privileged_roles}


@dataclass(frozen=True)
class Scope:
    # None means every owner
    owner_id: Optional[int]

    @property
    def is_all(self) -> bool:
        return self.owner_id is None

    def apply(self, query, owner_column):
        if self.owner_id is None:
            return query
        return query.filter(owner_column == self.owner_id)


def resolve_scope(
    user: User,
    requested_user_id: Optional[int] = None,
    privileged_roles: Iterable[Role] = ADMIN_ROLES,
) -> Scope:
    """
    Privileged callers get the owner they asked for, or everyone when they
    did not ask. Anyone else is pinned to their own id whatever they asked.
    """
    if is_privileged(user, privileged_roles):
        return Scope(owner_id=requested_user_id)
    return Scope(owner_id=user.id)


def ensure_owner(
    user: User,
    owner_id: int,
    privileged_roles: Iterable[Role] = ADMIN_ROLES,
) -> None:
    """Raise ``ScopeViolation`` unless the caller may write rows of ``owner_id``."""
    if owner_id != user.id and not is_privileged(user, privileged_roles):
        raise ScopeViolation("Not allowed to modify records of another user")


def resolve_owner(
    db,
    user: User,
    requested_user_id: Optional[int] = None,
    privileged_roles: Iterable[Role] = ADMIN_ROLES,
) -> int:
    """
    Owner id a write should be recorded under: the caller, or the requested
    user for privileged callers. The scope check runs before the lookup.
    """
    if requested_user_id is None or requested_user_id == user.id:
        return user.id
    ensure_owner(user, requested_user_id, privileged_roles)
    if db.query(User.id).filter(User.id == requested_user_id).first() is None:
        raise NotFoundError("User not found")
    return requested_user_id

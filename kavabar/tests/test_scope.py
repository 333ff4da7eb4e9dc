import pytest

from kavabar.core.errors import NotFoundError, ScopeViolation
from kavabar.core.roles import CREDIT_ROLES
from kavabar.core.scope import ensure_owner, resolve_owner, resolve_scope
from kavabar.models.user import User


def _user(user_id, role):
    return User(id=user_id, username=f"u{user_id}", hashed_password="x", role=role)


def test_regular_user_is_pinned_to_own_rows():
    user = _user(1, "user")
    assert resolve_scope(user).owner_id == 1
    assert resolve_scope(user, 2).owner_id == 1


def test_admin_may_pick_an_owner_or_see_all():
    admin = _user(1, "admin")
    assert resolve_scope(admin).is_all
    assert resolve_scope(admin, 2).owner_id == 2


def test_manager_is_privileged_only_for_credit_roles():
    manager = _user(3, "manager")
    assert resolve_scope(manager, 2).owner_id == 3
    assert resolve_scope(manager, 2, CREDIT_ROLES).owner_id == 2
    assert resolve_scope(manager, privileged_roles=CREDIT_ROLES).is_all


def test_ensure_owner():
    ensure_owner(_user(1, "user"), 1)
    ensure_owner(_user(1, "admin"), 2)
    with pytest.raises(ScopeViolation):
        ensure_owner(_user(1, "user"), 2)
    with pytest.raises(ScopeViolation):
        ensure_owner(_user(1, "manager"), 2)
    ensure_owner(_user(1, "manager"), 2, CREDIT_ROLES)


def test_resolve_owner(db, admin, alice, bob):
    assert resolve_owner(db, alice) == alice.id
    assert resolve_owner(db, alice, alice.id) == alice.id
    assert resolve_owner(db, admin, bob.id) == bob.id

    with pytest.raises(ScopeViolation):
        resolve_owner(db, alice, bob.id)
    # Scope is checked before existence
    with pytest.raises(ScopeViolation):
        resolve_owner(db, alice, 9999)
    with pytest.raises(NotFoundError):
        resolve_owner(db, admin, 9999)

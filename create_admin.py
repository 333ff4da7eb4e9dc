#!/usr/bin/env python3
"""
Script to create (or reset) an admin user
Run from the project root: python create_admin.py [username] [password]
"""
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from kavabar.core.config import settings
from kavabar.core.database import SessionLocal
from kavabar.core.roles import Role
from kavabar.core.security import hash_password
from kavabar.models.user import User


def create_admin(username: str, password: str) -> int:
    db = SessionLocal()
    try:
        user = db.query(User).filter(User.username == username).first()
        if user:
            user.role = Role.admin.value
            user.hashed_password = hash_password(password)
            action = "updated to admin role"
        else:
            user = User(username=username, hashed_password=hash_password(password), role=Role.admin.value)
            db.add(user)
            action = "created"
        db.commit()
        db.refresh(user)
    except Exception as e:
        db.rollback()
        print(f"\n✗ Error creating admin user: {e}")
        return 1
    finally:
        db.close()

    print(f"\n✓ User '{user.username}' {action}")
    print(f"\n{'='*50}")
    print("CREDENTIALS:")
    print(f"{'='*50}")
    print(f"Username: {username}")
    print(f"Password: {password}")
    print(f"Role: {Role.admin.value}")
    print(f"{'='*50}")
    return 0


if __name__ == '__main__':
    args = sys.argv[1:]
    name = args[0] if args else settings.admin_username
    secret = args[1] if len(args) > 1 else settings.admin_password
    sys.exit(create_admin(name, secret))

"""
Script to recreate the database from the current models and seed the default admin
"""
import kavabar.models  # noqa: F401  (registers every table on Base.metadata)
from kavabar.core.config import settings
from kavabar.core.database import SessionLocal, engine
from kavabar.models.base import Base
from kavabar.services.seed import seed_admin


def recreate_db():
    print(f"Recreating database at {settings.database_url} ...")

    print("Dropping existing tables...")
    Base.metadata.drop_all(bind=engine)

    print("Creating tables...")
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        seed_admin(db)
    finally:
        db.close()

    print("Database recreated successfully!")
    print("\nLogin credentials:")
    print(f"   Username: {settings.admin_username}")
    print(f"   Password: {settings.admin_password}")


if __name__ == "__main__":
    recreate_db()

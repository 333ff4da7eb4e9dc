import logging
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker

from kavabar.core.config import settings
from kavabar.models.base import Base

logger = logging.getLogger(__name__)


def _engine_kwargs(database_url: str) -> dict:
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return {"pool_pre_ping": True}
    # The SQLite file lives next to the app; create its folder on first run
    if url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    return {"connect_args": {"check_same_thread": False}}


engine = create_engine(settings.database_url, **_engine_kwargs(settings.database_url))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def run_migrations() -> None:
    """Apply the alembic version list up to head."""
    from alembic import command
    from alembic.config import Config

    config = Config(settings.alembic_ini)
    config.set_main_option("sqlalchemy.url", settings.database_url)
    logger.info("Running migrations from %s", settings.alembic_ini)
    command.upgrade(config, "head")


def init_db() -> None:
    import kavabar.models  # noqa: F401

    # Create tables in dev/test without running Alembic
    if settings.env in {"dev", "test"}:
        Base.metadata.create_all(bind=engine)
        logger.info("Database schema created on %s", engine.url.render_as_string(hide_password=True))
    else:
        run_migrations()

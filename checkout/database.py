import logging

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, declarative_base

from checkout.errors import StorageUnavailable

logger = logging.getLogger(__name__)

Base = declarative_base()


def init_db(database_url: str) -> sessionmaker:
    """Open the database, create missing tables and return a session factory.

    Safe to call repeatedly: existing tables are left untouched.
    """
    # models must be imported so their tables are registered on Base
    from checkout import models  # noqa: F401

    try:
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False} if database_url.startswith("sqlite") else {}
        )
        Base.metadata.create_all(bind=engine)
    except (SQLAlchemyError, OSError) as exc:
        raise StorageUnavailable(f"Cannot open order database: {exc}") from exc

    logger.info("Order database ready at %s", engine.url.render_as_string(hide_password=True))
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)

"""
Database Setup

SQLAlchemy declarative base plus engine/session factories built from Settings.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


def create_db_engine(database_url: str) -> Engine:
    """
    Create a SQLAlchemy engine.

    Args:
        database_url: SQLAlchemy database URL

    Returns:
        Engine: Configured engine
    """
    connect_args = {}
    if database_url.startswith("sqlite"):
        # Sessions are used from FastAPI's threadpool and Celery workers
        connect_args["check_same_thread"] = False
    return create_engine(database_url, pool_pre_ping=True, connect_args=connect_args)


def create_session_factory(engine: Engine) -> sessionmaker:
    """Create a session factory bound to the engine."""
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """Create all tables that do not exist yet."""
    # Import models so they're registered with Base.metadata
    from cryptoalert.models import Alert, PriceHistory  # noqa: F401

    Base.metadata.create_all(bind=engine)

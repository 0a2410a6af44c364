# bookstore/database.py
import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlmodel import SQLModel, create_engine, Session

from bookstore.core.config import get_settings
from bookstore.core.errors import BookstoreError, InfrastructureError

settings = get_settings()
logger = logging.getLogger(__name__)

# ---------------------------------------------------------
# Engine
#
# Postgres (production):
# - sslmode=require   : enforce SSL when running in the cloud
# - pool_size=5       : small fixed pool per worker process
# - pool_pre_ping=True: validate connections before using them
#
# SQLite (local dev / tests):
# - check_same_thread=False so the FastAPI threadpool can share it
# ---------------------------------------------------------


def build_engine(db_url: str, echo: bool = False):
    """
    Create the SQLAlchemy engine for the given URL with per-dialect options.
    """
    if db_url.startswith("sqlite"):
        return create_engine(
            db_url,
            echo=echo,
            connect_args={"check_same_thread": False},
        )

    # Append sslmode=require if it is not already present
    if db_url.startswith("postgresql") and "sslmode=" not in db_url:
        if "?" in db_url:
            db_url = db_url + "&sslmode=require"
        else:
            db_url = db_url + "?sslmode=require"

    return create_engine(
        db_url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=5,
    )


engine = build_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)


def create_db_and_tables() -> None:
    """
    Create all tables defined in SQLModel metadata if they do not exist.

    This is called once on application startup.
    """
    SQLModel.metadata.create_all(engine)


def get_session():
    """
    FastAPI dependency that yields a SQLModel Session.

    Usage:

        from fastapi import Depends

        @router.get("/example")
        def example_endpoint(session: Session = Depends(get_session)):
            ...
    """
    with Session(engine) as session:
        yield session


@contextmanager
def unit_of_work(session: Session, failure_message: str) -> Iterator[Session]:
    """
    Run a block of repository calls as one atomic transaction.

    - Commit when the block finishes.
    - Roll back on any exception, so no partial writes become visible.
    - Domain errors (BookstoreError) are re-raised unchanged.
    - Anything else is logged and re-raised as InfrastructureError carrying
      `failure_message` and the exception text.

    Repositories never commit; only services open a unit of work.
    """
    try:
        yield session
        session.commit()
    except BookstoreError:
        session.rollback()
        raise
    except Exception as exc:
        session.rollback()
        logger.exception("Transaction rolled back: %s", failure_message)
        raise InfrastructureError(failure_message, detail=str(exc)) from exc

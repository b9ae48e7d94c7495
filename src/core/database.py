# pyright: reportMissingTypeStubs=false
"""
Database configuration and session management.

This module defines the declarative Base, the audit timestamp listeners, and
the Database handle that owns the engine and session factory. The handle is
built once at application startup (see main.create_app) and handed to request
handlers through the get_db dependency.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Generator, Optional

from fastapi import HTTPException, Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from core.constants import DB_POOL_RECYCLE_SECONDS

logger = logging.getLogger(__name__)


# Create Base class for declarative models
class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


@event.listens_for(Base, "before_insert", propagate=True)  # type: ignore
def receive_before_insert(mapper, connection, target):  # type: ignore
    """Set created_at and updated_at on insert using clinic timezone."""
    # Import here to avoid circular import
    from utils.datetime_utils import clinic_now
    now = clinic_now()
    # Only touch mapped columns; properties won't be in mapper.columns
    for column_name in ("created_at", "updated_at"):
        if column_name in mapper.columns and getattr(target, column_name, None) is None:  # type: ignore
            setattr(target, column_name, now)


@event.listens_for(Base, "before_update", propagate=True)  # type: ignore
def receive_before_update(mapper, connection, target):  # type: ignore
    """Set updated_at on update using clinic timezone."""
    from utils.datetime_utils import clinic_now
    if "updated_at" in mapper.columns:  # type: ignore
        setattr(target, "updated_at", clinic_now())


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):  # type: ignore
    """SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """
    Handle owning the SQLAlchemy engine and session factory.

    Constructed once per process (or per test) and passed explicitly to
    whatever needs database access, instead of a module-level engine.
    """

    def __init__(self, url: str, engine_options: Optional[Dict[str, Any]] = None):
        options: Dict[str, Any] = {
            "pool_pre_ping": True,  # Verify connections before use
            "echo": False,
        }
        if url.startswith("sqlite"):
            # Request handlers and websocket tasks run on different threads
            options["connect_args"] = {"check_same_thread": False}
        else:
            options["pool_recycle"] = DB_POOL_RECYCLE_SECONDS
        options.update(engine_options or {})

        self.url = url
        self.engine: Engine = create_engine(url, **options)
        if self.engine.dialect.name == "sqlite":
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine,
            expire_on_commit=False,  # Don't expire objects after commit
        )

    def session(self) -> Session:
        """Open a new session. The caller is responsible for closing it."""
        return self.SessionLocal()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Transactional session for work outside FastAPI dependency injection.

        Commits on success, rolls back on any error. Used by scheduler jobs
        and the websocket relay.

        Example:
            ```python
            with database.session_scope() as db:
                db.query(Organization).count()
            ```
        """
        db = self.SessionLocal()
        try:
            yield db
            db.commit()
        except HTTPException:
            # Don't log HTTPExceptions as errors - they're expected business logic
            db.rollback()
            raise
        except Exception as e:
            db.rollback()
            logger.exception(f"Database transaction failed: {e}")
            raise
        finally:
            db.close()

    def create_tables(self) -> None:
        """
        Create all tables defined on Base.metadata.

        In production, prefer Alembic migrations; this is for tests and
        local bootstrap.
        """
        # Import models so every table is registered on the metadata
        import models  # noqa: F401  # type: ignore[reportUnusedImport]
        try:
            Base.metadata.create_all(bind=self.engine)
            logger.info("Database tables created successfully")
        except SQLAlchemyError as e:
            logger.exception(f"Failed to create database tables: {e}")
            raise

    def drop_tables(self) -> None:
        """
        Drop all tables defined on Base.metadata.

        WARNING: This will permanently delete all data in the tables!
        """
        try:
            Base.metadata.drop_all(bind=self.engine)
            logger.info("Database tables dropped successfully")
        except SQLAlchemyError as e:
            logger.exception(f"Failed to drop database tables: {e}")
            raise

    def dispose(self) -> None:
        self.engine.dispose()


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    FastAPI dependency to provide database sessions.

    Pulls the Database handle from app.state and yields a session that is
    closed after the request, rolling back on any error.
    """
    database: Database = request.app.state.database
    db = database.session()
    try:
        yield db
    except SQLAlchemyError as e:
        logger.exception(f"Database error: {e}")
        db.rollback()
        raise
    except HTTPException:
        # Don't log HTTPExceptions as errors - they're expected business logic
        db.rollback()
        raise
    except Exception as e:
        logger.exception(f"Unexpected error in database session: {e}")
        db.rollback()
        raise
    finally:
        db.close()

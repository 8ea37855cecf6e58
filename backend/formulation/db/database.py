"""
SQLite database setup with SQLAlchemy.

The ``Database`` object owns one engine and its session factory. It is
constructed explicitly and opened/closed by its owner (the FastAPI lifespan,
or a test fixture), so several independent databases can coexist.
"""
from contextlib import contextmanager
from typing import Iterator, Optional

from fastapi import Request
from sqlalchemy import create_engine, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
import logging

logger = logging.getLogger(__name__)

# Create Base class for models
Base = declarative_base()


class Database:
    """Engine and session lifecycle for one database URL."""

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.echo = echo
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("Database is not open")
        return self._engine

    def open(self) -> "Database":
        """Create the engine and all tables."""
        if self._engine is not None:
            return self

        kwargs = {"echo": self.echo}
        if self.url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}  # Needed for SQLite
            if self.url in ("sqlite://", "sqlite:///:memory:"):
                # One shared connection so every session sees the same in-memory data
                kwargs["poolclass"] = StaticPool

        self._engine = create_engine(self.url, **kwargs)
        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self._engine)

        try:
            # Register models on Base.metadata
            from formulation import models  # noqa: F401

            Base.metadata.create_all(bind=self._engine)
            tables = inspect(self._engine).get_table_names()
            logger.info(f"Database tables: {tables}")
        except Exception as e:
            logger.error(f"Failed to initialize database: {e}")
            self.close()
            raise
        return self

    def close(self) -> None:
        """Dispose of the engine and its connections."""
        if self._engine is not None:
            self._engine.dispose()
            logger.info("Database closed")
        self._engine = None
        self._session_factory = None

    def session(self) -> Session:
        """Create a new session bound to this database."""
        if self._session_factory is None:
            raise RuntimeError("Database is not open")
        return self._session_factory()

    def reset(self) -> None:
        """Drop and recreate all tables (use with caution!)."""
        from formulation import models  # noqa: F401

        Base.metadata.drop_all(bind=self.engine)
        Base.metadata.create_all(bind=self.engine)
        logger.info("Database tables recreated")

    def __enter__(self) -> "Database":
        return self.open()

    def __exit__(self, *exc_info) -> None:
        self.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """Commit on success, roll back and re-raise on any error."""
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


def get_database(request: Request) -> Database:
    """Dependency returning the application's open database."""
    return request.app.state.database


def get_db(request: Request) -> Iterator[Session]:
    """
    Dependency function to get database session.

    Yields:
        Session: SQLAlchemy database session
    """
    db = get_database(request).session()
    try:
        yield db
    finally:
        db.close()

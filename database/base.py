"""
Database engine, connection pool and transaction helpers.

The pool is a process-scoped resource: `db_manager.init()` is called once at
startup and `db_manager.close()` at shutdown (see server.py lifespan).
Services never reach for the engine directly, they receive a Session.
"""
from contextlib import contextmanager
from typing import Iterator, Optional
import logging

from fastapi import HTTPException
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from config.settings import settings
from shared.exceptions import InternalServerException

logger = logging.getLogger(__name__)

Base = declarative_base()


class Database:
    """Owns the engine (and therefore the connection pool) and the session factory."""

    def __init__(self, url: Optional[str] = None):
        self.url = url or settings.DATABASE_URL
        self.engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    def init(self) -> None:
        if self.engine is not None:
            return

        if self.url.startswith("sqlite"):
            connect_args = {"check_same_thread": False}
            if ":memory:" in self.url or self.url == "sqlite://":
                # In-memory databases live and die with a single connection
                self.engine = create_engine(
                    self.url,
                    connect_args=connect_args,
                    poolclass=StaticPool,
                    echo=settings.DATABASE_ECHO,
                )
            else:
                self.engine = create_engine(
                    self.url,
                    connect_args=connect_args,
                    pool_size=settings.DATABASE_POOL_SIZE,
                    max_overflow=settings.DATABASE_MAX_OVERFLOW,
                    pool_timeout=settings.DATABASE_POOL_TIMEOUT,
                    echo=settings.DATABASE_ECHO,
                )
        else:
            self.engine = create_engine(
                self.url,
                pool_size=settings.DATABASE_POOL_SIZE,
                max_overflow=settings.DATABASE_MAX_OVERFLOW,
                pool_timeout=settings.DATABASE_POOL_TIMEOUT,
                pool_pre_ping=True,
                echo=settings.DATABASE_ECHO,
            )

        self._session_factory = sessionmaker(
            bind=self.engine,
            autoflush=False,
            autocommit=False,
            expire_on_commit=False,
        )
        logger.info("✅ Database connection pool created")

    def create_all(self) -> None:
        # Import models so they register with Base before creating tables
        import modules.users.models  # noqa: F401
        import modules.inventory.models  # noqa: F401
        import modules.catalogs.models  # noqa: F401
        import modules.bookings.models  # noqa: F401
        import modules.payments.models  # noqa: F401
        Base.metadata.create_all(bind=self.engine)

    def session(self) -> Session:
        if self._session_factory is None:
            raise RuntimeError("Database is not initialised, call init() first")
        return self._session_factory()

    def close(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
            logger.info("Database connection pool closed")
        self.engine = None
        self._session_factory = None


db_manager = Database()


def get_db() -> Iterator[Session]:
    """FastAPI dependency: one pooled session per request."""
    session = db_manager.session()
    try:
        yield session
    finally:
        session.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """
    Run a multi-statement unit of work: commit on success, roll back on any failure.

    Domain errors (HTTPException subclasses) are re-raised as they are. Any
    storage failure is logged and surfaced as an opaque internal error once the
    rollback has happened, so no partial write survives.
    """
    try:
        yield db
        db.commit()
    except HTTPException:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"❌ Transaction rolled back: {e}", exc_info=True)
        raise InternalServerException()
    except Exception:
        db.rollback()
        raise

"""Database handle for TaskFlow.

A ``Database`` is constructed once per process, connected at startup and
disconnected at shutdown (see ``main.create_app``). Request handlers receive it
through ``dependencies.services`` instead of importing a module-level engine.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from .errors import DependencyError

# Import models so they're registered with SQLModel.metadata
from .models import Task, User  # noqa: F401

logger = logging.getLogger(__name__)


def normalize_database_url(url: str) -> str:
    """Accept Heroku-style ``postgres://`` URLs."""
    if url.startswith("postgres://"):
        return "postgresql://" + url[len("postgres://"):]
    return url


class Database:
    """Owns the SQLAlchemy engine and hands out sessions.

    Attributes:
        url: SQLAlchemy database URL
        echo: Echo SQL statements to the log
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = normalize_database_url(url)
        self.echo = echo
        self._engine: Optional[Engine] = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise DependencyError("Database is not connected")
        return self._engine

    @property
    def is_connected(self) -> bool:
        return self._engine is not None

    def connect(self) -> None:
        """Create the engine and any missing tables. Idempotent."""
        if self._engine is not None:
            return

        kwargs: Dict[str, Any] = {"echo": self.echo}
        if self.url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in self.url or self.url in ("sqlite://", "sqlite:///"):
                # one shared connection, otherwise each session sees an empty db
                kwargs["poolclass"] = StaticPool
        else:
            kwargs["pool_pre_ping"] = True

        try:
            engine = create_engine(self.url, **kwargs)
            SQLModel.metadata.create_all(engine)
        except SQLAlchemyError as e:
            logger.error(f"Failed to connect to database: {e}")
            raise DependencyError("Database unavailable") from e

        self._engine = engine
        logger.info(f"Connected to database ({engine.url.get_backend_name()})")

    def disconnect(self) -> None:
        """Dispose of the engine's connection pool."""
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        logger.info("Disconnected from database")

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Get a database session.

        Usage:
            with database.session() as session:
                session.add(task)
                session.commit()
        """
        with Session(self.engine, expire_on_commit=False) as session:
            yield session

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except (SQLAlchemyError, DependencyError) as e:
            logger.warning(f"Database ping failed: {e}")
            return False

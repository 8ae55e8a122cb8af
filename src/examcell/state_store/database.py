"""SQLite engine and session handling for the portal store."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from examcell.state_store.models import Base

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger("examcell.state_store")

MEMORY = ":memory:"


class Database:
    """SQLite connection manager.

    File databases run in WAL mode; every connection enforces foreign keys so
    deleting a student cascades to its marks, queries and bonafide requests.
    """

    def __init__(self, db_path: str = "examcell.db") -> None:
        """Prepare a lazily opened database.

        Args:
            db_path: SQLite file path, or ":memory:" for a throwaway database.
        """
        self.db_path = db_path
        self._engine: Engine | None = None
        self._session_factory: sessionmaker[Session] | None = None

    @property
    def is_memory(self) -> bool:
        return self.db_path == MEMORY

    def _create_engine(self) -> Engine:
        if self.is_memory:
            # One shared connection so every session (and TestClient thread) sees the same DB
            return create_engine(
                "sqlite://",
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
            )

        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        return create_engine(
            f"sqlite:///{self.db_path}",
            connect_args={"check_same_thread": False},
        )

    @property
    def engine(self) -> Engine:
        """Engine for ``db_path``, opened on first use."""
        if self._engine is None:
            engine = self._create_engine()
            use_wal = not self.is_memory

            @event.listens_for(engine, "connect")
            def set_sqlite_pragma(dbapi_connection: object, _connection_record: object) -> None:
                cursor = dbapi_connection.cursor()  # type: ignore[attr-defined]
                if use_wal:
                    cursor.execute("PRAGMA journal_mode=WAL")
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

            self._engine = engine
            logger.debug("Opened database %s", self.db_path)
        return self._engine

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)
        return self._session_factory

    def create_tables(self) -> None:
        """Create any portal tables that are missing."""
        Base.metadata.create_all(self.engine)

    def get_session(self) -> Session:
        """Open a session the caller must close."""
        return self.session_factory()

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Session that commits on success and rolls back on any error."""
        session = self.get_session()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def journal_mode(self) -> str:
        with self.engine.connect() as conn:
            return str(conn.execute(text("PRAGMA journal_mode")).scalar())

    def close(self) -> None:
        """Dispose of the engine and its connections."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._session_factory = None

"""
Engine and session handling for the journal store.

The journal is single-user and local-first: a SQLite file under db/ by
default. Any SQLAlchemy URL can be used instead (JOURNAL_DB_URL).
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker

from db.models import Base
from config import config


def _sqlite_file(db_url: str) -> Path | None:
    """Database file behind a SQLite URL, or None for other backends and :memory:."""
    url = make_url(db_url)
    if url.get_backend_name() != "sqlite" or url.database in (None, "", ":memory:"):
        return None
    return Path(url.database)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseManager:
    """
    Owns one engine and hands out transactional sessions.

    Usage:
        db = DatabaseManager("sqlite:///db/journal.db")
        with db.session() as session:
            snapshots = SnapshotRepository(session).list()
    """

    def __init__(self, db_url: Path | str | None = None):
        self.db_url = str(db_url) if db_url else config.database.url

        db_file = _sqlite_file(self.db_url)
        if db_file is not None:
            db_file.parent.mkdir(parents=True, exist_ok=True)

        self.engine = create_engine(self.db_url, echo=config.database.echo)
        if self.engine.dialect.name == "sqlite":
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

        # Rows stay readable after commit; services convert them to records
        self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)

    def create_tables(self) -> None:
        Base.metadata.create_all(self.engine)

    def drop_tables(self) -> None:
        """Drop every journal table. All snapshots, adjustments and targets are lost."""
        Base.metadata.drop_all(self.engine)

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """
        One unit of work: commit on success, roll back and re-raise on error.

        Example:
            with db.session() as session:
                SnapshotRepository(session).upsert(...)
        """
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        """Release pooled connections."""
        self.engine.dispose()


# Process-wide manager, created lazily by get_db()
_db_manager: DatabaseManager | None = None


def get_db(db_url: Path | str | None = None) -> DatabaseManager:
    """
    Return the process-wide DatabaseManager, creating it on first use.

    ``db_url`` only takes effect on the first call; use reset_db() to
    switch databases.
    """
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager(db_url)
    return _db_manager


def init_db(db_url: Path | str | None = None, if_drop: bool = False) -> DatabaseManager:
    """
    Make sure the journal tables exist.

    Args:
        db_url: Optional database URL (see get_db).
        if_drop: Drop existing tables first.
    """
    db = get_db(db_url)
    if if_drop:
        db.drop_tables()
    db.create_tables()
    return db


def reset_db() -> None:
    """Forget the global manager so the next get_db() call can use a new URL."""
    global _db_manager
    if _db_manager is not None:
        _db_manager.dispose()
    _db_manager = None

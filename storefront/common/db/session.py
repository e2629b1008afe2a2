from contextlib import contextmanager
from pathlib import Path
from typing import Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker


def _ensure_sqlite_parent(url: str) -> None:
    # Ensure sqlite file parent directory exists to avoid 'unable to open database file'
    if url.startswith("sqlite:///") and ":memory:" not in url:
        db_path = url.split("sqlite:///")[-1]
        Path(db_path).expanduser().resolve().parent.mkdir(parents=True, exist_ok=True)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Owns the engine and session factory for one process.

    The entry point calls ``connect()`` at startup and ``close()`` at shutdown;
    services only ever see ``session``.
    """

    def __init__(self, url: str, *, echo: bool = False):
        self.url = url
        self._echo = echo
        self._engine: Optional[Engine] = None
        self._session_maker: Optional[sessionmaker] = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("Database is not connected")
        return self._engine

    def connect(self) -> "Database":
        if self._engine is not None:
            return self
        _ensure_sqlite_parent(self.url)
        engine = create_engine(self.url, echo=self._echo, future=True)
        if engine.dialect.name == "sqlite":
            event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        self._engine = engine
        self._session_maker = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, future=True)
        return self

    def create_all(self) -> None:
        from ..models import Base

        Base.metadata.create_all(self.engine)

    def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
        self._engine = None
        self._session_maker = None

    @contextmanager
    def session(self):
        if self._session_maker is None:
            raise RuntimeError("Database is not connected")
        session = self._session_maker()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

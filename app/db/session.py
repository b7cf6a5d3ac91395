import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.exceptions import EntryNotFoundError, StoreError
from app.db.base import Base
from app.db.models import Entry

logger = logging.getLogger("app.db")

SEED_ENTRY_ID = 0
SEED_ENTRY_NAME = "Datadog"


class EntryStore:
    """In-memory ``entries`` table behind a single shared connection.

    ``StaticPool`` keeps one connection for the engine's lifetime, so every
    session sees the same in-memory database. The lock allows one session
    against that connection at a time.
    """

    def __init__(self, database_url: str = "sqlite+pysqlite:///:memory:") -> None:
        self._engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        self._session_factory = sessionmaker(bind=self._engine, autocommit=False, autoflush=False)
        self._lock = threading.Lock()

    def initialize(self) -> None:
        Base.metadata.create_all(bind=self._engine)
        with self.session() as db:
            db.add(Entry(id=SEED_ENTRY_ID, name=SEED_ENTRY_NAME))
            db.commit()
        logger.info("entry_store_initialized seed_id=%s", SEED_ENTRY_ID)

    @contextmanager
    def session(self) -> Iterator[Session]:
        with self._lock:
            db = self._session_factory()
            try:
                yield db
            finally:
                db.close()

    def lookup_name_by_id(self, entry_id: int) -> str:
        with self.session() as db:
            try:
                name = db.scalar(select(Entry.name).where(Entry.id == entry_id))
            except SQLAlchemyError as exc:
                raise StoreError(str(exc)) from exc
        if name is None:
            raise EntryNotFoundError(entry_id)
        return name

    def dispose(self) -> None:
        self._engine.dispose()

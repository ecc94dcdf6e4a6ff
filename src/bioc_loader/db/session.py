# src/bioc_loader/db/session.py
import logging
from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker

from .models import Base

logger = logging.getLogger(__name__)


class Database:
    """
    Explicit store handle: one engine and session factory per run.
    Every worker thread opens its own session from the shared pool.
    """
    def __init__(self, url: str, pool_size: int = 10, echo: bool = False):
        self.url = make_url(url)
        engine_kwargs = {"pool_pre_ping": True, "echo": echo}
        if self.url.get_backend_name() == "sqlite":
            # Worker threads share one file database in tests and small runs
            engine_kwargs["connect_args"] = {"check_same_thread": False, "timeout": 30}
        else:
            engine_kwargs["pool_size"] = pool_size
            engine_kwargs["max_overflow"] = pool_size
        self.engine = create_engine(self.url, **engine_kwargs)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    @property
    def dialect(self) -> str:
        return self.engine.dialect.name

    @contextmanager
    def get_session(self):
        """
        Context manager to provide a session around a series of operations.
        Usage:
            with database.get_session() as session:
                session.add(some_model)
                session.commit()
        """
        session = self.SessionLocal()
        try:
            yield session
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    @contextmanager
    def transaction(self):
        """
        Like get_session, but commits when the block exits cleanly.
        Either everything inside the block is written or nothing is.
        """
        with self.get_session() as session:
            yield session
            session.commit()

    def ping(self) -> None:
        """Fails fast when the store is unreachable."""
        with self.engine.connect() as connection:
            connection.execute(text("SELECT 1"))

    def create_all(self) -> None:
        Base.metadata.create_all(bind=self.engine)
        logger.info("Database schema ready")

    def dispose(self) -> None:
        self.engine.dispose()
        logger.info("Disconnected from database")

# src/bioc_loader/ingestion/registry.py
import logging
import threading
from typing import Dict

from sqlalchemy.exc import IntegrityError

from bioc_loader.core.locks import KeyedLock
from bioc_loader.core.schemas import CollectionHandle, CollectionRecord
from bioc_loader.db.repository import LoaderRepository
from bioc_loader.db.session import Database

logger = logging.getLogger(__name__)


def _handle(collection) -> CollectionHandle:
    return CollectionHandle(
        id=collection.id, key=collection.key, source=collection.source, date=collection.date
    )


class CollectionRegistry:
    """
    Resolves the single Collection row that owns documents from one input file.

    Lookups for the same key are serialized so parallel workers hitting the
    first document of a file create exactly one row. A unique-key violation
    from another process is treated as "already created".
    Resolved handles are cached; collections are never changed after creation.
    """
    def __init__(self, database: Database):
        self._database = database
        self._locks = KeyedLock()
        self._cache: Dict[str, CollectionHandle] = {}
        self._cache_lock = threading.Lock()

    def resolve_or_create(self, record: CollectionRecord) -> CollectionHandle:
        cached = self._cache.get(record.key)
        if cached is not None:
            return cached

        with self._locks.hold(record.key):
            cached = self._cache.get(record.key)
            if cached is not None:
                return cached

            handle = self._find_or_create(record)
            with self._cache_lock:
                self._cache[record.key] = handle
            return handle

    def _find_or_create(self, record: CollectionRecord) -> CollectionHandle:
        with self._database.get_session() as session:
            repo = LoaderRepository(session)
            existing = repo.find_collection_by_key(record.key)
            if existing is not None:
                return _handle(existing)

            try:
                handle = _handle(repo.create_collection(record))
                session.commit()
                logger.info(f"Created collection {handle.id} for {record.key}")
                return handle
            except IntegrityError:
                # Lost the race to another writer; their row is the one to use
                session.rollback()
                existing = repo.find_collection_by_key(record.key)
                if existing is None:
                    raise
                return _handle(existing)

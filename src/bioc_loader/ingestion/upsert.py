# src/bioc_loader/ingestion/upsert.py
import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from bioc_loader.core.exceptions import MissingDocumentIdError, StoreError
from bioc_loader.core.locks import KeyedLock
from bioc_loader.core.schemas import CollectionRecord, DocumentRecord, UpsertResult
from bioc_loader.db.repository import LoaderRepository
from bioc_loader.db.session import Database
from .registry import CollectionRegistry

logger = logging.getLogger(__name__)


class DocumentUpsertEngine:
    """
    Writes one normalized document, replacing any earlier version with the same document_id.

    Re-ingestion is always delete-and-replace: the old document and all of its
    passages, infons and annotations are removed and the new tree is written.
    The delete and every insert share one transaction, so a failure at any
    point leaves the previous version untouched. Work on a given document_id
    is serialized across worker threads.
    """
    def __init__(self, database: Database, registry: Optional[CollectionRegistry] = None):
        self._database = database
        self._registry = registry or CollectionRegistry(database)
        self._locks = KeyedLock()

    def upsert(self, document: DocumentRecord, collection: CollectionRecord) -> UpsertResult:
        doc_id = document.document_id
        if not doc_id:
            raise MissingDocumentIdError(
                f"Document in collection {collection.key} has no id and cannot be stored"
            )

        try:
            handle = self._registry.resolve_or_create(collection)
            with self._locks.hold(doc_id):
                with self._database.transaction() as session:
                    replaced = self._write(LoaderRepository(session), document, handle.id)
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to store document {doc_id}: {exc}", document_id=doc_id) from exc

        if replaced:
            logger.debug(f"Replaced existing document {doc_id}")
        return UpsertResult(document_id=doc_id, inserted=True, replaced=replaced)

    def _write(self, repo: LoaderRepository, document: DocumentRecord, collection_id) -> bool:
        # 1. Drop the previous version, children cascade with it
        existing = repo.find_document_by_natural_key(document.document_id)
        if existing is not None:
            repo.delete_document_cascading(existing)

        # 2. Document row
        db_document = repo.create_document(document.document_id, collection_id)

        # 3. Whole passage tree in one flush
        if document.passages:
            repo.create_passages_with_nested_children(db_document, document.passages)

        return existing is not None

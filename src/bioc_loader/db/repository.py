# src/bioc_loader/db/repository.py
import logging
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import delete, func, select, tuple_
from sqlalchemy.orm import Session

from bioc_loader.core.schemas import CollectionRecord, DiseaseRecord, PassageRecord
from .models import (
    Annotation, AnnotationInfon, Collection, Disease, Document, Passage, PassageInfon
)

logger = logging.getLogger(__name__)


class LoaderRepository:
    """Storage operations used by the loader, bound to one session.

    The repository only flushes. Committing is left to the caller so that a
    whole document replacement can be wrapped in a single transaction.
    """

    def __init__(self, session: Session):
        """Initialize repository.

        Args:
            session: SQLAlchemy session owned by the caller
        """
        self.session = session

    # --- Collections ---

    def find_collection_by_key(self, key: str) -> Optional[Collection]:
        return self.session.execute(
            select(Collection).where(Collection.key == key)
        ).scalar_one_or_none()

    def create_collection(self, record: CollectionRecord) -> Collection:
        """Insert a new collection row.

        Args:
            record: Collection key, source and date

        Returns:
            The flushed Collection, with its generated id

        Raises:
            sqlalchemy.exc.IntegrityError: if another writer already created the key
        """
        collection = Collection(key=record.key, source=record.source, date=record.date)
        self.session.add(collection)
        self.session.flush()
        return collection

    # --- Documents ---

    def find_document_by_natural_key(self, document_id: str) -> Optional[Document]:
        return self.session.execute(
            select(Document).where(Document.document_id == document_id)
        ).scalar_one_or_none()

    def delete_document_cascading(self, document: Document) -> None:
        """Delete a document with its passages, infons and annotations.

        The flush happens here so the natural key is free before the
        replacement row is inserted in the same transaction.
        """
        logger.debug(f"Deleting existing document {document.document_id}")
        self.session.delete(document)
        self.session.flush()

    def create_document(self, document_id: str, collection_id: UUID) -> Document:
        document = Document(document_id=document_id, collection_id=collection_id)
        self.session.add(document)
        self.session.flush()
        return document

    def create_passages_with_nested_children(
        self,
        document: Document,
        passages: Iterable[PassageRecord],
    ) -> List[Passage]:
        """Insert passages with their infons, annotations and annotation infons.

        The full row tree is attached to the session and written in one flush.

        Args:
            document: Parent document row
            passages: Normalized passages, in source order

        Returns:
            The created Passage rows
        """
        rows = []
        for p_idx, record in enumerate(passages):
            passage = Passage(
                document_id=document.id,
                ordinal=p_idx,
                offset=record.offset,
                text=record.text,
                section_type=record.section_type,
                type=record.type,
                infons=[
                    PassageInfon(ordinal=i, key=infon.key, value=infon.value)
                    for i, infon in enumerate(record.infons)
                ],
                annotations=[
                    Annotation(
                        ordinal=a_idx,
                        annotation_id=annotation.annotation_id,
                        identifier=annotation.identifier,
                        type=annotation.type,
                        offset=annotation.offset,
                        length=annotation.length,
                        text=annotation.text,
                        infons=[
                            AnnotationInfon(ordinal=i, key=infon.key, value=infon.value)
                            for i, infon in enumerate(annotation.infons)
                        ],
                    )
                    for a_idx, annotation in enumerate(record.annotations)
                ],
            )
            rows.append(passage)

        self.session.add_all(rows)
        self.session.flush()
        return rows

    def count_documents(self) -> int:
        return self.session.scalar(select(func.count()).select_from(Document))

    # --- Disease vocabulary ---

    def count_diseases(self) -> int:
        return self.session.scalar(select(func.count()).select_from(Disease))

    def delete_all_diseases(self) -> int:
        result = self.session.execute(delete(Disease))
        return result.rowcount

    def create_diseases(self, records: List[DiseaseRecord]) -> int:
        """Bulk insert disease rows, skipping (mesh_id, text) pairs that already exist.

        Returns:
            Number of rows actually inserted
        """
        if not records:
            return 0
        rows = [{"mesh_id": r.mesh_id, "text": r.text} for r in records]

        dialect = self.session.get_bind().dialect.name
        if dialect in ("postgresql", "sqlite"):
            if dialect == "postgresql":
                from sqlalchemy.dialects.postgresql import insert
            else:
                from sqlalchemy.dialects.sqlite import insert
            stmt = insert(Disease).values(rows).on_conflict_do_nothing(
                index_elements=["mesh_id", "text"]
            )
            return self.session.execute(stmt).rowcount

        # Portable path: drop pairs already stored or repeated in the batch
        pairs = {(row["mesh_id"], row["text"]) for row in rows}
        existing = set(self.session.execute(
            select(Disease.mesh_id, Disease.text).where(tuple_(Disease.mesh_id, Disease.text).in_(pairs))
        ).all())
        fresh = []
        for row in rows:
            pair = (row["mesh_id"], row["text"])
            if pair not in existing:
                existing.add(pair)
                fresh.append(Disease(**row))
        self.session.add_all(fresh)
        self.session.flush()
        return len(fresh)

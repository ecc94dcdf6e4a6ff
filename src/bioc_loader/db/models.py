# src/bioc_loader/db/models.py
from uuid import uuid4

from sqlalchemy import (
    Column, Integer, String, Text, DateTime, ForeignKey, UniqueConstraint, Uuid, func
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()

class Collection(Base):
    """
    One input source (a BioC file). Created lazily, never updated or deleted by the loader.
    """
    __tablename__ = "collections"

    id = Column(Uuid, primary_key=True, default=uuid4)
    source = Column(String, nullable=True)
    date = Column(String, nullable=True)
    key = Column(String, nullable=False, unique=True)  # originating file name

    documents = relationship("Document", back_populates="collection")


class Document(Base):
    """
    A single article. document_id is the natural key; re-ingestion replaces the whole row tree.
    """
    __tablename__ = "documents"

    id = Column(Uuid, primary_key=True, default=uuid4)
    document_id = Column(String, nullable=False, unique=True)
    collection_id = Column(Uuid, ForeignKey("collections.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    collection = relationship("Collection", back_populates="documents")
    passages = relationship(
        "Passage", back_populates="document", cascade="all, delete-orphan", order_by="Passage.ordinal"
    )


class Passage(Base):
    __tablename__ = "passages"

    id = Column(Uuid, primary_key=True, default=uuid4)
    document_id = Column(Uuid, ForeignKey("documents.id", ondelete="CASCADE"), nullable=False)
    ordinal = Column(Integer, nullable=False)  # position in the source document
    offset = Column(Integer, nullable=False, default=0)
    text = Column(Text, nullable=False, default="")

    # Extracted from the passage infons
    section_type = Column(String, nullable=True)
    type = Column(String, nullable=True)

    document = relationship("Document", back_populates="passages")
    infons = relationship(
        "PassageInfon", back_populates="passage", cascade="all, delete-orphan", order_by="PassageInfon.ordinal"
    )
    annotations = relationship(
        "Annotation", back_populates="passage", cascade="all, delete-orphan", order_by="Annotation.ordinal"
    )


class PassageInfon(Base):
    """
    Raw key/value metadata of a passage. Keys may repeat within a passage.
    """
    __tablename__ = "passage_infons"

    id = Column(Uuid, primary_key=True, default=uuid4)
    passage_id = Column(Uuid, ForeignKey("passages.id", ondelete="CASCADE"), nullable=False)
    ordinal = Column(Integer, nullable=False)
    key = Column(String, nullable=False, default="")
    value = Column(Text, nullable=False, default="")

    passage = relationship("Passage", back_populates="infons")


class Annotation(Base):
    __tablename__ = "annotations"

    id = Column(Uuid, primary_key=True, default=uuid4)
    passage_id = Column(Uuid, ForeignKey("passages.id", ondelete="CASCADE"), nullable=False)
    ordinal = Column(Integer, nullable=False)
    annotation_id = Column(String, nullable=False, default="")  # source-local, not unique

    # Extracted from the annotation infons
    identifier = Column(String, nullable=True)
    type = Column(String, nullable=True)

    offset = Column(Integer, nullable=False, default=0)
    length = Column(Integer, nullable=False, default=0)
    text = Column(Text, nullable=False, default="")

    passage = relationship("Passage", back_populates="annotations")
    infons = relationship(
        "AnnotationInfon", back_populates="annotation", cascade="all, delete-orphan", order_by="AnnotationInfon.ordinal"
    )


class AnnotationInfon(Base):
    __tablename__ = "annotation_infons"

    id = Column(Uuid, primary_key=True, default=uuid4)
    annotation_id = Column(Uuid, ForeignKey("annotations.id", ondelete="CASCADE"), nullable=False)
    ordinal = Column(Integer, nullable=False)
    key = Column(String, nullable=False, default="")
    value = Column(Text, nullable=False, default="")

    annotation = relationship("Annotation", back_populates="infons")


class Disease(Base):
    """
    Auxiliary disease vocabulary (disease2pubtator). Duplicate (mesh_id, text) pairs are skipped on insert.
    """
    __tablename__ = "diseases"
    __table_args__ = (UniqueConstraint("mesh_id", "text", name="uq_diseases_mesh_id_text"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    mesh_id = Column(String, nullable=False)
    text = Column(Text, nullable=False)

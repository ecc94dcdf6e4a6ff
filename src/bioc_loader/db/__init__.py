# src/bioc_loader/db/__init__.py
# Expose models for easier importing
from .models import (
    Base, Collection, Document, Passage, PassageInfon, Annotation, AnnotationInfon, Disease
)
from .session import Database
from .repository import LoaderRepository

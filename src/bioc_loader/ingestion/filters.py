# src/bioc_loader/ingestion/filters.py
from typing import AbstractSet, FrozenSet, Iterable, Optional, Union

from bioc_loader.core.schemas import DocumentRecord

# Annotation infon keys whose values are compared against the required set
MATCH_KEYS = ("type", "identifier")


def parse_required_annotations(value: Union[str, Iterable[str], None]) -> FrozenSet[str]:
    """
    Accepts "Gene,Disease" or an iterable of names.
    Whitespace around names is dropped, case is kept.
    """
    if value is None:
        return frozenset()
    items = value.split(",") if isinstance(value, str) else value
    return frozenset(item.strip() for item in items if item and item.strip())


def should_process_document(document: DocumentRecord, required: Optional[AbstractSet[str]]) -> bool:
    """
    Whole-document inclusion test.

    With no required annotations every document passes. Otherwise the
    document passes as soon as one annotation carries a type or identifier
    infon whose value is in the required set (exact, case-sensitive).
    A passing document is stored in full.
    """
    if not required:
        return True

    for passage in document.passages:
        for annotation in passage.annotations:
            for infon in annotation.infons:
                if infon.key in MATCH_KEYS and infon.value in required:
                    return True
    return False

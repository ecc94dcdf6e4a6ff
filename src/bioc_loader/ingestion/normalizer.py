# src/bioc_loader/ingestion/normalizer.py
"""
Converts the loose tree produced by the parser into typed records.

Every one-or-many field of the tree goes through ensure_list, so the rest of
the pipeline only ever sees ordered lists. Missing optional fields take their
defaults; nothing here raises on absent data.
"""
from typing import Any, Dict, List, Optional, Tuple

from bioc_loader.core.schemas import (
    AnnotationRecord, CollectionRecord, DocumentRecord, InfonRecord, PassageRecord
)

PASSAGE_DERIVED_KEYS = ("section_type", "type")
ANNOTATION_DERIVED_KEYS = ("identifier", "type")


def ensure_list(value: Any) -> List[Any]:
    """A bare element becomes a one-item list, None becomes empty."""
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _as_str(value: Any, default: Optional[str] = "") -> Optional[str]:
    if value is None:
        return default
    if isinstance(value, dict):
        # Element that carried attributes but only its text matters here
        value = value.get("value")
        if value is None:
            return default
    return str(value).strip()


def _as_int(value: Any, default: int = 0) -> int:
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return default


def _node(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def extract_derived(infons: List[InfonRecord], keys: Tuple[str, ...]) -> Dict[str, Optional[str]]:
    """
    Pull well-known keys out of an infon list.
    When a key repeats, the last occurrence wins.
    """
    derived: Dict[str, Optional[str]] = {key: None for key in keys}
    for infon in infons:
        if infon.key in derived:
            derived[infon.key] = infon.value
    return derived


def normalize_infon(node: Any) -> InfonRecord:
    node = _node(node)
    return InfonRecord(key=_as_str(node.get("key")), value=_as_str(node.get("value")))


def normalize_infons(value: Any) -> List[InfonRecord]:
    return [normalize_infon(item) for item in ensure_list(value)]


def normalize_annotation(node: Any) -> AnnotationRecord:
    node = _node(node)
    infons = normalize_infons(node.get("infon"))
    derived = extract_derived(infons, ANNOTATION_DERIVED_KEYS)

    # Only the first location is stored
    locations = ensure_list(node.get("location"))
    location = _node(locations[0]) if locations else {}

    return AnnotationRecord(
        annotation_id=_as_str(node.get("id")),
        identifier=derived["identifier"],
        type=derived["type"],
        offset=_as_int(location.get("offset")),
        length=_as_int(location.get("length")),
        text=_as_str(node.get("text")),
        infons=infons,
    )


def normalize_passage(node: Any) -> PassageRecord:
    node = _node(node)
    infons = normalize_infons(node.get("infon"))
    derived = extract_derived(infons, PASSAGE_DERIVED_KEYS)
    return PassageRecord(
        offset=_as_int(node.get("offset")),
        text=_as_str(node.get("text")),
        section_type=derived["section_type"],
        type=derived["type"],
        infons=infons,
        annotations=[normalize_annotation(a) for a in ensure_list(node.get("annotation"))],
    )


def normalize_document(node: Any, collection_key: str) -> DocumentRecord:
    node = _node(node)
    document_id = _as_str(node.get("id"), default=None)
    return DocumentRecord(
        document_id=document_id or None,
        collection_key=collection_key,
        passages=[normalize_passage(p) for p in ensure_list(node.get("passage"))],
    )


def normalize_collection(node: Any, key: str) -> CollectionRecord:
    node = _node(node)
    return CollectionRecord(
        key=key,
        source=_as_str(node.get("source"), default=None) or None,
        date=_as_str(node.get("date"), default=None) or None,
    )

"""Unit tests for the record normalizer."""

from bioc_loader.ingestion.normalizer import (
    ensure_list,
    normalize_annotation,
    normalize_collection,
    normalize_document,
    normalize_passage,
)

from conftest import make_tree


def test_ensure_list_coerces_bare_values():
    assert ensure_list(None) == []
    assert ensure_list({"a": 1}) == [{"a": 1}]
    assert ensure_list("x") == ["x"]
    items = [1, 2]
    assert ensure_list(items) is items


def test_single_passage_matches_list_of_one():
    passage = make_tree()["passage"]
    bare = normalize_document({"id": "1", "passage": passage}, collection_key="f.xml")
    listed = normalize_document({"id": "1", "passage": [passage]}, collection_key="f.xml")
    assert bare == listed
    assert len(bare.passages) == 1


def test_document_fields():
    document = normalize_document(make_tree(document_id=42), collection_key="f.xml")
    assert document.document_id == "42"
    assert document.collection_key == "f.xml"

    passage = document.passages[0]
    assert passage.offset == 10
    assert passage.text == "Passage text"
    assert passage.type == "abstract"
    assert passage.section_type is None

    annotation = passage.annotations[0]
    assert annotation.annotation_id == "7"
    assert annotation.type == "Gene"
    assert annotation.identifier == "672"
    assert (annotation.offset, annotation.length) == (12, 4)
    assert annotation.text == "BRCA"
    assert [i.key for i in annotation.infons] == ["type", "identifier"]


def test_missing_document_id_is_none():
    assert normalize_document(make_tree(document_id=None), collection_key="f.xml").document_id is None
    assert normalize_document({"id": "", "passage": []}, collection_key="f.xml").document_id is None


def test_passage_derived_fields():
    passage = normalize_passage({
        "infon": [
            {"key": "section_type", "value": "title"},
            {"key": "type", "value": "front"},
        ]
    })
    assert passage.section_type == "title"
    assert passage.type == "front"


def test_passage_without_known_keys():
    passage = normalize_passage({"infon": {"key": "year", "value": "2020"}})
    assert passage.section_type is None
    assert passage.type is None
    # Unrecognized keys are still kept as raw infons
    assert [(i.key, i.value) for i in passage.infons] == [("year", "2020")]


def test_repeated_keys_last_occurrence_wins():
    passage = normalize_passage({
        "infon": [
            {"key": "type", "value": "first"},
            {"key": "section_type", "value": "INTRO"},
            {"key": "type", "value": "second"},
        ]
    })
    assert passage.type == "second"
    # Repeats are not deduplicated
    assert [i.value for i in passage.infons if i.key == "type"] == ["first", "second"]

    annotation = normalize_annotation({
        "id": "1",
        "infon": [
            {"key": "identifier", "value": "A"},
            {"key": "identifier", "value": "B"},
        ],
    })
    assert annotation.identifier == "B"


def test_defaults_for_missing_fields():
    annotation = normalize_annotation({"id": "9"})
    assert (annotation.offset, annotation.length) == (0, 0)
    assert annotation.text == ""
    assert annotation.infons == []
    assert annotation.identifier is None and annotation.type is None

    passage = normalize_passage({})
    assert passage.text == ""
    assert passage.offset == 0
    assert passage.annotations == []


def test_annotation_uses_first_location_only():
    annotation = normalize_annotation({
        "id": "1",
        "location": [{"offset": "5", "length": "3"}, {"offset": "50", "length": "30"}],
    })
    assert (annotation.offset, annotation.length) == (5, 3)


def test_numeric_coercion_falls_back_to_default():
    passage = normalize_passage({"offset": "not-a-number"})
    assert passage.offset == 0
    assert normalize_passage({"offset": 17}).offset == 17


def test_infon_without_value():
    passage = normalize_passage({"infon": {"key": "type"}})
    assert passage.infons[0].value == ""
    assert passage.type == ""


def test_normalize_is_deterministic():
    tree = make_tree()
    assert normalize_document(tree, "f.xml") == normalize_document(tree, "f.xml")


def test_normalize_collection():
    collection = normalize_collection({"source": "PubTator", "document": []}, key="f.xml")
    assert collection.key == "f.xml"
    assert collection.source == "PubTator"
    assert collection.date is None

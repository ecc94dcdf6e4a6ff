"""Tests for the disease vocabulary loader."""

import pytest
from sqlalchemy import select

from bioc_loader.core.exceptions import InputPathError
from bioc_loader.core.schemas import DiseaseRecord
from bioc_loader.db.models import Disease
from bioc_loader.ingestion.diseases import DiseaseLoader, count_lines, parse_line

DISEASE_LINES = [
    "1\tDisease\tMESH:D001\tSome disease",
    "2\tDisease\tD002\tOther disease",
    "3\tDisease\tD003",                      # too few columns
    "4\tDisease\t\tNo id",                   # empty id
    "5\tDisease\tMESH:D001\tSome disease",   # duplicate pair
    "6\tDisease\tMESH:D001\tSynonym",        # same id, new text
    "",
]


@pytest.fixture
def disease_file(tmp_path):
    path = tmp_path / "disease2pubtator3"
    path.write_text("\n".join(DISEASE_LINES) + "\n", encoding="utf-8")
    return path


def _stored(database):
    with database.get_session() as session:
        return sorted(session.execute(select(Disease.mesh_id, Disease.text)).all())


def test_parse_valid_line():
    assert parse_line("1\tname\tMESH:D001\tSome disease") == DiseaseRecord(mesh_id="D001", text="Some disease")


def test_parse_keeps_unprefixed_id():
    assert parse_line("1\tname\tC000123\t Text \n") == DiseaseRecord(mesh_id="C000123", text="Text")


@pytest.mark.parametrize("line", [
    "1\tname\tD001",
    "",
    "1\tname\t\tText",
    "1\tname\tD001\t   ",
    "1\tname\tMESH:\tText",
])
def test_parse_rejects_invalid_lines(line):
    assert parse_line(line) is None


def test_count_lines(disease_file):
    assert count_lines(disease_file) == len(DISEASE_LINES)


def test_load_file(database, disease_file):
    report = DiseaseLoader(database, batch_size=2, concurrency=1).load_file(disease_file)

    assert report.lines == len(DISEASE_LINES)
    assert report.valid == 4
    assert report.invalid == 3
    assert report.loaded == 3
    assert report.failed_batches == 0
    assert _stored(database) == [("D001", "Some disease"), ("D001", "Synonym"), ("D002", "Other disease")]


def test_reload_replaces_existing_rows(database, disease_file, tmp_path):
    DiseaseLoader(database, batch_size=10, concurrency=1).load_file(disease_file)

    smaller = tmp_path / "smaller"
    smaller.write_text("1\tDisease\tD999\tNew disease\n", encoding="utf-8")
    report = DiseaseLoader(database, batch_size=10, concurrency=1).load_file(smaller)

    assert report.deleted == 3
    assert _stored(database) == [("D999", "New disease")]


def test_progress_reports_final_line_count(database, disease_file):
    seen = []
    DiseaseLoader(database, batch_size=2, concurrency=1, progress=seen.append).load_file(disease_file)
    assert seen[-1] == len(DISEASE_LINES)


def test_missing_file(database, tmp_path):
    with pytest.raises(InputPathError):
        DiseaseLoader(database).load_file(tmp_path / "absent")


def test_invalid_settings(database):
    with pytest.raises(ValueError):
        DiseaseLoader(database, batch_size=0)


def test_undecodable_bytes_do_not_abort_the_load(database, tmp_path):
    path = tmp_path / "latin1"
    path.write_bytes(
        b"1\tDisease\tD001\tGood\n"
        b"2\tDisease\tD002\tBad \xff byte\n"
        b"3\tDisease\t\xff\n"
    )
    report = DiseaseLoader(database, batch_size=10, concurrency=1).load_file(path)

    assert report.lines == 3
    assert report.valid == 2
    assert report.invalid == 1
    assert _stored(database) == [("D001", "Good"), ("D002", "Bad \ufffd byte")]


def test_unreadable_file_keeps_existing_rows(database, disease_file, monkeypatch):
    DiseaseLoader(database, batch_size=10, concurrency=1).load_file(disease_file)

    def refuse(*args, **kwargs):
        raise PermissionError("denied")

    monkeypatch.setattr("bioc_loader.ingestion.diseases.open", refuse, raising=False)
    with pytest.raises(PermissionError):
        DiseaseLoader(database, batch_size=10, concurrency=1).load_file(disease_file)

    assert len(_stored(database)) == 3

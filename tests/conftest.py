"""Pytest configuration and shared fixtures."""

from pathlib import Path

import pytest

from bioc_loader.core.schemas import CollectionRecord
from bioc_loader.db.session import Database

SAMPLE_BIOC = """<?xml version="1.0" encoding="UTF-8"?>
<collection>
  <source>PubTator</source>
  <date>2024-01-01</date>
  <key>BioC.key</key>
  <document>
    <id>1001</id>
    <passage>
      <infon key="section_type">TITLE</infon>
      <infon key="type">front</infon>
      <offset>0</offset>
      <text>BRCA1 mutations in breast cancer</text>
      <annotation id="1">
        <infon key="identifier">672</infon>
        <infon key="type">Gene</infon>
        <location offset="0" length="5"/>
        <text>BRCA1</text>
      </annotation>
      <annotation id="2">
        <infon key="identifier">MESH:D001943</infon>
        <infon key="type">Disease</infon>
        <location offset="19" length="13"/>
        <text>breast cancer</text>
      </annotation>
    </passage>
    <passage>
      <infon key="type">abstract</infon>
      <offset>33</offset>
      <text>Abstract text.</text>
    </passage>
  </document>
  <document>
    <id>1002</id>
    <passage>
      <offset>0</offset>
      <text>Only a disease here.</text>
      <annotation id="3">
        <infon key="type">Disease</infon>
        <location offset="7" length="7"/>
        <text>disease</text>
      </annotation>
    </passage>
  </document>
</collection>
"""

# Same document ids as SAMPLE_BIOC, different content
REVISED_BIOC = """<?xml version="1.0" encoding="UTF-8"?>
<collection>
  <source>PubTator</source>
  <document>
    <id>1001</id>
    <passage>
      <infon key="type">title</infon>
      <offset>0</offset>
      <text>Revised title</text>
    </passage>
  </document>
</collection>
"""


@pytest.fixture
def database(tmp_path: Path) -> Database:
    """File-backed SQLite database with the schema created.

    Yields:
        Database: store handle, disposed after the test
    """
    db = Database(f"sqlite:///{tmp_path / 'bioc.db'}")
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def sample_file(tmp_path: Path) -> Path:
    path = tmp_path / "input" / "sample.xml"
    path.parent.mkdir()
    path.write_text(SAMPLE_BIOC, encoding="utf-8")
    return path


@pytest.fixture
def collection() -> CollectionRecord:
    return CollectionRecord(key="sample.xml", source="PubTator", date="2024-01-01")


def make_tree(document_id="42", passage=None):
    """Minimal parser-shaped document node."""
    if passage is None:
        passage = {
            "offset": "10",
            "text": "Passage text",
            "infon": {"key": "type", "value": "abstract"},
            "annotation": {
                "id": "7",
                "infon": [{"key": "type", "value": "Gene"}, {"key": "identifier", "value": "672"}],
                "location": {"offset": "12", "length": "4"},
                "text": "BRCA",
            },
        }
    node = {"passage": passage}
    if document_id is not None:
        node["id"] = document_id
    return node

# src/bioc_loader/ingestion/parsers.py
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, Dict, Union

from bioc_loader.core.exceptions import DocumentParseError


def _element_to_tree(element: ET.Element) -> Any:
    """
    Loose conversion of one element.
    A bare leaf becomes its text. Anything with attributes or children becomes a
    dict: attributes, then children by tag (a repeated tag becomes a list, a
    single one stays bare), then the element's own text under "value".
    """
    children = list(element)
    text = (element.text or "").strip()
    if not children and not element.attrib:
        return text

    node: Dict[str, Any] = dict(element.attrib)
    for child in children:
        value = _element_to_tree(child)
        if child.tag not in node:
            node[child.tag] = value
        elif isinstance(node[child.tag], list):
            node[child.tag].append(value)
        else:
            node[child.tag] = [node[child.tag], value]
    if text:
        node["value"] = text
    return node


def parse_string(content: Union[str, bytes]) -> Dict[str, Any]:
    try:
        root = ET.fromstring(content)
    except ET.ParseError as exc:
        raise DocumentParseError(f"Malformed BioC XML: {exc}") from exc
    return {root.tag: _element_to_tree(root)}


def parse_file(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Parse a BioC XML file into {"collection": {...}}.
    Documents, passages, annotations, infons and locations may come back as a
    single dict or a list; the normalizer evens that out.
    """
    try:
        root = ET.parse(str(path)).getroot()
    except ET.ParseError as exc:
        raise DocumentParseError(f"Malformed BioC XML in {path}: {exc}") from exc
    except OSError as exc:
        raise DocumentParseError(f"Cannot read {path}: {exc}") from exc
    return {root.tag: _element_to_tree(root)}

"""Tests for textpart.io_utils module."""
from __future__ import annotations

import json
from pathlib import Path

import pytest

from textpart.engine import TextPart
from textpart.io_utils import dump_document, load_rules_payload, save_document


def test_load_rules_payload(tmp_path: Path) -> None:
    path = tmp_path / "rules.json"
    path.write_text(json.dumps({"name": "x", "sections": ["a"]}))
    assert load_rules_payload(path) == {"name": "x", "sections": ["a"]}


def test_load_rules_payload_rejects_list(tmp_path: Path) -> None:
    path = tmp_path / "rules.json"
    path.write_text("[1, 2]")
    with pytest.raises(ValueError):
        load_rules_payload(path)


def test_dump_document_compact() -> None:
    doc = TextPart(config={"sections_enabled": False}).transform("a")
    assert dump_document(doc, pretty=False) == b'[{"lineNumber":1,"parts":["a"]}]'


def test_save_document_creates_parents(tmp_path: Path) -> None:
    doc = TextPart(name="n", identifiers={"important": ["b"]}).transform("abc")
    path = tmp_path / "nested" / "doc.json"
    save_document(doc, path)
    data = json.loads(path.read_text())
    assert data[0]["title"] == "n"
    assert data[0]["severityLevel"] == "important"

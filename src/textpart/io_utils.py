"""I/O utilities for rule files and transformed documents.

orjson-backed JSON loading and dumping. Documents are written in their
wire form (``Document.to_wire()``).
"""
from __future__ import annotations

from pathlib import Path
from typing import Any

import orjson

from textpart.part_types import Document


def load_json(path: Path) -> Any:
    """Load JSON from a file."""
    return orjson.loads(path.read_bytes())


def load_rules_payload(path: Path) -> dict[str, Any]:
    """Load a rules file (``{name, sections, identifiers, config}``) as a dict."""
    payload = load_json(path)
    if not isinstance(payload, dict):
        raise ValueError(f"Rules payload must be a JSON object: {path}")
    return payload


def dump_document(doc: Document, *, pretty: bool = True) -> bytes:
    """Serialize a document's wire form to JSON bytes."""
    opts = orjson.OPT_INDENT_2 if pretty else 0
    return orjson.dumps(doc.to_wire(), option=opts)


def save_document(doc: Document, path: Path, *, pretty: bool = True) -> None:
    """Write a document as JSON, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(dump_document(doc, pretty=pretty) + b"\n")

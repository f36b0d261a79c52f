"""Final document assembly and per-section severity rollup."""
from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import replace

from textpart.part_types import Document, Line, Section, max_severity


def section_severity(section: Section) -> str | None:
    """Highest annotation level in ``section`` (general < important < critical).

    None when the section holds no annotations.
    """
    return max_severity(a.level for a in section.iter_annotations())


def rollup_severity(sections: Iterable[Section]) -> list[Section]:
    return [replace(s, severity_level=section_severity(s)) for s in sections]


def assemble_sections(sections: Sequence[Section], *, severity_rollup: bool = True) -> Document:
    """Wrap annotated sections into a Document, rolling up severity if asked."""
    if severity_rollup:
        return Document(sections=tuple(rollup_severity(sections)))
    return Document(sections=tuple(sections))


def assemble_lines(lines: Sequence[Line]) -> Document:
    return Document(lines=tuple(lines))

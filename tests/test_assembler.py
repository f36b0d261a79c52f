"""Tests for textpart.assembler module."""
from textpart.assembler import assemble_lines, assemble_sections, section_severity
from textpart.part_types import Annotation, Line, PlainText, Section


def _section(*levels: str) -> Section:
    lines = tuple(
        Line(i, (PlainText("x"), Annotation("y", level=lvl)))
        for i, lvl in enumerate(levels, start=1)
    )
    return Section("s", lines=lines, is_empty=not lines)


class TestSectionSeverity:
    def test_highest_wins(self) -> None:
        assert section_severity(_section("general", "critical", "important")) == "critical"

    def test_none_without_annotations(self) -> None:
        plain = Section("s", lines=(Line(1, (PlainText("x"),)),))
        assert section_severity(plain) is None


class TestAssemble:
    def test_rollup(self) -> None:
        doc = assemble_sections([_section("important"), _section()])
        assert doc.sections is not None
        assert [s.severity_level for s in doc.sections] == ["important", None]

    def test_rollup_disabled(self) -> None:
        doc = assemble_sections([_section("critical")], severity_rollup=False)
        assert doc.sections is not None
        assert doc.sections[0].severity_level is None

    def test_lines_pass_through(self) -> None:
        src = _section("general")
        doc = assemble_sections([src])
        assert doc.sections is not None
        assert doc.sections[0].lines == src.lines

    def test_flat(self) -> None:
        line = Line(1, (PlainText("x"),))
        doc = assemble_lines([line])
        assert doc.sections is None
        assert doc.lines == (line,)

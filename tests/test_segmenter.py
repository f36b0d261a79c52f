"""Tests for textpart.segmenter module."""
from __future__ import annotations

import re

from textpart.rule_store import make_section_rule
from textpart.segmenter import find_boundary, segment_sections
from textpart.splitter import split_lines


def _titles_and_texts(sections) -> list[tuple[str, list[str]]]:  # type: ignore[no-untyped-def]
    return [(s.title, [ln.text for ln in s.lines]) for s in sections]


class TestSegmentSections:
    def test_no_rules_single_section(self) -> None:
        lines = split_lines("a\nb\nc")
        sections = segment_sections("doc", lines, [])
        assert len(sections) == 1
        assert sections[0].title == "doc"
        assert sections[0].matched_text is None
        assert sections[0].lines == tuple(lines)
        assert sections[0].is_empty is False

    def test_boundaries(self) -> None:
        lines = split_lines("intro\nsection1\nbody\nsection2\nend")
        rules = [make_section_rule("section1"), make_section_rule(re.compile(r"section\d"))]
        sections = segment_sections("doc", lines, rules)
        assert _titles_and_texts(sections) == [
            ("doc", ["intro"]),
            ("section1", ["section1", "body"]),
            ("section2", ["section2", "end"]),
        ]
        assert [s.matched_text for s in sections] == [None, "section1", "section2"]

    def test_title_is_whole_line(self) -> None:
        lines = split_lines("== Part One ==\nx")
        sections = segment_sections("doc", lines, [make_section_rule("Part")])
        assert sections[1].title == "== Part One =="
        assert sections[1].matched_text == "Part"

    def test_leading_section_kept_when_empty(self) -> None:
        lines = split_lines("section\nx")
        sections = segment_sections("doc", lines, [make_section_rule("section")])
        assert sections[0].title == "doc"
        assert sections[0].lines == ()
        assert sections[0].is_empty is True
        assert sections[1].is_empty is False

    def test_no_repeat_suppresses_same_match(self) -> None:
        lines = split_lines("section\nx\nsection\ny")
        rules = [make_section_rule(re.compile("section"), no_repeat=True)]
        sections = segment_sections("doc", lines, rules)
        assert _titles_and_texts(sections) == [
            ("doc", []),
            ("section", ["section", "x", "section", "y"]),
        ]

    def test_no_repeat_allows_different_match(self) -> None:
        lines = split_lines("sec A\nx\nsec B\ny\nsec B")
        rules = [make_section_rule(re.compile(r"sec \w"), no_repeat=True)]
        sections = segment_sections("doc", lines, rules)
        assert [s.title for s in sections] == ["doc", "sec A", "sec B"]
        assert [ln.text for ln in sections[2].lines] == ["sec B", "y", "sec B"]

    def test_without_no_repeat_every_match_opens(self) -> None:
        lines = split_lines("section\nx\nsection\ny")
        sections = segment_sections("doc", lines, [make_section_rule("section")])
        assert len(sections) == 3

    def test_suppressed_rule_falls_through_to_next(self) -> None:
        lines = split_lines("part\npart two")
        rules = [
            make_section_rule("part", no_repeat=True),
            make_section_rule("two", {"kind": "second"}),
        ]
        sections = segment_sections("doc", lines, rules)
        assert [s.title for s in sections] == ["doc", "part", "part two"]
        assert sections[2].matched_text == "two"
        assert sections[2].extra_data == {"kind": "second"}

    def test_one_boundary_per_line(self) -> None:
        lines = split_lines("alpha beta")
        rules = [make_section_rule("alpha", {"n": 1}), make_section_rule("beta", {"n": 2})]
        sections = segment_sections("doc", lines, rules)
        assert len(sections) == 2
        assert sections[1].extra_data == {"n": 1}

    def test_rule_metadata_on_section(self) -> None:
        lines = split_lines("Five\nSix")
        rules = [make_section_rule("Five", {"message": "Hey there"}, visible=True)]
        sections = segment_sections("doc", lines, rules)
        assert sections[1].extra_data == {"message": "Hey there"}
        assert sections[1].visible is True
        assert sections[0].visible is False

    def test_every_line_in_exactly_one_section(self) -> None:
        lines = split_lines("a\nh1\nb\nh2\nc\nh1")
        sections = segment_sections("doc", lines, [make_section_rule(re.compile(r"h\d"))])
        numbers = [ln.line_number for s in sections for ln in s.lines]
        assert numbers == [1, 2, 3, 4, 5, 6]


class TestFindBoundary:
    def test_none_when_nothing_matches(self) -> None:
        assert find_boundary("abc", [make_section_rule("z")], None) is None

    def test_returns_rule_and_match(self) -> None:
        rule = make_section_rule(re.compile(r"\d+"))
        hit = find_boundary("ch 12", [rule], None)
        assert hit == (rule, "12")

"""Tests for textpart.splitter module."""
from textpart.part_types import PlainText
from textpart.splitter import limit_line_length, split_lines


class TestSplitLines:
    def test_numbers_from_one(self) -> None:
        lines = split_lines("a\nb\nc")
        assert [ln.line_number for ln in lines] == [1, 2, 3]
        assert [ln.parts for ln in lines] == [
            (PlainText("a"),), (PlainText("b"),), (PlainText("c"),),
        ]

    def test_trailing_newline_gives_empty_line(self) -> None:
        lines = split_lines("a\n")
        assert [ln.text for ln in lines] == ["a", ""]

    def test_empty_input(self) -> None:
        lines = split_lines("")
        assert len(lines) == 1
        assert lines[0].line_number == 1
        assert lines[0].parts == (PlainText(""),)

    def test_line_length_limit(self) -> None:
        lines = split_lines("abcdef\nab", line_length_limit=3)
        assert [ln.text for ln in lines] == ["abc", "ab"]


class TestLimitLineLength:
    def test_no_limit(self) -> None:
        assert limit_line_length("abcdef", None) == "abcdef"

    def test_truncates_without_marker(self) -> None:
        assert limit_line_length("abcdef", 4) == "abcd"

    def test_short_line_untouched(self) -> None:
        assert limit_line_length("ab", 4) == "ab"

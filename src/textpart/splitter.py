"""Split raw text into numbered lines."""
from __future__ import annotations

from textpart.part_types import Line, PlainText


def limit_line_length(text: str, limit: int | None) -> str:
    """Keep only the first ``limit`` characters of ``text`` (no marker added)."""
    if limit is None or len(text) <= limit:
        return text
    return text[:limit]


def split_lines(text: str, *, line_length_limit: int | None = None) -> list[Line]:
    """Split ``text`` on newlines into lines numbered from 1.

    Each line starts out as a single PlainText part. Splitting is on
    ``"\\n"`` only, so a trailing newline yields a final empty line and an
    empty string yields one empty line.
    """
    return [
        Line(line_number=i, parts=(PlainText(limit_line_length(raw, line_length_limit)),))
        for i, raw in enumerate(text.split("\n"), start=1)
    ]

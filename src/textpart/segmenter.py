"""Section segmentation.

Walks the split lines once, keeping a single piece of state: the section
currently accepting lines. Before the first line is read, a section
titled with the document name is opened; it is always first in the
output, even if it never receives a line.

Per line:
    1. Test section rules in store order against the line text.
    2. The first rule that matches opens a new section titled with the
       line, unless the rule is ``no_repeat`` and its match equals the
       current section's match; then the next rule is tried.
    3. At most one new section per line.
    4. The line is appended to the current section.
"""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from textpart.part_types import Line, Rule, Section


@dataclass(slots=True)
class _OpenSection:
    """Mutable accumulator for a section while lines are being consumed."""

    title: str
    matched_text: str | None
    extra_data: Mapping[str, Any]
    visible: bool = False
    lines: list[Line] = field(default_factory=list[Line])

    def append(self, line: Line) -> None:
        self.lines.append(line)

    def freeze(self) -> Section:
        return Section(
            title=self.title,
            matched_text=self.matched_text,
            lines=tuple(self.lines),
            extra_data=dict(self.extra_data),
            is_empty=not self.lines,
            visible=self.visible,
        )


def find_boundary(line_text: str, rules: Sequence[Rule], current_match: str | None) -> tuple[Rule, str] | None:
    """Return the first qualifying (rule, matched text) for a line, or None."""
    for rule in rules:
        matched = rule.pattern.search(line_text)
        if matched is None:
            continue
        if rule.no_repeat and matched == current_match:
            continue
        return rule, matched
    return None


def segment_sections(title: str, lines: Sequence[Line], rules: Sequence[Rule]) -> list[Section]:
    """Group ``lines`` into sections opened by ``rules``.

    Args:
        title: Title of the leading section (the document name).
        lines: Split lines, still one PlainText part each.
        rules: Section rules in precedence order.

    Returns:
        Sections ordered by the position of their first line. Every line
        lands in exactly one section.
    """
    current = _OpenSection(title=title, matched_text=None, extra_data={})
    opened = [current]
    for line in lines:
        hit = find_boundary(line.text, rules, current.matched_text)
        if hit is not None:
            rule, matched = hit
            current = _OpenSection(
                title=line.text,
                matched_text=matched,
                extra_data=rule.extra_data,
                visible=rule.visible,
            )
            opened.append(current)
        current.append(line)
    return [s.freeze() for s in opened]

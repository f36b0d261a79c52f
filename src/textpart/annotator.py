"""Annotation scanning.

Rules are applied as a fold: each rule rewrites the part list of a line
and the result feeds the next rule. Only PlainText parts are scanned, so
a span claimed by an earlier rule is never seen by a later one. This is
not equivalent to one combined multi-pattern scan once rules overlap.
"""
from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import replace

from textpart.part_types import Annotation, Line, Part, PlainText, Rule, Section


def annotation_for(rule: Rule, matched_text: str) -> Annotation:
    return Annotation(
        matched_text=matched_text,
        level=rule.level,
        description=rule.description,
        link=rule.link,
        extra_data=dict(rule.extra_data),
    )


def split_plain_text(part: PlainText, rule: Rule) -> list[Part]:
    """Replace every match of ``rule`` inside ``part`` with an Annotation.

    Gaps around matches stay as PlainText, empty ones included, so
    ``"banana"`` scanned for ``a`` gives
    ``["b", <a>, "n", <a>, "n", <a>, ""]``. Zero-width matches are
    skipped. A part with no match comes back unchanged.
    """
    text = part.text
    out: list[Part] = []
    last = 0
    for start, end in rule.pattern.spans(text):
        if start == end:
            continue
        out.append(PlainText(text[last:start]))
        out.append(annotation_for(rule, text[start:end]))
        last = end
    if not out:
        return [part]
    out.append(PlainText(text[last:]))
    return out


def apply_rule(parts: Iterable[Part], rule: Rule) -> tuple[Part, ...]:
    """One fold step: scan the PlainText parts, flatten the result."""
    out: list[Part] = []
    for part in parts:
        if isinstance(part, PlainText):
            out.extend(split_plain_text(part, rule))
        else:
            out.append(part)
    return tuple(out)


def annotate_line(line: Line, rules: Sequence[Rule]) -> Line:
    """Apply every rule to ``line`` in order. The line number is kept."""
    parts: tuple[Part, ...] = line.parts
    for rule in rules:
        parts = apply_rule(parts, rule)
    if parts is line.parts:
        return line
    return Line(line_number=line.line_number, parts=parts)


def annotate_lines(lines: Iterable[Line], rules: Sequence[Rule]) -> list[Line]:
    return [annotate_line(ln, rules) for ln in lines]


def annotate_sections(sections: Iterable[Section], rules: Sequence[Rule]) -> list[Section]:
    """Annotate each section's lines independently."""
    return [replace(s, lines=tuple(annotate_lines(s.lines, rules))) for s in sections]

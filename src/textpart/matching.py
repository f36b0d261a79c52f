"""Pattern-matching primitives used by section and annotation rules.

The engine only needs two operations from a pattern: the first match in a
line, and every non-overlapping match found leftmost-first in a single
left-to-right pass. ``PatternMatcher`` is that narrow interface;
``RegexMatcher`` satisfies it with the stdlib ``re`` engine.

Pure text operations with zero pipeline dependencies.
"""
from __future__ import annotations

import re
from collections.abc import Iterator
from typing import Protocol, runtime_checkable

from textpart.part_types import InvalidRule


@runtime_checkable
class PatternMatcher(Protocol):
    """Anything that can find matches of one pattern inside a line."""

    def search(self, text: str) -> str | None:
        """Return the text of the first match, or None."""
        ...

    def spans(self, text: str) -> Iterator[tuple[int, int]]:
        """Yield (start, end) of every non-overlapping match, left to right."""
        ...


class RegexMatcher:
    """``PatternMatcher`` backed by a compiled regular expression."""

    __slots__ = ("regex",)

    def __init__(self, regex: re.Pattern[str]) -> None:
        self.regex = regex

    def search(self, text: str) -> str | None:
        m = self.regex.search(text)
        return m.group(0) if m is not None else None

    def spans(self, text: str) -> Iterator[tuple[int, int]]:
        for m in self.regex.finditer(text):
            yield m.start(), m.end()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RegexMatcher):
            return NotImplemented
        return self.regex == other.regex

    def __hash__(self) -> int:
        return hash(self.regex)

    def __repr__(self) -> str:
        return f"RegexMatcher({self.regex.pattern!r})"


# ---------------------------------------------------------------------------
# Pattern construction
# ---------------------------------------------------------------------------

# "/body/flags" — same slash-delimited literal the rule DSLs use.
_REGEX_LITERAL_RE = re.compile(r"^/(?P<body>.+)/(?P<flags>[imsx]*)$", re.DOTALL)

_FLAG_MAP: dict[str, re.RegexFlag] = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "x": re.VERBOSE,
}


def is_regex_literal(value: str) -> bool:
    """True if ``value`` is written as a ``/body/flags`` regex literal."""
    return _REGEX_LITERAL_RE.match(value) is not None


def parse_regex_literal(value: str) -> re.Pattern[str]:
    """Compile a ``/body/flags`` literal.

    Raises:
        InvalidRule: if ``value`` is not a regex literal.
        re.error: if the body is not a valid regular expression.
    """
    m = _REGEX_LITERAL_RE.match(value)
    if m is None:
        raise InvalidRule(f"Not a regex literal: {value!r}")
    flags = re.RegexFlag(0)
    for ch in m.group("flags"):
        flags |= _FLAG_MAP[ch]
    return re.compile(m.group("body"), flags)


def compile_pattern(pattern: object) -> PatternMatcher:
    """Turn a raw pattern into a matcher.

    A ``str`` is matched literally. A compiled ``re.Pattern`` is used
    as-is. An existing ``PatternMatcher`` passes through unchanged.

    Raises:
        InvalidRule: for anything else (including an empty string).
    """
    if isinstance(pattern, str):
        if not pattern:
            raise InvalidRule("Pattern must not be an empty string")
        return RegexMatcher(re.compile(re.escape(pattern)))
    if isinstance(pattern, re.Pattern):
        if not isinstance(pattern.pattern, str):
            raise InvalidRule("Byte patterns cannot match text lines")
        return RegexMatcher(pattern)
    if isinstance(pattern, PatternMatcher):
        return pattern
    raise InvalidRule(
        f"Tried to add something which was not a pattern ({pattern!r} ({type(pattern).__name__}))"
    )

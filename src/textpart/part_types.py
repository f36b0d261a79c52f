"""Core types for the text-part pipeline.

Every stage of the pipeline shares these types. Documents, sections,
lines and parts are frozen: a fresh tree is built on each ``transform``
call and never mutated afterwards. All dataclasses use slots=True.

Type hierarchy:
  Ok[T] / Err[E]   — Strict algebraic Result type (shorthand normalizer)
  Rule             — Pattern plus metadata (section or annotation rule)
  PlainText        — Untagged text fragment of a line
  Annotation       — Tagged match carrying rule metadata
  Line             — Ordered parts with a stable 1-based line number
  Section          — Titled run of lines bounded by section-rule matches
  Document         — Ordered sections, or a flat line list
"""
from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from textpart.matching import PatternMatcher

# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class TextPartError(ValueError):
    """Base error for rule and section construction failures."""


class InvalidRuleMetadata(TextPartError):
    """A rule's metadata payload is a scalar instead of a mapping."""


class InvalidRule(TextPartError):
    """An object is neither a usable pattern nor a record with a pattern field."""


class InvalidSectionFields(TextPartError):
    """A section was built with a non-text title, non-sequence lines or non-mapping data."""


# ---------------------------------------------------------------------------
# Result ADT — strict Ok/Err
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Ok[T]:
    """Success case of Result[T, E].

    Usage::

        match normalize_section_specs(specs):
            case Ok(value=rules): ...
            case Err(error=e): print(e.message)
    """
    value: T


@dataclass(frozen=True, slots=True)
class Err[E]:
    """Failure case of Result[T, E]."""
    error: E


type Result[T, E] = Ok[T] | Err[E]


# ---------------------------------------------------------------------------
# Severity levels
# ---------------------------------------------------------------------------

SEVERITY_LEVELS: tuple[str, ...] = ("general", "important", "critical")

DEFAULT_SEVERITY = "general"

_SEVERITY_RANK: dict[str, int] = {lvl: i for i, lvl in enumerate(SEVERITY_LEVELS)}


def is_severity(value: object) -> bool:
    """True if ``value`` names a known severity level."""
    return isinstance(value, str) and value in _SEVERITY_RANK


def max_severity(levels: Iterable[str | None]) -> str | None:
    """Return the highest level in ``levels`` (general < important < critical).

    Unknown and ``None`` entries are ignored. Returns None when nothing
    ranks.
    """
    best: str | None = None
    best_rank = -1
    for lvl in levels:
        if lvl is None:
            continue
        rank = _SEVERITY_RANK.get(lvl, -1)
        if rank > best_rank:
            best, best_rank = lvl, rank
    return best


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Rule:
    """A compiled pattern plus the metadata attached to its matches.

    ``no_repeat`` and ``visible`` only matter for section rules;
    ``level``, ``description`` and ``link`` only for annotation rules.
    """

    pattern: PatternMatcher
    extra_data: Mapping[str, Any] = field(default_factory=dict[str, Any])
    level: str | None = None
    description: str | None = None
    link: str | None = None
    no_repeat: bool = False
    visible: bool = False

    def __hash__(self) -> int:
        # extra_data is a plain dict; equal rules still hash equal without it
        return hash((self.pattern, self.level, self.description, self.link, self.no_repeat, self.visible))


# ---------------------------------------------------------------------------
# Parts and lines
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class PlainText:
    """A fragment of a line that no annotation rule claimed."""

    text: str

    def to_wire(self) -> str:
        return self.text


@dataclass(frozen=True, slots=True)
class Annotation:
    """A matched substring tagged with the metadata of the rule that claimed it.

    Annotations are never re-scanned by later rules.
    Hashing leaves out ``extra_data``, so equal annotations hash equal
    and lines and documents can be used as set members or dict keys.
    """

    matched_text: str
    level: str | None = None
    description: str | None = None
    link: str | None = None
    extra_data: Mapping[str, Any] = field(default_factory=dict[str, Any])

    @property
    def text(self) -> str:
        return self.matched_text

    def to_wire(self) -> dict[str, Any]:
        return {
            "type": "annotation",
            "matchedText": self.matched_text,
            "level": self.level,
            "description": self.description,
            "link": self.link,
            "extraData": dict(self.extra_data),
        }

    def __hash__(self) -> int:
        return hash((self.matched_text, self.level, self.description, self.link))


type Part = PlainText | Annotation


@dataclass(frozen=True, slots=True)
class Line:
    """An ordered sequence of parts tagged with its original 1-based line number."""

    line_number: int
    parts: tuple[Part, ...]

    @property
    def text(self) -> str:
        """The line's full text, reassembled from its parts."""
        return "".join(p.text for p in self.parts)

    @property
    def annotations(self) -> tuple[Annotation, ...]:
        return tuple(p for p in self.parts if isinstance(p, Annotation))

    def to_wire(self) -> dict[str, Any]:
        return {
            "lineNumber": self.line_number,
            "parts": [p.to_wire() for p in self.parts],
        }


# ---------------------------------------------------------------------------
# Sections and documents
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Section:
    """A titled, contiguous run of lines.

    The first section of a document is titled with the document name and
    has no ``matched_text``; every later section is titled with the line
    that opened it.

    Invariants (enforced in __post_init__):
        - title is a str
        - lines is a sequence of Line
        - extra_data is a mapping
        - is_empty agrees with lines (derived when left as None)
    """

    title: str
    matched_text: str | None = None
    lines: tuple[Line, ...] = ()
    extra_data: Mapping[str, Any] = field(default_factory=dict[str, Any])
    severity_level: str | None = None
    is_empty: bool | None = None
    visible: bool = False

    def __post_init__(self) -> None:
        """Validate structural invariants at construction time."""
        if not isinstance(self.title, str):
            raise InvalidSectionFields(
                f"Section.title must be a str, got {type(self.title).__name__}"
            )
        if isinstance(self.lines, (str, bytes)) or not isinstance(self.lines, Sequence):
            raise InvalidSectionFields(
                f"Section.lines must be a sequence, got {type(self.lines).__name__}"
            )
        if not all(isinstance(ln, Line) for ln in self.lines):
            raise InvalidSectionFields("Section.lines must only contain Line objects")
        if not isinstance(self.extra_data, Mapping):
            raise InvalidSectionFields(
                f"Section.extra_data must be a mapping, got {type(self.extra_data).__name__}"
            )
        if not isinstance(self.lines, tuple):
            object.__setattr__(self, "lines", tuple(self.lines))
        if self.is_empty is None:
            object.__setattr__(self, "is_empty", not self.lines)
        elif self.is_empty != (not self.lines):
            raise InvalidSectionFields(
                f"Section.is_empty={self.is_empty!r} disagrees with {len(self.lines)} line(s)"
            )

    def __hash__(self) -> int:
        return hash((
            self.title, self.matched_text, self.lines,
            self.severity_level, self.is_empty, self.visible,
        ))

    def iter_annotations(self) -> Iterator[Annotation]:
        for line in self.lines:
            yield from line.annotations

    def to_wire(self) -> dict[str, Any]:
        return {
            "type": "section",
            "title": self.title,
            "matchedText": self.matched_text,
            "lines": [ln.to_wire() for ln in self.lines],
            "extraData": dict(self.extra_data),
            "severityLevel": self.severity_level,
            "isEmpty": self.is_empty,
            "visible": self.visible,
        }


@dataclass(frozen=True, slots=True)
class Document:
    """Final result of a transform: sections, or a flat line list.

    Exactly one of ``sections`` / ``lines`` is set.
    """

    sections: tuple[Section, ...] | None = None
    lines: tuple[Line, ...] | None = None

    def __post_init__(self) -> None:
        if (self.sections is None) == (self.lines is None):
            raise ValueError("Document needs exactly one of sections or lines")

    @property
    def is_sectioned(self) -> bool:
        return self.sections is not None

    def iter_lines(self) -> Iterator[Line]:
        """Yield every line in document order, regardless of sectioning."""
        if self.sections is not None:
            for section in self.sections:
                yield from section.lines
        else:
            yield from self.lines or ()

    def to_wire(self) -> list[dict[str, Any]]:
        """JSON-ready form: a list of sections, or a list of lines."""
        if self.sections is not None:
            return [s.to_wire() for s in self.sections]
        return [ln.to_wire() for ln in self.lines or ()]

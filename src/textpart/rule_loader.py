"""Shorthand rule specs -> canonical rule lists.

Callers may describe rules in several convenience shapes. This module
flattens all of them into an ordered ``list[RuleSpec]`` before anything
reaches the rule store, so the rest of the engine only ever sees one
shape.

Accepted entry shapes::

    "Chapter"                                   bare pattern (literal text)
    re.compile(r"^Chapter \\d+")                 bare pattern (regex)
    {"pattern": "Chapter", "extraData": {...}}  single spec
    {"pattern": ["a", "b"], "extraData": {...}} one rule per pattern, in order
    {"critical": [...], "general": [...]}       level map (identifiers only)

``regex`` and ``data`` are accepted as legacy spellings of ``pattern``
and ``extraData``. Normalization never raises: it returns ``Ok(specs)``
or ``Err(RuleSpecError)``; ``raise_for_error`` turns the latter into the
matching exception.
"""
from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from textpart.matching import PatternMatcher, is_regex_literal, parse_regex_literal
from textpart.part_types import (
    Err,
    InvalidRule,
    InvalidRuleMetadata,
    Ok,
    Result,
    Rule,
    TextPartError,
    is_severity,
)
from textpart.rule_store import make_annotation_rule, make_section_rule

_PATTERN_KEYS: tuple[str, ...] = ("pattern", "regex")
_DATA_KEYS: tuple[str, ...] = ("extraData", "data")
_IDENTIFIER_KEYS: tuple[str, ...] = ("level", "description", "link")

# every spelling of a section option -> RuleSpec field
SECTION_OPTION_ALIASES: dict[str, str] = {
    "noRepeat": "no_repeat",
    "norepeat": "no_repeat",
    "no_repeat": "no_repeat",
    "visible": "visible",
}

_SPEC_KEYS: frozenset[str] = frozenset(
    _PATTERN_KEYS + _DATA_KEYS + _IDENTIFIER_KEYS + tuple(SECTION_OPTION_ALIASES)
)

# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RuleSpec:
    """One rule, normalized but not yet compiled."""

    pattern: object
    extra_data: Mapping[str, Any] = field(default_factory=dict[str, Any])
    level: str | None = None
    description: str | None = None
    link: str | None = None
    no_repeat: bool = False
    visible: bool = False


@dataclass(frozen=True, slots=True)
class RuleSpecError:
    """Typed failure for a spec that cannot be normalized.

    ``kind`` is "rule" for an unusable pattern or shape and "metadata"
    for a scalar where a mapping (or level name) was required.
    """

    kind: str
    message: str
    where: str = ""

    def to_exception(self) -> TextPartError:
        text = f"{self.where}: {self.message}" if self.where else self.message
        if self.kind == "metadata":
            return InvalidRuleMetadata(text)
        return InvalidRule(text)


type SpecResult = Result[list[RuleSpec], RuleSpecError]


def raise_for_error[T](result: Result[T, RuleSpecError]) -> T:
    """Unwrap ``Ok`` or raise the exception matching an ``Err``."""
    match result:
        case Ok(value=value):
            return value
        case Err(error=err):
            raise err.to_exception()
    raise TypeError(f"Not a Result: {result!r}")


# ---------------------------------------------------------------------------
# Entry dispatch
# ---------------------------------------------------------------------------

def _is_raw_pattern(value: object) -> bool:
    return isinstance(value, (str, re.Pattern)) or isinstance(value, PatternMatcher)


def _first_key(entry: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for k in keys:
        if k in entry:
            return entry[k]
    return None


def _has_pattern_key(entry: Mapping[str, Any]) -> bool:
    return any(k in entry for k in _PATTERN_KEYS)


def read_section_options(
    raw: Mapping[str, Any], where: str, *, strict: bool = False,
) -> Result[dict[str, bool], RuleSpecError]:
    """Pick ``noRepeat``/``visible`` (any spelling) out of ``raw``.

    Values must be real booleans, so the JSON string ``"false"`` is
    rejected instead of read as true. With ``strict`` every key must be
    an option.
    """
    out: dict[str, bool] = {}
    for key, value in raw.items():
        name = SECTION_OPTION_ALIASES.get(key)
        if name is None:
            if strict:
                return Err(RuleSpecError("metadata", f"unknown section rule option {key!r}", where))
            continue
        if not isinstance(value, bool):
            return Err(RuleSpecError(
                "metadata", f"{key!r} must be true or false, got {value!r}", where,
            ))
        out[name] = value
    return Ok(out)


def _spec_from_mapping(
    entry: Mapping[str, Any], where: str, group_level: str | None, kind: str,
) -> SpecResult:
    unknown = [k for k in entry if k not in _SPEC_KEYS]
    if unknown:
        return Err(RuleSpecError(
            "rule", f"unknown spec key(s): {', '.join(sorted(map(repr, unknown)))}", where,
        ))

    raw = _first_key(entry, _PATTERN_KEYS)
    match raw:
        case None:
            return Err(RuleSpecError("rule", "spec has no 'pattern' field", where))
        case str() | re.Pattern():
            patterns: list[object] = [raw]
        case list() | tuple():
            if not raw:
                return Err(RuleSpecError("rule", "'pattern' list is empty", where))
            patterns = list(raw)
        case _ if isinstance(raw, PatternMatcher):
            patterns = [raw]
        case _:
            return Err(RuleSpecError(
                "rule", f"'pattern' must be a pattern or a list of patterns, got {type(raw).__name__}", where,
            ))
    for i, p in enumerate(patterns):
        if not _is_raw_pattern(p):
            return Err(RuleSpecError(
                "rule", f"pattern #{i} is not a pattern ({type(p).__name__})", where,
            ))

    extra = _first_key(entry, _DATA_KEYS)
    if extra is None:
        extra = {}
    if not isinstance(extra, Mapping):
        return Err(RuleSpecError(
            "metadata", f"extra data must be a mapping, got {type(extra).__name__}", where,
        ))

    match read_section_options(entry, where):
        case Ok(value=options):
            pass
        case Err() as err:
            return err

    # level/description/link only mean something on annotation rules
    level = description = link = None
    if kind != "section":
        level = group_level if group_level is not None else entry.get("level")
        if level is not None and not is_severity(level):
            return Err(RuleSpecError("metadata", f"unknown severity level {level!r}", where))
        description = entry.get("description")
        link = entry.get("link")
        for name, value in (("description", description), ("link", link)):
            if value is not None and not isinstance(value, str):
                return Err(RuleSpecError("metadata", f"'{name}' must be a string", where))

    return Ok([
        RuleSpec(
            pattern=p,
            extra_data=dict(extra),
            level=level,
            description=description,
            link=link,
            **options,
        )
        for p in patterns
    ])


def normalize_entry(
    entry: object,
    where: str = "",
    group_level: str | None = None,
    *,
    kind: str = "identifier",
) -> SpecResult:
    """Normalize one shorthand entry into one or more specs.

    ``kind`` is "section" or "identifier"; section specs ignore the
    annotation-only fields.
    """
    match entry:
        case Rule():
            return Ok([RuleSpec(pattern=entry)])
        case str() | re.Pattern():
            return Ok([RuleSpec(pattern=entry, level=group_level)])
        case Mapping():
            return _spec_from_mapping(entry, where, group_level, kind)
        case _ if isinstance(entry, PatternMatcher):
            return Ok([RuleSpec(pattern=entry, level=group_level)])
        case _:
            return Err(RuleSpecError(
                "rule",
                f"expected a pattern or a spec with a 'pattern' field, got {type(entry).__name__}",
                where,
            ))


def _normalize_list(
    entries: object, where: str, group_level: str | None = None, *, kind: str = "identifier",
) -> SpecResult:
    if _is_raw_pattern(entries) or isinstance(entries, (Mapping, Rule)):
        return normalize_entry(entries, where, group_level, kind=kind)
    if isinstance(entries, (str, bytes)) or not isinstance(entries, Sequence):
        return Err(RuleSpecError(
            "rule", f"expected a list of rule specs, got {type(entries).__name__}", where,
        ))
    out: list[RuleSpec] = []
    for i, entry in enumerate(entries):
        match normalize_entry(entry, f"{where}[{i}]", group_level, kind=kind):
            case Ok(value=specs):
                out.extend(specs)
            case Err() as err:
                return err
    return Ok(out)


def normalize_section_specs(specs: object) -> SpecResult:
    """Flatten section shorthand into an ordered spec list."""
    if specs is None:
        return Ok([])
    return _normalize_list(specs, "sections", kind="section")


def normalize_identifier_specs(specs: object) -> SpecResult:
    """Flatten annotation shorthand (list or level map) into an ordered spec list.

    A mapping without a ``pattern``/``regex`` field is read as a level
    map; each group's entries are tagged with the group's level and kept
    in mapping order.
    """
    if specs is None:
        return Ok([])
    if isinstance(specs, Mapping) and not _has_pattern_key(specs):
        out: list[RuleSpec] = []
        for level, group in specs.items():
            if not is_severity(level):
                return Err(RuleSpecError(
                    "metadata", f"unknown severity level {level!r}", "identifiers",
                ))
            match _normalize_list(group, f"identifiers.{level}", level):
                case Ok(value=specs_for_level):
                    out.extend(specs_for_level)
                case Err() as err:
                    return err
        return Ok(out)
    return _normalize_list(specs, "identifiers")


# ---------------------------------------------------------------------------
# Compilation
# ---------------------------------------------------------------------------

def _resolve_pattern(pattern: object, regex_literals: bool) -> object:
    if regex_literals and isinstance(pattern, str) and is_regex_literal(pattern):
        return parse_regex_literal(pattern)
    return pattern


def compile_section_specs(specs: Sequence[RuleSpec], *, regex_literals: bool = False) -> list[Rule]:
    """Compile specs into section rules. Raises on the first bad pattern."""
    return [
        s.pattern if isinstance(s.pattern, Rule) else make_section_rule(
            _resolve_pattern(s.pattern, regex_literals),
            s.extra_data,
            no_repeat=s.no_repeat,
            visible=s.visible,
        )
        for s in specs
    ]


def compile_identifier_specs(specs: Sequence[RuleSpec], *, regex_literals: bool = False) -> list[Rule]:
    """Compile specs into annotation rules. Raises on the first bad pattern."""
    return [
        s.pattern if isinstance(s.pattern, Rule) else make_annotation_rule(
            _resolve_pattern(s.pattern, regex_literals),
            s.extra_data,
            s.description,
            s.link,
            level=s.level,
        )
        for s in specs
    ]

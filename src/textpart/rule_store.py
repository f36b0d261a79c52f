"""Ordered, append-only rule lists for one engine instance.

Order is precedence: the first section rule that qualifies opens the
boundary, and earlier annotation rules claim text before later ones see
it. The store never reorders its rules.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from textpart.matching import compile_pattern
from textpart.part_types import (
    DEFAULT_SEVERITY,
    InvalidRule,
    InvalidRuleMetadata,
    Rule,
    is_severity,
)

log = logging.getLogger("textpart.rule_store")


def _coerce_extra_data(extra_data: object) -> dict[str, Any]:
    if extra_data is None:
        return {}
    if not isinstance(extra_data, Mapping):
        raise InvalidRuleMetadata(
            f"Invalid type for rule metadata ({type(extra_data).__name__}); expected a mapping"
        )
    return dict(extra_data)


def _optional_text(name: str, value: object) -> str | None:
    if value is None or isinstance(value, str):
        return value
    raise InvalidRuleMetadata(f"Rule {name} must be a str, got {type(value).__name__}")


def make_section_rule(
    pattern: object,
    extra_data: object = None,
    *,
    no_repeat: bool = False,
    visible: bool = False,
) -> Rule:
    """Validate and compile a section-boundary rule.

    A prebuilt ``Rule`` is returned as-is and takes no other arguments.

    Raises:
        InvalidRuleMetadata: extra_data is not a mapping.
        InvalidRule: pattern is not usable, or a ``Rule`` came with options.
    """
    if isinstance(pattern, Rule):
        if extra_data is not None or no_repeat or visible:
            raise InvalidRule("A prebuilt Rule cannot be combined with extra data or options")
        return pattern
    return Rule(
        pattern=compile_pattern(pattern),
        extra_data=_coerce_extra_data(extra_data),
        no_repeat=bool(no_repeat),
        visible=bool(visible),
    )


def make_annotation_rule(
    pattern: object,
    level_or_extra_data: object = None,
    description: object = None,
    link: object = None,
    *,
    level: str | None = None,
) -> Rule:
    """Validate and compile an annotation (highlight) rule.

    ``level_or_extra_data`` is either a severity level name or an
    extra-data mapping. ``level`` sets the level alongside extra data.
    Rules without an explicit level are ``general``.

    Raises:
        InvalidRuleMetadata: metadata is a scalar other than a level name.
        InvalidRule: pattern is not usable, or a prebuilt ``Rule`` came
            with metadata.
    """
    if isinstance(pattern, Rule):
        if any(v is not None for v in (level_or_extra_data, description, link, level)):
            raise InvalidRule("A prebuilt Rule cannot be combined with level or metadata")
        return pattern
    if level is not None and not is_severity(level):
        raise InvalidRuleMetadata(f"Unknown severity level {level!r}")
    if isinstance(level_or_extra_data, str):
        if not is_severity(level_or_extra_data):
            raise InvalidRuleMetadata(
                f"Unknown severity level {level_or_extra_data!r}; "
                "expected a level name or a mapping"
            )
        level = level or level_or_extra_data
        data: dict[str, Any] = {}
    else:
        data = _coerce_extra_data(level_or_extra_data)
    return Rule(
        pattern=compile_pattern(pattern),
        extra_data=data,
        level=level or DEFAULT_SEVERITY,
        description=_optional_text("description", description),
        link=_optional_text("link", link),
    )


class RuleStore:
    """Section rules and annotation rules, each kept in insertion order."""

    def __init__(self) -> None:
        self._sections: list[Rule] = []
        self._annotations: list[Rule] = []

    @property
    def section_rules(self) -> tuple[Rule, ...]:
        return tuple(self._sections)

    @property
    def annotation_rules(self) -> tuple[Rule, ...]:
        return tuple(self._annotations)

    def add_section_rule(
        self,
        pattern: object,
        extra_data: object = None,
        *,
        no_repeat: bool = False,
        visible: bool = False,
    ) -> Rule:
        rule = make_section_rule(pattern, extra_data, no_repeat=no_repeat, visible=visible)
        self._sections.append(rule)
        log.debug("Added section rule #%d: %r", len(self._sections), rule.pattern)
        return rule

    def add_annotation_rule(
        self,
        pattern: object,
        level_or_extra_data: object = None,
        description: object = None,
        link: object = None,
    ) -> Rule:
        rule = make_annotation_rule(pattern, level_or_extra_data, description, link)
        self._annotations.append(rule)
        log.debug(
            "Added annotation rule #%d: %r (level=%s)",
            len(self._annotations), rule.pattern, rule.level,
        )
        return rule

    def extend_section_rules(self, rules: Iterable[Rule]) -> None:
        """Append already-validated rules, all or nothing."""
        batch = list(rules)
        if not all(isinstance(r, Rule) for r in batch):
            raise InvalidRule("extend_section_rules only accepts Rule objects")
        self._sections.extend(batch)
        log.debug("Loaded %d section rules", len(batch))

    def extend_annotation_rules(self, rules: Iterable[Rule]) -> None:
        """Append already-validated rules, all or nothing."""
        batch = list(rules)
        if not all(isinstance(r, Rule) for r in batch):
            raise InvalidRule("extend_annotation_rules only accepts Rule objects")
        self._annotations.extend(batch)
        log.debug("Loaded %d annotation rules", len(batch))

    def clear(self) -> None:
        """Drop every rule of both kinds."""
        self._sections.clear()
        self._annotations.clear()
        log.debug("Cleared all rules")

    def __len__(self) -> int:
        return len(self._sections) + len(self._annotations)

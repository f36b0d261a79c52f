"""TextPart — rule-driven text segmentation and annotation engine.

Pipeline (strictly forward)::

    split_lines -> segment_sections -> annotate -> assemble

A configured engine is meant to be reused: the rule store persists
across ``transform`` calls, and ``transform`` is a pure function of the
current rules and the input text. Rule mutation must not overlap an
in-flight transform.

Usage::

    tp = TextPart(
        name="build.log",
        sections=[{"pattern": re.compile(r"^== "), "noRepeat": True}],
        identifiers={"critical": ["ERROR"], "important": ["WARN"]},
    )
    doc = tp.transform(text)
    for section in doc.sections:
        print(section.title, section.severity_level)
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any

from textpart.annotator import annotate_lines, annotate_sections
from textpart.assembler import assemble_lines, assemble_sections
from textpart.part_types import Document, InvalidRule, InvalidRuleMetadata, Rule
from textpart.rule_loader import (
    compile_identifier_specs,
    compile_section_specs,
    normalize_entry,
    normalize_identifier_specs,
    normalize_section_specs,
    raise_for_error,
    read_section_options,
)
from textpart.rule_store import RuleStore
from textpart.segmenter import segment_sections
from textpart.splitter import split_lines

log = logging.getLogger("textpart.engine")

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

# camelCase spellings used by rule files
_CONFIG_ALIASES: dict[str, str] = {
    "lineLengthLimit": "line_length_limit",
    "sectionsEnabled": "sections_enabled",
    "severityRollup": "severity_rollup",
}

@dataclass(frozen=True, slots=True)
class EngineConfig:
    """Flags the pipeline branches on.

    Invariants (enforced in __post_init__):
        - line_length_limit is None or a positive int
    """

    line_length_limit: int | None = None
    sections_enabled: bool = True
    severity_rollup: bool = True

    def __post_init__(self) -> None:
        limit = self.line_length_limit
        if limit is not None and (
            isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0
        ):
            raise ValueError(
                f"line_length_limit must be a positive int, got {limit!r}"
            )

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any] | None) -> EngineConfig:
        """Build a config from snake_case or camelCase keys.

        Raises:
            ValueError: on unknown keys or invalid values.
        """
        if raw is None:
            return cls()
        if not isinstance(raw, Mapping):
            raise ValueError(f"Engine config must be a mapping, got {type(raw).__name__}")
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in raw.items():
            name = _CONFIG_ALIASES.get(key, key)
            if name not in known:
                raise ValueError(f"Unknown engine config key: {key!r}")
            kwargs[name] = value
        return cls(**kwargs)


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class TextPart:
    """Split text into sections and lines of annotated parts.

    Args:
        name: Title of the leading section. Falls back to the text of the
            first line when empty.
        sections: Section-rule shorthand specs loaded at construction.
        identifiers: Annotation-rule shorthand specs (list or level map).
        config: ``EngineConfig`` or a mapping accepted by
            ``EngineConfig.from_mapping``.
        regex_literals: Read ``/body/flags`` strings in loaded specs as
            regular expressions instead of literal text.
    """

    def __init__(
        self,
        name: str = "",
        sections: object = None,
        identifiers: object = None,
        config: EngineConfig | Mapping[str, Any] | None = None,
        *,
        regex_literals: bool = False,
    ) -> None:
        if not isinstance(name, str):
            raise ValueError(f"name must be a str, got {type(name).__name__}")
        self.name = name
        self.config = config if isinstance(config, EngineConfig) else EngineConfig.from_mapping(config)
        self.regex_literals = regex_literals
        self.rules = RuleStore()
        self.load_sections(sections)
        self.load_identifiers(identifiers)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], *, regex_literals: bool = True) -> TextPart:
        """Build an engine from a rules-file payload.

        Recognised keys: ``name``, ``sections``, ``identifiers``, ``config``.
        """
        if not isinstance(payload, Mapping):
            raise ValueError("Rules payload must be a JSON object")
        unknown = set(payload) - {"name", "sections", "identifiers", "config"}
        if unknown:
            raise ValueError(f"Unknown rules payload keys: {sorted(unknown)}")
        return cls(
            name=payload.get("name") or "",
            sections=payload.get("sections"),
            identifiers=payload.get("identifiers"),
            config=payload.get("config"),
            regex_literals=regex_literals,
        )

    # -- rule management ----------------------------------------------------

    def load_sections(self, specs: object) -> list[Rule]:
        """Normalize, compile and append section rules (all or nothing)."""
        rules = compile_section_specs(
            raise_for_error(normalize_section_specs(specs)),
            regex_literals=self.regex_literals,
        )
        self.rules.extend_section_rules(rules)
        return rules

    def load_identifiers(self, specs: object) -> list[Rule]:
        """Normalize, compile and append annotation rules (all or nothing)."""
        rules = compile_identifier_specs(
            raise_for_error(normalize_identifier_specs(specs)),
            regex_literals=self.regex_literals,
        )
        self.rules.extend_annotation_rules(rules)
        return rules

    def add_section_identifier(
        self,
        pattern: object,
        extra_data: object = None,
        options: Mapping[str, Any] | None = None,
        *,
        no_repeat: bool = False,
        visible: bool = False,
    ) -> Rule:
        """Add one section-boundary rule after the existing ones.

        A spec mapping or prebuilt ``Rule`` carries its own data and
        options, so passing them again is an ``InvalidRule``.
        """
        if isinstance(pattern, (Mapping, Rule)) and (
            extra_data is not None or options is not None or no_repeat or visible
        ):
            raise InvalidRule(
                "extra_data and options must be inside the section spec, not passed beside it"
            )
        if isinstance(pattern, Mapping):
            specs = raise_for_error(normalize_entry(pattern, "section", kind="section"))
            rules = compile_section_specs(specs, regex_literals=self.regex_literals)
            self.rules.extend_section_rules(rules)
            return rules[0]
        opts = {"no_repeat": no_repeat, "visible": visible}
        if options is not None:
            if not isinstance(options, Mapping):
                raise InvalidRuleMetadata(
                    f"Section rule options must be a mapping, got {type(options).__name__}"
                )
            opts.update(raise_for_error(read_section_options(options, "options", strict=True)))
        return self.rules.add_section_rule(pattern, extra_data, **opts)

    def add_identifier(
        self,
        pattern: object,
        level_or_extra_data: object = None,
        description: str | None = None,
        link: str | None = None,
    ) -> Rule:
        """Add one annotation rule after the existing ones.

        ``level_or_extra_data`` is a severity level name or an extra-data
        mapping. A spec mapping or prebuilt ``Rule`` takes no other
        arguments.
        """
        if isinstance(pattern, (Mapping, Rule)) and any(
            v is not None for v in (level_or_extra_data, description, link)
        ):
            raise InvalidRule(
                "level, description and link must be inside the identifier spec, not passed beside it"
            )
        if isinstance(pattern, Mapping):
            specs = raise_for_error(normalize_entry(pattern, "identifier"))
            rules = compile_identifier_specs(specs, regex_literals=self.regex_literals)
            self.rules.extend_annotation_rules(rules)
            return rules[0]
        return self.rules.add_annotation_rule(pattern, level_or_extra_data, description, link)

    def clear_rules(self) -> None:
        self.rules.clear()

    # -- transform ------------------------------------------------------------

    def transform(self, text: str) -> Document:
        """Split, segment, annotate and assemble ``text``."""
        if not isinstance(text, str):
            raise TypeError(f"transform() expects str, got {type(text).__name__}")
        cfg = self.config
        section_rules = self.rules.section_rules
        annotation_rules = self.rules.annotation_rules

        lines = split_lines(text, line_length_limit=cfg.line_length_limit)
        if cfg.sections_enabled:
            title = self.name or lines[0].text
            sections = segment_sections(title, lines, section_rules)
            doc = assemble_sections(
                annotate_sections(sections, annotation_rules),
                severity_rollup=cfg.severity_rollup,
            )
        else:
            doc = assemble_lines(annotate_lines(lines, annotation_rules))

        if log.isEnabledFor(logging.DEBUG):
            n_annotations = sum(len(ln.annotations) for ln in doc.iter_lines())
            log.debug(
                "Transformed %d lines into %s (%d annotations)",
                len(lines),
                f"{len(doc.sections)} sections" if doc.sections is not None else "flat lines",
                n_annotations,
            )
        return doc

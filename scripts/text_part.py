#!/usr/bin/env python3
"""Split a text file into sections and annotated lines, print JSON.

Rules come from a JSON rules file::

    {
      "name": "build.log",
      "sections": [{"pattern": "/^== .*/", "noRepeat": true}],
      "identifiers": {"critical": ["/ERROR\\\\b/"], "important": ["WARN"]},
      "config": {"lineLengthLimit": 500}
    }

Strings written as ``/body/flags`` are regular expressions; any other
string is matched literally.

Usage:
    python3 scripts/text_part.py build.log --rules rules.json
    cat build.log | python3 scripts/text_part.py - --rules rules.json --no-sections
    python3 scripts/text_part.py notes.txt --name Notes --output out/notes.json
"""
from __future__ import annotations

import argparse
import logging
import re
import sys
from pathlib import Path
from typing import Any

from textpart.engine import TextPart
from textpart.io_utils import dump_document, load_rules_payload, save_document
from textpart.part_types import TextPartError

log = logging.getLogger("text_part")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Segment text into sections and annotate rule matches."
    )
    parser.add_argument(
        "input",
        nargs="?",
        default="-",
        help="Input text file, or '-' for stdin (default: -)",
    )
    parser.add_argument(
        "--rules", type=Path, default=None, help="Path to a JSON rules file"
    )
    parser.add_argument(
        "--name",
        default=None,
        help="Document name / first section title (overrides the rules file)",
    )
    parser.add_argument(
        "--line-length-limit",
        type=int,
        default=None,
        help="Truncate every line to this many characters",
    )
    parser.add_argument(
        "--no-sections",
        action="store_true",
        help="Skip sectioning and emit a flat line list",
    )
    parser.add_argument(
        "--no-severity",
        action="store_true",
        help="Do not compute per-section severity levels",
    )
    parser.add_argument(
        "--output", type=Path, default=None, help="Write JSON here instead of stdout"
    )
    parser.add_argument(
        "--compact", action="store_true", help="Emit JSON without indentation"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging",
    )
    return parser


def _read_text(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def build_engine(args: argparse.Namespace) -> TextPart:
    """Merge the rules file with command-line overrides."""
    payload: dict[str, Any] = {}
    if args.rules is not None:
        payload = load_rules_payload(args.rules)
        log.info("Loaded rules from %s", args.rules)

    config: dict[str, Any] = dict(payload.get("config") or {})
    if args.line_length_limit is not None:
        config["line_length_limit"] = args.line_length_limit
    if args.no_sections:
        config["sections_enabled"] = False
    if args.no_severity:
        config["severity_rollup"] = False
    payload["config"] = config
    if args.name is not None:
        payload["name"] = args.name
    return TextPart.from_payload(payload)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )

    try:
        engine = build_engine(args)
        text = _read_text(args.input)
    except (TextPartError, re.error, ValueError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    log.debug(
        "Engine ready: %d section rules, %d annotation rules",
        len(engine.rules.section_rules), len(engine.rules.annotation_rules),
    )
    doc = engine.transform(text)

    if args.output is not None:
        save_document(doc, args.output, pretty=not args.compact)
        log.info("Wrote %s", args.output)
    else:
        sys.stdout.buffer.write(dump_document(doc, pretty=not args.compact))
        sys.stdout.buffer.write(b"\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

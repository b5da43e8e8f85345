# Vault Linter
# Copyright (C) 2025 Phoenix Link (Pty) Ltd.
#
# This file is part of Vault Linter.
#
# Vault Linter is free software: you can redistribute it and/or modify it
# under the terms of the GNU Affero General Public License v3.0 (AGPL-3.0).
# See https://www.gnu.org/licenses/agpl-3.0.html for the full text.
"""
Vault Linter -- Heading & Spacing Rules

Generic-loop rules that only touch prose. Everything goes through
``map_body`` so front matter and fenced code are left alone.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from vaultlint.core.context import LintContext
from vaultlint.rules.base import BooleanOption, Rule, RuleType
from vaultlint.rules.frontmatter import map_body

HEADING_BLANK_LINES = "heading-blank-lines"
TRAILING_SPACES = "trailing-spaces"
CONSECUTIVE_BLANK_LINES = "consecutive-blank-lines"
LINE_BREAK_AT_DOCUMENT_END = "line-break-at-document-end"

HEADING_RE = re.compile(r"^#{1,6}[ \t]+\S")
_BLANK_RUN_RE = re.compile(r"\n(?:[ \t]*\n){2,}")

# Markdown hard line break
LINE_BREAK = "  "


def heading_blank_lines(text: str, options: Mapping[str, Any], context: LintContext) -> str:
    """Surround headings with blank lines; the line after is optional via ``bottom``."""
    bottom = options.get("bottom", True)

    def _fix(segment: str) -> str:
        lines = segment.split("\n")
        out: list[str] = []
        for index, line in enumerate(lines):
            if not HEADING_RE.match(line):
                out.append(line)
                continue
            if out and out[-1].strip():
                out.append("")
            out.append(line)
            following = lines[index + 1] if index + 1 < len(lines) else None
            if bottom and following is not None and following.strip():
                out.append("")
        return "\n".join(out)

    return map_body(text, _fix)


def trailing_spaces(text: str, options: Mapping[str, Any], context: LintContext) -> str:
    keep_line_break = options.get("two_space_line_break", False)

    def _strip(segment: str) -> str:
        lines = []
        for line in segment.split("\n"):
            stripped = line.rstrip(" \t")
            if keep_line_break and stripped and line[len(stripped) :] == LINE_BREAK:
                lines.append(line)
            else:
                lines.append(stripped)
        return "\n".join(lines)

    return map_body(text, _strip)


def consecutive_blank_lines(text: str, options: Mapping[str, Any], context: LintContext) -> str:
    return map_body(text, lambda segment: _BLANK_RUN_RE.sub("\n\n", segment))


def line_break_at_document_end(text: str, options: Mapping[str, Any], context: LintContext) -> str:
    """Exactly one newline at the end of a non-empty note."""
    if not text:
        return text
    return text.rstrip("\n") + "\n"


RULES: list[Rule] = [
    Rule.define(
        HEADING_BLANK_LINES,
        "Heading Blank Lines",
        "All headings have one blank line both before and after (except where the heading is at the beginning or end of the document).",
        RuleType.HEADING,
        heading_blank_lines,
        options=(
            BooleanOption("bottom", "Insert a blank line after headings", True),
        ),
    ),
    Rule.define(
        TRAILING_SPACES,
        "Trailing Spaces",
        "Remove extra spaces and tabs at the end of lines.",
        RuleType.SPACING,
        trailing_spaces,
        options=(
            BooleanOption(
                "two_space_line_break",
                "Ignore two spaces followed by a line break (Markdown line break)",
                False,
            ),
        ),
    ),
    Rule.define(
        CONSECUTIVE_BLANK_LINES,
        "Consecutive Blank Lines",
        "There should be at most one consecutive blank line.",
        RuleType.SPACING,
        consecutive_blank_lines,
    ),
    Rule.define(
        LINE_BREAK_AT_DOCUMENT_END,
        "Line Break at Document End",
        "Ensure that there is exactly one line break at the end of a document.",
        RuleType.SPACING,
        line_break_at_document_end,
    ),
]

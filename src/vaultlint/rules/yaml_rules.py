# Vault Linter
# Copyright (C) 2025 Phoenix Link (Pty) Ltd.
#
# This file is part of Vault Linter.
#
# Vault Linter is free software: you can redistribute it and/or modify it
# under the terms of the GNU Affero General Public License v3.0 (AGPL-3.0).
# See https://www.gnu.org/licenses/agpl-3.0.html for the full text.
"""
Vault Linter -- YAML Rules

Rules that touch the front matter block:

    format-tags-in-yaml              pre-rule, runs before any YAML parsing
    escape-yaml-special-characters   pre-rule, runs before any YAML parsing
    yaml-title                       generic pass, parses the block
    yaml-timestamp                   end stage, stamps created/modified keys
    yaml-key-sort                    final stage, orders top-level keys

The two pre-rules work purely on lines because their job is to make the
block parseable in the first place.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from vaultlint.core.context import LintContext
from vaultlint.rules.base import (
    BooleanOption,
    DropdownOption,
    Rule,
    RuleType,
    TextAreaOption,
    TextOption,
)
from vaultlint.rules.frontmatter import (
    ensure_yaml_section,
    format_scalar,
    get_key_value,
    get_yaml_section,
    has_key,
    insert_key,
    join_key_blocks,
    load_yaml,
    map_body,
    needs_quoting,
    quote_scalar,
    replace_yaml_section,
    set_key_value,
    split_key_blocks,
)

FORMAT_TAGS_IN_YAML = "format-tags-in-yaml"
ESCAPE_YAML_SPECIAL_CHARACTERS = "escape-yaml-special-characters"
YAML_TITLE = "yaml-title"
YAML_TIMESTAMP = "yaml-timestamp"
YAML_KEY_SORT = "yaml-key-sort"

DEFAULT_TIMESTAMP_FORMAT = "%A, %B %d %Y, %I:%M:%S %p"

SORT_NONE = "None"
SORT_ASCENDING = "Ascending Alphabetical"
SORT_DESCENDING = "Descending Alphabetical"

TAG_KEYS = ("tags", "tag")

_TAG_HASH_RE = re.compile(r"(^|[\s\[,'\"])#(?=[^\s#,\]'\"])")
_LIST_ITEM_RE = re.compile(r"^\s*-\s")
_KEY_VALUE_RE = re.compile(r"^(?P<prefix>[ \t]*[^\s#\-\[\]{}][^\n]*?:[ \t]+)(?P<value>\S.*?)[ \t]*$")
_H1_RE = re.compile(r"^#[ \t]+(?P<title>.+?)[ \t]*#*[ \t]*$", re.MULTILINE)


# ---------------------------------------------------------------------------
# format-tags-in-yaml
# ---------------------------------------------------------------------------


def format_tags_in_yaml(text: str, options: Mapping[str, Any], context: LintContext) -> str:
    """Remove the ``#`` from tags in the front matter; YAML reads ``#tag`` as a comment."""
    body = get_yaml_section(text)
    if body is None:
        return text

    preamble, blocks = split_key_blocks(body)
    formatted = []
    for key, lines in blocks:
        if key.lower() in TAG_KEYS:
            name, sep, value = lines[0].partition(":")
            lines = [name + sep + _TAG_HASH_RE.sub(r"\1", value)] + [
                _TAG_HASH_RE.sub(r"\1", line) if _LIST_ITEM_RE.match(line) else line
                for line in lines[1:]
            ]
        formatted.append((key, lines))

    new_body = join_key_blocks(preamble, formatted)
    if new_body == body:
        return text
    return replace_yaml_section(text, new_body)


# ---------------------------------------------------------------------------
# escape-yaml-special-characters
# ---------------------------------------------------------------------------


def _escape_flow_list(value: str) -> str:
    items = [item.strip() for item in value[1:-1].split(",")]
    escaped = [quote_scalar(item) if needs_quoting(item) else item for item in items]
    return "[" + ", ".join(escaped) + "]"


def escape_yaml_special_characters(
    text: str, options: Mapping[str, Any], context: LintContext
) -> str:
    """Quote values a YAML parser would reject, such as ``title: Part 1: Intro``."""
    body = get_yaml_section(text)
    if body is None:
        return text

    escape_arrays = options.get("try_to_escape_single_line_arrays", False)
    lines = body.split("\n")
    for index, line in enumerate(lines):
        match = _KEY_VALUE_RE.match(line)
        if not match:
            continue
        value = match.group("value")
        if value.startswith("[") and value.endswith("]"):
            if escape_arrays:
                lines[index] = match.group("prefix") + _escape_flow_list(value)
            continue
        if needs_quoting(value):
            lines[index] = match.group("prefix") + quote_scalar(value)

    new_body = "\n".join(lines)
    if new_body == body:
        return text
    return replace_yaml_section(text, new_body)


# ---------------------------------------------------------------------------
# yaml-title
# ---------------------------------------------------------------------------


def _first_heading(text: str) -> str | None:
    found: list[str] = []

    def _collect(segment: str) -> str:
        if not found:
            match = _H1_RE.search(segment)
            if match:
                found.append(match.group("title"))
        return segment

    map_body(text, _collect)
    return found[0] if found else None


def yaml_title(text: str, options: Mapping[str, Any], context: LintContext) -> str:
    """Insert a title key from the first level-1 heading, or the file name."""
    key = options["title_key"]
    body = get_yaml_section(text)
    if body is not None and key in load_yaml(body):
        return text

    title = _first_heading(text) or context.file_name
    if not title:
        return text
    with_section = ensure_yaml_section(text)
    body = get_yaml_section(with_section) or ""
    return replace_yaml_section(with_section, insert_key(body, key, format_scalar(title)))


# ---------------------------------------------------------------------------
# yaml-timestamp
# ---------------------------------------------------------------------------


def _stamp(moment: datetime, fmt: str) -> str:
    return format_scalar(moment.strftime(fmt))


def yaml_timestamp(
    text: str, options: Mapping[str, Any], context: LintContext
) -> tuple[str, bool]:
    """
    Keep date-created / date-modified keys in the front matter.

    Missing keys are inserted. An existing date-modified value is refreshed
    to the current time only when an earlier stage already changed the note.
    Returns the new text and whether the date-modified key was written.
    """
    if not (options["date_created"] or options["date_modified"]):
        return text, False

    fmt = options["format"] or DEFAULT_TIMESTAMP_FORMAT
    current = context.current_time or datetime.now()
    with_section = ensure_yaml_section(text)
    body = get_yaml_section(with_section) or ""
    new_body = body
    modified_written = False

    if options["date_modified"]:
        key = options["date_modified_key"]
        if not has_key(new_body, key):
            moment = current if context.already_modified else context.file_modified_time
            new_body = insert_key(new_body, key, _stamp(moment, fmt))
            modified_written = True
        elif context.already_modified:
            value = _stamp(current, fmt)
            if get_key_value(new_body, key) != value:
                new_body = set_key_value(new_body, key, value)
                modified_written = True

    if options["date_created"]:
        key = options["date_created_key"]
        if not has_key(new_body, key):
            new_body = insert_key(new_body, key, _stamp(context.file_created_time, fmt))

    if new_body == body:
        return text, False
    return replace_yaml_section(with_section, new_body), modified_written


# ---------------------------------------------------------------------------
# yaml-key-sort
# ---------------------------------------------------------------------------


def yaml_key_sort(
    text: str, options: Mapping[str, Any], context: LintContext
) -> tuple[str, bool]:
    """
    Order top-level front matter keys.

    Priority keys come first (or last) in the configured order; the rest keep
    their order or are sorted alphabetically. When the order changes and the
    timestamp stage wrote date-modified this run, that key is set to the supplied
    current time so it stays consistent with what the timestamp stage wrote.
    """
    body = get_yaml_section(text)
    if body is None:
        return text, False

    content = body[:-1] if body.endswith("\n") else body
    preamble, blocks = split_key_blocks(content)

    prioritized = []
    for key in options["yaml_key_priority_sort_order"].split("\n"):
        key = key.strip()
        for index, (name, _lines) in enumerate(blocks):
            if name == key:
                prioritized.append(blocks.pop(index))
                break

    order = options["yaml_sort_order_for_other_keys"]
    if order == SORT_ASCENDING:
        blocks.sort(key=lambda block: block[0].lower())
    elif order == SORT_DESCENDING:
        blocks.sort(key=lambda block: block[0].lower(), reverse=True)

    if options["priority_keys_at_start_of_yaml"]:
        ordered = prioritized + blocks
    else:
        ordered = blocks + prioritized

    new_body = join_key_blocks(preamble, ordered) + ("\n" if body.endswith("\n") else "")
    if new_body == body:
        return text, False

    key = context.date_modified_key
    if (
        context.date_modified_enabled
        and key
        and context.current_time_formatted
        and has_key(new_body, key)
    ):
        new_body = set_key_value(new_body, key, format_scalar(context.current_time_formatted))
    return replace_yaml_section(text, new_body), True


# ---------------------------------------------------------------------------
# DESCRIPTORS
# ---------------------------------------------------------------------------

RULES: list[Rule] = [
    Rule.define(
        FORMAT_TAGS_IN_YAML,
        "Format Tags in YAML",
        "Remove hashtags from tags in the YAML front matter, as they make the tags there invalid.",
        RuleType.YAML,
        format_tags_in_yaml,
        special_execution_order=True,
    ),
    Rule.define(
        ESCAPE_YAML_SPECIAL_CHARACTERS,
        "Escape YAML Special Characters",
        "Quote front matter values containing characters that would make the YAML invalid.",
        RuleType.YAML,
        escape_yaml_special_characters,
        options=(
            BooleanOption(
                "try_to_escape_single_line_arrays",
                "Also escape entries of single-line arrays ([a, b])",
                False,
            ),
        ),
        special_execution_order=True,
    ),
    Rule.define(
        YAML_TITLE,
        "YAML Title",
        "Insert the title of the file into the YAML front matter.",
        RuleType.YAML,
        yaml_title,
        options=(TextOption("title_key", "Which YAML key to use for the title", "title"),),
    ),
    Rule.define(
        YAML_TIMESTAMP,
        "YAML Timestamp",
        "Keep track of the date the file was created and last modified in the YAML front matter.",
        RuleType.YAML,
        yaml_timestamp,
        options=(
            BooleanOption("date_created", "Insert the file creation date", True),
            TextOption("date_created_key", "Which YAML key to use for creation date", "date created"),
            BooleanOption("date_modified", "Insert the date the file was last modified", True),
            TextOption(
                "date_modified_key", "Which YAML key to use for modification date", "date modified"
            ),
            TextOption("format", "strftime format for the timestamps", DEFAULT_TIMESTAMP_FORMAT),
        ),
        special_execution_order=True,
    ),
    Rule.define(
        YAML_KEY_SORT,
        "YAML Key Sort",
        "Sort the YAML keys based on the order and priority specified.",
        RuleType.YAML,
        yaml_key_sort,
        options=(
            TextAreaOption(
                "yaml_key_priority_sort_order",
                "The order in which to sort keys, one per line",
                "",
            ),
            BooleanOption(
                "priority_keys_at_start_of_yaml",
                "Put the priority keys at the start of the YAML front matter",
                True,
            ),
            DropdownOption(
                "yaml_sort_order_for_other_keys",
                "How to sort the keys not listed in the priority order",
                SORT_NONE,
                choices=(SORT_NONE, SORT_ASCENDING, SORT_DESCENDING),
            ),
        ),
        special_execution_order=True,
    ),
]

# Vault Linter
# Copyright (C) 2025 Phoenix Link (Pty) Ltd.
#
# This file is part of Vault Linter.
#
# Vault Linter is free software: you can redistribute it and/or modify it
# under the terms of the GNU Affero General Public License v3.0 (AGPL-3.0).
# See https://www.gnu.org/licenses/agpl-3.0.html for the full text.
"""
Vault Linter -- Front Matter Helpers

Line-level helpers for the YAML block at the top of a note. Most YAML rules
edit the block textually so untouched lines keep their exact formatting;
``load_yaml`` is the single place the block is parsed into data.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import Any

import yaml

from vaultlint.core.errors import StructuredMetadataError, describe_yaml_error

FRONT_MATTER_RE = re.compile(r"\A---\n(?P<body>.*?)^---[ \t]*(?:\n|\Z)", re.DOTALL | re.MULTILINE)
FENCE_RE = re.compile(r"^(?P<fence>```|~~~)[^\n]*\n.*?^(?P=fence)[ \t]*(?:\n|\Z)", re.DOTALL | re.MULTILINE)
TOP_LEVEL_KEY_RE = re.compile(r"^(?P<key>[^\s#\-][^\n]*?):(?:[ \t]+(?P<value>.*))?$")


def strip_cr(text: str) -> str:
    return text.replace("\r", "")


# ---------------------------------------------------------------------------
# Locating the block
# ---------------------------------------------------------------------------


def split_front_matter(text: str) -> tuple[str, str]:
    """(front matter including delimiters, remainder). Front is empty when absent."""
    match = FRONT_MATTER_RE.match(text)
    if not match:
        return "", text
    return text[: match.end()], text[match.end() :]


def get_yaml_section(text: str) -> str | None:
    """Body between the ``---`` delimiters, or None when there is no block."""
    match = FRONT_MATTER_RE.match(text)
    return match.group("body") if match else None


def replace_yaml_section(text: str, body: str) -> str:
    """Swap the block's body, keeping the delimiters and the rest of the note."""
    match = FRONT_MATTER_RE.match(text)
    if not match:
        raise ValueError("Text has no front matter to replace")
    if body and not body.endswith("\n"):
        body += "\n"
    return text[: match.start("body")] + body + text[match.end("body") :]


def ensure_yaml_section(text: str) -> str:
    if FRONT_MATTER_RE.match(text):
        return text
    return "---\n---\n" + text


def load_yaml(body: str) -> dict[str, Any]:
    """Parse a front matter body. Raises StructuredMetadataError when invalid."""
    try:
        data = yaml.safe_load(body)
    except yaml.YAMLError as exc:
        raise StructuredMetadataError(describe_yaml_error(exc)) from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise StructuredMetadataError(f"front matter must be a mapping, not {type(data).__name__}")
    return data


# ---------------------------------------------------------------------------
# Top-level keys
# ---------------------------------------------------------------------------


def unquote_key(key: str) -> str:
    key = key.strip()
    if len(key) >= 2 and key[0] == key[-1] and key[0] in ("'", '"'):
        return key[1:-1]
    return key


def split_key_blocks(body: str) -> tuple[list[str], list[tuple[str, list[str]]]]:
    """
    Split a body into leading lines and one block per top-level key.

    A block is the key line plus every following line that does not start a
    new top-level key (indented lines, block list items, comments).
    """
    preamble: list[str] = []
    blocks: list[tuple[str, list[str]]] = []
    for line in body.split("\n"):
        match = TOP_LEVEL_KEY_RE.match(line)
        if match:
            blocks.append((unquote_key(match.group("key")), [line]))
        elif blocks:
            blocks[-1][1].append(line)
        else:
            preamble.append(line)
    return preamble, blocks


def join_key_blocks(preamble: list[str], blocks: list[tuple[str, list[str]]]) -> str:
    lines = list(preamble)
    for _key, block_lines in blocks:
        lines.extend(block_lines)
    return "\n".join(lines)


def has_key(body: str, key: str) -> bool:
    _preamble, blocks = split_key_blocks(body)
    return any(name == key for name, _lines in blocks)


def get_key_value(body: str, key: str) -> str | None:
    """Raw inline value of a top-level key (``""`` for a bare ``key:``)."""
    for line in body.split("\n"):
        match = TOP_LEVEL_KEY_RE.match(line)
        if match and unquote_key(match.group("key")) == key:
            return (match.group("value") or "").strip()
    return None


def set_key_value(body: str, key: str, value: str) -> str:
    """Replace a key's whole block with ``key: value``; insert at the top if missing."""
    preamble, blocks = split_key_blocks(body)
    for index, (name, lines) in enumerate(blocks):
        if name == key:
            trailing = _trailing_blank_lines(lines[1:])
            blocks[index] = (name, [f"{key}: {value}", *trailing])
            return join_key_blocks(preamble, blocks)
    return insert_key(body, key, value)


def insert_key(body: str, key: str, value: str) -> str:
    line = f"{key}: {value}"
    if not body:
        return line + "\n"
    return line + "\n" + body


def _trailing_blank_lines(lines: list[str]) -> list[str]:
    trailing = []
    for line in reversed(lines):
        if line.strip():
            break
        trailing.append(line)
    return trailing


# ---------------------------------------------------------------------------
# Scalars
# ---------------------------------------------------------------------------

# Indicators a plain scalar cannot start with
SPECIAL_START = ("@", "`", "- ")


def needs_quoting(value: str) -> bool:
    """Whether a plain scalar would be misread (or rejected) by a YAML parser."""
    if not value:
        return False
    if value[0] in ("'", '"', "[", "{", "|", ">"):
        return False
    return ": " in value or value.endswith(":") or value.startswith(SPECIAL_START)


def quote_scalar(value: str) -> str:
    """Wrap a scalar in quotes, preferring double quotes."""
    if '"' not in value and "\\" not in value:
        return f'"{value}"'
    escaped = value.replace("'", "''")
    return f"'{escaped}'"


def format_scalar(value: str) -> str:
    return quote_scalar(value) if needs_quoting(value) else value


# ---------------------------------------------------------------------------
# Note body
# ---------------------------------------------------------------------------


def map_body(text: str, transform: Callable[[str], str]) -> str:
    """
    Apply ``transform`` to the prose of a note.

    The front matter and fenced code blocks are passed through untouched;
    every other segment starts and ends on a line boundary.
    """
    front, rest = split_front_matter(text)
    pieces: list[str] = []
    last = 0
    for match in FENCE_RE.finditer(rest):
        pieces.append(transform(rest[last : match.start()]))
        pieces.append(match.group(0))
        last = match.end()
    pieces.append(transform(rest[last:]))
    return front + "".join(pieces)

# Vault Linter
# Copyright (C) 2025 Phoenix Link (Pty) Ltd.
#
# This file is part of Vault Linter.
#
# Vault Linter is free software: you can redistribute it and/or modify it
# under the terms of the GNU Affero General Public License v3.0 (AGPL-3.0).
# See https://www.gnu.org/licenses/agpl-3.0.html for the full text.
"""
Vault Linter -- Disabled-Rule Scanner

A note can switch rules off for itself through its front matter:

    ---
    disabled rules: [yaml-timestamp, trailing-spaces]
    ---

The value may be a single alias or a list; ``all`` disables every rule.
The scan runs once per lint run on the untouched original text, so no rule
can disable itself through text it emits. When the front matter is not yet
valid YAML (the pre-rules may be what fixes it) the key is read line by
line instead, so scanning never fails.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from typing import Any

import yaml

from vaultlint.rules.frontmatter import get_key_value, get_yaml_section, split_key_blocks

logger = logging.getLogger("vaultlint.rules.disabled")

DISABLED_RULES_KEY = "disabled rules"
ALL_RULES = "all"

_LIST_ITEM_RE = re.compile(r"^\s*-\s+(?P<item>.+?)\s*$")


def get_disabled_rules(text: str, all_aliases: Iterable[str]) -> frozenset[str]:
    """Aliases switched off for this run by the note's own front matter."""
    body = get_yaml_section(text)
    if body is None:
        return frozenset()

    try:
        data = yaml.safe_load(body)
        value = data.get(DISABLED_RULES_KEY) if isinstance(data, dict) else None
    except yaml.YAMLError:
        logger.debug("Front matter not parseable yet, scanning '%s' line by line", DISABLED_RULES_KEY)
        value = _scan_lines(body)

    aliases = _as_aliases(value)
    if ALL_RULES in aliases:
        return frozenset(all_aliases)
    return frozenset(aliases)


def _as_aliases(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return []
    return [str(item).strip() for item in value if item is not None and str(item).strip()]


def _unquote(item: str) -> str:
    item = item.strip()
    if len(item) >= 2 and item[0] == item[-1] and item[0] in ("'", '"'):
        return item[1:-1]
    return item


def _scan_lines(body: str) -> list[str]:
    inline = get_key_value(body, DISABLED_RULES_KEY)
    if inline is None:
        return []
    if inline:
        if inline.startswith("[") and inline.endswith("]"):
            return [_unquote(part) for part in inline[1:-1].split(",") if part.strip()]
        return [_unquote(inline)]

    _preamble, blocks = split_key_blocks(body)
    for key, lines in blocks:
        if key != DISABLED_RULES_KEY:
            continue
        items = []
        for line in lines[1:]:
            match = _LIST_ITEM_RE.match(line)
            if match:
                items.append(_unquote(match.group("item")))
        return items
    return []

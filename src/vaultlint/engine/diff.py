# Vault Linter
# Copyright (C) 2025 Phoenix Link (Pty) Ltd.
#
# This file is part of Vault Linter.
#
# Vault Linter is free software: you can redistribute it and/or modify it
# under the terms of the GNU Affero General Public License v3.0 (AGPL-3.0).
# See https://www.gnu.org/licenses/agpl-3.0.html for the full text.
"""
Vault Linter -- Diff Engine

Character-level diff between the text before and after a lint run, built on
Google's diff-match-patch. The diff is computed with no time budget so the
same pair of texts always yields the same operations.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from diff_match_patch import diff_match_patch


class DiffKind(IntEnum):
    """Operation kinds, numbered as diff-match-patch numbers them."""

    DELETE = -1
    EQUAL = 0
    INSERT = 1


@dataclass(frozen=True)
class DiffOp:
    kind: DiffKind
    text: str

    def to_dict(self) -> dict:
        return {"kind": self.kind.name.lower(), "text": self.text}


def _differ() -> diff_match_patch:
    dmp = diff_match_patch()
    # 0 = no deadline; a timed-out diff depends on machine speed
    dmp.Diff_Timeout = 0
    return dmp


def compute_diff(old_text: str, new_text: str) -> list[DiffOp]:
    """
    Ordered diff operations turning ``old_text`` into ``new_text``.

    Concatenating EQUAL + DELETE texts gives ``old_text``; EQUAL + INSERT
    texts give ``new_text``. Identical inputs give no non-EQUAL operation.
    """
    raw = _differ().diff_main(old_text, new_text, False)
    return [DiffOp(DiffKind(kind), text) for kind, text in raw if text]


def source_text(ops: list[DiffOp]) -> str:
    return "".join(op.text for op in ops if op.kind != DiffKind.INSERT)


def target_text(ops: list[DiffOp]) -> str:
    return "".join(op.text for op in ops if op.kind != DiffKind.DELETE)


def count_changes(ops: list[DiffOp]) -> tuple[int, int]:
    """(characters added, characters removed)."""
    added = sum(len(op.text) for op in ops if op.kind == DiffKind.INSERT)
    removed = sum(len(op.text) for op in ops if op.kind == DiffKind.DELETE)
    return added, removed

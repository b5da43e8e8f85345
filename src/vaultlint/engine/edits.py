# Vault Linter
# Copyright (C) 2025 Phoenix Link (Pty) Ltd.
#
# This file is part of Vault Linter.
#
# Vault Linter is free software: you can redistribute it and/or modify it
# under the terms of the GNU Affero General Public License v3.0 (AGPL-3.0).
# See https://www.gnu.org/licenses/agpl-3.0.html for the full text.
"""
Vault Linter -- Edit Projector

Turns a diff into positional edits for a live editor buffer.

Every position is expressed in the coordinates of the buffer as it was
*before* the batch, so the whole list can be handed to an editor as one
atomic transaction. The cursor advances through EQUAL and DELETE text only;
insertions are anchored at the cursor without moving it.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from vaultlint.engine.diff import DiffKind, DiffOp, count_changes


@dataclass(frozen=True, order=True)
class EditPosition:
    """Zero-based line and column (column counted in characters)."""

    line: int
    ch: int

    def to_dict(self) -> dict:
        return {"line": self.line, "ch": self.ch}


@dataclass(frozen=True)
class EditOperation:
    """
    A single buffer change.

    ``to_pos`` is None for a pure insertion at ``from_pos``. A deletion has an
    empty ``text``.
    """

    from_pos: EditPosition
    to_pos: EditPosition | None = None
    text: str = ""

    @property
    def is_insertion(self) -> bool:
        return self.to_pos is None

    def to_dict(self) -> dict:
        return {
            "from": self.from_pos.to_dict(),
            "to": self.to_pos.to_dict() if self.to_pos else None,
            "text": self.text,
        }


@dataclass(frozen=True)
class EditProjection:
    operations: list[EditOperation]
    chars_added: int
    chars_removed: int

    @property
    def is_empty(self) -> bool:
        return not self.operations


def advance(position: EditPosition, text: str) -> EditPosition:
    """Position reached after walking over ``text`` from ``position``."""
    newlines = text.count("\n")
    if not newlines:
        return EditPosition(position.line, position.ch + len(text))
    return EditPosition(position.line + newlines, len(text) - text.rfind("\n") - 1)


def project_edits(ops: Iterable[DiffOp]) -> EditProjection:
    """Project diff operations onto edits in pre-batch coordinates."""
    ops = list(ops)
    cursor = EditPosition(0, 0)
    operations: list[EditOperation] = []
    for op in ops:
        if op.kind == DiffKind.EQUAL:
            cursor = advance(cursor, op.text)
        elif op.kind == DiffKind.INSERT:
            operations.append(EditOperation(cursor, None, op.text))
        else:
            end = advance(cursor, op.text)
            operations.append(EditOperation(cursor, end, ""))
            cursor = end
    added, removed = count_changes(ops)
    return EditProjection(operations, added, removed)


def position_to_offset(text: str, position: EditPosition) -> int:
    """Character offset of ``position`` in ``text``. Raises ValueError when out of range."""
    offset = 0
    for _ in range(position.line):
        newline = text.find("\n", offset)
        if newline < 0:
            raise ValueError(f"Line {position.line} is past the end of the text")
        offset = newline + 1
    line_end = text.find("\n", offset)
    line_length = (len(text) if line_end < 0 else line_end) - offset
    if position.ch > line_length:
        raise ValueError(f"Column {position.ch} is past the end of line {position.line}")
    return offset + position.ch


def apply_edits(text: str, operations: Iterable[EditOperation]) -> str:
    """
    Apply a batch atomically the way an editor transaction would.

    Positions are resolved against the untouched ``text`` and the edits are
    spliced in from last to first, so earlier offsets stay valid.
    """
    resolved = []
    for op in operations:
        start = position_to_offset(text, op.from_pos)
        end = start if op.to_pos is None else position_to_offset(text, op.to_pos)
        resolved.append((start, end, op.text))
    for start, end, replacement in reversed(resolved):
        text = text[:start] + replacement + text[end:]
    return text

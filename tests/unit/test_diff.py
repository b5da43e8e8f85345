"""Tests for vaultlint.engine.diff -- character diff between lint input and output."""

import pytest

from vaultlint.engine.diff import (
    DiffKind,
    DiffOp,
    compute_diff,
    count_changes,
    source_text,
    target_text,
)

PAIRS = [
    ("a\nbb\n", "a\nccbb\n"),
    ("hello world\n", "hello\n"),
    ("---\ntags: #one\n---\nBody  \n", "---\ntags: one\n---\nBody\n"),
    ("", "new note\n"),
    ("gone\n", ""),
    ("naïve café\n", "naive cafe\n"),
]


class TestComputeDiff:
    def test_identical_text_has_no_changes(self):
        ops = compute_diff("same\ntext\n", "same\ntext\n")
        assert all(op.kind == DiffKind.EQUAL for op in ops)
        assert count_changes(ops) == (0, 0)

    def test_empty_inputs(self):
        assert compute_diff("", "") == []

    def test_insertion(self):
        ops = compute_diff("a\nbb\n", "a\nccbb\n")
        assert ops == [
            DiffOp(DiffKind.EQUAL, "a\n"),
            DiffOp(DiffKind.INSERT, "cc"),
            DiffOp(DiffKind.EQUAL, "bb\n"),
        ]

    def test_deletion(self):
        ops = compute_diff("hello world\n", "hello\n")
        assert DiffOp(DiffKind.DELETE, " world") in ops
        assert count_changes(ops) == (0, 6)

    @pytest.mark.parametrize("old,new", PAIRS)
    def test_ops_reconstruct_both_sides(self, old, new):
        ops = compute_diff(old, new)
        assert source_text(ops) == old
        assert target_text(ops) == new

    def test_deterministic(self):
        old = "line one\nline two\n" * 50
        new = old.replace("two", "2")
        assert compute_diff(old, new) == compute_diff(old, new)

    def test_no_empty_ops(self):
        for old, new in PAIRS:
            assert all(op.text for op in compute_diff(old, new))


class TestDiffOp:
    def test_kind_values_match_library(self):
        assert DiffKind.DELETE == -1
        assert DiffKind.EQUAL == 0
        assert DiffKind.INSERT == 1

    def test_to_dict(self):
        assert DiffOp(DiffKind.INSERT, "x").to_dict() == {"kind": "insert", "text": "x"}

# Vault Linter
# Copyright (C) 2025 Phoenix Link (Pty) Ltd.
#
# This file is part of Vault Linter.
#
# Vault Linter is free software: you can redistribute it and/or modify it
# under the terms of the GNU Affero General Public License v3.0 (AGPL-3.0).
# See https://www.gnu.org/licenses/agpl-3.0.html for the full text.
"""
Vault Linter -- Batch Runner

Lints every Markdown document in the store, or every document under one
folder. Each document runs as its own task and reports a DocumentOutcome;
the outcomes are joined with ``asyncio.gather`` and counted afterwards, so
no task touches shared state. A failing document is reported and left as
it was; the others still run.
"""

from __future__ import annotations

import asyncio
import logging
import posixpath
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field

from vaultlint.core.errors import (
    ContentError,
    LintScope,
    classify_exception,
    log_label,
    notice_for,
)
from vaultlint.core.logging import get_logger
from vaultlint.engine.host import DocumentStore, Notifier

logger = logging.getLogger("vaultlint.engine.batch")

# path -> whether the document was rewritten
LintFileFn = Callable[[str], Awaitable[bool]]


def normalize_path(path: str) -> str:
    """Vault-relative ``/`` path without leading/trailing separators (root is ``""``)."""
    cleaned = posixpath.normpath(path.replace("\\", "/")).strip("/")
    return "" if cleaned == "." else cleaned


def is_ignored(path: str, folders_to_ignore: Iterable[str]) -> bool:
    """True when ``path`` starts with any non-empty ignore prefix."""
    return any(folder and path.startswith(folder) for folder in folders_to_ignore)


def _error_phrase(failed: int) -> str:
    return "was 1 error" if failed == 1 else f"were {failed} errors"


@dataclass
class DocumentOutcome:
    """Result of linting one document in a batch."""

    path: str
    changed: bool = False
    error: ContentError | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "changed": self.changed,
            "error": self.error.to_dict() if self.error else None,
        }


@dataclass
class BatchSummary:
    """Joined outcomes of one batch run."""

    scope: LintScope
    outcomes: list[DocumentOutcome] = field(default_factory=list)
    folder: str | None = None

    @property
    def succeeded(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.succeeded)

    @property
    def failed(self) -> int:
        return len(self.outcomes) - self.succeeded

    @property
    def processed(self) -> int:
        return len(self.outcomes)

    @property
    def changed(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.changed)

    def message(self) -> str:
        """Completion notice shown to the user."""
        if self.folder is None:
            if self.failed == 0:
                return "Linted all files"
            return f"Linted all files and there {_error_phrase(self.failed)}."
        name = posixpath.basename(self.folder) or "/"
        if self.failed == 0:
            return f"Linted all {self.processed} files in {name}."
        return f"Linted all {self.processed} files in {name} and there {_error_phrase(self.failed)}."

    def to_dict(self) -> dict:
        return {
            "scope": self.scope.value,
            "folder": self.folder,
            "processed": self.processed,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "changed": self.changed,
            "outcomes": [outcome.to_dict() for outcome in self.outcomes],
        }


class BatchRunner:
    """Runs a single-document lint over many documents concurrently."""

    def __init__(
        self,
        store: DocumentStore,
        lint_file: LintFileFn,
        notifier: Notifier,
        folders_to_ignore: Iterable[str] = (),
    ):
        self._store = store
        self._lint_file = lint_file
        self._notifier = notifier
        self._folders_to_ignore = tuple(folders_to_ignore)

    async def run_all(self) -> BatchSummary:
        """Lint every document that is not under an ignored folder."""
        paths = [
            path
            for path in await self._store.list_markdown_files()
            if not is_ignored(path, self._folders_to_ignore)
        ]
        return await self._run(paths, LintScope.ALL_FILES)

    async def run_folder(self, folder: str) -> BatchSummary:
        """Lint every document under ``folder``, including subfolders."""
        folder = normalize_path(folder)
        logger.info("Linting folder %s", folder or "/")
        prefix = f"{folder}/" if folder else ""
        paths = [
            path
            for path in await self._store.list_markdown_files()
            if normalize_path(path).startswith(prefix)
            and not is_ignored(path, self._folders_to_ignore)
        ]
        return await self._run(paths, LintScope.FOLDER, folder)

    async def _run(self, paths: list[str], scope: LintScope, folder: str | None = None) -> BatchSummary:
        outcomes = await asyncio.gather(*(self._lint_one(path, scope) for path in paths))
        summary = BatchSummary(scope=scope, outcomes=list(outcomes), folder=folder)
        get_logger().batch(scope.value, summary.succeeded, summary.failed, folder=folder or "")
        self._notifier.notify(summary.message())
        return summary

    async def _lint_one(self, path: str, scope: LintScope) -> DocumentOutcome:
        try:
            changed = await self._lint_file(path)
        except Exception as exc:
            error = classify_exception(exc, path)
            self._notifier.notify(notice_for(error, scope))
            get_logger().lint_error("Batch", log_label(scope, path), error)
            return DocumentOutcome(path, error=error)
        return DocumentOutcome(path, changed=changed)

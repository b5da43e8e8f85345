# Vault Linter
# Copyright (C) 2025 Phoenix Link (Pty) Ltd.
#
# This file is part of Vault Linter.
#
# Vault Linter is free software: you can redistribute it and/or modify it
# under the terms of the GNU Affero General Public License v3.0 (AGPL-3.0).
# See https://www.gnu.org/licenses/agpl-3.0.html for the full text.
"""
Vault Linter -- Lint Service

The command surface a host calls into:

    lint_text          lint a string for a given document
    run_linter_file    lint a stored document and write it back
    run_linter_editor  lint an open buffer and apply the change as one batch
    on_save            editor path, when lint-on-save is on
    run_all_files      batch over the whole store
    run_folder         batch over one folder

The service owns the current settings snapshot and rebuilds its Linter
whenever the snapshot is replaced.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from vaultlint.core.context import FileMetadata
from vaultlint.core.errors import ContentError, LintScope, classify_exception, log_label, notice_for
from vaultlint.core.locale import resolve_locale, system_language
from vaultlint.core.logging import get_logger, set_log_level
from vaultlint.core.settings import LinterSettings, SettingsStore
from vaultlint.engine.batch import BatchRunner, BatchSummary, is_ignored
from vaultlint.engine.diff import compute_diff
from vaultlint.engine.edits import EditProjection, project_edits
from vaultlint.engine.host import ConsoleNotifier, DocumentStore, EditorBuffer, Notifier
from vaultlint.engine.orchestrator import Linter
from vaultlint.rules.frontmatter import strip_cr
from vaultlint.rules.registry import RuleRegistry

logger = logging.getLogger("vaultlint.engine.service")


def changed_message(chars_added: int, chars_removed: int) -> str:
    return f"{chars_added} characters added\n{chars_removed} characters removed"


class LintService:
    """Entry point for hosts: CLI, editor integrations, tests."""

    def __init__(
        self,
        registry: RuleRegistry,
        settings: LinterSettings,
        store: DocumentStore | None = None,
        notifier: Notifier | None = None,
        settings_store: SettingsStore | None = None,
        clock: Callable[[], datetime] = datetime.now,
        app_language: str = "en",
        system_lang: str | None = None,
    ):
        self.registry = registry
        self.store = store
        self.notifier = notifier or ConsoleNotifier()
        self.settings_store = settings_store
        self._clock = clock
        self._app_language = app_language
        self._system_lang = system_lang if system_lang is not None else system_language()
        self._apply(settings)

    @classmethod
    def from_store(
        cls,
        registry: RuleRegistry,
        settings_store: SettingsStore,
        **kwargs,
    ) -> LintService:
        """Build a service from persisted settings."""
        return cls(registry, settings_store.load(registry), settings_store=settings_store, **kwargs)

    def _apply(self, settings: LinterSettings):
        self.settings = settings
        self.locale = resolve_locale(settings.linter_locale, self._app_language, self._system_lang)
        self.linter = Linter(self.registry, settings, self.locale, self._clock)
        set_log_level(settings.log_level)

    # =========================================================================
    # SETTINGS
    # =========================================================================

    def update_settings(self, settings: LinterSettings):
        """Swap in a new snapshot, persisting it when a store is attached."""
        before = self.settings.to_dict()
        after = settings.to_dict()
        changed = sorted(key for key in after if before.get(key) != after[key])
        self._apply(settings)
        if self.settings_store is not None:
            self.settings_store.save(settings)
        get_logger().settings_change(changed)

    def should_ignore_file(self, path: str) -> bool:
        return is_ignored(path, self.settings.folders_to_ignore)

    # =========================================================================
    # SINGLE DOCUMENT
    # =========================================================================

    def lint_text(self, old_text: str, metadata: FileMetadata) -> str:
        return self.linter.lint_text(old_text, metadata)

    def _require_store(self) -> DocumentStore:
        if self.store is None:
            raise RuntimeError("No document store attached to the lint service")
        return self.store

    async def _metadata(self, path: str) -> FileMetadata:
        if self.store is None:
            now = self._clock()
            return FileMetadata(path=path, created_at=now, modified_at=now)
        return await self.store.stat(path)

    async def run_linter_file(self, path: str) -> bool:
        """
        Lint a stored document and write the result back.

        Returns True when the document was rewritten. Every failure, including
        unreadable or undecodable files, reaches the caller as a ContentError.
        """
        store = self._require_store()
        try:
            old_text = strip_cr(await store.read(path))
            metadata = await store.stat(path)
        except (OSError, ValueError) as exc:
            raise classify_exception(exc, path) from exc

        new_text = self.lint_text(old_text, metadata)
        if new_text == old_text:
            return False
        try:
            await store.write(path, new_text)
        except OSError as exc:
            raise classify_exception(exc, path) from exc
        return True

    async def run_linter_editor(self, buffer: EditorBuffer, path: str) -> EditProjection | None:
        """
        Lint an open buffer and apply the net change as one edit batch.

        On failure the user is notified once, the error is logged, the buffer
        is left untouched and None is returned.
        """
        logger.info("Running linter on %s", path)
        old_text = buffer.get_value()
        try:
            new_text = self.lint_text(old_text, await self._metadata(path))
        except (ContentError, OSError) as exc:
            error = classify_exception(exc, path)
            self.notifier.notify(notice_for(error, LintScope.FILE))
            get_logger().lint_error("Linter", log_label(LintScope.FILE, path), error)
            return None

        projection = project_edits(compute_diff(old_text, new_text))
        buffer.apply_edit_batch(projection.operations)

        get_logger().lint_run(path, projection.chars_added, projection.chars_removed)
        if self.settings.display_changed:
            self.notifier.notify(changed_message(projection.chars_added, projection.chars_removed))
        return projection

    async def on_save(self, buffer: EditorBuffer, path: str) -> bool:
        """Lint on save when enabled and the file is not ignored. True when it ran."""
        if not self.settings.lint_on_save or self.should_ignore_file(path):
            return False
        await self.run_linter_editor(buffer, path)
        return True

    # =========================================================================
    # BATCH
    # =========================================================================

    def _batch_runner(self) -> BatchRunner:
        return BatchRunner(
            self._require_store(),
            self.run_linter_file,
            self.notifier,
            self.settings.folders_to_ignore,
        )

    async def run_all_files(self) -> BatchSummary:
        return await self._batch_runner().run_all()

    async def run_folder(self, folder: str) -> BatchSummary:
        return await self._batch_runner().run_folder(folder)

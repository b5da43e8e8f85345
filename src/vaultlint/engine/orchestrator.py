# Vault Linter
# Copyright (C) 2025 Phoenix Link (Pty) Ltd.
#
# This file is part of Vault Linter.
#
# Vault Linter is free software: you can redistribute it and/or modify it
# under the terms of the GNU Affero General Public License v3.0 (AGPL-3.0).
# See https://www.gnu.org/licenses/agpl-3.0.html for the full text.
"""
Vault Linter -- Pipeline Orchestrator

Runs every rule over one note in a fixed order:

    1. scan the original text for disabled rules
    2. format-tags-in-yaml              (pre-rule)
    3. escape-yaml-special-characters   (pre-rule)
    4. every other rule, in registry order
    5. yaml-timestamp                   (knows whether 2-4 changed the note)
    6. yaml-key-sort                    (knows whether 5 wrote date-modified)

The pre-rules come first because later YAML rules parse the front matter and
would fail on tags like ``#todo`` or values like ``Part 1: Intro``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Collection
from datetime import datetime

from vaultlint.core.context import FileMetadata, LintContext
from vaultlint.core.errors import classify_exception
from vaultlint.core.locale import DEFAULT_LOCALE
from vaultlint.core.settings import LinterSettings
from vaultlint.rules.base import Rule, RuleOutcome
from vaultlint.rules.disabled import get_disabled_rules
from vaultlint.rules.registry import RuleRegistry
from vaultlint.rules.yaml_rules import (
    DEFAULT_TIMESTAMP_FORMAT,
    ESCAPE_YAML_SPECIAL_CHARACTERS,
    FORMAT_TAGS_IN_YAML,
    YAML_KEY_SORT,
    YAML_TIMESTAMP,
)

logger = logging.getLogger("vaultlint.engine.orchestrator")

PRE_RULES = (FORMAT_TAGS_IN_YAML, ESCAPE_YAML_SPECIAL_CHARACTERS)

Clock = Callable[[], datetime]


class Linter:
    """
    Applies a registry of rules to notes under one settings snapshot.

    The snapshot, locale and clock are fixed for the lifetime of the
    instance; build a new Linter when settings change.
    """

    def __init__(
        self,
        registry: RuleRegistry,
        settings: LinterSettings,
        locale: str = DEFAULT_LOCALE,
        clock: Clock = datetime.now,
    ):
        self.registry = registry
        self.settings = settings
        self.locale = locale
        self._clock = clock

    def lint_text(self, original_text: str, metadata: FileMetadata) -> str:
        """
        Lint one note and return the final text.

        Raises a ContentError subclass carrying the file path and the alias
        of the failing rule; nothing is partially applied.
        """
        logger.debug("Linting %s", metadata.path)
        disabled = get_disabled_rules(original_text, self.registry.aliases())
        context = LintContext.for_file(metadata, self.locale)
        text = original_text

        for alias in PRE_RULES:
            rule = self.registry.get(alias)
            if rule is not None:
                text = self._invoke(rule, text, disabled, context, metadata.path).text

        for rule in self.registry.generic_rules():
            text = self._invoke(rule, text, disabled, context, metadata.path).text

        timestamp = self.registry.get(YAML_TIMESTAMP)
        modified_written = False
        if timestamp is not None:
            stamp_context = context.for_timestamp(self._clock(), original_text != text)
            outcome = self._invoke(timestamp, text, disabled, stamp_context, metadata.path)
            text, modified_written = outcome.text, outcome.flag

        key_sort = self.registry.get(YAML_KEY_SORT)
        if key_sort is not None:
            sort_context = self._key_sort_context(context, timestamp, modified_written)
            text = self._invoke(key_sort, text, disabled, sort_context, metadata.path).text

        return text

    def _key_sort_context(
        self,
        context: LintContext,
        timestamp: Rule | None,
        modified_written: bool,
    ) -> LintContext:
        if timestamp is None:
            return context.for_key_sort(self._clock().strftime(DEFAULT_TIMESTAMP_FORMAT), False, "")
        options = timestamp.get_options(self.settings)
        return context.for_key_sort(
            self._clock().strftime(options["format"] or DEFAULT_TIMESTAMP_FORMAT),
            modified_written,
            options["date_modified_key"],
        )

    def _invoke(
        self,
        rule: Rule,
        text: str,
        disabled: Collection[str],
        context: LintContext,
        file_path: str,
    ) -> RuleOutcome:
        try:
            return rule.apply_if_enabled(text, self.settings, disabled, context)
        except Exception as exc:
            error = classify_exception(exc, file_path, rule.alias)
            if error is exc:
                raise
            raise error from exc

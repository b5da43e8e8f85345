# Vault Linter
# Copyright (C) 2025 Phoenix Link (Pty) Ltd.
#
# This file is part of Vault Linter.
#
# Vault Linter is free software: you can redistribute it and/or modify it
# under the terms of the GNU Affero General Public License v3.0 (AGPL-3.0).
# See https://www.gnu.org/licenses/agpl-3.0.html for the full text.
"""
Vault Linter -- CLI Commands

Implements the commands behind the ``vaultlint`` console script:

    vaultlint file PATH                        Lint one note
    vaultlint all                              Lint every note in the vault
    vaultlint folder PATH                      Lint every note under a folder
    vaultlint rules                            List rules and their options
    vaultlint settings show                    Show global settings
    vaultlint settings set KEY VALUE           Change a global setting
    vaultlint settings rule ALIAS OPTION VALUE Change a rule option

Each command returns a CommandResult. User notices (change counts, batch
summaries, lint errors) go through the service's notifier.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from vaultlint.core.settings import GLOBAL_SETTINGS, format_global_value, parse_global_value
from vaultlint.engine.host import TextBuffer
from vaultlint.engine.service import LintService
from vaultlint.rules.frontmatter import strip_cr

logger = logging.getLogger("vaultlint.cli.commands")


@dataclass
class CommandResult:
    """Result of a CLI command execution."""

    success: bool
    message: str
    data: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "data": self.data,
        }


def _setting_name(key: str) -> str | None:
    """Accept either the snake_case name or the stored camelCase key."""
    if key in GLOBAL_SETTINGS:
        return key
    for name, meta in GLOBAL_SETTINGS.items():
        if meta["key"] == key:
            return name
    return None


# =============================================================================
# LINTING
# =============================================================================


async def _lint_file(service: LintService, path: str) -> CommandResult:
    store = service.store
    if store is None:
        return CommandResult(success=False, message="No vault configured.")
    try:
        buffer = TextBuffer(strip_cr(await store.read(path)))
    except (OSError, ValueError) as exc:
        return CommandResult(success=False, message=f"Cannot read '{path}': {exc}")

    projection = await service.run_linter_editor(buffer, path)
    if projection is None:
        return CommandResult(success=False, message=f"Linting '{path}' failed.", data={"path": path})

    if not projection.is_empty:
        await store.write(path, buffer.get_value())
    return CommandResult(
        success=True,
        message=f"Linted '{path}'." if not projection.is_empty else f"No changes to '{path}'.",
        data={
            "path": path,
            "chars_added": projection.chars_added,
            "chars_removed": projection.chars_removed,
            "edits": [op.to_dict() for op in projection.operations],
        },
    )


def cmd_lint_file(service: LintService, path: str) -> CommandResult:
    """Lint one note through the editor path and write it back when changed."""
    return asyncio.run(_lint_file(service, path))


def cmd_lint_all(service: LintService) -> CommandResult:
    """Lint every note in the vault."""
    summary = asyncio.run(service.run_all_files())
    return CommandResult(
        success=summary.failed == 0,
        message=f"{summary.processed} files processed, {summary.changed} changed, {summary.failed} failed.",
        data=summary.to_dict(),
    )


def cmd_lint_folder(service: LintService, folder: str) -> CommandResult:
    """Lint every note under ``folder``."""
    summary = asyncio.run(service.run_folder(folder))
    return CommandResult(
        success=summary.failed == 0,
        message=f"{summary.processed} files processed, {summary.changed} changed, {summary.failed} failed.",
        data=summary.to_dict(),
    )


# =============================================================================
# RULES & SETTINGS
# =============================================================================


def cmd_rules(service: LintService) -> CommandResult:
    """List rules grouped by category, with their current option values."""
    lines = []
    data: dict[str, Any] = {}
    for category, rules in service.registry.by_category():
        lines.append(f"{category.value}:")
        for rule in rules:
            options = rule.get_options(service.settings)
            mark = "x" if options[rule.enabled_option_name] else " "
            lines.append(f"  [{mark}] {rule.alias} -- {rule.name}")
            for opt in rule.options[1:]:
                lines.append(f"        {opt.name} = {opt.render(options[opt.name])}")
            data[rule.alias] = options
    return CommandResult(success=True, message="\n".join(lines), data=data)


def cmd_settings_show(service: LintService) -> CommandResult:
    """Show the global settings."""
    settings = service.settings
    lines = [
        f"  {meta['label']:<28} {format_global_value(name, getattr(settings, name))}"
        for name, meta in GLOBAL_SETTINGS.items()
    ]
    lines.append(f"  {'Resolved locale':<28} {service.locale}")
    return CommandResult(success=True, message="\n".join(lines), data=settings.to_dict())


def cmd_settings_set(service: LintService, key: str, raw: str) -> CommandResult:
    """Change one global setting and persist it."""
    name = _setting_name(key)
    if name is None:
        return CommandResult(success=False, message=f"Unknown setting: {key}")
    try:
        value = parse_global_value(name, raw)
    except ValueError as exc:
        return CommandResult(success=False, message=str(exc))

    service.update_settings(service.settings.with_changes(**{name: value}))
    label = GLOBAL_SETTINGS[name]["label"]
    return CommandResult(
        success=True,
        message=f"{label} set to {format_global_value(name, value)}.",
        data={name: getattr(service.settings, name)},
    )


def cmd_settings_rule(service: LintService, alias: str, option: str, raw: str) -> CommandResult:
    """Change one rule option and persist it."""
    rule = service.registry.get(alias)
    if rule is None:
        return CommandResult(success=False, message=f"Unknown rule: {alias}")
    try:
        opt = rule.option(option)
        value = opt.parse(raw)
    except (KeyError, ValueError) as exc:
        return CommandResult(success=False, message=str(exc).strip("'\""))

    service.update_settings(service.settings.with_rule_option(alias, option, value))
    return CommandResult(
        success=True,
        message=f"{alias}: {option} set to {opt.render(value)}.",
        data={alias: service.settings.rule_config(alias)},
    )

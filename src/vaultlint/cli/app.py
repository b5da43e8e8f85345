# Vault Linter
# Copyright (C) 2025 Phoenix Link (Pty) Ltd.
#
# This file is part of Vault Linter.
#
# Vault Linter is free software: you can redistribute it and/or modify it
# under the terms of the GNU Affero General Public License v3.0 (AGPL-3.0).
# See https://www.gnu.org/licenses/agpl-3.0.html for the full text.
"""
Vault Linter CLI -- Main entry point.

Usage:
    vaultlint file notes/todo.md
    vaultlint --vault ~/notes all
    vaultlint folder projects
    vaultlint settings rule yaml-timestamp enabled true
    vaultlint --version
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from vaultlint import __version__
from vaultlint.cli.commands import (
    CommandResult,
    cmd_lint_all,
    cmd_lint_file,
    cmd_lint_folder,
    cmd_rules,
    cmd_settings_rule,
    cmd_settings_set,
    cmd_settings_show,
)
from vaultlint.core.settings import SettingsStore
from vaultlint.engine.host import ConsoleNotifier, FileSystemDocumentStore
from vaultlint.engine.service import LintService
from vaultlint.rules import default_registry


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vaultlint",
        description="Vault Linter -- deterministic rule pipeline for Markdown notes",
    )
    parser.add_argument("--version", action="version", version=f"vault-linter {__version__}")
    parser.add_argument(
        "--vault",
        default=".",
        help="Root folder of the notes (default: current directory)",
    )
    parser.add_argument(
        "--settings",
        default=None,
        help="Path to settings.json (default: ~/.vaultlint/settings.json)",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    lint_file = commands.add_parser("file", help="Lint one note")
    lint_file.add_argument("path")
    commands.add_parser("all", help="Lint every note in the vault")
    lint_folder = commands.add_parser("folder", help="Lint every note under a folder")
    lint_folder.add_argument("path")
    commands.add_parser("rules", help="List rules and their options")

    settings = commands.add_parser("settings", help="Show or change settings")
    actions = settings.add_subparsers(dest="action", required=True)
    actions.add_parser("show", help="Show global settings")
    set_global = actions.add_parser("set", help="Change a global setting")
    set_global.add_argument("key")
    set_global.add_argument("value")
    set_rule = actions.add_parser("rule", help="Change a rule option")
    set_rule.add_argument("alias")
    set_rule.add_argument("option")
    set_rule.add_argument("value")
    return parser


def vault_relative(vault: Path, path: str) -> str:
    """Vault-relative ``/`` path for a path given on the command line."""
    candidate = Path(path)
    if candidate.is_absolute():
        candidate = candidate.resolve().relative_to(vault.resolve())
    return candidate.as_posix()


def dispatch(service: LintService, args: argparse.Namespace, vault: Path) -> CommandResult:
    if args.command == "file":
        try:
            path = vault_relative(vault, args.path)
        except ValueError:
            return CommandResult(success=False, message=f"'{args.path}' is not inside the vault {vault}")
        return cmd_lint_file(service, path)
    if args.command == "all":
        return cmd_lint_all(service)
    if args.command == "folder":
        try:
            folder = vault_relative(vault, args.path)
        except ValueError:
            return CommandResult(success=False, message=f"'{args.path}' is not inside the vault {vault}")
        return cmd_lint_folder(service, folder)
    if args.command == "rules":
        return cmd_rules(service)
    if args.action == "show":
        return cmd_settings_show(service)
    if args.action == "set":
        return cmd_settings_set(service, args.key, args.value)
    return cmd_settings_rule(service, args.alias, args.option, args.value)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    vault = Path(args.vault).expanduser()

    try:
        service = LintService.from_store(
            default_registry(),
            SettingsStore(args.settings),
            store=FileSystemDocumentStore(vault),
            notifier=ConsoleNotifier(),
        )
    except (OSError, json.JSONDecodeError) as exc:
        print(f"  Cannot load settings: {exc}", file=sys.stderr)
        return 1

    result = dispatch(service, args, vault)
    print(result.message, file=sys.stdout if result.success else sys.stderr)
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())

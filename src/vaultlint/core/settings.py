# Vault Linter
# Copyright (C) 2025 Phoenix Link (Pty) Ltd.
#
# This file is part of Vault Linter.
#
# Vault Linter is free software: you can redistribute it and/or modify it
# under the terms of the GNU Affero General Public License v3.0 (AGPL-3.0).
# See https://www.gnu.org/licenses/agpl-3.0.html for the full text.
"""
Vault Linter -- Settings Snapshot & Persistence

Settings are an immutable snapshot handed to each lint run. The snapshot is
rebuilt at load time from rule defaults merged with stored overrides, and
every change produces a new snapshot that is persisted before the next run
picks it up.

Persisted shape (JSON, camelCase keys so existing settings files keep loading):
    {
      "ruleConfigs":     {"<alias>": {"<option>": value, ...}, ...},
      "lintOnSave":      false,
      "displayChanged":  true,
      "foldersToIgnore": ["templates"],
      "linterLocale":    "system-default",
      "logLevel":        "ERROR"
    }

Migrations on load:
  - a legacy per-rule ``Enabled`` key is copied to the rule's enabled option
    and dropped
  - a legacy numeric ``logLevel`` (0=TRACE .. 5=SILENT) becomes its name

Config location: ~/.vaultlint/settings.json  (VAULTLINT_HOME overrides)
"""

from __future__ import annotations

import copy
import json
import logging
import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import TYPE_CHECKING, Any

from vaultlint.core.locale import SYSTEM_DEFAULT

if TYPE_CHECKING:
    from vaultlint.rules.base import Rule

logger = logging.getLogger("vaultlint.core.settings")

# ---------------------------------------------------------------------------
# Default paths
# ---------------------------------------------------------------------------
_VAULTLINT_HOME = Path(os.environ.get("VAULTLINT_HOME", Path.home() / ".vaultlint"))
DEFAULT_SETTINGS_PATH = _VAULTLINT_HOME / "settings.json"

LEGACY_ENABLED_KEY = "Enabled"
LEGACY_LOG_LEVELS: dict[int, str] = {
    0: "TRACE",
    1: "DEBUG",
    2: "INFO",
    3: "WARN",
    4: "ERROR",
    5: "SILENT",
}
LOG_LEVEL_NAMES = list(LEGACY_LOG_LEVELS.values())

# Global scalars with metadata for display and editing
GLOBAL_SETTINGS: dict[str, dict[str, Any]] = {
    "lint_on_save": {
        "key": "lintOnSave",
        "label": "Lint on save",
        "type": "bool",
        "default": False,
        "description": "Lint the file on manual save",
    },
    "display_changed": {
        "key": "displayChanged",
        "label": "Display message on lint",
        "type": "bool",
        "default": True,
        "description": "Display the number of characters changed after linting",
    },
    "folders_to_ignore": {
        "key": "foldersToIgnore",
        "label": "Folders to ignore",
        "type": "lines",
        "default": (),
        "description": "Folders to ignore when linting all files or linting on save",
    },
    "linter_locale": {
        "key": "linterLocale",
        "label": "Override locale",
        "type": "str",
        "default": SYSTEM_DEFAULT,
        "description": "Set this if you want to use a locale different from the default",
    },
    "log_level": {
        "key": "logLevel",
        "label": "Log level",
        "type": "choice",
        "choices": LOG_LEVEL_NAMES,
        "default": "ERROR",
        "description": "Verbosity of the linter's own log output",
    },
}


# ---------------------------------------------------------------------------
# Snapshot
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LinterSettings:
    """Immutable settings snapshot for one or more lint runs."""

    rule_configs: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)
    lint_on_save: bool = False
    display_changed: bool = True
    folders_to_ignore: tuple[str, ...] = ()
    linter_locale: str = SYSTEM_DEFAULT
    log_level: str = "ERROR"

    def rule_config(self, alias: str) -> dict[str, Any]:
        """Copy of one rule's option map (empty if the rule is unknown)."""
        return dict(self.rule_configs.get(alias, {}))

    def with_changes(self, **changes: Any) -> LinterSettings:
        """New snapshot with global scalars replaced."""
        unknown = set(changes) - set(GLOBAL_SETTINGS) - {"rule_configs"}
        if unknown:
            raise KeyError(f"Unknown settings: {', '.join(sorted(unknown))}")
        if "folders_to_ignore" in changes:
            changes["folders_to_ignore"] = tuple(changes["folders_to_ignore"])
        if "rule_configs" in changes:
            changes["rule_configs"] = copy.deepcopy(dict(changes["rule_configs"]))
        return replace(self, **changes)

    def with_rule_option(self, alias: str, option: str, value: Any) -> LinterSettings:
        """New snapshot with one rule option replaced."""
        configs = {key: dict(opts) for key, opts in self.rule_configs.items()}
        configs.setdefault(alias, {})[option] = value
        return replace(self, rule_configs=configs)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the persisted camelCase shape."""
        data: dict[str, Any] = {
            "ruleConfigs": {alias: dict(opts) for alias, opts in self.rule_configs.items()}
        }
        for name, meta in GLOBAL_SETTINGS.items():
            value = getattr(self, name)
            data[meta["key"]] = list(value) if isinstance(value, tuple) else value
        return data


# ---------------------------------------------------------------------------
# Load / merge
# ---------------------------------------------------------------------------


def _migrate_log_level(value: Any) -> str:
    if isinstance(value, bool):
        return "ERROR"
    if isinstance(value, int):
        return LEGACY_LOG_LEVELS.get(value, "ERROR")
    name = str(value).upper()
    return name if name in LOG_LEVEL_NAMES else "ERROR"


def build_settings(rules: Iterable[Rule], stored: Mapping[str, Any] | None = None) -> LinterSettings:
    """
    Build a full snapshot from rule defaults and stored overrides.

    Defaults are filled first so every registered rule has a complete option
    map; overrides are merged second. Stored configs for rules that are no
    longer registered are dropped.
    """
    stored = stored or {}
    stored_configs = stored.get("ruleConfigs") or {}

    rule_configs: dict[str, dict[str, Any]] = {}
    for rule in rules:
        config = rule.default_options()
        overrides = stored_configs.get(rule.alias)
        if isinstance(overrides, Mapping):
            config.update(overrides)
            if LEGACY_ENABLED_KEY in overrides:
                config[rule.enabled_option_name] = bool(overrides[LEGACY_ENABLED_KEY])
                del config[LEGACY_ENABLED_KEY]
        rule_configs[rule.alias] = config

    scalars: dict[str, Any] = {}
    for name, meta in GLOBAL_SETTINGS.items():
        if meta["key"] in stored:
            scalars[name] = stored[meta["key"]]

    if "folders_to_ignore" in scalars:
        scalars["folders_to_ignore"] = tuple(
            str(folder) for folder in (scalars["folders_to_ignore"] or [])
        )
    if "log_level" in scalars:
        scalars["log_level"] = _migrate_log_level(scalars["log_level"])

    return LinterSettings(rule_configs=rule_configs, **scalars)


def parse_global_value(name: str, raw: str) -> Any:
    """Parse a CLI/raw string into the typed value of a global setting."""
    meta = GLOBAL_SETTINGS.get(name)
    if meta is None:
        raise KeyError(f"Unknown setting: {name}")
    kind = meta["type"]
    if kind == "bool":
        lowered = raw.strip().lower()
        if lowered in ("true", "yes", "on", "1", "enabled"):
            return True
        if lowered in ("false", "no", "off", "0", "disabled"):
            return False
        raise ValueError(f"{meta['label']} expects a boolean, got {raw!r}")
    if kind == "lines":
        return tuple(part.strip() for part in raw.replace(",", "\n").split("\n") if part.strip())
    if kind == "choice":
        value = raw.strip().upper()
        if value not in meta["choices"]:
            raise ValueError(f"{meta['label']} must be one of {', '.join(meta['choices'])}")
        return value
    return raw.strip()


def format_global_value(name: str, value: Any) -> str:
    """Format a global setting value for display."""
    kind = GLOBAL_SETTINGS[name]["type"]
    if kind == "bool":
        return "enabled" if value else "disabled"
    if kind == "lines":
        return ", ".join(value) if value else "(none)"
    return str(value)


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


class SettingsStore:
    """JSON-file persistence for settings snapshots."""

    def __init__(self, path: Path | str | None = None):
        self.path = Path(path) if path else DEFAULT_SETTINGS_PATH

    def load_raw(self) -> dict[str, Any]:
        """Stored blob, or an empty dict when nothing has been saved yet."""
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            logger.warning("Ignoring malformed settings file %s", self.path)
            return {}
        return data

    def load(self, rules: Iterable[Rule]) -> LinterSettings:
        return build_settings(rules, self.load_raw())

    def save(self, settings: LinterSettings):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(settings.to_dict(), indent=2), encoding="utf-8")
        logger.debug("Saved settings to %s", self.path)

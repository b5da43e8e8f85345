# Vault Linter
# Copyright (C) 2025 Phoenix Link (Pty) Ltd.
#
# This file is part of Vault Linter.
#
# Vault Linter is free software: you can redistribute it and/or modify it
# under the terms of the GNU Affero General Public License v3.0 (AGPL-3.0).
# See https://www.gnu.org/licenses/agpl-3.0.html for the full text.
"""
Vault Linter -- Rule Descriptors & Options

A rule is a frozen descriptor around a pure apply function:

    apply(text, options, context) -> str | (str, bool)

Descriptors declare a stable alias (used by disable directives and as the
settings key), a category, and an ordered option list. The first option is
always the boolean ``enabled`` switch. Rules with
``special_execution_order`` are skipped by the generic loop and invoked by
the orchestrator at a fixed stage instead.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Collection, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, NamedTuple

if TYPE_CHECKING:
    from vaultlint.core.context import LintContext
    from vaultlint.core.settings import LinterSettings

logger = logging.getLogger("vaultlint.rules.base")

ENABLED_OPTION = "enabled"


class RuleType(str, Enum):
    """Display category. Registry order decides the order categories appear in."""

    YAML = "YAML"
    HEADING = "Heading"
    CONTENT = "Content"
    SPACING = "Spacing"


class RuleOutcome(NamedTuple):
    """New text plus the rule's auxiliary flag."""

    text: str
    flag: bool = False


# ---------------------------------------------------------------------------
# OPTIONS
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RuleOption:
    """A configurable option. ``render`` and ``parse`` form its display/update contract."""

    name: str
    description: str
    default: Any

    def render(self, value: Any) -> str:
        return str(value)

    def parse(self, raw: str) -> Any:
        return raw


@dataclass(frozen=True)
class BooleanOption(RuleOption):
    default: bool = False

    def render(self, value: Any) -> str:
        return "enabled" if value else "disabled"

    def parse(self, raw: str) -> bool:
        lowered = raw.strip().lower()
        if lowered in ("true", "yes", "on", "1", "enabled"):
            return True
        if lowered in ("false", "no", "off", "0", "disabled"):
            return False
        raise ValueError(f"Option '{self.name}' expects a boolean, got {raw!r}")


@dataclass(frozen=True)
class TextOption(RuleOption):
    default: str = ""

    def render(self, value: Any) -> str:
        return repr(value)


@dataclass(frozen=True)
class TextAreaOption(RuleOption):
    """Multi-line text; one entry per line."""

    default: str = ""

    def render(self, value: Any) -> str:
        lines = [line for line in str(value).split("\n") if line.strip()]
        return ", ".join(lines) if lines else "(none)"

    def parse(self, raw: str) -> str:
        # CLI callers separate entries with commas
        return "\n".join(part.strip() for part in raw.replace(",", "\n").split("\n") if part.strip())


@dataclass(frozen=True)
class DropdownOption(RuleOption):
    choices: tuple[str, ...] = ()

    def parse(self, raw: str) -> str:
        for choice in self.choices:
            if choice.lower() == raw.strip().lower():
                return choice
        raise ValueError(f"Option '{self.name}' must be one of: {', '.join(self.choices)}")


# ---------------------------------------------------------------------------
# RULE DESCRIPTOR
# ---------------------------------------------------------------------------

# (text, options, context) -> str, or (str, bool) for end-stage rules
ApplyFn = Callable[..., Any]


@dataclass(frozen=True)
class Rule:
    """Immutable rule descriptor."""

    alias: str
    name: str
    description: str
    category: RuleType
    apply_fn: ApplyFn = field(repr=False, compare=False)
    options: tuple[RuleOption, ...] = ()
    special_execution_order: bool = False

    @classmethod
    def define(
        cls,
        alias: str,
        name: str,
        description: str,
        category: RuleType,
        apply_fn: ApplyFn,
        options: tuple[RuleOption, ...] = (),
        special_execution_order: bool = False,
        enabled_by_default: bool = False,
    ) -> Rule:
        """Build a descriptor, prepending the ``enabled`` switch to its options."""
        enabled = BooleanOption(ENABLED_OPTION, f"Enable the {name} rule", enabled_by_default)
        return cls(
            alias=alias,
            name=name,
            description=description,
            category=category,
            apply_fn=apply_fn,
            options=(enabled, *options),
            special_execution_order=special_execution_order,
        )

    @property
    def enabled_option_name(self) -> str:
        return self.options[0].name

    def option(self, name: str) -> RuleOption:
        for opt in self.options:
            if opt.name == name:
                return opt
        raise KeyError(f"Rule '{self.alias}' has no option '{name}'")

    def default_options(self) -> dict[str, Any]:
        return {opt.name: opt.default for opt in self.options}

    def get_options(self, settings: LinterSettings) -> dict[str, Any]:
        """Defaults overlaid with this rule's entry in the settings snapshot."""
        options = self.default_options()
        options.update(settings.rule_config(self.alias))
        return options

    def is_enabled(self, settings: LinterSettings) -> bool:
        return bool(self.get_options(settings).get(self.enabled_option_name, False))

    def is_active(self, settings: LinterSettings, disabled_rules: Collection[str]) -> bool:
        """Enabled in settings and not switched off for this run."""
        return self.alias not in disabled_rules and self.is_enabled(settings)

    def apply(self, text: str, options: Mapping[str, Any], context: LintContext) -> RuleOutcome:
        """
        Run the rule unconditionally.

        Plain rules return text and get ``flag = changed``; end-stage rules
        return their own ``(text, flag)`` pair.
        """
        result = self.apply_fn(text, options, context)
        if isinstance(result, tuple):
            return RuleOutcome(*result)
        return RuleOutcome(result, result != text)

    def apply_if_enabled(
        self,
        text: str,
        settings: LinterSettings,
        disabled_rules: Collection[str],
        context: LintContext,
    ) -> RuleOutcome:
        """Run the rule unless it is disabled for this run or switched off."""
        if self.alias in disabled_rules:
            logger.debug("%s is disabled", self.alias)
            return RuleOutcome(text, False)
        options = self.get_options(settings)
        if not options.get(self.enabled_option_name, False):
            return RuleOutcome(text, False)
        return self.apply(text, options, context)

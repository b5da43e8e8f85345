# Vault Linter
# Copyright (C) 2025 Phoenix Link (Pty) Ltd.
#
# This file is part of Vault Linter.
#
# Vault Linter is free software: you can redistribute it and/or modify it
# under the terms of the GNU Affero General Public License v3.0 (AGPL-3.0).
# See https://www.gnu.org/licenses/agpl-3.0.html for the full text.
"""Ordered rule registry."""

from __future__ import annotations

from collections.abc import Iterator

from vaultlint.rules.base import Rule, RuleType


class RuleRegistry:
    """
    Ordered collection of rule descriptors.

    Registration order is execution order for the generic pass and display
    order for listings.
    """

    def __init__(self, rules: list[Rule] | None = None):
        self._rules: list[Rule] = []
        self._by_alias: dict[str, Rule] = {}
        for rule in rules or []:
            self.register(rule)

    def register(self, rule: Rule) -> Rule:
        if rule.alias in self._by_alias:
            raise ValueError(f"Rule alias already registered: {rule.alias}")
        self._rules.append(rule)
        self._by_alias[rule.alias] = rule
        return rule

    def get(self, alias: str) -> Rule | None:
        return self._by_alias.get(alias)

    def __getitem__(self, alias: str) -> Rule:
        try:
            return self._by_alias[alias]
        except KeyError:
            raise KeyError(f"Unknown rule: {alias}") from None

    def __contains__(self, alias: object) -> bool:
        return alias in self._by_alias

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def aliases(self) -> list[str]:
        return [rule.alias for rule in self._rules]

    def generic_rules(self) -> list[Rule]:
        """Rules run by the main ordered pass."""
        return [rule for rule in self._rules if not rule.special_execution_order]

    def by_category(self) -> list[tuple[RuleType, list[Rule]]]:
        """Rules grouped by category, groups in order of first appearance."""
        groups: dict[RuleType, list[Rule]] = {}
        for rule in self._rules:
            groups.setdefault(rule.category, []).append(rule)
        return list(groups.items())

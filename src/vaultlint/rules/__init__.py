"""
Rule descriptors, the rule registry, and the disabled-rule scanner.
"""

from vaultlint.rules import spacing_rules, yaml_rules
from vaultlint.rules.base import Rule, RuleOutcome, RuleType
from vaultlint.rules.disabled import get_disabled_rules
from vaultlint.rules.registry import RuleRegistry


def default_registry() -> RuleRegistry:
    """All built-in rules in registry order."""
    return RuleRegistry([*yaml_rules.RULES, *spacing_rules.RULES])


__all__ = [
    "Rule",
    "RuleOutcome",
    "RuleRegistry",
    "RuleType",
    "default_registry",
    "get_disabled_rules",
]

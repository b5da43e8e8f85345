"""Tests for vaultlint.rules.registry and rule descriptors."""

import pytest

from vaultlint.rules.base import ENABLED_OPTION, Rule, RuleType
from vaultlint.rules.registry import RuleRegistry


def _rule(alias, category=RuleType.SPACING, special=False):
    return Rule.define(alias, alias.title(), "test rule", category, lambda text, options, context: text,
                       special_execution_order=special)


class TestDefaultRegistry:
    def test_registry_order(self, registry):
        assert registry.aliases() == [
            "format-tags-in-yaml",
            "escape-yaml-special-characters",
            "yaml-title",
            "yaml-timestamp",
            "yaml-key-sort",
            "heading-blank-lines",
            "trailing-spaces",
            "consecutive-blank-lines",
            "line-break-at-document-end",
        ]

    def test_generic_rules_skip_special_order(self, registry):
        generic = [rule.alias for rule in registry.generic_rules()]
        assert "yaml-title" in generic
        assert "format-tags-in-yaml" not in generic
        assert "escape-yaml-special-characters" not in generic
        assert "yaml-timestamp" not in generic
        assert "yaml-key-sort" not in generic

    def test_first_option_is_enabled_switch(self, registry):
        for rule in registry:
            assert rule.enabled_option_name == ENABLED_OPTION
            assert rule.options[0].default is False

    def test_categories_grouped_in_first_appearance_order(self, registry):
        categories = [category for category, _rules in registry.by_category()]
        assert categories == [RuleType.YAML, RuleType.HEADING, RuleType.SPACING]


class TestRuleRegistry:
    def test_duplicate_alias_rejected(self):
        registry = RuleRegistry([_rule("one")])
        with pytest.raises(ValueError):
            registry.register(_rule("one"))

    def test_lookup(self):
        registry = RuleRegistry([_rule("one"), _rule("two")])
        assert registry["two"].alias == "two"
        assert registry.get("three") is None
        assert "one" in registry
        assert len(registry) == 2

    def test_unknown_alias_raises(self):
        with pytest.raises(KeyError):
            RuleRegistry()["missing"]

    def test_by_category_keeps_rule_order(self):
        registry = RuleRegistry([
            _rule("a", RuleType.SPACING),
            _rule("b", RuleType.YAML),
            _rule("c", RuleType.SPACING),
        ])
        grouped = [(category, [r.alias for r in rules]) for category, rules in registry.by_category()]
        assert grouped == [(RuleType.SPACING, ["a", "c"]), (RuleType.YAML, ["b"])]


class TestRuleDescriptor:
    def test_descriptor_is_frozen(self):
        rule = _rule("one")
        with pytest.raises(AttributeError):
            rule.alias = "two"

    def test_plain_rule_flag_is_changed(self):
        rule = Rule.define("upper", "Upper", "", RuleType.CONTENT, lambda text, options, context: text.upper())
        assert rule.apply("abc", {}, None) == ("ABC", True)
        assert rule.apply("ABC", {}, None) == ("ABC", False)

    def test_tuple_result_passes_through(self):
        rule = Rule.define("pair", "Pair", "", RuleType.YAML, lambda text, options, context: (text, True))
        outcome = rule.apply("abc", {}, None)
        assert outcome.text == "abc"
        assert outcome.flag is True

    def test_option_lookup(self, registry):
        rule = registry["trailing-spaces"]
        assert rule.option("two_space_line_break").default is False
        with pytest.raises(KeyError):
            rule.option("nope")

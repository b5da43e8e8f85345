"""Tests for vaultlint.rules.yaml_rules -- front matter rules."""

from datetime import datetime

import pytest

from vaultlint.core.context import LintContext
from vaultlint.core.errors import StructuredMetadataError
from vaultlint.rules.yaml_rules import (
    SORT_ASCENDING,
    SORT_DESCENDING,
    escape_yaml_special_characters,
    format_tags_in_yaml,
    yaml_key_sort,
    yaml_timestamp,
    yaml_title,
)

FMT = "%Y-%m-%d %H:%M"


@pytest.fixture
def context():
    return LintContext(
        file_created_time=datetime(2024, 1, 1, 9, 0),
        file_modified_time=datetime(2024, 2, 1, 10, 0),
        file_name="Daily Note",
        locale="en",
    )


def _options(registry, alias, **overrides):
    options = registry[alias].default_options()
    options.update(overrides)
    return options


# =========================================================================
# PRE-RULES
# =========================================================================


class TestFormatTagsInYaml:
    def test_flow_list(self, registry, context):
        text = "---\ntags: [#one, #two]\n---\nBody #notatag\n"
        result = format_tags_in_yaml(text, _options(registry, "format-tags-in-yaml"), context)
        assert result == "---\ntags: [one, two]\n---\nBody #notatag\n"

    def test_inline_tags(self, registry, context):
        text = "---\ntags: #one #two\n---\n"
        assert format_tags_in_yaml(text, {}, context) == "---\ntags: one two\n---\n"

    def test_block_list(self, context):
        text = "---\ntag:\n  - #one\n  - two\n---\n"
        assert format_tags_in_yaml(text, {}, context) == "---\ntag:\n  - one\n  - two\n---\n"

    def test_other_keys_untouched(self, context):
        text = "---\ncolor: '#fff'\ntags: [a]\n---\n"
        assert format_tags_in_yaml(text, {}, context) == text

    def test_no_front_matter(self, context):
        assert format_tags_in_yaml("# Heading\n", {}, context) == "# Heading\n"


class TestEscapeYamlSpecialCharacters:
    def test_quotes_values(self, registry, context):
        text = "---\ntitle: Part 1: Intro\nalias: @home\nok: fine\n---\n"
        options = _options(registry, "escape-yaml-special-characters")
        assert escape_yaml_special_characters(text, options, context) == (
            '---\ntitle: "Part 1: Intro"\nalias: "@home"\nok: fine\n---\n'
        )

    def test_idempotent(self, registry, context):
        text = "---\ntitle: Part 1: Intro\n---\n"
        options = _options(registry, "escape-yaml-special-characters")
        once = escape_yaml_special_characters(text, options, context)
        assert escape_yaml_special_characters(once, options, context) == once

    def test_arrays_left_alone_by_default(self, registry, context):
        text = "---\naliases: [a: b, c]\n---\n"
        options = _options(registry, "escape-yaml-special-characters")
        assert escape_yaml_special_characters(text, options, context) == text

    def test_arrays_escaped_when_enabled(self, registry, context):
        text = "---\naliases: [a: b, c]\n---\n"
        options = _options(registry, "escape-yaml-special-characters", try_to_escape_single_line_arrays=True)
        assert escape_yaml_special_characters(text, options, context) == '---\naliases: ["a: b", c]\n---\n'

    def test_result_parses(self, registry, context):
        import yaml

        text = "---\ntitle: Part 1: Intro\nnote: ends:\n---\n"
        options = _options(registry, "escape-yaml-special-characters")
        body = escape_yaml_special_characters(text, options, context).split("---\n")[1]
        assert yaml.safe_load(body) == {"title": "Part 1: Intro", "note": "ends:"}


# =========================================================================
# YAML TITLE
# =========================================================================


class TestYamlTitle:
    def test_inserts_file_name(self, registry, context):
        options = _options(registry, "yaml-title")
        assert yaml_title("Body\n", options, context) == "---\ntitle: Daily Note\n---\nBody\n"

    def test_prefers_first_heading(self, registry, context):
        options = _options(registry, "yaml-title")
        assert yaml_title("# My Title\ntext\n", options, context) == (
            "---\ntitle: My Title\n---\n# My Title\ntext\n"
        )

    def test_existing_title_kept(self, registry, context):
        text = "---\ntitle: Keep\n---\n# Other\n"
        assert yaml_title(text, _options(registry, "yaml-title"), context) == text

    def test_custom_key(self, registry, context):
        options = _options(registry, "yaml-title", title_key="name")
        assert yaml_title("---\na: 1\n---\n", options, context) == "---\nname: Daily Note\na: 1\n---\n"

    def test_invalid_front_matter_raises(self, registry, context):
        with pytest.raises(StructuredMetadataError):
            yaml_title("---\ntitle: Part 1: Intro\n---\n", _options(registry, "yaml-title"), context)


# =========================================================================
# END STAGES
# =========================================================================


class TestYamlTimestamp:
    def _opts(self, registry, **overrides):
        return _options(registry, "yaml-timestamp", format=FMT, **overrides)

    def test_inserts_from_file_times(self, registry, context):
        stamped = context.for_timestamp(datetime(2024, 3, 5, 14, 30), already_modified=False)
        text, modified = yaml_timestamp("Body\n", self._opts(registry), stamped)
        assert text == (
            "---\ndate created: 2024-01-01 09:00\ndate modified: 2024-02-01 10:00\n---\nBody\n"
        )
        assert modified is True

    def test_inserts_current_time_when_already_modified(self, registry, context):
        stamped = context.for_timestamp(datetime(2024, 3, 5, 14, 30), already_modified=True)
        text, _modified = yaml_timestamp("Body\n", self._opts(registry), stamped)
        assert "date modified: 2024-03-05 14:30\n" in text

    def test_existing_keys_unchanged_when_not_modified(self, registry, context):
        original = "---\ndate created: x\ndate modified: y\n---\nBody\n"
        stamped = context.for_timestamp(datetime(2024, 3, 5, 14, 30), already_modified=False)
        assert yaml_timestamp(original, self._opts(registry), stamped) == (original, False)

    def test_refreshes_modified_when_already_modified(self, registry, context):
        original = "---\ndate created: x\ndate modified: y\n---\nBody\n"
        stamped = context.for_timestamp(datetime(2024, 3, 5, 14, 30), already_modified=True)
        text, modified = yaml_timestamp(original, self._opts(registry), stamped)
        assert text == "---\ndate created: x\ndate modified: 2024-03-05 14:30\n---\nBody\n"
        assert modified is True

    def test_created_only(self, registry, context):
        stamped = context.for_timestamp(datetime(2024, 3, 5, 14, 30), already_modified=True)
        text, modified = yaml_timestamp("Body\n", self._opts(registry, date_modified=False), stamped)
        assert text == "---\ndate created: 2024-01-01 09:00\n---\nBody\n"
        assert modified is False

    def test_nothing_tracked(self, registry, context):
        stamped = context.for_timestamp(datetime(2024, 3, 5, 14, 30), already_modified=True)
        options = self._opts(registry, date_created=False, date_modified=False)
        assert yaml_timestamp("Body\n", options, stamped) == ("Body\n", False)


class TestYamlKeySort:
    def _opts(self, registry, **overrides):
        return _options(registry, "yaml-key-sort", **overrides)

    def test_priority_then_ascending(self, registry, context):
        options = self._opts(
            registry,
            yaml_key_priority_sort_order="b",
            yaml_sort_order_for_other_keys=SORT_ASCENDING,
        )
        text, changed = yaml_key_sort("---\nc: 3\na: 1\nb: 2\n---\nBody\n", options, context)
        assert text == "---\nb: 2\na: 1\nc: 3\n---\nBody\n"
        assert changed is True

    def test_descending(self, registry, context):
        options = self._opts(registry, yaml_sort_order_for_other_keys=SORT_DESCENDING)
        text, _changed = yaml_key_sort("---\na: 1\nc: 3\nb: 2\n---\n", options, context)
        assert text == "---\nc: 3\nb: 2\na: 1\n---\n"

    def test_priority_keys_at_end(self, registry, context):
        options = self._opts(
            registry,
            yaml_key_priority_sort_order="a",
            priority_keys_at_start_of_yaml=False,
        )
        text, _changed = yaml_key_sort("---\na: 1\nc: 3\nb: 2\n---\n", options, context)
        assert text == "---\nc: 3\nb: 2\na: 1\n---\n"

    def test_unchanged(self, registry, context):
        original = "---\nc: 3\na: 1\n---\n"
        assert yaml_key_sort(original, self._opts(registry), context) == (original, False)

    def test_multi_line_values_move_with_key(self, registry, context):
        options = self._opts(registry, yaml_sort_order_for_other_keys=SORT_ASCENDING)
        text, _changed = yaml_key_sort("---\ntags:\n  - x\nalpha: 1\n---\n", options, context)
        assert text == "---\nalpha: 1\ntags:\n  - x\n---\n"

    def test_date_modified_updated_when_sorted(self, registry, context):
        options = self._opts(registry, yaml_sort_order_for_other_keys=SORT_ASCENDING)
        sort_context = context.for_key_sort("2024-03-05 14:30", True, "date modified")
        text, changed = yaml_key_sort("---\nb: 2\ndate modified: old\na: 1\n---\n", options, sort_context)
        assert text == "---\na: 1\nb: 2\ndate modified: 2024-03-05 14:30\n---\n"
        assert changed is True

    def test_date_modified_left_when_not_tracked(self, registry, context):
        options = self._opts(registry, yaml_sort_order_for_other_keys=SORT_ASCENDING)
        sort_context = context.for_key_sort("2024-03-05 14:30", False, "date modified")
        text, _changed = yaml_key_sort("---\nb: 2\ndate modified: old\na: 1\n---\n", options, sort_context)
        assert text == "---\na: 1\nb: 2\ndate modified: old\n---\n"

    def test_no_front_matter(self, registry, context):
        assert yaml_key_sort("Body\n", self._opts(registry), context) == ("Body\n", False)

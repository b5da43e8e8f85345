# Vault Linter
# Copyright (C) 2025 Phoenix Link (Pty) Ltd.
#
# This file is part of Vault Linter.
#
# Vault Linter is free software: you can redistribute it and/or modify it
# under the terms of the GNU Affero General Public License v3.0 (AGPL-3.0).
# See https://www.gnu.org/licenses/agpl-3.0.html for the full text.
"""
Vault Linter -- Lint Error Taxonomy

Every failure raised while a document is being linted is normalised into a
``ContentError`` so callers only ever handle one family:

    ContentError
    ├── StructuredMetadataError   front matter could not be parsed
    └── GenericRuleError          anything else (rule bug, I/O failure)

Errors carry structured fields (file path, rule alias, underlying detail).
Turning them into user-facing text happens once, in ``notice_for`` and
``log_label``, at the presentation boundary.
"""

from __future__ import annotations

from enum import Enum

import yaml

# ---------------------------------------------------------------------------
# CLASSIFICATION
# ---------------------------------------------------------------------------


class ErrorClass(str, Enum):
    """Classification used for notices and log entries."""

    STRUCTURED_METADATA = "structured_metadata"
    GENERIC = "generic"


class LintScope(Enum):
    """Which command surfaced the error. Value is the log label prefix."""

    FILE = "Lint File"
    ALL_FILES = "Lint All Files"
    FOLDER = "Lint All Files in Folder"


# ---------------------------------------------------------------------------
# EXCEPTIONS
# ---------------------------------------------------------------------------


class ContentError(Exception):
    """Raised when linting a single document fails."""

    classification = ErrorClass.GENERIC

    def __init__(
        self,
        detail: str,
        file_path: str = "",
        rule_alias: str | None = None,
    ):
        super().__init__(detail)
        self.detail = detail
        self.file_path = file_path
        self.rule_alias = rule_alias

    def to_dict(self) -> dict[str, str | None]:
        return {
            "classification": self.classification.value,
            "file_path": self.file_path,
            "rule_alias": self.rule_alias,
            "detail": self.detail,
        }


class StructuredMetadataError(ContentError):
    """The YAML front matter of the document cannot be parsed."""

    classification = ErrorClass.STRUCTURED_METADATA


class GenericRuleError(ContentError):
    """Any other failure while running a rule or touching storage."""

    classification = ErrorClass.GENERIC


def describe_yaml_error(exc: yaml.YAMLError) -> str:
    """Trim a PyYAML error down to its problem and location."""
    problem = getattr(exc, "problem", None)
    mark = getattr(exc, "problem_mark", None)
    if problem:
        if mark is not None:
            return f"{problem} (line {mark.line + 1}, column {mark.column + 1})"
        return str(problem)
    lines = str(exc).strip().splitlines()
    return lines[0] if lines else exc.__class__.__name__


def classify_exception(
    exc: BaseException,
    file_path: str = "",
    rule_alias: str | None = None,
) -> ContentError:
    """
    Normalise any exception raised during a lint run into a ContentError.

    Existing ContentErrors keep their class and detail; the file path and
    rule alias are filled in only when missing.
    """
    if isinstance(exc, ContentError):
        if not exc.file_path:
            exc.file_path = file_path
        if exc.rule_alias is None:
            exc.rule_alias = rule_alias
        return exc
    if isinstance(exc, yaml.YAMLError):
        return StructuredMetadataError(describe_yaml_error(exc), file_path, rule_alias)
    detail = str(exc) or exc.__class__.__name__
    return GenericRuleError(f"{exc.__class__.__name__}: {detail}", file_path, rule_alias)


# ---------------------------------------------------------------------------
# PRESENTATION
# ---------------------------------------------------------------------------

GENERIC_NOTICE = "An error occurred during linting. See the log for details"


def notice_for(error: ContentError, scope: LintScope) -> str:
    """Short user-facing notice for a failed document."""
    if error.classification is ErrorClass.STRUCTURED_METADATA:
        if scope is LintScope.FILE:
            return f"There is an error in the yaml: {error.detail}"
        return f"There is an error in the yaml of file '{error.file_path}': {error.detail}"
    return GENERIC_NOTICE


def log_label(scope: LintScope, file_path: str) -> str:
    """Log line prefix for a failed document."""
    return f"{scope.value} Error in File '{file_path}'"

# Vault Linter
# Copyright (C) 2025 Phoenix Link (Pty) Ltd.
#
# This file is part of Vault Linter.
#
# Vault Linter is free software: you can redistribute it and/or modify it
# under the terms of the GNU Affero General Public License v3.0 (AGPL-3.0).
# See https://www.gnu.org/licenses/agpl-3.0.html for the full text.
"""Per-document inputs handed to rules during one lint run."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import PurePosixPath


@dataclass(frozen=True)
class FileMetadata:
    """What the host knows about a document besides its text."""

    path: str
    created_at: datetime
    modified_at: datetime

    @property
    def basename(self) -> str:
        """File name without folder or extension (``notes/My Note.md`` -> ``My Note``)."""
        return PurePosixPath(self.path.replace("\\", "/")).stem


@dataclass(frozen=True)
class LintContext:
    """
    Immutable bundle built fresh for every document on every run.

    The end-stage fields (``current_time`` onwards) are only filled in for the
    timestamp and key-sort stages.
    """

    file_created_time: datetime
    file_modified_time: datetime
    file_name: str
    locale: str
    current_time: datetime | None = None
    already_modified: bool = False
    current_time_formatted: str | None = None
    date_modified_enabled: bool = False
    date_modified_key: str | None = None

    @classmethod
    def for_file(cls, metadata: FileMetadata, locale: str) -> LintContext:
        return cls(
            file_created_time=metadata.created_at,
            file_modified_time=metadata.modified_at,
            file_name=metadata.basename,
            locale=locale,
        )

    def for_timestamp(self, current_time: datetime, already_modified: bool) -> LintContext:
        return replace(self, current_time=current_time, already_modified=already_modified)

    def for_key_sort(
        self,
        current_time_formatted: str,
        date_modified_enabled: bool,
        date_modified_key: str,
    ) -> LintContext:
        return replace(
            self,
            current_time_formatted=current_time_formatted,
            date_modified_enabled=date_modified_enabled,
            date_modified_key=date_modified_key,
        )

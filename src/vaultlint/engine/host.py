# Vault Linter
# Copyright (C) 2025 Phoenix Link (Pty) Ltd.
#
# This file is part of Vault Linter.
#
# Vault Linter is free software: you can redistribute it and/or modify it
# under the terms of the GNU Affero General Public License v3.0 (AGPL-3.0).
# See https://www.gnu.org/licenses/agpl-3.0.html for the full text.
"""
Vault Linter -- Host Interfaces

The seams between the engine and whatever hosts it:

    DocumentStore   read / write / stat notes, list every Markdown file
    EditorBuffer    an open document that takes one atomic batch of edits
    Notifier        fire-and-forget user notices

Filesystem storage, an in-memory text buffer and console/memory notifiers
are provided for the CLI and for tests.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from abc import ABC, abstractmethod
from datetime import datetime
from functools import partial
from pathlib import Path
from typing import TextIO

from vaultlint.core.context import FileMetadata
from vaultlint.engine.edits import EditOperation, apply_edits

logger = logging.getLogger("vaultlint.engine.host")

MARKDOWN_SUFFIX = ".md"


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------


class DocumentStore(ABC):
    """Abstract document storage. Paths are vault-relative, ``/`` separated."""

    @abstractmethod
    async def read(self, path: str) -> str:
        """Full text of a document."""

    @abstractmethod
    async def write(self, path: str, text: str):
        """Replace a document's text."""

    @abstractmethod
    async def stat(self, path: str) -> FileMetadata:
        """Creation and modification times."""

    @abstractmethod
    async def list_markdown_files(self) -> list[str]:
        """Every Markdown document in the store."""


class FileSystemDocumentStore(DocumentStore):
    """Notes on disk under a vault root. Blocking I/O runs in the default executor."""

    def __init__(self, root: Path | str):
        self.root = Path(root)

    def _resolve(self, path: str) -> Path:
        return self.root / path

    async def _run(self, func, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(func, *args))

    async def read(self, path: str) -> str:
        data = await self._run(self._resolve(path).read_bytes)
        return data.decode("utf-8")

    async def write(self, path: str, text: str):
        await self._run(self._resolve(path).write_bytes, text.encode("utf-8"))
        logger.debug("Wrote %s", path)

    async def stat(self, path: str) -> FileMetadata:
        st = await self._run(self._resolve(path).stat)
        created = getattr(st, "st_birthtime", st.st_ctime)
        return FileMetadata(
            path=path,
            created_at=datetime.fromtimestamp(created),
            modified_at=datetime.fromtimestamp(st.st_mtime),
        )

    def _scan(self) -> list[str]:
        return sorted(
            candidate.relative_to(self.root).as_posix()
            for candidate in self.root.rglob(f"*{MARKDOWN_SUFFIX}")
            if candidate.is_file()
        )

    async def list_markdown_files(self) -> list[str]:
        return await self._run(self._scan)


# ---------------------------------------------------------------------------
# Editor buffer
# ---------------------------------------------------------------------------


class EditorBuffer(ABC):
    """An open document that accepts edits."""

    @abstractmethod
    def get_value(self) -> str:
        """Current text of the buffer."""

    @abstractmethod
    def apply_edit_batch(self, operations: list[EditOperation]):
        """Apply every edit as one transaction, positions in pre-batch coordinates."""


class TextBuffer(EditorBuffer):
    """In-memory buffer with editor transaction semantics."""

    def __init__(self, text: str = ""):
        self._text = text
        self.batches_applied = 0

    def get_value(self) -> str:
        return self._text

    def apply_edit_batch(self, operations: list[EditOperation]):
        self._text = apply_edits(self._text, operations)
        self.batches_applied += 1


# ---------------------------------------------------------------------------
# Notices
# ---------------------------------------------------------------------------


class Notifier(ABC):
    """Fire-and-forget user notices."""

    @abstractmethod
    def notify(self, message: str):
        """Show a notice. Must not raise."""


class ConsoleNotifier(Notifier):
    def __init__(self, stream: TextIO | None = None):
        self._stream = stream

    def notify(self, message: str):
        print(message, file=self._stream or sys.stdout)


class MemoryNotifier(Notifier):
    """Collects notices; used by tests and by callers that render them later."""

    def __init__(self):
        self.messages: list[str] = []

    def notify(self, message: str):
        self.messages.append(message)

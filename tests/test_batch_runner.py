"""
Tests for vaultlint.engine.batch -- whole-vault and folder runs.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from vaultlint.core.errors import GenericRuleError, LintScope, StructuredMetadataError
from vaultlint.engine.batch import BatchRunner, BatchSummary, DocumentOutcome, is_ignored, normalize_path
from vaultlint.engine.host import FileSystemDocumentStore, MemoryNotifier
from vaultlint.engine.service import LintService

BAD_YAML = "---\ntitle: Part 1: Intro\n---\nbody  \n"


@pytest.fixture
def notes(vault):
    files = {
        "a.md": "alpha  \n",
        "b.md": "beta\n",
        "projects/p1.md": "one  \n",
        "projects/deep/p2.md": "two  \n",
        "templates/t.md": "template  \n",
        "broken.md": BAD_YAML,
    }
    for path, text in files.items():
        target = vault / path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text)
    return files


@pytest.fixture
def service(vault, registry, settings_for, fixed_now):
    def _build(**scalars):
        return LintService(
            registry,
            settings_for("trailing-spaces", "yaml-title", **scalars),
            store=FileSystemDocumentStore(vault),
            notifier=MemoryNotifier(),
            clock=lambda: fixed_now,
            system_lang="en-us",
        )

    return _build


# =========================================================================
# WHOLE VAULT
# =========================================================================


class TestRunAll:
    @pytest.mark.asyncio
    async def test_failures_are_isolated(self, service, vault, notes):
        svc = service()
        summary = await svc.run_all_files()
        assert summary.processed == len(notes)
        assert summary.failed == 1
        assert summary.succeeded == len(notes) - 1
        assert (vault / "broken.md").read_text() == BAD_YAML
        assert (vault / "a.md").read_text() == "---\ntitle: a\n---\nalpha\n"

    @pytest.mark.asyncio
    async def test_notices(self, service, notes):
        svc = service()
        await svc.run_all_files()
        assert svc.notifier.messages[-1] == "Linted all files and there was 1 error."
        assert any(
            message.startswith("There is an error in the yaml of file 'broken.md': ")
            for message in svc.notifier.messages
        )

    @pytest.mark.asyncio
    async def test_ignored_folders_skipped(self, service, vault, notes):
        svc = service(folders_to_ignore=("templates", ""))
        summary = await svc.run_all_files()
        assert "templates/t.md" not in [outcome.path for outcome in summary.outcomes]
        assert (vault / "templates" / "t.md").read_text() == "template  \n"

    @pytest.mark.asyncio
    async def test_error_is_classified(self, service, notes):
        summary = await service().run_all_files()
        failed = [outcome for outcome in summary.outcomes if not outcome.succeeded]
        assert failed[0].path == "broken.md"
        assert isinstance(failed[0].error, StructuredMetadataError)
        assert failed[0].error.rule_alias == "yaml-title"


# =========================================================================
# FOLDER
# =========================================================================


class TestRunFolder:
    @pytest.mark.asyncio
    async def test_folder_includes_subfolders(self, service, vault, notes):
        svc = service()
        summary = await svc.run_folder("projects/")
        assert sorted(outcome.path for outcome in summary.outcomes) == [
            "projects/deep/p2.md",
            "projects/p1.md",
        ]
        assert svc.notifier.messages[-1] == "Linted all 2 files in projects."
        assert (vault / "a.md").read_text() == "alpha  \n"

    @pytest.mark.asyncio
    async def test_nested_folder_name(self, service, notes):
        svc = service()
        await svc.run_folder("projects/deep")
        assert svc.notifier.messages[-1] == "Linted all 1 files in deep."

    @pytest.mark.asyncio
    async def test_folder_prefix_is_not_a_name_prefix(self, service, vault, notes):
        (vault / "projects-old").mkdir()
        (vault / "projects-old" / "x.md").write_text("x  \n")
        summary = await service().run_folder("projects")
        assert "projects-old/x.md" not in [outcome.path for outcome in summary.outcomes]


# =========================================================================
# RUNNER
# =========================================================================


class TestBatchRunner:
    @pytest.mark.asyncio
    async def test_io_error_counted(self):
        store = MagicMock()
        store.list_markdown_files = AsyncMock(return_value=["a.md", "b.md", "c.md"])

        async def lint_file(path):
            if path == "b.md":
                raise PermissionError("read-only")
            return path == "a.md"

        notifier = MemoryNotifier()
        summary = await BatchRunner(store, lint_file, notifier).run_all()
        assert (summary.succeeded, summary.failed, summary.changed) == (2, 1, 1)
        error = summary.outcomes[1].error
        assert isinstance(error, GenericRuleError)
        assert error.file_path == "b.md"
        assert notifier.messages == [
            "An error occurred during linting. See the log for details",
            "Linted all files and there was 1 error.",
        ]

    @pytest.mark.asyncio
    async def test_empty_vault(self):
        store = MagicMock()
        store.list_markdown_files = AsyncMock(return_value=[])
        notifier = MemoryNotifier()
        summary = await BatchRunner(store, AsyncMock(), notifier).run_all()
        assert summary.processed == 0
        assert notifier.messages == ["Linted all files"]


class TestSummary:
    def _summary(self, failed, folder=None):
        outcomes = [DocumentOutcome("ok.md")]
        outcomes += [DocumentOutcome(f"bad{i}.md", error=GenericRuleError("x")) for i in range(failed)]
        scope = LintScope.FOLDER if folder is not None else LintScope.ALL_FILES
        return BatchSummary(scope=scope, outcomes=outcomes, folder=folder)

    def test_messages(self):
        assert self._summary(0).message() == "Linted all files"
        assert self._summary(1).message() == "Linted all files and there was 1 error."
        assert self._summary(2).message() == "Linted all files and there were 2 errors."

    def test_folder_messages(self):
        assert self._summary(0, "notes").message() == "Linted all 1 files in notes."
        assert self._summary(2, "a/notes").message() == "Linted all 3 files in notes and there were 2 errors."

    def test_to_dict(self):
        data = self._summary(1).to_dict()
        assert (data["processed"], data["succeeded"], data["failed"]) == (2, 1, 1)
        assert data["outcomes"][1]["error"]["classification"] == "generic"


class TestPathHelpers:
    @pytest.mark.parametrize(
        "raw,expected",
        [("projects/", "projects"), ("/projects/deep/", "projects/deep"), ("a\\b", "a/b"), ("/", ""), (".", "")],
    )
    def test_normalize_path(self, raw, expected):
        assert normalize_path(raw) == expected

    def test_is_ignored(self):
        assert is_ignored("templates/t.md", ["templates"])
        assert not is_ignored("notes/a.md", ["", "templates"])

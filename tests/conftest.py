"""Pytest configuration for vault-linter tests."""

import sys
from datetime import datetime
from pathlib import Path

import pytest

# Ensure src/vaultlint is importable
src_path = str(Path(__file__).parent.parent / "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)


@pytest.fixture(autouse=True)
def isolated_log_dir(tmp_path, monkeypatch):
    """Keep the live logger out of the real home directory."""
    import vaultlint.core.logging as live_log

    monkeypatch.setattr(live_log, "LOG_DIR", tmp_path / "logs")
    monkeypatch.setattr(live_log, "_logger_instance", None)
    yield tmp_path / "logs"


@pytest.fixture
def registry():
    from vaultlint.rules import default_registry

    return default_registry()


@pytest.fixture
def fixed_now():
    return datetime(2024, 3, 5, 14, 30, 0)


@pytest.fixture
def metadata():
    from vaultlint.core.context import FileMetadata

    return FileMetadata(
        path="notes/Daily Note.md",
        created_at=datetime(2024, 1, 1, 9, 0, 0),
        modified_at=datetime(2024, 2, 1, 10, 0, 0),
    )


@pytest.fixture
def vault(tmp_path):
    """Empty vault folder."""
    root = tmp_path / "vault"
    root.mkdir()
    return root


@pytest.fixture
def settings_for(registry):
    """Build a snapshot with the given rules enabled and options/scalars overridden."""
    from vaultlint.core.settings import build_settings

    def _build(*aliases, options=None, **scalars):
        configs = {alias: {"enabled": True} for alias in aliases}
        for alias, opts in (options or {}).items():
            configs.setdefault(alias, {}).update(opts)
        settings = build_settings(registry, {"ruleConfigs": configs})
        return settings.with_changes(**scalars) if scalars else settings

    return _build

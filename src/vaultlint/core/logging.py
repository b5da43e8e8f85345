# Vault Linter
# Copyright (C) 2025 Phoenix Link (Pty) Ltd.
#
# This file is part of Vault Linter.
#
# Vault Linter is free software: you can redistribute it and/or modify it
# under the terms of the GNU Affero General Public License v3.0 (AGPL-3.0).
# See https://www.gnu.org/licenses/agpl-3.0.html for the full text.
"""
Vault Linter -- Live Logger

Every lint run, settings change and per-file failure is captured to a
rotating log file that users can tail.

LOG LOCATION:
    ~/.vaultlint/logs/vaultlint.log        (current)
    ~/.vaultlint/logs/vaultlint.log.1      (previous rotation)

RULES:
    - Single log file, max 10 MB before rotation
    - Human-readable format with structured fields
    - WARNING and above mirrored to stderr
    - Verbosity of the ``vaultlint`` logger tree follows the ``logLevel`` setting

USAGE:
    from vaultlint.core.logging import get_logger
    log = get_logger()
    log.info("Linter", "Running linter", file="notes/a.md")
    log.lint_error("Batch", "Lint All Files Error in File 'a.md'", error=err)
"""

import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone
from pathlib import Path

# =============================================================================
# CONSTANTS
# =============================================================================

MAX_LOG_FILE_BYTES = 10 * 1024 * 1024  # 10 MB per file
LOG_BACKUP_COUNT = 5
LOG_DIR = Path(os.environ.get("VAULTLINT_HOME", Path.home() / ".vaultlint")) / "logs"
LOG_FILE_NAME = "vaultlint.log"

PACKAGE_LOGGER = "vaultlint"

LOG_LEVELS: dict[str, int] = {
    "TRACE": logging.DEBUG,
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "SILENT": logging.CRITICAL + 10,
}


# =============================================================================
# CUSTOM FORMATTER -- human-readable + structured
# =============================================================================


class LinterLogFormatter(logging.Formatter):
    """
    Format: TIMESTAMP | LEVEL | COMPONENT | MESSAGE | {structured fields}

    Example:
    2026-02-09T17:30:45.123Z | INFO  | Linter       | Running linter | file="notes/a.md"
    2026-02-09T17:30:46.501Z | ERROR | Batch        | Lint All Files Error in File 'b.md' | classification="generic"
    """

    LEVEL_WIDTH = 5
    COMPONENT_WIDTH = 12

    def format(self, record: logging.LogRecord) -> str:
        now = datetime.now(timezone.utc)
        ts = now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"

        level = getattr(record, "lint_level", record.levelname)
        component = getattr(record, "component", record.name)
        message = record.getMessage()

        fields = getattr(record, "fields", {})
        field_str = ""
        if fields:
            parts = []
            for k, v in fields.items():
                if isinstance(v, str):
                    parts.append(f'{k}="{v}"')
                elif isinstance(v, float):
                    parts.append(f"{k}={v:.3f}")
                else:
                    parts.append(f"{k}={v}")
            field_str = " | " + " ".join(parts)

        line = (
            f"{ts} | {level:<{self.LEVEL_WIDTH}} | "
            f"{component:<{self.COMPONENT_WIDTH}} | {message}{field_str}"
        )
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def level_from_name(name: str | int) -> int:
    """Map a settings log level (name or stdlib int) to a logging level."""
    if isinstance(name, int):
        return name
    return LOG_LEVELS.get(str(name).upper(), logging.ERROR)


# =============================================================================
# LINTER LOGGER
# =============================================================================


class LinterLogger:
    """
    Live logger for the linter.

    Writes to ~/.vaultlint/logs/vaultlint.log with:
    - 10 MB rotation per file
    - Human-readable format with structured fields
    - Component-tagged entries for filtering
    """

    def __init__(self, log_dir: Path | None = None):
        self._log_dir = Path(log_dir) if log_dir else LOG_DIR
        self._log_dir.mkdir(parents=True, exist_ok=True)
        self._log_file = self._log_dir / LOG_FILE_NAME

        self._logger = logging.getLogger("vaultlint.live")
        self._logger.setLevel(logging.DEBUG)
        self._logger.propagate = False

        # Remove existing handlers to avoid duplicates
        for handler in list(self._logger.handlers):
            handler.close()
        self._logger.handlers.clear()

        self._file_handler = logging.handlers.RotatingFileHandler(
            str(self._log_file),
            maxBytes=MAX_LOG_FILE_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        self._file_handler.setLevel(logging.DEBUG)
        self._file_handler.setFormatter(LinterLogFormatter())
        self._logger.addHandler(self._file_handler)

        self._stderr_handler = logging.StreamHandler(sys.stderr)
        self._stderr_handler.setLevel(logging.WARNING)
        self._stderr_handler.setFormatter(LinterLogFormatter())
        self._logger.addHandler(self._stderr_handler)

        self._session_id = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
        self._error_count = 0

        self.debug("System", "Logger initialized", log_file=str(self._log_file))

    def _log(self, level: int, lint_level: str, component: str, message: str, exc_info=None, **fields):
        """Core log method."""
        fields["session"] = self._session_id
        record = self._logger.makeRecord(
            name="vaultlint.live",
            level=level,
            fn="",
            lno=0,
            msg=message,
            args=(),
            exc_info=exc_info,
        )
        record.component = component
        record.lint_level = lint_level
        record.fields = fields
        self._logger.handle(record)

    # =========================================================================
    # PUBLIC API -- Standard levels
    # =========================================================================

    def info(self, component: str, message: str, **fields):
        """Log an informational event."""
        self._log(logging.INFO, "INFO", component, message, **fields)

    def warn(self, component: str, message: str, **fields):
        """Log a warning."""
        self._log(logging.WARNING, "WARN", component, message, **fields)

    def error(self, component: str, message: str, **fields):
        """Log an error."""
        self._log(logging.ERROR, "ERROR", component, message, **fields)

    def debug(self, component: str, message: str, **fields):
        """Log a debug event."""
        self._log(logging.DEBUG, "DEBUG", component, message, **fields)

    # =========================================================================
    # PUBLIC API -- Domain-specific log methods
    # =========================================================================

    def lint_error(self, component: str, label: str, error: Exception, **fields):
        """Log a failed document with its full error."""
        self._error_count += 1
        to_dict = getattr(error, "to_dict", None)
        if callable(to_dict):
            fields.update({k: v for k, v in to_dict().items() if v is not None})
        cause = error.__cause__ or error
        exc_info = (type(cause), cause, cause.__traceback__)
        self._log(logging.ERROR, "ERROR", component, label, exc_info=exc_info, **fields)

    def lint_run(self, file_path: str, chars_added: int = 0, chars_removed: int = 0, **fields):
        """Log a completed single-document run."""
        fields.update(file=file_path, added=chars_added, removed=chars_removed)
        self._log(logging.INFO, "LINT", "Linter", "Lint complete", **fields)

    def batch(self, scope: str, succeeded: int, failed: int, **fields):
        """Log a completed batch run."""
        fields.update(scope=scope, succeeded=succeeded, failed=failed)
        level = logging.INFO if failed == 0 else logging.WARNING
        self._log(level, "BATCH", "Batch", f"{scope} finished", **fields)

    def settings_change(self, changed_keys: list | None = None, **fields):
        """Log settings update."""
        fields.update(changed=str(changed_keys or []))
        self._log(logging.INFO, "CFG", "Settings", "Settings updated", **fields)

    # =========================================================================
    # UTILITY
    # =========================================================================

    def set_level(self, level: str | int):
        """Apply the configured verbosity to the log file, stderr and the package loggers."""
        numeric = level_from_name(level)
        self._file_handler.setLevel(numeric)
        self._stderr_handler.setLevel(max(numeric, logging.DEBUG))
        logging.getLogger(PACKAGE_LOGGER).setLevel(numeric)

    @property
    def log_file(self) -> str:
        return str(self._log_file)

    @property
    def error_count(self) -> int:
        return self._error_count


# =============================================================================
# SINGLETON
# =============================================================================

_logger_instance: LinterLogger | None = None


def get_logger(log_dir: Path | None = None) -> LinterLogger:
    """Get or create the global LinterLogger singleton."""
    global _logger_instance
    if _logger_instance is None:
        _logger_instance = LinterLogger(log_dir=log_dir)
    return _logger_instance


def set_log_level(level: str | int):
    """Apply the settings' log level to the live logger and module loggers."""
    get_logger().set_level(level)

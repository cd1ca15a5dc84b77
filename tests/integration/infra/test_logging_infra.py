from __future__ import annotations

"""
Integration tests for Logging Infrastructure.

Verifies the QueueListener based setup, idempotent configuration, forced
re-configuration and the clean detachment of owned handlers.
"""

import logging
from pathlib import Path

from codecontext.infra.logging import (
    LoggingConfig,
    configure_logging,
    get_default_log_path,
    shutdown_logging,
)
from codecontext.infra.logging.handlers import is_owned_handler


def _owned_handlers() -> list:
    return [h for h in logging.getLogger().handlers if is_owned_handler(h)]


def test_logging_idempotency() -> None:
    cfg = LoggingConfig(level="INFO", console=True)

    configure_logging(cfg)
    count = len(_owned_handlers())
    configure_logging(cfg)

    assert count == 1
    assert len(_owned_handlers()) == count


def test_force_reconfigures_level() -> None:
    configure_logging(LoggingConfig(level="WARNING"))
    configure_logging(LoggingConfig(level="DEBUG"), force=True)

    assert logging.getLogger().level == logging.DEBUG
    assert len(_owned_handlers()) == 1


def test_file_handler_receives_records(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "run.log"
    configure_logging(LoggingConfig(level="INFO", console=False, log_file=str(log_file)), force=True)

    logging.getLogger("codecontext.test").info("condensing started")
    shutdown_logging()

    text = log_file.read_text(encoding="utf-8")
    assert "condensing started" in text
    assert "codecontext.test" in text


def test_shutdown_keeps_foreign_handlers() -> None:
    root = logging.getLogger()
    foreign = logging.NullHandler()
    root.addHandler(foreign)
    try:
        configure_logging(LoggingConfig(level="INFO"), force=True)
        shutdown_logging()

        assert foreign in root.handlers
        assert _owned_handlers() == []
    finally:
        root.removeHandler(foreign)


def test_unknown_level_defaults_to_warning() -> None:
    configure_logging(LoggingConfig(level="chatty"), force=True)
    assert logging.getLogger().level == logging.WARNING


def test_default_log_path(isolated_home: Path) -> None:
    assert get_default_log_path() == str(isolated_home / ".codecontext" / "logs" / "codecontext.log")

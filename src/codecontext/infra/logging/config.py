from __future__ import annotations

"""
Logging Configuration Model.

Immutable settings consumed by configure_logging() plus the mapping of
level names accepted on the command line.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

_LEVEL_MAP: Dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


@dataclass(frozen=True)
class LoggingConfig:
    """
    Settings for the process-wide logging setup.

    Attributes:
        level: Minimum severity name ('DEBUG', 'INFO', ...).
        console: Emit records on stderr.
        log_file: Optional path of a rotating log file.
        max_bytes: Size threshold that triggers a rollover.
        backup_count: Number of rotated files to keep.
        console_fmt: Record format on the terminal.
        file_fmt: Record format in the log file.
        datefmt: Timestamp format in the log file.
    """
    level: str = "WARNING"
    console: bool = True
    log_file: Optional[str] = None

    max_bytes: int = 1024 * 1024
    backup_count: int = 2

    console_fmt: str = "%(levelname)s | %(message)s"
    file_fmt: str = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    datefmt: str = "%Y-%m-%d %H:%M:%S"

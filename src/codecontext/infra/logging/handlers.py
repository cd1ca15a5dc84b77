from __future__ import annotations

"""
Logging Handler Factories.

Handlers installed by this package carry a marker attribute so that a
re-configuration only detaches what it attached itself and leaves handlers
added by test runners or embedding applications alone.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

_HANDLER_MARKER: str = "_codecontext_handler"

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def mark_handler(handler: logging.Handler) -> logging.Handler:
    """Flag a handler as owned by this package and return it."""
    setattr(handler, _HANDLER_MARKER, True)
    return handler


def is_owned_handler(handler: logging.Handler) -> bool:
    """True when the handler was created by mark_handler()."""
    return bool(getattr(handler, _HANDLER_MARKER, False))


def create_console_handler(level: int, fmt: str) -> logging.Handler:
    """Build the stderr handler used for diagnostics."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    return mark_handler(handler)


def create_file_handler(
        log_file: str,
        level: int,
        formatter: logging.Formatter,
        max_bytes: int,
        backup_count: int,
) -> Optional[RotatingFileHandler]:
    """
    Open a rotating log file.

    A failure to open the file is reported on stderr and never aborts the
    run; the caller simply continues without file logging.

    Args:
        log_file: Target path; parent directories are created.
        level: Numeric logging level.
        formatter: Record formatter.
        max_bytes: Rollover threshold.
        backup_count: Number of archived files.

    Returns:
        Optional[RotatingFileHandler]: The handler, or None on I/O failure.
    """
    try:
        parent = os.path.dirname(os.path.abspath(log_file))
        os.makedirs(parent, exist_ok=True)
        handler = RotatingFileHandler(
            log_file,
            maxBytes=int(max_bytes),
            backupCount=int(backup_count),
            encoding="utf-8",
        )
    except OSError as e:
        sys.stderr.write(f"WARNING: Cannot open log file '{log_file}': {e}\n")
        return None

    handler.setLevel(level)
    handler.setFormatter(formatter)
    mark_handler(handler)
    return handler

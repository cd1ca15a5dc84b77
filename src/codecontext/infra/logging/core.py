from __future__ import annotations

"""
Logging Setup.

Configures the root logger once per process. Records are pushed through a
queue and written by a QueueListener thread, so file output never slows the
file processing loop. Calling configure_logging() again is a no-op unless
'force' is set, which the CLI uses when '--debug' or '--log-file' is given.
"""

import atexit
import logging
import os
import queue
from logging.handlers import QueueHandler, QueueListener
from typing import List, Optional

from codecontext.infra.fs import get_user_data_dir
from codecontext.infra.logging.config import _LEVEL_MAP, LoggingConfig
from codecontext.infra.logging.handlers import (
    create_console_handler,
    create_file_handler,
    is_owned_handler,
    mark_handler,
)

_CONFIGURED_ATTR: str = "_codecontext_configured"
_LISTENER_ATTR: str = "_codecontext_listener"

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def get_default_log_path(file_name: str = "codecontext.log") -> str:
    """
    Location of the persistent log file inside the user data directory.

    Args:
        file_name: Log file name.

    Returns:
        str: Absolute path; the directory is created on demand.
    """
    return os.path.join(get_user_data_dir(), "logs", file_name)


def configure_logging(cfg: LoggingConfig, *, force: bool = False) -> logging.Logger:
    """
    Install the queue-based handlers on the root logger.

    Args:
        cfg: Logging settings.
        force: Replace a previous configuration instead of keeping it.

    Returns:
        logging.Logger: The root logger.
    """
    root = logging.getLogger()

    if getattr(root, _CONFIGURED_ATTR, False) and not force:
        return root

    level = _parse_level(cfg.level)
    root.setLevel(level)
    shutdown_logging()

    handlers: List[logging.Handler] = []
    if cfg.console:
        handlers.append(create_console_handler(level, cfg.console_fmt))
    if cfg.log_file:
        file_handler = create_file_handler(
            cfg.log_file,
            level,
            logging.Formatter(cfg.file_fmt, datefmt=cfg.datefmt),
            cfg.max_bytes,
            cfg.backup_count,
        )
        if file_handler is not None:
            handlers.append(file_handler)

    if not handlers:
        return root

    log_queue: queue.Queue[logging.LogRecord] = queue.Queue(-1)
    listener = QueueListener(log_queue, *handlers, respect_handler_level=True)
    listener.start()

    root.addHandler(mark_handler(QueueHandler(log_queue)))
    setattr(root, _LISTENER_ATTR, listener)
    setattr(root, _CONFIGURED_ATTR, True)
    atexit.register(_stop_listener, listener)

    return root


def shutdown_logging() -> None:
    """Flush pending records and detach every handler this package installed."""
    root = logging.getLogger()

    listener = getattr(root, _LISTENER_ATTR, None)
    _stop_listener(listener)
    setattr(root, _LISTENER_ATTR, None)

    for handler in list(root.handlers):
        if is_owned_handler(handler):
            root.removeHandler(handler)
            handler.close()
    setattr(root, _CONFIGURED_ATTR, False)


def get_logger(name: str) -> logging.Logger:
    """Return a named logger (usually called with __name__)."""
    return logging.getLogger(name)

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _parse_level(level: str) -> int:
    if not level:
        return logging.WARNING
    return _LEVEL_MAP.get(str(level).strip().upper(), logging.WARNING)


def _stop_listener(listener: Optional[QueueListener]) -> None:
    """Stop a listener; a second stop (atexit after shutdown) is ignored."""
    if listener is None:
        return
    if getattr(listener, "_thread", None) is not None:
        listener.stop()
        for handler in listener.handlers:
            handler.close()

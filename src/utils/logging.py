"""Logging setup.

INFO-level progress goes to stdout, warnings and errors go to stderr, each
line tagged with its level so dry-run and live logs can be compared side by side.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

LEVEL_TAGS = {
    logging.DEBUG: "[DBG ]",
    logging.INFO: "[INFO]",
    logging.WARNING: "[WARN]",
    logging.ERROR: "[ERR ]",
    logging.CRITICAL: "[ERR ]",
}

# Third-party loggers that are noisy at DEBUG
QUIET_LOGGERS = ["urllib3", "markdown_it"]


class LevelTagFormatter(logging.Formatter):
    """Prefix each message with a short level tag."""

    def __init__(self, verbose: bool = False) -> None:
        super().__init__()
        self.verbose = verbose

    def format(self, record: logging.LogRecord) -> str:
        tag = LEVEL_TAGS.get(record.levelno, f"[{record.levelname}]")
        message = record.getMessage()
        if self.verbose:
            message = f"{record.name}: {message}"
        if record.exc_info and self.verbose:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return f"{tag} {message}"


class _MaxLevelFilter(logging.Filter):
    def __init__(self, max_level: int) -> None:
        super().__init__()
        self.max_level = max_level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < self.max_level


def setup_logging(level: str = "INFO", verbose: bool = False, stream: Optional[object] = None) -> None:
    """Configure the root logger.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR)
        verbose: Include logger names and tracebacks
        stream: Single stream for every level (optional, used by tests)
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    root.setLevel(numeric_level)
    formatter = LevelTagFormatter(verbose=verbose)

    if stream is not None:
        handler = logging.StreamHandler(stream)
        handler.setFormatter(formatter)
        root.addHandler(handler)
    else:
        stdout_handler = logging.StreamHandler(sys.stdout)
        stdout_handler.addFilter(_MaxLevelFilter(logging.WARNING))
        stdout_handler.setFormatter(formatter)

        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setLevel(logging.WARNING)
        stderr_handler.setFormatter(formatter)

        root.addHandler(stdout_handler)
        root.addHandler(stderr_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

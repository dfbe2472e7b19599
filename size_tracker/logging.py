"""
Logging setup for CI runs.

Log records are rendered as GitHub Actions workflow commands so warnings
and errors show up as annotations on the run.
"""

import logging
import sys
from contextlib import contextmanager
from typing import Iterator

_WORKFLOW_PREFIXES = {
    logging.DEBUG: "::debug::",
    logging.WARNING: "::warning::",
    logging.ERROR: "::error::",
    logging.CRITICAL: "::error::",
}


class WorkflowCommandFormatter(logging.Formatter):
    """Prefixes non-info records with the matching workflow command."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        prefix = _WORKFLOW_PREFIXES.get(record.levelno, "")
        if not prefix:
            return message
        # Workflow commands end at the first newline.
        escaped = message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
        return f"{prefix}{escaped}"


def configure_logging(level: str = "INFO") -> None:
    """Configures the package logger to write workflow-command lines to stdout."""
    logger = logging.getLogger("size_tracker")
    logger.setLevel(level.upper())

    # Remove existing handlers to avoid duplication
    if logger.handlers:
        logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(WorkflowCommandFormatter("%(message)s"))
    logger.addHandler(handler)


@contextmanager
def log_group(title: str) -> Iterator[None]:
    """Folds everything logged inside the block under a collapsible group."""
    logger = logging.getLogger("size_tracker")
    logger.info("::group::%s", title)
    try:
        yield
    finally:
        logger.info("::endgroup::")

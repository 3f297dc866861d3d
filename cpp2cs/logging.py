"""Logging setup for the cpp2cs converter.

Every module logs through ``get_logger(<component>)``; the component (``parsing.header``,
``parsing.source``, ``reconcile``, ``converter`` ...) is shown in verbose output so parser
diagnostics can be traced back to the stage that produced them.
"""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "cpp2cs"
_CONSOLE_FORMAT = "[cpp2cs] %(levelname)s %(message)s"
_VERBOSE_FORMAT = "[cpp2cs] %(levelname)s %(component)s: %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(component)s: %(message)s"


class _ComponentFilter(logging.Filter):
    """Expose the logger name below ``cpp2cs.`` as ``%(component)s``."""

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name.startswith(f"{_LOGGER_NAME}."):
            name = name[len(_LOGGER_NAME) + 1 :]
        record.component = name
        return True


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a component logger under the cpp2cs hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Install console output (and an optional UTF-8 log file) on the cpp2cs logger.

    Verbose mode lowers the level to DEBUG, where the parsers report skipped constructs.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Repeated invocations in one process must not stack handlers.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    component = _ComponentFilter()
    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.addFilter(component)
    stream_handler.setFormatter(logging.Formatter(_VERBOSE_FORMAT if verbose else _CONSOLE_FORMAT))
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.addFilter(component)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(file_handler)
        # The file always gets the full diagnostic trail.
        logger.setLevel(logging.DEBUG)

    return logger


__all__ = ["configure_logging", "get_logger"]

"""Logging setup shared by every git-ai-commit module.

All module loggers hang off the ``git_ai_commit`` package logger, which owns
a single stderr handler. Records render as ``[LEVEL::logger] message`` and are
colored with ``click.style`` only when stderr is a terminal and ``NO_COLOR``
is unset. The starting level comes from ``GIT_AI_COMMIT_LOG_LEVEL``;
``--verbose`` and ``--debug`` raise it at runtime.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO, Final

import click


LOG_LEVEL_ENV_VAR: Final[str] = "GIT_AI_COMMIT_LOG_LEVEL"
PACKAGE_LOGGER_NAME: Final[str] = "git_ai_commit"

_FORMAT: Final[str] = "[%(levelname)s::%(name)s] %(message)s"

# level -> (click color, bold)
_LEVEL_COLORS: Final[dict[int, tuple[str, bool]]] = {
    logging.DEBUG: ("bright_black", False),
    logging.INFO: ("cyan", False),
    logging.WARNING: ("yellow", True),
    logging.ERROR: ("red", True),
    logging.CRITICAL: ("magenta", True),
}


def level_from_name(name: str | None) -> int | None:
    """Return the numeric level for *name*, or None if it is empty or unknown."""

    if not name:
        return None
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else None


def _wants_color(stream: IO[str]) -> bool:
    if os.getenv("NO_COLOR"):
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


class CliLogFormatter(logging.Formatter):
    """Prefix records with level and logger name, optionally in color."""

    def __init__(self, color: bool = False) -> None:
        super().__init__(_FORMAT)
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        if not self.color:
            return text

        fg, bold = _LEVEL_COLORS.get(record.levelno, (None, False))
        return click.style(text, fg=fg, bold=bold, dim=record.levelno <= logging.DEBUG)


def _package_logger() -> logging.Logger:
    package = logging.getLogger(PACKAGE_LOGGER_NAME)
    if package.handlers:
        return package

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(CliLogFormatter(color=_wants_color(sys.stderr)))
    package.addHandler(handler)

    env_level = level_from_name(os.getenv(LOG_LEVEL_ENV_VAR))
    if env_level is not None:
        package.setLevel(env_level)
    return package


def git_ai_commit_logger(name: str) -> logging.Logger:
    """Return the logger for *name*, nested under the package logger."""

    package = _package_logger()
    if name == package.name or name.startswith(f"{package.name}."):
        return logging.getLogger(name)
    return package.getChild(name)


def set_git_ai_commit_log_level(level_name: str) -> None:
    """Switch every git-ai-commit logger to *level_name*.

    Raises:
        ValueError: If *level_name* is not a logging level.
    """
    level = level_from_name(level_name)
    if level is None:
        raise ValueError(f"Unknown log level: {level_name}")
    _package_logger().setLevel(level)

"""Component loggers.

Each component logs under ``dockwire.<component>`` (``dockwire.transport``,
``dockwire.tls``, ``dockwire.dispatcher``), so applications configure them
through the standard ``logging`` tree. The library itself only installs a
``NullHandler``.
"""

from __future__ import annotations

import logging
from typing import Any, Literal

LogLevel = Literal["trace", "debug", "info", "warn", "error"]

ROOT_LOGGER_NAME = "dockwire"
TRACE_LEVEL = 5
logging.addLevelName(TRACE_LEVEL, "TRACE")
logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())

LOG_LEVELS: dict[LogLevel, int] = {
    "trace": TRACE_LEVEL,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


class BoundLogger:
    """A ``logging.Logger`` paired with the minimum level a client asked for.

    The threshold only filters what this client emits; it never changes the
    level of the underlying logger.
    """

    def __init__(self, logger: logging.Logger | None = None, *, level: LogLevel = "info") -> None:
        self._logger = logger or logging.getLogger(ROOT_LOGGER_NAME)
        self._level = level
        self._threshold = LOG_LEVELS[level]

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    @property
    def name(self) -> str:
        return self._logger.name

    @property
    def level(self) -> LogLevel:
        return self._level

    def trace(self, msg: str, *args: Any) -> None:
        self._log(TRACE_LEVEL, msg, *args)

    def debug(self, msg: str, *args: Any) -> None:
        self._log(logging.DEBUG, msg, *args)

    def info(self, msg: str, *args: Any) -> None:
        self._log(logging.INFO, msg, *args)

    def warn(self, msg: str, *args: Any) -> None:
        self._log(logging.WARNING, msg, *args)

    def error(self, msg: str, *args: Any) -> None:
        self._log(logging.ERROR, msg, *args)

    def child(self, component: str) -> "BoundLogger":
        return BoundLogger(self._logger.getChild(component), level=self._level)

    def _log(self, level: int, msg: str, *args: Any) -> None:
        if level >= self._threshold and self._logger.isEnabledFor(level):
            # stacklevel points records at the calling component
            self._logger.log(level, msg, *args, stacklevel=3)


def create_logger(*, logger: logging.Logger | BoundLogger | None = None, level: LogLevel = "info") -> BoundLogger:
    if isinstance(logger, BoundLogger):
        return logger
    if logger is not None and not isinstance(logger, logging.Logger):
        raise TypeError(f"Expected a logging.Logger, got {type(logger).__name__}")
    return BoundLogger(logger, level=level)


__all__ = ["BoundLogger", "LOG_LEVELS", "LogLevel", "ROOT_LOGGER_NAME", "TRACE_LEVEL", "create_logger"]

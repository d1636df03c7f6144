#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Logging mixin shared by daprlink components.

Classes inherit from ``ModernLogger`` and log through ``self.debug(...)``,
``self.info(...)`` and friends. Records go to a regular ``logging.Logger`` so
applications keep full control over handlers and formatting.
"""

import logging
from typing import Any, Dict, Optional, Union

_LEVELS: Dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


def resolve_log_level(level: Union[str, int, None]) -> Optional[int]:
    """
    Convert a level name (case-insensitive) or number into a logging level.
    """
    if level is None:
        return None
    if isinstance(level, int):
        return level
    normalized = str(level).strip().lower()
    if normalized not in _LEVELS:
        raise ValueError(
            "Unknown log level '{0}'. Expected one of: {1}".format(
                level, ", ".join(sorted(_LEVELS))
            )
        )
    return _LEVELS[normalized]


class ModernLogger:
    """
    Mixin that gives a class its own named logger.

    Subclasses call ``ModernLogger.__init__(self, name=..., level=...)``.
    When ``level`` is ``None`` the logger inherits its level from the
    logging hierarchy.
    """

    def __init__(self, name: Optional[str] = None, level: Union[str, int, None] = None):
        logger_name = name or "{0}.{1}".format(
            type(self).__module__, type(self).__qualname__
        )
        self._logger = logging.getLogger(logger_name)
        resolved = resolve_log_level(level)
        if resolved is not None:
            self._logger.setLevel(resolved)

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def debug(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._logger.debug(message, *args, **kwargs)

    def info(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._logger.info(message, *args, **kwargs)

    def warning(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._logger.warning(message, *args, **kwargs)

    def error(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._logger.error(message, *args, **kwargs)

    def critical(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._logger.critical(message, *args, **kwargs)

#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Logging mixin shared by server-side components.

Classes inherit from ``ModernLogger`` and call ``self.info(...)`` and friends
directly. Each instance gets a named stdlib logger under the ``robotremote``
hierarchy so applications can tune verbosity per component.
"""

import logging
import threading
from typing import Any, Dict, Optional, Union

ROOT_LOGGER_NAME = "robotremote"
DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_LEVELS: Dict[str, int] = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}

_HANDLER_INSTALL_LOCK = threading.Lock()
_HANDLER_INSTALLED = False


def resolve_level(level: Union[str, int]) -> int:
    """
    Map a level name (case-insensitive) or numeric level to a logging level.
    """
    if isinstance(level, int):
        return level
    normalized = str(level).strip().lower()
    if normalized not in _LEVELS:
        raise ValueError("Unknown log level: {0}".format(level))
    return _LEVELS[normalized]


def _install_default_handler() -> None:
    """
    Attach one stream handler to the package root logger.

    Skipped when the application already configured handlers on it.
    """
    global _HANDLER_INSTALLED

    if _HANDLER_INSTALLED:
        return

    with _HANDLER_INSTALL_LOCK:
        if _HANDLER_INSTALLED:
            return

        root = logging.getLogger(ROOT_LOGGER_NAME)
        if not root.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
            root.addHandler(handler)
        _HANDLER_INSTALLED = True


class ModernLogger:
    """
    Mixin exposing leveled logging methods bound to a per-component logger.
    """

    def __init__(self, name: Optional[str] = None, level: Union[str, int] = "info") -> None:
        _install_default_handler()
        logger_name = name or self.__class__.__name__
        if not logger_name.startswith(ROOT_LOGGER_NAME):
            logger_name = "{0}.{1}".format(ROOT_LOGGER_NAME, logger_name)
        self._logger = logging.getLogger(logger_name)
        self._logger.setLevel(resolve_level(level))

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def set_log_level(self, level: Union[str, int]) -> None:
        self._logger.setLevel(resolve_level(level))

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.error(msg, *args, **kwargs)

    def critical(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.critical(msg, *args, **kwargs)

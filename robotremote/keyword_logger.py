#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Per-invocation keyword log accumulator.

A keyword body creates one ``KeywordLogger``, emits leveled lines while it
works, and hands ``get_message()`` to its ``Return`` wrapper. The text travels
back in the result envelope's ``output`` field, where the test driver splits
it on the ``*LEVEL:timestamp*`` markers.

Example:
    >>> logger = KeywordLogger()
    >>> logger.info("Reading directory %s", path)
    >>> return Return(len(items), logger.get_message())
"""

import time
from typing import Any, Callable, List, Optional


def format_message(message: Any, *args: Any) -> str:
    """
    printf-style formatting; arguments without a placeholder are appended.
    """
    text = str(message)
    if not args:
        return text
    try:
        return text % args
    except (TypeError, ValueError):
        pass

    # Consume as many arguments as the placeholders accept, append the rest.
    for split in range(len(args) - 1, 0, -1):
        try:
            head = text % args[:split]
        except (TypeError, ValueError):
            continue
        return " ".join([head] + [str(arg) for arg in args[split:]])
    return " ".join([text] + [str(arg) for arg in args])


class KeywordLogger:
    """
    Ordered, timestamped log lines for a single keyword invocation.

    Never shared between invocations.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None) -> None:
        self._clock = clock or time.time
        self._lines: List[str] = []

    def _emit(self, level: str, message: Any, args: tuple) -> None:
        timestamp = int(self._clock() * 1000)
        self._lines.append(
            "*{0}:{1}* {2}\n".format(level, timestamp, format_message(message, *args))
        )

    def trace(self, message: Any, *args: Any) -> None:
        self._emit("TRACE", message, args)

    def debug(self, message: Any, *args: Any) -> None:
        self._emit("DEBUG", message, args)

    def info(self, message: Any, *args: Any) -> None:
        self._emit("INFO", message, args)

    def warn(self, message: Any, *args: Any) -> None:
        self._emit("WARN", message, args)

    def fail(self, message: Any, *args: Any) -> None:
        self._emit("FAIL", message, args)

    def html(self, message: Any, *args: Any) -> None:
        self._emit("HTML", message, args)

    def get_message(self) -> str:
        return "".join(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

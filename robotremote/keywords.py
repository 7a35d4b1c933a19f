#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Keyword-author facing types.

- ``keyword``: decorator attaching explicit name / argument / doc metadata
- ``Return``: explicit return value carrying log output and an optional error
- ``Value`` / ``Failure`` / ``Deferred``: tagged outcome of calling a keyword
  body, consumed by the execution engine

Keyword bodies may keep returning plain values, raising, or returning
awaitables; ``as_outcome`` classifies those into the tagged variants. Bodies
that want to be explicit can return the variants directly.
"""

import asyncio
import concurrent.futures
import inspect
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable, Optional, Sequence, Union

from .core.utils.exceptions import ExceptionFormatter
from .keyword_logger import KeywordLogger

_KEYWORD_ATTR = "__robotremote_keyword__"


@dataclass(frozen=True)
class KeywordMetadata:
    """
    Declarative metadata attached by ``@keyword``.
    """

    name: Optional[str] = None
    args: Optional[Sequence[str]] = None
    doc: Optional[str] = None


def keyword(
    func: Optional[Callable[..., Any]] = None,
    *,
    name: Optional[str] = None,
    args: Optional[Iterable[str]] = None,
    doc: Optional[str] = None,
) -> Union[Callable[[Callable[..., Any]], Callable[..., Any]], Callable[..., Any]]:
    """
    Attach explicit keyword metadata to a function.

    Usable bare (``@keyword``) or with options
    (``@keyword(name="Count Items", args=["path"])``). Explicit ``args`` take
    precedence over the parameter names read from the signature.
    """
    metadata = KeywordMetadata(
        name=name,
        args=tuple(str(arg) for arg in args) if args is not None else None,
        doc=doc,
    )

    def decorator(target: Callable[..., Any]) -> Callable[..., Any]:
        setattr(target, _KEYWORD_ATTR, metadata)
        return target

    if func is not None and callable(func):
        return decorator(func)
    return decorator


def get_keyword_metadata(func: Any) -> Optional[KeywordMetadata]:
    target = getattr(func, "__func__", func)
    metadata = getattr(target, _KEYWORD_ATTR, None)
    if isinstance(metadata, KeywordMetadata):
        return metadata
    return None


class Return:
    """
    Explicit keyword return: value, captured log output, optional error.

    ``output`` may be a string or the ``KeywordLogger`` itself; a logger is
    read once at construction.

    Example:
        >>> logger = KeywordLogger()
        >>> logger.warn("Awful thing is going to happen.")
        >>> return Return("value", logger, RuntimeError("awful"))
    """

    __slots__ = ("return_value", "output", "error")

    def __init__(
        self,
        return_value: Any = "",
        output: Union[str, KeywordLogger, None] = "",
        error: Any = None,
    ) -> None:
        if isinstance(output, KeywordLogger):
            output = output.get_message()
        self.return_value = return_value
        self.output = output or ""
        self.error = error

    def __repr__(self) -> str:
        return "Return(return_value={0!r}, output={1!r}, error={2!r})".format(
            self.return_value, self.output, self.error
        )


@dataclass(frozen=True)
class Value:
    """Body completed with a value."""

    value: Any = None


@dataclass(frozen=True)
class Failure:
    """Body failed; message and formatted traceback."""

    message: str
    traceback: str = ""

    def __post_init__(self) -> None:
        if not self.message:
            raise ValueError("Failure message must not be empty")

    @classmethod
    def from_exception(cls, exc: BaseException) -> "Failure":
        return cls(
            message=ExceptionFormatter.format_message(exc),
            traceback=ExceptionFormatter.format_exception(exc),
        )


@dataclass(frozen=True)
class Deferred:
    """Body will complete later; settles through an awaitable."""

    awaitable: Awaitable[Any] = field(repr=False)

    def to_future(self) -> "asyncio.Future[Any]":
        return asyncio.ensure_future(self.awaitable)


KeywordOutcome = Union[Value, Failure, Deferred]


def as_outcome(returned: Any) -> KeywordOutcome:
    """
    Classify whatever a keyword body returned into a tagged outcome.
    """
    if isinstance(returned, (Value, Failure, Deferred)):
        return returned
    if isinstance(returned, BaseException):
        return Failure.from_exception(returned)
    if isinstance(returned, concurrent.futures.Future):
        return Deferred(asyncio.wrap_future(returned))
    if inspect.isawaitable(returned):
        return Deferred(returned)
    return Value(returned)


__all__ = [
    "keyword",
    "get_keyword_metadata",
    "KeywordMetadata",
    "Return",
    "Value",
    "Failure",
    "Deferred",
    "KeywordOutcome",
    "as_outcome",
]

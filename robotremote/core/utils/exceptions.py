#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Exception hierarchy for the remote keyword server.

Two tiers of failure exist in the system:

1. Protocol faults (unknown method, unknown keyword, malformed parameters).
   These are raised as exceptions from the dispatcher and surface to the
   caller as RPC-level errors. No result envelope is ever built for them.
2. Keyword failures (a body raised, a deferred body rejected, a Return
   wrapper carried an error, the timeout fired). These never raise out of the
   execution engine; they are folded into a FAIL result envelope.

Everything in this module belongs to tier 1 or to the ambient concerns
around it (configuration, serialization, transport).
"""

import traceback
from typing import Any, Dict, Optional


class RemoteKeywordError(Exception):
    """
    Base class for all robotremote errors.

    Args:
        message: Human readable error description
        cause: Underlying exception, if any
        **details: Structured context attached to the error
    """

    def __init__(
        self,
        message: str = "",
        cause: Optional[BaseException] = None,
        **details: Any,
    ) -> None:
        self.message = message or self.__class__.__name__
        self.cause = cause
        self.details: Dict[str, Any] = {
            key: value for key, value in details.items() if value is not None
        }
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
        }
        if self.details:
            payload["details"] = dict(self.details)
        if self.cause is not None:
            payload["cause"] = ExceptionFormatter.format_exception_summary(self.cause)
        return payload


class ProtocolFaultError(RemoteKeywordError):
    """
    RPC-level fault: the call itself fails and no result envelope exists.
    """

    code = "METHOD_NOT_FOUND"

    def __init__(
        self,
        message: str = "",
        method: Optional[str] = None,
        cause: Optional[BaseException] = None,
        **details: Any,
    ) -> None:
        self.method = method
        super().__init__(message, cause=cause, method=method, **details)


class InvalidParamsError(ProtocolFaultError):
    """
    Parameters of a protocol call have the wrong shape.
    """

    code = "INVALID_PARAMS"


class KeywordNotFoundError(ProtocolFaultError):
    """
    A protocol call named a keyword absent from the registry.
    """

    code = "KEYWORD_NOT_FOUND"

    def __init__(
        self,
        keyword_name: str,
        method: Optional[str] = None,
        message: Optional[str] = None,
    ) -> None:
        self.keyword_name = keyword_name
        super().__init__(
            message or "No keyword named '{0}' is registered".format(keyword_name),
            method=method,
            keyword_name=keyword_name,
        )


class KeywordRegistrationError(RemoteKeywordError):
    """
    A library entry could not be turned into a keyword.
    """


class SerializationError(RemoteKeywordError):
    """
    A value could not be encoded to or decoded from the wire format.
    """

    def __init__(
        self,
        operation: str,
        message: str = "",
        data_type: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        self.operation = operation
        super().__init__(
            message or "{0} failed".format(operation),
            cause=cause,
            operation=operation,
            data_type=data_type,
        )


class ConfigurationError(RemoteKeywordError, ValueError):
    """
    Server configuration is invalid.
    """

    def __init__(
        self,
        message: str,
        option: Optional[str] = None,
        value: Any = None,
    ) -> None:
        self.option = option
        super().__init__(message, option=option, value=value)


class TransportError(RemoteKeywordError):
    """
    The RPC transport failed (connection refused, deadline exceeded, ...).
    """

    def __init__(
        self,
        message: str,
        address: Optional[str] = None,
        cause: Optional[BaseException] = None,
        **details: Any,
    ) -> None:
        self.address = address
        super().__init__(message, cause=cause, address=address, **details)


class ExceptionFormatter:
    """
    Rendering helpers for exceptions crossing the wire.
    """

    @staticmethod
    def format_message(exc: BaseException) -> str:
        """
        Message for a result envelope; never empty.
        """
        message = str(exc).strip()
        if isinstance(exc, RemoteKeywordError):
            message = exc.message
        return message or exc.__class__.__name__

    @staticmethod
    def format_exception(exc: BaseException) -> str:
        return "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        )

    @staticmethod
    def format_exception_chain(exc: BaseException) -> str:
        parts = []
        current: Optional[BaseException] = exc
        while current is not None:
            parts.append(ExceptionFormatter.format_exception_summary(current))
            current = current.__cause__ or current.__context__
        return " <- ".join(parts)

    @staticmethod
    def format_exception_summary(exc: BaseException) -> str:
        return "{0}: {1}".format(
            exc.__class__.__name__, ExceptionFormatter.format_message(exc)
        )


class ExceptionTranslator:
    """
    Wrap foreign exceptions into the robotremote hierarchy.
    """

    @staticmethod
    def as_transport_error(
        exc: BaseException,
        address: Optional[str] = None,
        message: Optional[str] = None,
    ) -> TransportError:
        if isinstance(exc, TransportError):
            return exc
        return TransportError(
            message or ExceptionFormatter.format_message(exc),
            address=address,
            cause=exc,
        )


__all__ = [
    "RemoteKeywordError",
    "ProtocolFaultError",
    "InvalidParamsError",
    "KeywordNotFoundError",
    "KeywordRegistrationError",
    "SerializationError",
    "ConfigurationError",
    "TransportError",
    "ExceptionFormatter",
    "ExceptionTranslator",
]

#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Protocol domain models for the remote keyword protocol.

Author-facing types live in ``robotremote.keywords``; this module holds what
crosses the wire.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Union

from ..core.data.backends import to_wire_value


class ProtocolMethod(str, Enum):
    """
    Remote protocol method names.
    """

    GET_KEYWORD_NAMES = "get_keyword_names"
    GET_KEYWORD_ARGUMENTS = "get_keyword_arguments"
    GET_KEYWORD_DOCUMENTATION = "get_keyword_documentation"
    RUN_KEYWORD = "run_keyword"
    STOP_REMOTE_SERVER = "stop_remote_server"

    @classmethod
    def from_value(cls, value: Union["ProtocolMethod", str]) -> "ProtocolMethod":
        """
        Parse a method name from enum/string.
        """
        if isinstance(value, cls):
            return value
        return cls(str(value).strip())


class KeywordStatus(str, Enum):
    PASS = "PASS"
    FAIL = "FAIL"


TIMEOUT_ERROR_MESSAGE = "Keyword execution got timeout"


@dataclass(frozen=True)
class KeywordResult:
    """
    Normalized outcome of one keyword invocation (the result envelope).

    ``status`` is FAIL exactly when ``error`` is non-empty; use ``passed`` /
    ``failed`` to build instances so the two never disagree.
    """

    status: KeywordStatus = KeywordStatus.PASS
    return_value: Any = ""
    output: str = ""
    error: str = ""
    traceback: str = ""

    def __post_init__(self) -> None:
        failed = self.status == KeywordStatus.FAIL
        if failed != bool(self.error):
            raise ValueError(
                "Result status {0} disagrees with error {1!r}".format(
                    self.status.value, self.error
                )
            )

    @classmethod
    def passed(cls, return_value: Any = "", output: str = "") -> "KeywordResult":
        return cls(
            status=KeywordStatus.PASS,
            return_value=return_value,
            output=output or "",
        )

    @classmethod
    def failed(
        cls,
        error: str,
        traceback: str = "",
        return_value: Any = "",
        output: str = "",
    ) -> "KeywordResult":
        return cls(
            status=KeywordStatus.FAIL,
            return_value=return_value,
            output=output or "",
            error=error or "Keyword failed",
            traceback=traceback or "",
        )

    @classmethod
    def timed_out(cls) -> "KeywordResult":
        return cls.failed(TIMEOUT_ERROR_MESSAGE)

    @property
    def is_pass(self) -> bool:
        return self.status == KeywordStatus.PASS

    def to_dict(self) -> Dict[str, Any]:
        """
        Wire form of the envelope.
        """
        return {
            "status": self.status.value,
            "return": to_wire_value(self.return_value),
            "output": self.output,
            "error": self.error,
            "traceback": self.traceback,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "KeywordResult":
        return cls(
            status=KeywordStatus(payload.get("status", KeywordStatus.PASS.value)),
            return_value=payload.get("return", ""),
            output=payload.get("output", "") or "",
            error=payload.get("error", "") or "",
            traceback=payload.get("traceback", "") or "",
        )

#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Tests for the transport-agnostic protocol dispatcher.
"""

import asyncio

import pytest

from robotremote.core.config import ServerConfig
from robotremote.core.service import KeywordService
from robotremote.core.utils.exceptions import (
    InvalidParamsError,
    KeywordNotFoundError,
    ProtocolFaultError,
)
from robotremote.protocols import KeywordDispatcher, ProtocolMethod


class CalculatorLibrary:
    def add(self, a, b):
        """Add two numbers."""
        return a + b

    def divide(self, a, b):
        return a / b


def _dispatcher(allow_stop=False, closed=None):
    service = KeywordService(
        [CalculatorLibrary()],
        config=ServerConfig(allow_stop=allow_stop, timeout=2000),
        close_listener=(lambda: closed.append(True)) if closed is not None else None,
        terminate=lambda: None,
    )
    return KeywordDispatcher(service)


def test_get_keyword_names_includes_reserved_stop_keyword():
    dispatcher = _dispatcher()

    names = asyncio.run(dispatcher.dispatch("get_keyword_names", []))

    assert names[0] == "stopRemoteServer"
    assert set(names) == {"stopRemoteServer", "add", "divide"}


def test_introspection_methods():
    dispatcher = _dispatcher()

    async def run_case():
        return (
            await dispatcher.dispatch(ProtocolMethod.GET_KEYWORD_ARGUMENTS, ["add"]),
            await dispatcher.dispatch(ProtocolMethod.GET_KEYWORD_DOCUMENTATION, ["add"]),
            await dispatcher.dispatch(ProtocolMethod.GET_KEYWORD_ARGUMENTS, ["stopRemoteServer"]),
            await dispatcher.dispatch(ProtocolMethod.GET_KEYWORD_DOCUMENTATION, ["stopRemoteServer"]),
        )

    add_args, add_doc, stop_args, stop_doc = asyncio.run(run_case())

    assert add_args == ["a", "b"]
    assert add_doc == "Add two numbers."
    assert stop_args == []
    assert stop_doc == "Stop remote server"


def test_run_keyword_returns_wire_envelope():
    dispatcher = _dispatcher()

    result = asyncio.run(dispatcher.dispatch("run_keyword", ["add", [2, 3]]))

    assert result == {
        "status": "PASS",
        "return": 5,
        "output": "",
        "error": "",
        "traceback": "",
    }


def test_keyword_failure_is_a_successful_call_with_fail_envelope():
    dispatcher = _dispatcher()

    result = asyncio.run(dispatcher.dispatch("run_keyword", ["divide", [1, 0]]))

    assert result["status"] == "FAIL"
    assert "division by zero" in result["error"]
    assert "ZeroDivisionError" in result["traceback"]


def test_unknown_keyword_is_protocol_fault_for_every_named_method():
    dispatcher = _dispatcher()

    for method, params in (
        ("run_keyword", ["missingKeyword", []]),
        ("get_keyword_arguments", ["missingKeyword"]),
        ("get_keyword_documentation", ["missingKeyword"]),
    ):
        with pytest.raises(KeywordNotFoundError):
            asyncio.run(dispatcher.dispatch(method, params))


def test_unknown_method_is_protocol_fault():
    dispatcher = _dispatcher()

    with pytest.raises(ProtocolFaultError) as info:
        asyncio.run(dispatcher.dispatch("delete_everything", []))

    assert not isinstance(info.value, KeywordNotFoundError)
    assert info.value.method == "delete_everything"


@pytest.mark.parametrize(
    "method,params",
    [
        ("get_keyword_arguments", []),
        ("get_keyword_arguments", [42]),
        ("run_keyword", []),
        ("run_keyword", ["add", "not-a-list"]),
        ("run_keyword", ["add", [1, 2], ["not", "a", "mapping"]]),
        ("stop_remote_server", ["unexpected"]),
    ],
)
def test_malformed_parameters_are_rejected(method, params):
    dispatcher = _dispatcher()

    with pytest.raises(InvalidParamsError):
        asyncio.run(dispatcher.dispatch(method, params))


def test_run_keyword_accepts_named_arguments():
    dispatcher = _dispatcher()

    result = asyncio.run(dispatcher.dispatch("run_keyword", ["add", [1], {"b": 41}]))

    assert result["return"] == 42


def test_stop_refused_keeps_server_available():
    closed = []
    dispatcher = _dispatcher(allow_stop=False, closed=closed)

    async def run_case():
        stopped = await dispatcher.dispatch("stop_remote_server", [])
        names = await dispatcher.dispatch("get_keyword_names", [])
        return stopped, names

    stopped, names = asyncio.run(run_case())

    assert stopped is False
    assert "add" in names
    assert closed == []


def test_stop_allowed_closes_listener_and_returns_true():
    closed = []
    dispatcher = _dispatcher(allow_stop=True, closed=closed)

    assert asyncio.run(dispatcher.dispatch("stop_remote_server", [])) is True
    assert closed == [True]


def test_reserved_keyword_runs_through_engine():
    dispatcher = _dispatcher(allow_stop=False)

    result = asyncio.run(dispatcher.dispatch("run_keyword", ["stopRemoteServer", []]))

    assert result["status"] == "PASS"
    assert result["return"] is False


def test_supported_methods_cover_the_protocol():
    assert set(_dispatcher().supported_methods()) == {
        "get_keyword_names",
        "get_keyword_arguments",
        "get_keyword_documentation",
        "run_keyword",
        "stop_remote_server",
    }

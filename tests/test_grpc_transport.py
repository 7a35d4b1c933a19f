#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
End-to-end tests over the gRPC transport on an ephemeral port.
"""

import asyncio
import threading
import time

import pytest

from robotremote import KeywordProxy, KeywordServer, RemoteKeywordClient
from robotremote.core.nodes.server import ServerState
from robotremote.core.utils.exceptions import (
    InvalidParamsError,
    KeywordNotFoundError,
    ProtocolFaultError,
    TransportError,
)
from robotremote.keywords import Return
from robotremote.keyword_logger import KeywordLogger


class TransportLibrary:
    def add(self, a, b):
        """Add two numbers."""
        return a + b

    async def slow(self, seconds):
        await asyncio.sleep(seconds)
        return "done"

    def logged(self):
        log = KeywordLogger(clock=lambda: 5)
        log.info("working")
        return Return(return_value=("a", None), output=log)


def _server(**overrides):
    options = {"port": 0, "timeout": 200, "grace_window": 500}
    options.update(overrides)
    return KeywordServer(
        [TransportLibrary()],
        install_signal_handlers=False,
        terminate=lambda: None,
        **options,
    )


def test_round_trip_over_grpc():
    server = _server()

    async def run_case():
        port = await server.start_async()
        try:
            async with RemoteKeywordClient("127.0.0.1:{0}".format(port), timeout=5) as client:
                names = await client.get_keyword_names()
                args = await client.get_keyword_arguments("add")
                doc = await client.get_keyword_documentation("add")
                added = await client.run_keyword("add", [2, 3])
                logged = await client.run_keyword("logged")
                slow = await client.run_keyword("slow", [1])
            return names, args, doc, added, logged, slow
        finally:
            await server.stop_async(grace=0)

    names, args, doc, added, logged, slow = asyncio.run(run_case())

    assert set(names) == {"stopRemoteServer", "add", "slow", "logged"}
    assert args == ["a", "b"]
    assert doc == "Add two numbers."
    assert added.is_pass and added.return_value == 5
    assert logged.return_value == ["a", ""]
    assert logged.output == "*INFO:5000* working\n"
    assert not slow.is_pass
    assert slow.error == "Keyword execution got timeout"
    assert server.state is ServerState.STOPPED


def test_protocol_faults_map_to_client_errors():
    server = _server()

    async def run_case():
        port = await server.start_async()
        errors = []
        try:
            async with RemoteKeywordClient("127.0.0.1:{0}".format(port), timeout=5) as client:
                for call in (
                    client.run_keyword("missingKeyword"),
                    client.call("run_keyword", ["add", "not-a-list"]),
                ):
                    try:
                        await call
                    except ProtocolFaultError as e:
                        errors.append(e)
            return errors
        finally:
            await server.stop_async(grace=0)

    missing, invalid = asyncio.run(run_case())

    assert isinstance(missing, KeywordNotFoundError)
    assert missing.keyword_name == "missingKeyword"
    assert isinstance(invalid, InvalidParamsError)


def test_proxy_over_grpc():
    server = _server()

    async def run_case():
        port = await server.start_async()
        try:
            async with RemoteKeywordClient("127.0.0.1:{0}".format(port), timeout=5) as client:
                proxy = await KeywordProxy(client).load()
                result = await proxy.add(40, 2)
                await proxy.wait_for_metadata()
                return result, proxy.add.args
        finally:
            await server.stop_async(grace=0)

    result, args = asyncio.run(run_case())

    assert result.return_value == 42
    assert args == ["a", "b"]


def test_remote_stop_refused_by_default():
    server = _server()

    async def run_case():
        port = await server.start_async()
        try:
            async with RemoteKeywordClient("127.0.0.1:{0}".format(port), timeout=5) as client:
                stopped = await client.stop_remote_server()
                names = await client.get_keyword_names()
            return stopped, names, server.is_running
        finally:
            await server.stop_async(grace=0)

    stopped, names, running = asyncio.run(run_case())

    assert stopped is False
    assert "add" in names
    assert running is True


def test_remote_stop_closes_listener_and_terminates():
    terminated = []
    server = KeywordServer(
        [TransportLibrary()],
        install_signal_handlers=False,
        terminate=lambda: terminated.append(True),
        port=0,
        allow_stop=True,
        grace_window=300,
    )

    async def run_case():
        port = await server.start_async()
        address = "127.0.0.1:{0}".format(port)
        async with RemoteKeywordClient(address, timeout=5) as client:
            stopped = await client.stop_remote_server()
        await asyncio.wait_for(server.wait_for_termination(), timeout=5)

        async with RemoteKeywordClient(address, timeout=2) as client:
            with pytest.raises(TransportError):
                await client.get_keyword_names()

        await asyncio.wait_for(
            server.service.lifecycle.wait_for_forced_termination(), timeout=5
        )
        return stopped

    assert asyncio.run(run_case()) is True
    assert server.state is ServerState.STOPPED
    assert terminated == [True]


def _wait_until(predicate, timeout):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.05)
    return predicate()


def test_background_server_terminates_after_grace_window():
    terminated = []
    server = KeywordServer(
        [TransportLibrary()],
        install_signal_handlers=False,
        terminate=lambda: terminated.append(threading.current_thread().name),
        port=0,
        allow_stop=True,
        grace_window=300,
    )
    thread = server.start_background()

    async def stop_remotely():
        async with RemoteKeywordClient(server.address, timeout=5) as client:
            return await client.stop_remote_server()

    started = time.monotonic()
    assert asyncio.run(stop_remotely()) is True

    assert _wait_until(lambda: terminated, timeout=3)
    assert time.monotonic() - started >= 0.25
    assert terminated == [thread.name]

    thread.join(timeout=3)
    assert not thread.is_alive()
    assert server.state is ServerState.STOPPED


def test_explicit_local_stop_cancels_forced_termination():
    terminated = []
    server = KeywordServer(
        [TransportLibrary()],
        install_signal_handlers=False,
        terminate=lambda: terminated.append(True),
        port=0,
        allow_stop=True,
        grace_window=1000,
    )
    thread = server.start_background()

    async def stop_remotely():
        async with RemoteKeywordClient(server.address, timeout=5) as client:
            return await client.stop_remote_server()

    assert asyncio.run(stop_remotely()) is True
    server.stop(timeout=3)

    assert not thread.is_alive()
    time.sleep(1.2)
    assert terminated == []

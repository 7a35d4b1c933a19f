#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Tests for the keyword discovery proxy.
"""

import asyncio

import pytest

from robotremote.core.config import ServerConfig
from robotremote.core.service import KeywordService
from robotremote.keywords import keyword
from robotremote.protocols import KeywordDispatcher, KeywordStatus
from robotremote.proxy import KeywordCaller, KeywordProxy, LocalCaller


class GreetingLibrary:
    @keyword(name="greet", doc="Say hello")
    def say_hello(self, name, greeting="Hello"):
        return "{0}, {1}!".format(greeting, name)

    def shout(self, text):
        raise RuntimeError(text.upper())


def _proxy():
    service = KeywordService(
        [GreetingLibrary()],
        config=ServerConfig(timeout=2000),
        terminate=lambda: None,
    )
    return KeywordProxy(LocalCaller(KeywordDispatcher(service)))


def test_local_caller_satisfies_caller_protocol():
    assert isinstance(_proxy()._caller, KeywordCaller)


def test_metadata_is_unknown_until_fetched():
    proxy = _proxy()

    async def run_case():
        await proxy.load()
        before = (proxy.greet.args, proxy.greet.doc)
        await proxy.wait_for_metadata()
        return before

    before = asyncio.run(run_case())

    assert before == (None, None)
    assert proxy.greet.args == ["name", "greeting"]
    assert proxy.greet.doc == "Say hello"
    assert proxy["stopRemoteServer"].args == []


def test_stub_calls_run_keyword_remotely():
    proxy = _proxy()

    async def run_case():
        await proxy.load()
        return await proxy.greet("Ada", greeting="Hi"), await proxy.shout("boom")

    greeted, shouted = asyncio.run(run_case())

    assert greeted.status is KeywordStatus.PASS
    assert greeted.return_value == "Hi, Ada!"
    assert shouted.status is KeywordStatus.FAIL
    assert shouted.error == "BOOM"


def test_proxy_container_behaviour():
    proxy = _proxy()
    asyncio.run(proxy.load())

    assert "greet" in proxy
    assert set(proxy) == {"stopRemoteServer", "greet", "shout"}
    assert len(proxy) == 3
    assert set(proxy.as_mapping()) == set(proxy.names())
    with pytest.raises(AttributeError):
        proxy.missing_keyword


def test_proxy_stop_remote_server_honors_policy():
    proxy = _proxy()

    assert asyncio.run(proxy.stop_remote_server()) is False

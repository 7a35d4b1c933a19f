#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Discovery proxy: local call stubs for every keyword a server exposes.

``load()`` asks for the keyword names, creates one stub per name right away,
and fetches each stub's arguments and documentation in the background. Until
those answers arrive ``stub.args`` and ``stub.doc`` are ``None``.

Example:
    >>> async with RemoteKeywordClient("127.0.0.1:8270") as client:
    ...     proxy = await KeywordProxy(client).load()
    ...     result = await proxy.countItemsInDirectory("/tmp")
    ...     await proxy.wait_for_metadata()
    ...     print(proxy.countItemsInDirectory.doc)
"""

import asyncio
from typing import Any, Dict, Iterator, List, Mapping, Optional, Protocol, Sequence, Union, runtime_checkable

from .protocols.dispatcher import KeywordDispatcher
from .protocols.models import KeywordResult, ProtocolMethod


@runtime_checkable
class KeywordCaller(Protocol):
    """Anything able to issue one protocol call"""

    async def call(
        self,
        method: Union[ProtocolMethod, str],
        params: Optional[Sequence[Any]] = None,
    ) -> Any:
        ...


class LocalCaller:
    """
    Caller that talks to an in-process dispatcher, bypassing the transport.
    """

    def __init__(self, dispatcher: KeywordDispatcher) -> None:
        self._dispatcher = dispatcher

    async def call(
        self,
        method: Union[ProtocolMethod, str],
        params: Optional[Sequence[Any]] = None,
    ) -> Any:
        return await self._dispatcher.dispatch(method, list(params or []))


class KeywordStub:
    """
    Awaitable call stub for one remote keyword.
    """

    def __init__(self, caller: KeywordCaller, name: str) -> None:
        self._caller = caller
        self.name = name
        self.args: Optional[List[str]] = None
        self.doc: Optional[str] = None

    async def __call__(self, *args: Any, **kwargs: Any) -> KeywordResult:
        params: List[Any] = [self.name, list(args)]
        if kwargs:
            params.append(dict(kwargs))
        payload = await self._caller.call(ProtocolMethod.RUN_KEYWORD, params)
        return KeywordResult.from_dict(payload)

    def __repr__(self) -> str:
        return "KeywordStub(name={0!r}, args={1!r})".format(self.name, self.args)


class KeywordProxy:
    """
    Builds and holds keyword stubs discovered from a server.
    """

    def __init__(self, caller: KeywordCaller) -> None:
        self._caller = caller
        self._stubs: Dict[str, KeywordStub] = {}
        self._metadata_tasks: List["asyncio.Task[None]"] = []

    async def load(self) -> "KeywordProxy":
        names = await self._caller.call(ProtocolMethod.GET_KEYWORD_NAMES, [])
        for name in names:
            stub = KeywordStub(self._caller, name)
            self._stubs[name] = stub
            self._metadata_tasks.append(asyncio.ensure_future(self._fetch_arguments(stub)))
            self._metadata_tasks.append(asyncio.ensure_future(self._fetch_documentation(stub)))
        return self

    async def _fetch_arguments(self, stub: KeywordStub) -> None:
        stub.args = list(
            await self._caller.call(ProtocolMethod.GET_KEYWORD_ARGUMENTS, [stub.name])
        )

    async def _fetch_documentation(self, stub: KeywordStub) -> None:
        stub.doc = await self._caller.call(
            ProtocolMethod.GET_KEYWORD_DOCUMENTATION, [stub.name]
        )

    async def wait_for_metadata(self) -> None:
        """
        Wait until every stub has its arguments and documentation; the first
        failed fetch is re-raised.
        """
        if self._metadata_tasks:
            await asyncio.gather(*self._metadata_tasks)

    async def stop_remote_server(self) -> bool:
        return bool(await self._caller.call(ProtocolMethod.STOP_REMOTE_SERVER, []))

    def names(self) -> List[str]:
        return list(self._stubs.keys())

    def as_mapping(self) -> Mapping[str, KeywordStub]:
        return dict(self._stubs)

    def __getitem__(self, name: str) -> KeywordStub:
        return self._stubs[name]

    def __getattr__(self, name: str) -> KeywordStub:
        stubs = self.__dict__.get("_stubs", {})
        if name in stubs:
            return stubs[name]
        raise AttributeError("No remote keyword named '{0}'".format(name))

    def __contains__(self, name: object) -> bool:
        return name in self._stubs

    def __iter__(self) -> Iterator[str]:
        return iter(self._stubs)

    def __len__(self) -> int:
        return len(self._stubs)

#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
gRPC client for the remote keyword protocol.

``RemoteKeywordClient.call(method, params)`` is the transport-level caller the
discovery proxy builds on; typed helpers wrap the five protocol methods.

Example:
    >>> async with RemoteKeywordClient("127.0.0.1:8270") as client:
    ...     names = await client.get_keyword_names()
    ...     result = await client.run_keyword("add", [2, 3])
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import grpc
from grpc import aio as grpc_aio

from ...protocols.models import KeywordResult, ProtocolMethod
from ..data import JSONBackend
from ..utils.exceptions import (
    ExceptionTranslator,
    InvalidParamsError,
    KeywordNotFoundError,
    ProtocolFaultError,
    RemoteKeywordError,
)
from ..utils.logger import ModernLogger
from .server import method_path


def translate_rpc_error(
    exc: grpc.RpcError,
    method: ProtocolMethod,
    params: Sequence[Any],
    address: str,
) -> RemoteKeywordError:
    """
    Map a gRPC status back onto the protocol fault hierarchy.
    """
    code = exc.code() if hasattr(exc, "code") else None
    details = exc.details() if hasattr(exc, "details") else str(exc)
    if code == grpc.StatusCode.NOT_FOUND:
        name = params[0] if params else ""
        return KeywordNotFoundError(str(name), method=method.value, message=details)
    if code == grpc.StatusCode.INVALID_ARGUMENT:
        return InvalidParamsError(details or "Invalid parameters", method=method.value)
    if code == grpc.StatusCode.UNIMPLEMENTED:
        return ProtocolFaultError(details or "Method not implemented", method=method.value)
    return ExceptionTranslator.as_transport_error(
        exc,
        address=address,
        message="{0} failed: {1}".format(method.value, details or code),
    )


class RemoteKeywordClient(ModernLogger):
    """
    Async caller for a remote keyword server.

    Args:
        address: ``host:port`` of the server
        timeout: Per-call deadline in seconds; None waits indefinitely
    """

    def __init__(
        self,
        address: str,
        timeout: Optional[float] = None,
        log_level: str = "info",
    ) -> None:
        super().__init__(name="RemoteKeywordClient", level=log_level)
        self.address = address
        self.timeout = timeout
        self._serializer = JSONBackend()
        self._channel: Optional[grpc_aio.Channel] = None
        self._stubs: Dict[ProtocolMethod, Any] = {}

    async def connect(self) -> "RemoteKeywordClient":
        if self._channel is None:
            self._channel = grpc_aio.insecure_channel(self.address)
            self._stubs = {
                method: self._channel.unary_unary(
                    method_path(method),
                    request_serializer=self._serializer.serialize,
                    response_deserializer=self._serializer.deserialize,
                )
                for method in ProtocolMethod
            }
            self.debug("Opened channel to %s", self.address)
        return self

    async def close(self) -> None:
        if self._channel is not None:
            await self._channel.close()
            self._channel = None
            self._stubs = {}

    async def __aenter__(self) -> "RemoteKeywordClient":
        return await self.connect()

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        await self.close()

    async def call(
        self,
        method: Union[ProtocolMethod, str],
        params: Optional[Sequence[Any]] = None,
    ) -> Any:
        """
        Issue one protocol call and return the decoded response.
        """
        protocol_method = ProtocolMethod.from_value(method)
        payload = list(params or [])
        await self.connect()
        try:
            return await self._stubs[protocol_method](payload, timeout=self.timeout)
        except grpc.RpcError as e:
            raise translate_rpc_error(e, protocol_method, payload, self.address) from e

    async def get_keyword_names(self) -> List[str]:
        return list(await self.call(ProtocolMethod.GET_KEYWORD_NAMES))

    async def get_keyword_arguments(self, name: str) -> List[str]:
        return list(await self.call(ProtocolMethod.GET_KEYWORD_ARGUMENTS, [name]))

    async def get_keyword_documentation(self, name: str) -> str:
        return await self.call(ProtocolMethod.GET_KEYWORD_DOCUMENTATION, [name])

    async def run_keyword(
        self,
        name: str,
        args: Sequence[Any] = (),
        kwargs: Optional[Mapping[str, Any]] = None,
    ) -> KeywordResult:
        params: List[Any] = [name, list(args)]
        if kwargs:
            params.append(dict(kwargs))
        return KeywordResult.from_dict(await self.call(ProtocolMethod.RUN_KEYWORD, params))

    async def stop_remote_server(self) -> bool:
        return bool(await self.call(ProtocolMethod.STOP_REMOTE_SERVER))

#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Transport-agnostic dispatcher for the remote keyword protocol.

A transport hands ``dispatch`` a method name and the positional parameter
list it decoded from the wire, and gets back a plain wire value (list, str,
dict, bool). Protocol faults are raised, never encoded as results:

- unknown method -> ``ProtocolFaultError``
- malformed parameters -> ``InvalidParamsError``
- unknown keyword -> ``KeywordNotFoundError``

Keyword failures are not faults; they come back as a FAIL envelope inside a
successful ``run_keyword`` response.
"""

from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from ..core.utils.exceptions import InvalidParamsError, ProtocolFaultError
from ..core.utils.logger import ModernLogger
from .models import ProtocolMethod
from .runtime import KeywordRuntime

Handler = Callable[[Sequence[Any]], Awaitable[Any]]


class KeywordDispatcher(ModernLogger):
    """
    Binds protocol method names to runtime operations.
    """

    def __init__(self, runtime: KeywordRuntime, log_level: str = "info") -> None:
        super().__init__(name="KeywordDispatcher", level=log_level)
        self._runtime = runtime
        self._handlers: Dict[ProtocolMethod, Handler] = {
            ProtocolMethod.GET_KEYWORD_NAMES: self._get_keyword_names,
            ProtocolMethod.GET_KEYWORD_ARGUMENTS: self._get_keyword_arguments,
            ProtocolMethod.GET_KEYWORD_DOCUMENTATION: self._get_keyword_documentation,
            ProtocolMethod.RUN_KEYWORD: self._run_keyword,
            ProtocolMethod.STOP_REMOTE_SERVER: self._stop_remote_server,
        }

    @property
    def runtime(self) -> KeywordRuntime:
        return self._runtime

    def supported_methods(self) -> List[str]:
        return [method.value for method in self._handlers]

    async def dispatch(
        self,
        method: Union[ProtocolMethod, str],
        params: Optional[Sequence[Any]] = None,
    ) -> Any:
        """
        Route one protocol call to its handler.
        """
        try:
            protocol_method = ProtocolMethod.from_value(method)
        except ValueError as exc:
            raise ProtocolFaultError(
                message="Unknown protocol method: {0}".format(method),
                method=str(method),
                cause=exc,
            ) from exc

        if params is None:
            params = []
        if not isinstance(params, (list, tuple)):
            raise InvalidParamsError(
                "Parameters must be a list", method=protocol_method.value
            )

        self.debug("Dispatching %s with %d parameter(s)", protocol_method.value, len(params))
        return await self._handlers[protocol_method](params)

    @staticmethod
    def _expect(
        method: ProtocolMethod,
        params: Sequence[Any],
        minimum: int,
        maximum: int,
    ) -> None:
        if not minimum <= len(params) <= maximum:
            expected = str(minimum) if minimum == maximum else "{0}-{1}".format(minimum, maximum)
            raise InvalidParamsError(
                "{0} expects {1} parameter(s), got {2}".format(
                    method.value, expected, len(params)
                ),
                method=method.value,
            )

    @staticmethod
    def _keyword_name(method: ProtocolMethod, params: Sequence[Any]) -> str:
        name = params[0]
        if not isinstance(name, str):
            raise InvalidParamsError(
                "Keyword name must be a string", method=method.value
            )
        return name

    async def _get_keyword_names(self, params: Sequence[Any]) -> List[str]:
        self._expect(ProtocolMethod.GET_KEYWORD_NAMES, params, 0, 0)
        return list(self._runtime.keyword_names())

    async def _get_keyword_arguments(self, params: Sequence[Any]) -> List[str]:
        method = ProtocolMethod.GET_KEYWORD_ARGUMENTS
        self._expect(method, params, 1, 1)
        return list(self._runtime.keyword_arguments(self._keyword_name(method, params)))

    async def _get_keyword_documentation(self, params: Sequence[Any]) -> str:
        method = ProtocolMethod.GET_KEYWORD_DOCUMENTATION
        self._expect(method, params, 1, 1)
        return self._runtime.keyword_documentation(self._keyword_name(method, params))

    async def _run_keyword(self, params: Sequence[Any]) -> Dict[str, Any]:
        method = ProtocolMethod.RUN_KEYWORD
        self._expect(method, params, 1, 3)
        name = self._keyword_name(method, params)
        args, kwargs = self._split_arguments(method, params[1:])

        result = await self._runtime.run_keyword(name, args, kwargs)
        return result.to_dict()

    @staticmethod
    def _split_arguments(
        method: ProtocolMethod, rest: Sequence[Any]
    ) -> Tuple[List[Any], Dict[str, Any]]:
        args: Any = rest[0] if len(rest) > 0 else []
        kwargs: Any = rest[1] if len(rest) > 1 else {}

        if args is None or args == "":
            args = []
        if kwargs is None or kwargs == "":
            kwargs = {}
        if not isinstance(args, (list, tuple)):
            raise InvalidParamsError(
                "Keyword arguments must be a list", method=method.value
            )
        if not isinstance(kwargs, Mapping):
            raise InvalidParamsError(
                "Named keyword arguments must be an object", method=method.value
            )
        return list(args), {str(key): value for key, value in kwargs.items()}

    async def _stop_remote_server(self, params: Sequence[Any]) -> bool:
        self._expect(ProtocolMethod.STOP_REMOTE_SERVER, params, 0, 0)
        return bool(self._runtime.stop_remote_server())

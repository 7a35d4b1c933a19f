#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Keyword service: the runtime behind the protocol dispatcher.

Composes the registry, the execution engine and the lifecycle controller and
registers the reserved ``stopRemoteServer`` keyword before any library, so
libraries may shadow it (last registration wins).
"""

from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence

from ..protocols.models import KeywordResult
from ..protocols.runtime import KeywordRuntime
from .config import ServerConfig
from .engine import ExecutionEngine
from .lifecycle import LifecycleController, terminate_process
from .registry import STOP_REMOTE_SERVER_KEYWORD, KeywordRegistry
from .utils.logger import ModernLogger


class KeywordService(KeywordRuntime, ModernLogger):
    """
    In-process keyword runtime.

    Args:
        libraries: Keyword libraries, registered in order
        config: Server configuration (timeout, allow_stop, grace window)
        close_listener: Transport listener close callable for shutdown
        terminate: Forced termination callable; defaults to SIGTERM to self
    """

    def __init__(
        self,
        libraries: Iterable[Any] = (),
        config: Optional[ServerConfig] = None,
        close_listener: Optional[Callable[[], Any]] = None,
        terminate: Callable[[], None] = terminate_process,
    ) -> None:
        self.config = config or ServerConfig()
        ModernLogger.__init__(self, name="KeywordService", level=self.config.log_level)

        self.registry = KeywordRegistry(log_level=self.config.log_level)
        self.lifecycle = LifecycleController(
            close_listener=close_listener,
            allow_stop=self.config.allow_stop,
            grace_window=self.config.grace_window_seconds,
            terminate=terminate,
            address=self.config.address,
            log_level=self.config.log_level,
        )
        self.engine = ExecutionEngine(
            self.registry,
            timeout=self.config.timeout_seconds,
            cancel_on_timeout=self.config.cancel_on_timeout,
            log_level=self.config.log_level,
        )

        self.registry.register_keyword(
            STOP_REMOTE_SERVER_KEYWORD,
            self.lifecycle.stop_remote_server,
            doc="Stop remote server",
            args=(),
        )
        for library in libraries:
            self.registry.register(library)

        self.info("Loaded %d keyword(s)", len(self.registry))

    def keyword_names(self) -> List[str]:
        return self.registry.names()

    def keyword_arguments(self, name: str) -> List[str]:
        return list(self.registry.get(name).args)

    def keyword_documentation(self, name: str) -> str:
        return self.registry.get(name).doc

    async def run_keyword(
        self,
        name: str,
        args: Sequence[Any] = (),
        kwargs: Optional[Mapping[str, Any]] = None,
    ) -> KeywordResult:
        return await self.engine.run_keyword(name, args, kwargs)

    def stop_remote_server(self) -> bool:
        return self.lifecycle.stop_remote_server()

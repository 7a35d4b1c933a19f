#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
gRPC transport for the remote keyword server.

The five protocol methods are exposed as unary methods of the
``robotremote.RemoteKeywords`` service through generic handlers, so no
generated stubs are needed. Requests are JSON arrays of positional
parameters and responses are JSON values (see ``core.data.backends``).

Protocol faults become gRPC status codes:

- unknown keyword -> ``NOT_FOUND``
- malformed parameters -> ``INVALID_ARGUMENT``
- unknown method -> ``UNIMPLEMENTED`` (answered by gRPC itself)

Usage:
    >>> server = KeywordServer([MyLibrary()], host="0.0.0.0", port=8270, allow_stop=True)
    >>> server.start()  # Blocks until stopped

    >>> thread = server.start_background()
    >>> server.stop()
"""

import asyncio
import threading
import time
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

import grpc
from grpc import aio as grpc_aio

from ...protocols.dispatcher import KeywordDispatcher
from ...protocols.models import ProtocolMethod
from ..config import ServerConfig, create_config, get_config
from ..data import JSONBackend
from ..lifecycle import SignalWatcher, terminate_process
from ..service import KeywordService
from ..utils.exceptions import (
    ExceptionFormatter,
    ExceptionTranslator,
    InvalidParamsError,
    KeywordNotFoundError,
    ProtocolFaultError,
    RemoteKeywordError,
    TransportError,
)
from ..utils.logger import ModernLogger

SERVICE_NAME = "robotremote.RemoteKeywords"


def method_path(method: ProtocolMethod) -> str:
    return "/{0}/{1}".format(SERVICE_NAME, method.value)


def fault_status(exc: ProtocolFaultError) -> grpc.StatusCode:
    if isinstance(exc, KeywordNotFoundError):
        return grpc.StatusCode.NOT_FOUND
    if isinstance(exc, InvalidParamsError):
        return grpc.StatusCode.INVALID_ARGUMENT
    return grpc.StatusCode.UNIMPLEMENTED


class ServerState(Enum):
    """
    Server lifecycle states.
    """
    INITIALIZING = "initializing"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"
    ERROR = "error"


_VALID_TRANSITIONS = {
    ServerState.INITIALIZING: {ServerState.STARTING, ServerState.ERROR},
    ServerState.STARTING: {ServerState.RUNNING, ServerState.ERROR, ServerState.STOPPING},
    ServerState.RUNNING: {ServerState.STOPPING, ServerState.ERROR},
    ServerState.STOPPING: {ServerState.STOPPED, ServerState.ERROR},
    ServerState.STOPPED: set(),
    ServerState.ERROR: {ServerState.STOPPING, ServerState.STOPPED},
}


class KeywordServer(ModernLogger):
    """
    Remote keyword server listening on gRPC.

    Args:
        libraries: Keyword libraries to expose
        config: Base configuration; read from ``ROBOTREMOTE_*`` environment
            variables when omitted. Keyword overrides are applied on top
        install_signal_handlers: Watch SIGINT/SIGHUP when serving on the main thread
        terminate: Forced termination callable used after the grace window
        **overrides: ``ServerConfig`` fields (``host``, ``port``, ``timeout``,
            ``allow_stop``/``allowStop``, ...)
    """

    def __init__(
        self,
        libraries: Iterable[Any] = (),
        config: Optional[ServerConfig] = None,
        install_signal_handlers: bool = True,
        terminate: Callable[[], None] = terminate_process,
        **overrides: Any,
    ) -> None:
        self.config = create_config(config or get_config(), **overrides)
        ModernLogger.__init__(self, name="KeywordServer", level=self.config.log_level)

        self.service = KeywordService(
            libraries,
            config=self.config,
            close_listener=self._close_listener,
            terminate=terminate,
        )
        self.dispatcher = KeywordDispatcher(self.service, log_level=self.config.log_level)
        self._serializer = JSONBackend()
        self._install_signal_handlers = install_signal_handlers

        self._state = ServerState.INITIALIZING
        self._grpc_server: Optional[grpc_aio.Server] = None
        self._event_loop: Optional[asyncio.AbstractEventLoop] = None
        self._server_thread: Optional[threading.Thread] = None
        self._signal_watcher: Optional[SignalWatcher] = None
        self._shutdown_event: Optional[asyncio.Event] = None
        self.bound_port: Optional[int] = None

    @property
    def state(self) -> ServerState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state == ServerState.RUNNING

    @property
    def address(self) -> str:
        port = self.bound_port if self.bound_port is not None else self.config.port
        return "{0}:{1}".format(self.config.host, port)

    def _set_state(self, new_state: ServerState) -> None:
        old_state = self._state
        if old_state == new_state:
            return
        if new_state not in _VALID_TRANSITIONS[old_state]:
            raise RuntimeError(f"Invalid state transition: {old_state} -> {new_state}")
        self._state = new_state
        self.debug("Server state changed: %s -> %s", old_state.value, new_state.value)

    # -- gRPC wiring -------------------------------------------------------

    def _make_handler(self, method: ProtocolMethod):
        async def handler(request: Any, context: grpc_aio.ServicerContext) -> Any:
            try:
                return await self.dispatcher.dispatch(method, request)
            except ProtocolFaultError as e:
                self.debug("Protocol fault in %s: %s", method.value, e.message)
                await context.abort(fault_status(e), e.message)
            except RemoteKeywordError as e:
                self.error("Error handling %s: %s", method.value, ExceptionFormatter.format_exception_chain(e))
                await context.abort(grpc.StatusCode.INTERNAL, e.message)

        return handler

    def _build_generic_handler(self) -> grpc.GenericRpcHandler:
        handlers: Dict[str, grpc.RpcMethodHandler] = {
            method.value: grpc.unary_unary_rpc_method_handler(
                self._make_handler(method),
                request_deserializer=self._serializer.deserialize,
                response_serializer=self._serializer.serialize,
            )
            for method in ProtocolMethod
        }
        return grpc.method_handlers_generic_handler(SERVICE_NAME, handlers)

    def _get_grpc_server_options(self) -> List[Tuple[str, Any]]:
        return [
            ('grpc.max_send_message_length', 50 * 1024 * 1024),
            ('grpc.max_receive_message_length', 50 * 1024 * 1024),
            ('grpc.keepalive_time_ms', 30000),
            ('grpc.keepalive_timeout_ms', 5000),
            ('grpc.keepalive_permit_without_calls', True),
            ('grpc.so_reuseport', 0),
        ]

    def _close_listener(self) -> Any:
        """
        Stop accepting calls; in-flight calls get the grace window to finish.
        """
        if self._shutdown_event is not None:
            self._shutdown_event.set()
        if self._state in {ServerState.STARTING, ServerState.RUNNING}:
            self._set_state(ServerState.STOPPING)
        if self._grpc_server is None:
            return None
        return self._grpc_server.stop(grace=self.config.grace_window_seconds)

    # -- async lifecycle ---------------------------------------------------

    async def start_async(self) -> int:
        """
        Bind and start listening on the running loop; returns the bound port.
        """
        if self._state != ServerState.INITIALIZING:
            raise RuntimeError(f"Server cannot start from state: {self._state}")
        self._set_state(ServerState.STARTING)
        self._shutdown_event = asyncio.Event()

        try:
            self._grpc_server = grpc_aio.server(options=self._get_grpc_server_options())
            self._grpc_server.add_generic_rpc_handlers((self._build_generic_handler(),))
            self.bound_port = self._grpc_server.add_insecure_port(self.config.address)
            if not self.bound_port:
                raise TransportError("Could not bind listener", address=self.config.address)
            await self._grpc_server.start()
        except Exception as e:
            self._set_state(ServerState.ERROR)
            self.error("Server error during startup: %s", e, exc_info=True)
            raise ExceptionTranslator.as_transport_error(
                e, address=self.config.address, message="Remote keyword server startup failed"
            ) from e

        if self._install_signal_handlers and threading.current_thread() is threading.main_thread():
            self._signal_watcher = SignalWatcher(self.service.lifecycle, log_level=self.config.log_level)
            self._signal_watcher.install()

        self.service.lifecycle.address = self.address
        self._set_state(ServerState.RUNNING)
        self.info("Robot Framework remote server starting at %s", self.address)
        return self.bound_port

    async def wait_for_termination(self) -> None:
        if self._grpc_server is None:
            return
        await self._grpc_server.wait_for_termination()
        if self._state == ServerState.STOPPING:
            self._set_state(ServerState.STOPPED)

    async def serve(self) -> None:
        """
        Start and block the current loop until the listener closes.

        After a remote or signalled stop the loop stays alive until the grace
        window ends and the forced termination has run.
        """
        await self.start_async()
        try:
            await self.wait_for_termination()
            await self.service.lifecycle.wait_for_forced_termination()
        finally:
            if self._signal_watcher is not None:
                self._signal_watcher.uninstall()

    async def stop_async(self, grace: Optional[float] = None) -> None:
        """
        Close the listener from the owning loop and wait until it is closed.
        """
        if self._state in {ServerState.INITIALIZING, ServerState.STOPPED}:
            self.service.lifecycle.cancel_pending_termination()
            return
        if self._state != ServerState.STOPPING:
            self._set_state(ServerState.STOPPING)
        if self._shutdown_event is not None:
            self._shutdown_event.set()
        if self._grpc_server is not None:
            await self._grpc_server.stop(grace=grace)
        if self._signal_watcher is not None:
            self._signal_watcher.uninstall()
        self.service.lifecycle.cancel_pending_termination()
        self._set_state(ServerState.STOPPED)

    # -- blocking / background modes ---------------------------------------

    def start(self) -> "KeywordServer":
        """
        Serve in blocking mode on a fresh event loop.
        """
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            pass
        else:
            raise RuntimeError("start() cannot run inside an event loop; await serve() instead")

        self._event_loop = asyncio.new_event_loop()
        self._initialize_event_loop(self._event_loop)
        try:
            self._event_loop.run_until_complete(self.serve())
            return self
        finally:
            self._finalize_event_loop(self._event_loop)
            self._event_loop = None

    def start_background(self, timeout: float = 10.0) -> threading.Thread:
        """
        Serve on a daemon thread; returns once the listener is up.
        """
        if self._state != ServerState.INITIALIZING:
            raise RuntimeError(f"Server cannot start from state: {self._state}")

        def _background_server_runner():
            loop = asyncio.new_event_loop()
            self._event_loop = loop
            self._initialize_event_loop(loop)
            try:
                loop.run_until_complete(self.serve())
            except RemoteKeywordError as e:
                self.error("Error in background server: %s", e.message)
            except Exception as e:
                self.error("Unexpected error in background server: %s", e, exc_info=True)
            finally:
                self._finalize_event_loop(loop)

        self._server_thread = threading.Thread(
            target=_background_server_runner,
            name=f"RobotRemoteServer-{self.config.port}",
            daemon=True,
        )
        self._server_thread.start()
        self._wait_for_server_ready(timeout=timeout)
        return self._server_thread

    def stop(self, grace: Optional[float] = None, timeout: float = 10.0) -> None:
        """
        Stop from outside the serving loop (other thread, or after start() returned).
        """
        loop = self._event_loop
        if loop is None or loop.is_closed():
            return
        try:
            if loop.is_running():
                future = asyncio.run_coroutine_threadsafe(self.stop_async(grace=grace), loop)
                future.result(timeout=timeout)
            else:
                loop.run_until_complete(self.stop_async(grace=grace))
        except Exception as e:
            self.warning("Error while stopping server: %s", e)

        if self._server_thread is not None and self._server_thread.is_alive():
            self._server_thread.join(timeout=timeout)

    def _wait_for_server_ready(self, timeout: float) -> None:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if self._state == ServerState.RUNNING:
                return
            if self._state == ServerState.ERROR:
                raise TransportError("Server failed to start", address=self.config.address)
            time.sleep(0.05)
        raise TransportError(
            "Server did not start within {0} seconds".format(timeout),
            address=self.config.address,
        )

    def _initialize_event_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        asyncio.set_event_loop(loop)
        loop.set_exception_handler(self._handle_loop_exception)

    def _handle_loop_exception(
        self,
        loop: asyncio.AbstractEventLoop,
        context: Dict[str, Any],
    ) -> None:
        """
        Drop the grpc.aio poller BlockingIOError emitted while shutting down.
        """
        exception = context.get("exception")
        if (
            self._shutdown_event is not None
            and self._shutdown_event.is_set()
            and isinstance(exception, BlockingIOError)
            and "PollerCompletionQueue._handle_events" in repr(context.get("handle"))
        ):
            return
        loop.default_exception_handler(context)

    def _finalize_event_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        if loop.is_closed() or loop.is_running():
            return
        try:
            pending = [task for task in asyncio.all_tasks(loop) if not task.done()]
            for task in pending:
                task.cancel()
            if pending:
                loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
            loop.run_until_complete(loop.shutdown_asyncgens())
        except Exception as e:
            self.warning("Error while finalizing server loop: %s", e)
        finally:
            loop.close()

#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Shutdown lifecycle for the remote keyword server.

``LifecycleController`` owns the ``allow_stop`` policy and the shutdown
sequence: close the transport listener without waiting for it, then force
process termination once the grace window elapses so lingering client
connections cannot keep the process alive.

``SignalWatcher`` is a separate collaborator translating SIGINT/SIGHUP into a
shutdown request. It reacts to the first signal only; after that the default
OS disposition applies again, so a second Ctrl-C kills the process outright.
"""

import asyncio
import inspect
import os
import signal
from typing import Any, Callable, Iterable, List, Optional

from .utils.logger import ModernLogger

DEFAULT_SHUTDOWN_SIGNALS = tuple(
    sig for sig in (getattr(signal, "SIGINT", None), getattr(signal, "SIGHUP", None))
    if sig is not None
)


def terminate_process() -> None:
    """
    Default forced termination: SIGTERM to the current process.
    """
    os.kill(os.getpid(), signal.SIGTERM)


class LifecycleController(ModernLogger):
    """
    Handles stop requests for a server bound to ``address``.

    Args:
        close_listener: Closes the transport listener; may return an awaitable,
            which is scheduled but not awaited
        allow_stop: Whether remote stop requests are honored
        grace_window: Seconds between shutdown request and forced termination
        terminate: Forced termination callable
        address: ``host:port`` used in log messages
    """

    def __init__(
        self,
        close_listener: Optional[Callable[[], Any]] = None,
        allow_stop: bool = False,
        grace_window: float = 2.0,
        terminate: Callable[[], None] = terminate_process,
        address: str = "",
        log_level: str = "info",
    ) -> None:
        super().__init__(name="LifecycleController", level=log_level)
        self._close_listener = close_listener
        self._allow_stop = allow_stop is True
        self.grace_window = grace_window
        self._terminate = terminate
        self.address = address
        self._shutdown_requested = False
        self._close_task: Optional["asyncio.Future[Any]"] = None
        self._terminate_handle: Optional[asyncio.TimerHandle] = None
        self._termination_settled: Optional[asyncio.Event] = None

    @property
    def allow_stop(self) -> bool:
        return self._allow_stop

    @property
    def shutdown_requested(self) -> bool:
        return self._shutdown_requested

    def force_allow_stop(self) -> None:
        self._allow_stop = True

    def _prefix(self) -> str:
        return "Robot Framework remote server at {0}".format(self.address)

    def stop_remote_server(self) -> bool:
        """
        Honor a remote stop request when allowed.

        Returns immediately; the listener close and the forced termination are
        scheduled on the running loop.
        """
        if not self._allow_stop:
            self.info("%s does not allow stopping", self._prefix())
            return False

        self.info("%s stopping", self._prefix())
        self.request_shutdown()
        return True

    def request_shutdown(self, grace_window: Optional[float] = None) -> None:
        """
        Close the listener and schedule forced termination.

        Bypasses the ``allow_stop`` policy; meant for operators and signal
        handling. Repeated requests are ignored.
        """
        if self._shutdown_requested:
            self.debug("Shutdown already requested")
            return
        self._shutdown_requested = True

        window = self.grace_window if grace_window is None else grace_window
        loop = asyncio.get_running_loop()
        self._termination_settled = asyncio.Event()

        if self._close_listener is not None:
            closing = self._close_listener()
            if inspect.isawaitable(closing):
                self._close_task = asyncio.ensure_future(closing)
                self._close_task.add_done_callback(self._on_listener_closed)

        self._terminate_handle = loop.call_later(window, self._force_terminate)
        self.debug("Forced termination scheduled in %.3fs", window)

    def _on_listener_closed(self, task: "asyncio.Future[Any]") -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self.warning("Error while closing listener: %s", exc)
        else:
            self.debug("Listener closed")

    def _force_terminate(self) -> None:
        self._terminate_handle = None
        self.info("%s terminating after grace window", self._prefix())
        try:
            self._terminate()
        finally:
            self._settle_termination()

    def _settle_termination(self) -> None:
        if self._termination_settled is not None:
            self._termination_settled.set()

    def cancel_pending_termination(self) -> None:
        """
        Drop a scheduled forced termination. Only an explicit local stop does
        this; a remote or signalled stop always ends in termination.
        """
        if self._terminate_handle is not None:
            self._terminate_handle.cancel()
            self._terminate_handle = None
        self._settle_termination()

    async def wait_for_forced_termination(self) -> None:
        """
        Block until a requested shutdown has run its forced termination or had
        it cancelled. Returns at once when no shutdown was requested.
        """
        if self._termination_settled is not None:
            await self._termination_settled.wait()


class SignalWatcher(ModernLogger):
    """
    One-shot translation of termination signals into a stop request.
    """

    def __init__(
        self,
        controller: LifecycleController,
        signals: Iterable[int] = DEFAULT_SHUTDOWN_SIGNALS,
        log_level: str = "info",
    ) -> None:
        super().__init__(name="SignalWatcher", level=log_level)
        self._controller = controller
        self._signals: List[int] = list(signals)
        self._installed: List[int] = []
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._fired = False

    @property
    def installed_signals(self) -> List[int]:
        return list(self._installed)

    def install(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> bool:
        """
        Register handlers on the loop; False when the platform or thread
        does not support loop signal handlers.
        """
        self._loop = loop or asyncio.get_running_loop()
        for sig in self._signals:
            try:
                self._loop.add_signal_handler(sig, self._handle_signal, sig)
            except (NotImplementedError, RuntimeError, ValueError) as e:
                self.debug("Cannot watch signal %s: %s", sig, e)
                continue
            self._installed.append(sig)
        return bool(self._installed)

    def uninstall(self) -> None:
        if self._loop is None:
            return
        for sig in self._installed:
            self._loop.remove_signal_handler(sig)
            signal.signal(sig, signal.SIG_DFL)
        self._installed = []

    def _handle_signal(self, sig: int) -> None:
        if self._fired:
            return
        self._fired = True
        self.info("Received signal %s, shutting down", sig)
        self.uninstall()
        self._controller.force_allow_stop()
        self._controller.stop_remote_server()

#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Keyword execution engine.

Runs one keyword per call and turns whatever happens into exactly one
``KeywordResult``:

1. resolve the keyword (unknown name is a protocol fault, raised)
2. arm the per-invocation timeout timer
3. call the body synchronously and classify the outcome
   (``Value`` / ``Failure`` / ``Deferred``)
4. for a ``Deferred`` outcome, wait for settlement without blocking the loop
5. normalize the final value into the envelope

The timer and the body race to deliver. ``SingleDeliveryGuard`` lets only the
first one through; the loser is dropped without logging or retry.

A timed-out deferred body is abandoned by default. With
``cancel_on_timeout=True`` its asyncio task is cancelled, which only helps
bodies that reach an ``await``; synchronous work cannot be interrupted either
way.
"""

import asyncio
import time
from typing import Any, Mapping, Optional, Sequence

from ..keywords import Deferred, Failure, KeywordOutcome, Return, Value, as_outcome
from ..protocols.models import KeywordResult
from .registry import Keyword, KeywordRegistry
from .utils.concurrency import SingleDeliveryGuard, create_loop_future
from .utils.exceptions import ExceptionFormatter
from .utils.logger import ModernLogger


class Invocation:
    """
    Ephemeral state of one ``run_keyword`` call.
    """

    def __init__(self, keyword_name: str) -> None:
        self.keyword_name = keyword_name
        self.started_at = time.monotonic()
        self.guard = SingleDeliveryGuard(name=keyword_name)
        self.result: "asyncio.Future[KeywordResult]" = create_loop_future()
        self.timer: Optional[asyncio.TimerHandle] = None
        self.pending: Optional["asyncio.Future[Any]"] = None

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self.started_at

    def deliver(self, result: KeywordResult) -> bool:
        """
        Hand over the terminal result; False when another path already did.
        """
        if not self.guard.claim():
            return False
        self.cancel_timer()
        if not self.result.done():
            self.result.set_result(result)
        return True

    def cancel_timer(self) -> None:
        if self.timer is not None:
            self.timer.cancel()
            self.timer = None


def normalize_outcome(outcome: KeywordOutcome) -> KeywordResult:
    """
    Fold a non-deferred outcome into a result envelope.
    """
    if isinstance(outcome, Failure):
        return KeywordResult.failed(outcome.message, outcome.traceback)

    if isinstance(outcome, Value):
        value = outcome.value
        if not isinstance(value, Return):
            return KeywordResult.passed(value)

        embedded = value.error
        if isinstance(embedded, BaseException):
            embedded = Failure.from_exception(embedded)
        if isinstance(embedded, Failure):
            return KeywordResult.failed(
                embedded.message,
                embedded.traceback,
                return_value=value.return_value,
                output=value.output,
            )
        return KeywordResult.passed(value.return_value, value.output)

    if isinstance(outcome, Deferred):
        raise TypeError("Deferred outcomes must settle before normalization")
    raise TypeError("Unknown keyword outcome: {0!r}".format(outcome))


class ExecutionEngine(ModernLogger):
    """
    Executes registry keywords under a per-invocation timeout.

    Args:
        registry: Keyword lookup
        timeout: Per-invocation timeout in seconds
        cancel_on_timeout: Cancel the pending task of a timed-out deferred body
    """

    def __init__(
        self,
        registry: KeywordRegistry,
        timeout: float = 10.0,
        cancel_on_timeout: bool = False,
        log_level: str = "info",
    ) -> None:
        super().__init__(name="ExecutionEngine", level=log_level)
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self._registry = registry
        self.timeout = timeout
        self.cancel_on_timeout = cancel_on_timeout
        self._in_flight = 0

    @property
    def in_flight(self) -> int:
        return self._in_flight

    async def run_keyword(
        self,
        name: str,
        args: Sequence[Any] = (),
        kwargs: Optional[Mapping[str, Any]] = None,
    ) -> KeywordResult:
        keyword = self._registry.get(name)
        loop = asyncio.get_running_loop()

        invocation = Invocation(keyword.name)
        invocation.timer = loop.call_later(self.timeout, self._on_timeout, invocation)
        self._in_flight += 1
        try:
            outcome = self._call_body(keyword, args, kwargs or {})
            if isinstance(outcome, Deferred):
                self._await_deferred(invocation, outcome)
            else:
                invocation.deliver(normalize_outcome(outcome))

            result = await invocation.result
        finally:
            invocation.cancel_timer()
            self._in_flight -= 1

        self.debug(
            "Keyword '%s' finished with %s in %.3fs",
            keyword.name,
            result.status.value,
            invocation.elapsed,
        )
        return result

    def _call_body(
        self,
        keyword: Keyword,
        args: Sequence[Any],
        kwargs: Mapping[str, Any],
    ) -> KeywordOutcome:
        try:
            returned = keyword.body(*args, **kwargs)
        except Exception as exc:
            self.debug("Keyword '%s' raised %s", keyword.name, ExceptionFormatter.format_exception_summary(exc))
            return Failure.from_exception(exc)
        return as_outcome(returned)

    def _on_timeout(self, invocation: Invocation) -> None:
        invocation.timer = None
        if not invocation.deliver(KeywordResult.timed_out()):
            return

        self.warning(
            "Keyword '%s' timed out after %.3fs", invocation.keyword_name, self.timeout
        )
        if self.cancel_on_timeout and invocation.pending is not None:
            invocation.pending.cancel()

    def _on_settled(self, invocation: Invocation, task: "asyncio.Future[Any]") -> None:
        # Always consume the task so late failures are not reported as unretrieved.
        if task.cancelled():
            outcome: KeywordOutcome = Failure("Keyword execution was cancelled")
        else:
            exc = task.exception()
            if exc is not None:
                outcome = Failure.from_exception(exc)
            else:
                outcome = as_outcome(task.result())

        if invocation.guard.claimed:
            return
        if isinstance(outcome, Deferred):
            # Settled into another awaitable; keep waiting on the same invocation.
            self._await_deferred(invocation, outcome)
            return
        invocation.deliver(normalize_outcome(outcome))

    def _await_deferred(self, invocation: Invocation, outcome: Deferred) -> None:
        invocation.pending = outcome.to_future()
        invocation.pending.add_done_callback(
            lambda task: self._on_settled(invocation, task)
        )

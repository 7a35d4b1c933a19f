#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Concurrency primitives for keyword execution.
"""

import asyncio
import threading
from typing import Any


class SingleDeliveryGuard:
    """
    Claim-once flag deciding which completion path owns an invocation.

    The first caller of ``claim()`` gets ``True``; every later caller gets
    ``False`` and must drop its result without side effects. The internal lock
    keeps the check-and-set atomic when a settlement callback arrives from a
    foreign thread (``concurrent.futures`` callbacks).
    """

    def __init__(self, name: str = "invocation") -> None:
        self._name = name
        self._claimed = False
        self._guard = threading.Lock()

    def claim(self) -> bool:
        with self._guard:
            if self._claimed:
                return False
            self._claimed = True
            return True

    @property
    def claimed(self) -> bool:
        return self._claimed

    def __repr__(self) -> str:
        return "SingleDeliveryGuard(name={0!r}, claimed={1})".format(
            self._name, self._claimed
        )


def create_loop_future() -> "asyncio.Future[Any]":
    """
    Create a future bound to the currently running event loop.
    """
    return asyncio.get_running_loop().create_future()

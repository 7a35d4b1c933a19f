#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Tests for concurrency utility primitives.
"""

import asyncio
import threading

from robotremote.core.utils.concurrency import SingleDeliveryGuard, create_loop_future


def test_single_delivery_guard_claims_once():
    guard = SingleDeliveryGuard(name="kw")

    assert guard.claimed is False
    assert guard.claim() is True
    assert guard.claim() is False
    assert guard.claimed is True


def test_single_delivery_guard_under_thread_contention():
    guard = SingleDeliveryGuard()
    wins = []

    def contender():
        if guard.claim():
            wins.append(threading.get_ident())

    threads = [threading.Thread(target=contender) for _ in range(16)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(wins) == 1


def test_create_loop_future_binds_to_current_loop():
    async def run_case():
        future = create_loop_future()
        assert future.get_loop() is asyncio.get_running_loop()

    asyncio.run(run_case())

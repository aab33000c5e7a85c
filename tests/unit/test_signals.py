"""Unit tests for one-shot signals."""

import asyncio

import pytest

from mailbox_retention.core.signals import Signal


def test_fire_is_idempotent():
    signal = Signal("shutdown")

    assert signal.fire() is True
    assert signal.fire() is False
    assert signal.is_set()
    assert "set" in repr(signal)


@pytest.mark.asyncio
async def test_wait_for_times_out_when_not_fired():
    signal = Signal()

    assert await signal.wait_for(0.01) is False
    assert await signal.wait_for(0) is False


@pytest.mark.asyncio
async def test_late_waiter_sees_fired_signal():
    signal = Signal()
    signal.fire()

    assert await signal.wait_for(0) is True
    await asyncio.wait_for(signal.wait(), timeout=0.1)


@pytest.mark.asyncio
async def test_fire_wakes_all_waiters():
    signal = Signal()
    waiters = [asyncio.create_task(signal.wait_for(5.0)) for _ in range(3)]
    await asyncio.sleep(0)

    signal.fire()
    results = await asyncio.wait_for(asyncio.gather(*waiters), timeout=1.0)

    assert results == [True, True, True]

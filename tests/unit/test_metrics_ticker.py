"""Unit tests for the periodic metrics sampler."""

import asyncio
from datetime import timedelta
from unittest.mock import Mock

import pytest

from mailbox_retention.tasks.metrics_ticker import MetricsTicker


@pytest.mark.asyncio
async def test_ticker_samples_until_shutdown(metrics, shutdown):
    metrics.record_delete()
    ticker = MetricsTicker(metrics, timedelta(milliseconds=20), shutdown)

    ticker.start()
    await asyncio.sleep(0.11)
    shutdown.fire()
    await asyncio.wait_for(ticker.join(), timeout=1.0)

    assert ticker.samples >= 2
    assert metrics.deletes_history().startswith("1,1")


@pytest.mark.asyncio
async def test_ticker_survives_sampling_failure(metrics, shutdown):
    metrics.sample = Mock(side_effect=[RuntimeError("boom"), {"deletes_hist": "", "retained_hist": ""}] * 10)
    ticker = MetricsTicker(metrics, timedelta(milliseconds=10), shutdown)

    ticker.start()
    await asyncio.sleep(0.08)
    shutdown.fire()
    await asyncio.wait_for(ticker.join(), timeout=1.0)

    assert metrics.sample.call_count >= 2
    assert ticker.samples >= 1


@pytest.mark.asyncio
async def test_ticker_exits_immediately_when_already_shut_down(metrics, shutdown):
    shutdown.fire()
    ticker = MetricsTicker(metrics, timedelta(seconds=60), shutdown)

    ticker.start()
    await asyncio.wait_for(ticker.join(), timeout=1.0)

    assert ticker.samples == 0


def test_interval_must_be_positive(metrics, shutdown):
    with pytest.raises(ValueError):
        MetricsTicker(metrics, timedelta(0), shutdown)

"""Periodic sampling of the retention metrics into their histories."""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta

from mailbox_retention.core.metrics import RetentionMetrics
from mailbox_retention.core.signals import Signal
from mailbox_retention.core.structured_logging import log_json

logger = logging.getLogger(__name__)


class MetricsTicker:
    """Calls `RetentionMetrics.sample()` every `interval` until shutdown."""

    def __init__(self, metrics: RetentionMetrics, interval: timedelta, shutdown: Signal):
        if interval <= timedelta(0):
            raise ValueError("interval must be positive")
        self.metrics = metrics
        self.interval = interval
        self.shutdown = shutdown
        self.samples = 0
        self._task: asyncio.Task | None = None

    def start(self) -> None:
        if self._task is not None:
            raise RuntimeError("metrics ticker already started")
        self._task = asyncio.create_task(self._run(), name="retention-metrics-ticker")

    async def join(self) -> None:
        if self._task is not None:
            await self._task

    async def _run(self) -> None:
        seconds = self.interval.total_seconds()
        while not await self.shutdown.wait_for(seconds):
            try:
                rendered = self.metrics.sample()
            except Exception:
                logger.exception("Failed to sample retention metrics")
                continue
            self.samples += 1
            log_json(logger, logging.DEBUG, "retention_metrics_sampled", **rendered)

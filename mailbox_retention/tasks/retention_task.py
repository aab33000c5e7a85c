"""Background retention scanner loop."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from datetime import timedelta

from mailbox_retention.core.scan_context import scan_id_context
from mailbox_retention.core.signals import Signal
from mailbox_retention.core.structured_logging import log_json
from mailbox_retention.services.retention_service import RetentionService

logger = logging.getLogger(__name__)

MIN_SCAN_INTERVAL = timedelta(minutes=1)


class RetentionScanner:
    """Runs retention passes until shutdown.

    Passes never overlap, and two passes never start less than
    `min_interval` apart no matter how quickly a pass finishes.

    Example:
        >>> scanner = RetentionScanner(service, shutdown)
        >>> scanner.start()
        >>> ...
        >>> shutdown.fire()
        >>> await scanner.join()
    """

    def __init__(
        self,
        service: RetentionService,
        shutdown: Signal,
        min_interval: timedelta = MIN_SCAN_INTERVAL,
        monotonic: Callable[[], float] = time.monotonic,
    ):
        self.service = service
        self.shutdown = shutdown
        self.min_interval = min_interval
        self.monotonic = monotonic
        self.stopped = Signal("retention_scanner_stopped")
        self.scans_started = 0
        self._task: asyncio.Task | None = None
        self._started = False

    @property
    def policy(self):
        return self.service.policy

    def start(self) -> None:
        """Launch the scanner loop, or mark it stopped if retention is disabled."""
        if self._started:
            raise RuntimeError("retention scanner already started")
        self._started = True

        self.service.metrics.set_period(self.policy.period)
        if not self.policy.enabled:
            log_json(logger, logging.INFO, "retention_scanner_disabled")
            self.stopped.fire()
            return

        log_json(
            logger,
            logging.INFO,
            "retention_scanner_started",
            period_seconds=int(self.policy.period.total_seconds()),
            throttle_ms=int(self.policy.inter_collection_throttle.total_seconds() * 1000),
        )
        self._task = asyncio.create_task(self._run(), name="retention-scanner")

    def stop(self) -> None:
        """Broadcast shutdown; safe to call more than once."""
        self.shutdown.fire()

    async def join(self) -> None:
        """Wait until the scanner loop has exited."""
        if not self._started:
            return
        await self.stopped.wait()

    async def _run(self) -> None:
        min_interval = self.min_interval.total_seconds()
        start = self.monotonic()
        try:
            while True:
                # Prevent passes from starting more than once per interval
                elapsed = self.monotonic() - start
                if elapsed < min_interval:
                    wait = min_interval - elapsed
                    log_json(logger, logging.DEBUG, "retention_scanner_sleeping", seconds=round(wait, 3))
                    if await self.shutdown.wait_for(wait):
                        break

                start = self.monotonic()
                await self._scan()

                if self.shutdown.is_set():
                    break
        finally:
            log_json(logger, logging.INFO, "retention_scanner_stopped", scans=self.scans_started)
            self.stopped.fire()

    async def _scan(self) -> None:
        self.scans_started += 1
        started = time.perf_counter()
        with scan_id_context():
            try:
                await self.service.run_once()
            except Exception as exc:
                duration_ms = (time.perf_counter() - started) * 1000
                log_json(
                    logger,
                    logging.ERROR,
                    "retention_scan_error",
                    duration_ms=round(duration_ms, 2),
                    error=str(exc),
                    exception=exc.__class__.__name__,
                )

"""Process entry point: run the retention scanner until SIGINT/SIGTERM."""

from __future__ import annotations

import asyncio
import logging
import signal
from datetime import timedelta

from prometheus_client import REGISTRY

from mailbox_retention.core.config import Settings, get_settings
from mailbox_retention.core.database import create_engine, create_session_factory, create_tables
from mailbox_retention.core.metrics import RetentionCollector, RetentionMetrics
from mailbox_retention.core.signals import Signal
from mailbox_retention.core.structured_logging import configure_logging, log_json
from mailbox_retention.services.retention_service import RetentionPolicy, RetentionService
from mailbox_retention.services.sql_store import SqlMessageStore
from mailbox_retention.tasks.metrics_ticker import MetricsTicker
from mailbox_retention.tasks.retention_task import MIN_SCAN_INTERVAL, RetentionScanner

logger = logging.getLogger(__name__)


async def run(
    settings: Settings,
    shutdown: Signal | None = None,
    min_interval: timedelta = MIN_SCAN_INTERVAL,
) -> RetentionMetrics:
    """Run scanner and metrics ticker until the shutdown signal fires."""

    shutdown = shutdown or Signal("shutdown")
    loop = asyncio.get_running_loop()
    handled: list[int] = []
    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, shutdown.fire)
        except (NotImplementedError, RuntimeError):
            log_json(logger, logging.WARNING, "signal_handler_unavailable", signal=signum)
            continue
        handled.append(signum)

    engine = create_engine(settings)
    metrics = RetentionMetrics(history_size=settings.metrics_history_size)
    collector = RetentionCollector(metrics)
    REGISTRY.register(collector)

    try:
        await create_tables(engine)
        service = RetentionService(
            store=SqlMessageStore(create_session_factory(engine)),
            policy=RetentionPolicy.from_settings(settings),
            metrics=metrics,
            shutdown=shutdown,
        )
        scanner = RetentionScanner(service, shutdown, min_interval=min_interval)
        ticker = MetricsTicker(
            metrics,
            interval=timedelta(seconds=settings.metrics_sample_seconds),
            shutdown=shutdown,
        )

        scanner.start()
        ticker.start()
        await scanner.join()
        # A disabled scanner stops at once; keep serving metrics until shutdown
        await shutdown.wait()
        await ticker.join()
    finally:
        for signum in handled:
            loop.remove_signal_handler(signum)
        REGISTRY.unregister(collector)
        await engine.dispose()
        log_json(logger, logging.INFO, "retention_process_stopped")
    return metrics


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    asyncio.run(run(settings))


if __name__ == "__main__":
    main()

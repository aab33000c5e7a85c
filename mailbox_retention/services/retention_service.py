"""Retention pass over every mailbox in the store."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from mailbox_retention.core.config import Settings
from mailbox_retention.core.metrics import RetentionMetrics
from mailbox_retention.core.signals import Signal
from mailbox_retention.core.structured_logging import log_json
from mailbox_retention.services.store import MessageStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetentionPolicy:
    """How long messages are kept and how hard the store is pushed."""

    period: timedelta
    inter_collection_throttle: timedelta = timedelta(0)

    @property
    def enabled(self) -> bool:
        return self.period > timedelta(0)

    @classmethod
    def from_settings(cls, settings: Settings) -> RetentionPolicy:
        return cls(
            period=timedelta(minutes=settings.retention_period_minutes),
            inter_collection_throttle=timedelta(milliseconds=settings.retention_sleep_millis),
        )


@dataclass
class ScanOutcome:
    """Statistics of a single pass."""

    deletes_attempted: int = 0
    deletes_succeeded: int = 0
    deletes_failed: int = 0
    retained_count: int = 0
    mailboxes_scanned: int = 0
    completed_at: datetime | None = None
    aborted: bool = False


class RetentionService:
    """Deletes messages older than the retention period.

    A delete failure is logged and counted but never stops the pass. A
    failure to list mailboxes or messages aborts the whole pass and is raised
    to the caller.
    """

    def __init__(
        self,
        store: MessageStore,
        policy: RetentionPolicy,
        metrics: RetentionMetrics,
        shutdown: Signal,
        clock: Callable[[], datetime] | None = None,
    ):
        self.store = store
        self.policy = policy
        self.metrics = metrics
        self.shutdown = shutdown
        self.clock = clock or (lambda: datetime.now(UTC))

    async def run_once(self) -> ScanOutcome:
        """Run one pass over all mailboxes."""
        log_json(logger, logging.DEBUG, "retention_scan_start")
        cutoff = self.clock() - self.policy.period
        outcome = ScanOutcome()

        mailboxes = await self.store.list_mailboxes()
        throttle = self.policy.inter_collection_throttle.total_seconds()

        for mailbox in mailboxes:
            messages = await mailbox.list_messages()
            for message in messages:
                received_at = message.received_at
                if received_at.tzinfo is None:
                    received_at = received_at.replace(tzinfo=UTC)

                if received_at < cutoff:
                    await self._purge(message, outcome)
                else:
                    outcome.retained_count += 1
            outcome.mailboxes_scanned += 1

            # Reduce I/O pressure on the store between mailboxes
            if await self.shutdown.wait_for(throttle):
                outcome.aborted = True
                log_json(
                    logger,
                    logging.INFO,
                    "retention_scan_aborted",
                    reason="shutdown",
                    mailboxes_scanned=outcome.mailboxes_scanned,
                    deletes=outcome.deletes_succeeded,
                    delete_failures=outcome.deletes_failed,
                )
                return outcome

        outcome.completed_at = self.clock()
        self.metrics.set_scan_completed(outcome.completed_at)
        self.metrics.set_retained(outcome.retained_count)

        log_json(
            logger,
            logging.INFO,
            "retention_scan_done",
            mailboxes=outcome.mailboxes_scanned,
            deleted=outcome.deletes_succeeded,
            delete_failures=outcome.deletes_failed,
            retained=outcome.retained_count,
        )
        return outcome

    async def _purge(self, message, outcome: ScanOutcome) -> None:
        outcome.deletes_attempted += 1
        log_json(logger, logging.DEBUG, "retention_purge", message_id=message.id)
        try:
            await message.delete()
        except Exception as exc:
            outcome.deletes_failed += 1
            log_json(
                logger,
                logging.ERROR,
                "retention_delete_failed",
                message_id=message.id,
                error=str(exc),
                exception=exc.__class__.__name__,
            )
            return

        outcome.deletes_succeeded += 1
        self.metrics.record_delete()

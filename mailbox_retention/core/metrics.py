"""Retention metrics: counters, sample histories and Prometheus exposition."""

from __future__ import annotations

import threading
from collections import deque
from collections.abc import Callable, Iterable
from datetime import UTC, datetime, timedelta

from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily, InfoMetricFamily
from prometheus_client.registry import Collector

METRICS_GROUP = "retention"
DEFAULT_HISTORY_SIZE = 50


def render_history(values: Iterable[int], sep: str = ",") -> str:
    """Render sampled values oldest first as a delimited string."""

    return sep.join(str(v) for v in values)


class SampleHistory:
    """Fixed-capacity FIFO of sampled values; the oldest sample is evicted."""

    def __init__(self, capacity: int = DEFAULT_HISTORY_SIZE):
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._values: deque[int] = deque(maxlen=capacity)

    def push(self, value: int) -> None:
        self._values.append(value)

    def values(self) -> list[int]:
        return list(self._values)

    def render(self, sep: str = ",") -> str:
        return render_history(self._values, sep)

    def __len__(self) -> int:
        return len(self._values)


class RetentionMetrics:
    """Thread-safe holder of the retention metrics group.

    Written by the scan engine and read by the metrics ticker and the
    Prometheus collector, possibly from different threads. Every read and
    write goes through a single lock.
    """

    def __init__(
        self,
        history_size: int = DEFAULT_HISTORY_SIZE,
        clock: Callable[[], datetime] | None = None,
    ):
        self._clock = clock or (lambda: datetime.now(UTC))
        self._lock = threading.Lock()
        self._scan_completed_at = self._clock()
        self._deletes_total = 0
        self._retained_current = 0
        self._period_seconds = 0
        self._deletes_hist = SampleHistory(history_size)
        self._retained_hist = SampleHistory(history_size)

    # Writes

    def record_delete(self, count: int = 1) -> None:
        if count < 0:
            raise ValueError("delete count cannot be negative")
        with self._lock:
            self._deletes_total += count

    def set_retained(self, count: int) -> None:
        with self._lock:
            self._retained_current = count

    def set_scan_completed(self, completed_at: datetime) -> None:
        """Record a completed pass; timestamps older than the current one are ignored."""
        with self._lock:
            if completed_at > self._scan_completed_at:
                self._scan_completed_at = completed_at

    def set_period(self, period: timedelta) -> None:
        with self._lock:
            self._period_seconds = int(period.total_seconds())

    # Reads

    def deletes_total(self) -> int:
        with self._lock:
            return self._deletes_total

    def retained_current(self) -> int:
        with self._lock:
            return self._retained_current

    def period_seconds(self) -> int:
        with self._lock:
            return self._period_seconds

    def scan_completed_at(self) -> datetime:
        with self._lock:
            return self._scan_completed_at

    def seconds_since_scan_completed(self) -> int:
        elapsed = self._clock() - self.scan_completed_at()
        return max(0, int(elapsed.total_seconds()))

    def deletes_history(self) -> str:
        with self._lock:
            return self._deletes_hist.render()

    def retained_history(self) -> str:
        with self._lock:
            return self._retained_hist.render()

    def sample(self) -> dict[str, str]:
        """Push current counter values into the histories and render them."""
        with self._lock:
            self._deletes_hist.push(self._deletes_total)
            self._retained_hist.push(self._retained_current)
            return {
                "deletes_hist": self._deletes_hist.render(),
                "retained_hist": self._retained_hist.render(),
            }

    def snapshot(self) -> dict[str, int | str]:
        """Return the whole named metrics group."""
        since = self.seconds_since_scan_completed()
        with self._lock:
            return {
                "DeletesTotal": self._deletes_total,
                "Period": self._period_seconds,
                "RetainedCurrent": self._retained_current,
                "SecondsSinceScanCompleted": since,
                "DeletesHist": self._deletes_hist.render(),
                "RetainedHist": self._retained_hist.render(),
            }


class RetentionCollector(Collector):
    """Prometheus collector reading the retention group on each scrape."""

    def __init__(self, metrics: RetentionMetrics):
        self.metrics = metrics

    def collect(self):
        snap = self.metrics.snapshot()

        deletes = CounterMetricFamily(
            f"{METRICS_GROUP}_deletes",
            "Total number of messages purged by the retention scanner.",
        )
        deletes.add_metric([], snap["DeletesTotal"])
        yield deletes

        yield GaugeMetricFamily(
            f"{METRICS_GROUP}_period_seconds",
            "Configured retention period in seconds.",
            value=snap["Period"],
        )
        yield GaugeMetricFamily(
            f"{METRICS_GROUP}_retained_current",
            "Messages retained by the last completed scan.",
            value=snap["RetainedCurrent"],
        )
        yield GaugeMetricFamily(
            f"{METRICS_GROUP}_seconds_since_scan_completed",
            "Seconds since the last retention scan completed.",
            value=snap["SecondsSinceScanCompleted"],
        )

        history = InfoMetricFamily(
            f"{METRICS_GROUP}_history",
            "Sampled retention history, oldest first.",
        )
        history.add_metric(
            [],
            {
                "deletes_hist": str(snap["DeletesHist"]),
                "retained_hist": str(snap["RetainedHist"]),
            },
        )
        yield history

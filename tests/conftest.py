"""Pytest fixtures for testing."""

from collections.abc import Callable
from datetime import datetime, timedelta

import pytest

from mailbox_retention.core.metrics import RetentionMetrics
from mailbox_retention.core.signals import Signal
from mailbox_retention.services.retention_service import RetentionPolicy, RetentionService
from tests.fakes import NOW, FakeStore


@pytest.fixture()
def clock() -> Callable[[], datetime]:
    return lambda: NOW


@pytest.fixture()
def metrics(clock) -> RetentionMetrics:
    return RetentionMetrics(history_size=5, clock=clock)


@pytest.fixture()
def shutdown() -> Signal:
    return Signal("shutdown")


@pytest.fixture()
def policy() -> RetentionPolicy:
    return RetentionPolicy(period=timedelta(days=30))


@pytest.fixture()
def make_service(metrics, shutdown, clock, policy):
    """Build a RetentionService around a fake store."""

    def _make(store: FakeStore, **overrides) -> RetentionService:
        return RetentionService(
            store=store,
            policy=overrides.get("policy", policy),
            metrics=overrides.get("metrics", metrics),
            shutdown=overrides.get("shutdown", shutdown),
            clock=overrides.get("clock", clock),
        )

    return _make

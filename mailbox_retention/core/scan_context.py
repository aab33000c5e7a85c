"""Per-pass correlation ID carried into every log line of a retention scan."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from uuid import uuid4

_scan_id_var: ContextVar[str | None] = ContextVar("scan_id", default=None)


def get_scan_id() -> str | None:
    return _scan_id_var.get()


@contextmanager
def scan_id_context(scan_id: str | None = None) -> Iterator[str]:
    """Tag the enclosed pass with `scan_id`, or a fresh UUID when omitted."""

    scan_id = scan_id or str(uuid4())
    token = _scan_id_var.set(scan_id)
    try:
        yield scan_id
    finally:
        _scan_id_var.reset(token)

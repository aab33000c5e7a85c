"""Small structured logging helper.

The scanner logs JSON strings so its output can be consumed by any log
collector without introducing new dependencies.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any

from mailbox_retention.core.scan_context import get_scan_id


def log_json(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """Emit a single JSON log line with the scan correlation ID, if any."""

    if not logger.isEnabledFor(level):
        return

    payload: dict[str, Any] = {
        "timestamp": datetime.now(UTC).isoformat(),
        "event": event,
    }
    scan_id = get_scan_id()
    if scan_id:
        payload["scan_id"] = scan_id

    payload.update(fields)
    logger.log(level, json.dumps(payload, default=str))


def configure_logging(level: str = "INFO") -> None:
    """Install a plain message handler on the root logger."""

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(message)s",
    )

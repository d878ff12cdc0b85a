"""JSON line logging for service and request events.

Every event is one JSON object so upload/download outcomes can be filtered by
``event`` and correlated by ``request_id`` in any log collector.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any

from attachment_hub.core.request_context import get_request_id


def log_json(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """Emit a single JSON log line with the current request correlation ID."""

    payload: dict[str, Any] = {
        "timestamp": datetime.now(UTC).isoformat(),
        "event": event,
    }
    request_id = get_request_id()
    if request_id:
        payload["request_id"] = request_id

    payload.update(fields)
    logger.log(level, json.dumps(payload, default=str))


def configure_logging(level: int = logging.INFO) -> None:
    """Send bare messages to stderr; the JSON payload carries the structure."""

    logging.basicConfig(level=level, format="%(message)s")

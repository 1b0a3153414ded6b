"""
=============================================================================
ACCESS LOG
=============================================================================

One record per dispatched request: method, URI and resulting status.

=============================================================================
LOG FORMATS
=============================================================================

    TEXT FORMAT (default, human readable):
    ┌─────────────────────────────────────────────────────────────────────┐
    │ GET /index.html with status 200 (5 bytes, 0.41ms)                   │
    │ DELETE /gone.txt with status 404 (- bytes, 0.08ms)                  │
    └─────────────────────────────────────────────────────────────────────┘

    JSON FORMAT (for log aggregators):
    ┌─────────────────────────────────────────────────────────────────────┐
    │ {"method": "GET", "uri": "/index.html", "status_code": 200,         │
    │  "content_length": 5, "duration_ms": 0.41,                          │
    │  "timestamp": "19/Oct/2026:09:00:00 +0000"}                         │
    └─────────────────────────────────────────────────────────────────────┘

The URI is the one the handler ended up using, so a GET for "/" is logged
as "/index.html".

Records go to the "httpif.access" logger; route or silence it with the
usual logging configuration:

    logging.getLogger("httpif.access").setLevel(logging.WARNING)

=============================================================================
"""

import json
import logging
import time
from dataclasses import asdict, dataclass
from typing import Optional


logger = logging.getLogger("httpif.access")


@dataclass
class AccessLog:
    """Structured access log entry."""

    method: str
    uri: str
    status_code: int
    content_length: Optional[int]
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        entry = asdict(self)
        entry["status_code"] = int(self.status_code)
        entry["duration_ms"] = round(self.duration_ms, 2)
        return entry

    def to_text(self) -> str:
        size = "-" if self.content_length is None else str(self.content_length)
        return (
            f"{self.method} {self.uri} with status {int(self.status_code)} "
            f"({size} bytes, {self.duration_ms:.2f}ms)"
        )


def log_access(
    method: str,
    uri: str,
    status_code: int,
    content_length: Optional[int] = None,
    duration_ms: float = 0.0,
    log_format: str = "text",
) -> AccessLog:
    """
    Build and emit an access log record.

    Successful and client-error responses are logged at INFO, server
    errors at WARNING.

    Returns:
        The record that was logged.
    """
    entry = AccessLog(
        method=method,
        uri=uri,
        status_code=status_code,
        content_length=content_length,
        duration_ms=duration_ms,
        timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
    )

    level = logging.WARNING if int(status_code) >= 500 else logging.INFO
    if log_format == "json":
        logger.log(level, json.dumps(entry.to_dict()))
    else:
        logger.log(level, entry.to_text())

    return entry

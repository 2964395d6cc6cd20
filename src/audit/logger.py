"""
Audit Logger

DESIGN DECISION: Every workflow transition and ledger mutation is logged.
This provides:
1. Traceability of how each entry was recorded
2. Debugging capability when stored data is corrupt
3. A visible record of destructive actions

The audit logger:
- Is synchronous, like everything else in the app
- Gracefully handles failures (a broken sink never breaks the main flow)
- Supports correlation IDs to trace one purchase cycle
"""

import logging
import sys
from collections import deque
from typing import Callable, Optional
from uuid import UUID

import structlog

from src.models.audit import AuditEvent, AuditSeverity


_SEVERITY_TO_METHOD = {
    AuditSeverity.DEBUG: "debug",
    AuditSeverity.INFO: "info",
    AuditSeverity.WARNING: "warning",
    AuditSeverity.ERROR: "error",
    AuditSeverity.CRITICAL: "critical",
}


def configure_logging(level: str = "INFO", json_output: bool = True) -> None:
    """
    Configure structlog on top of stdlib logging.

    Call once at startup. JSON output is meant for log files; console
    output is easier to read while developing.
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An optional sink callable (e.g. a UI activity feed)

    The most recent events are also kept in memory.
    """

    def __init__(
        self,
        sink: Optional[Callable[[AuditEvent], None]] = None,
        max_recent: int = 200,
    ):
        """
        Initialize audit logger.

        Args:
            sink: Called with every event after it is logged locally.
            max_recent: How many events recent_events() can return.
        """
        self._sink = sink
        self._recent: deque[AuditEvent] = deque(maxlen=max_recent)
        self._logger = structlog.get_logger("spend_to_save.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Returns False if the sink raised.
        """
        self._recent.append(event)

        method = _SEVERITY_TO_METHOD[event.severity]
        getattr(self._logger, method)("audit_event", **event.to_log_dict())

        if self._sink:
            try:
                self._sink(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_sink_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def recent_events(
        self,
        limit: int = 50,
        correlation_id: Optional[UUID] = None,
    ) -> list[AuditEvent]:
        """Most recent events first, optionally for one correlation ID."""
        events = [
            event for event in reversed(self._recent)
            if correlation_id is None or event.correlation_id == correlation_id
        ]
        return events[:limit]

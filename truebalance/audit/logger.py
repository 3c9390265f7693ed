"""
Audit Logger

DESIGN DECISION: Every imported row and every record an aggregation leaves
out is logged. This provides:
1. Traceability of each import run
2. Debugging capability for dashboards that look "short"
3. Per-run counters for import summaries

The audit logger:
- Is synchronous, so the pure aggregators can report skips without an event loop
- Keeps the events of the current run in memory
- Supports correlation IDs to trace related events
"""

import logging
from collections import Counter
from typing import Optional
from uuid import UUID, uuid4

import structlog

from truebalance.config import AppSettings
from truebalance.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


# Configure structlog for local logging
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
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(settings: Optional[AppSettings] = None) -> None:
    """
    Route structlog output through the stdlib root logger at the
    configured level. Call once from the embedding application.
    """
    settings = settings or AppSettings()
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, settings.log_level),
    )


class AuditLogger:
    """
    Audit logging service for one import run or report computation.

    Logs every event through structlog and keeps it for counting.
    """

    def __init__(self, correlation_id: Optional[UUID] = None):
        """
        Initialize audit logger.

        Args:
            correlation_id: ID stamped on events built by the helpers.
                            A new one is created when omitted.
        """
        self.correlation_id = correlation_id or create_correlation_id()
        self._events: list[AuditEvent] = []
        self._counts: Counter = Counter()
        self._logger = structlog.get_logger("truebalance.audit")

    @property
    def events(self) -> list[AuditEvent]:
        return list(self._events)

    def count(self, event_type: AuditEventType) -> int:
        """Number of events of this type logged so far."""
        return self._counts[event_type]

    def log(self, event: AuditEvent) -> None:
        """Log an audit event locally and record it."""
        self._events.append(event)
        self._counts[event.event_type] += 1

        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

    def log_record_skipped(
        self,
        entity: str,
        record_id: Optional[int],
        reason: str,
    ) -> None:
        """Log a record an aggregator left out."""
        self.log(AuditEventBuilder.record_skipped(
            entity=entity,
            record_id=record_id,
            reason=reason,
            correlation_id=self.correlation_id,
        ))

    def log_fetch_degraded(
        self,
        credit_card_id: Optional[int],
        error_message: str,
    ) -> None:
        """Log a per-card invoice fetch that fell back to an empty list."""
        self.log(AuditEventBuilder.fetch_degraded(
            credit_card_id=credit_card_id,
            error_message=error_message,
            correlation_id=self.correlation_id,
        ))

    def log_structure_rejected(self, entity: str, reason: str) -> None:
        self.log(AuditEventBuilder.structure_rejected(
            entity=entity,
            reason=reason,
            correlation_id=self.correlation_id,
        ))

    def log_row_rejected(
        self,
        entity: str,
        line_number: int,
        field: str,
        message: str,
    ) -> None:
        self.log(AuditEventBuilder.row_rejected(
            entity=entity,
            line_number=line_number,
            field=field,
            message=message,
            correlation_id=self.correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of an import run and pass it through
    every step of that run.
    """
    return uuid4()

"""
Audit Models for TrueBalance

Every import run and every record an aggregation had to skip is logged as an
audit event. This provides:
1. Traceability of each imported row (created, skipped, failed)
2. Visibility into records the dashboard silently left out
3. Per-run counters for import summaries

DESIGN DECISION: Audit events are append-only. A run's events share one
correlation ID.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Each step of the import pipeline and the aggregation fallbacks has its
    own event type.
    """
    # Import pipeline
    IMPORT_STARTED = "import_started"
    IMPORT_COMPLETED = "import_completed"
    STRUCTURE_REJECTED = "structure_rejected"
    ROW_REJECTED = "row_rejected"
    RECORD_CREATED = "record_created"
    DUPLICATE_SKIPPED = "duplicate_skipped"
    CREATE_FAILED = "create_failed"

    # Aggregation
    RECORD_SKIPPED = "record_skipped"
    FETCH_DEGRADED = "fetch_degraded"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    event_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # What is this about? entity_type is the import kind, or "report"
    entity_type: Optional[str] = None
    entity_id: Optional[int] = Field(
        default=None,
        description="Backend ID of the record, when one exists"
    )
    line_number: Optional[int] = Field(
        default=None,
        description="Spreadsheet line the event refers to"
    )

    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID shared by all events of one import run"
    )

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "line_number": self.line_number,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.import_started("bill", 12, "SKIP", correlation_id)
        event = AuditEventBuilder.duplicate_skipped("bill", 3, 41, correlation_id)
    """

    @staticmethod
    def import_started(
        entity: str,
        item_count: int,
        strategy: str,
        correlation_id: Optional[UUID]
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_STARTED,
            entity_type=entity,
            correlation_id=correlation_id,
            description=f"Import started: {item_count} {entity} rows",
            details={
                "item_count": item_count,
                "strategy": strategy,
            },
        )

    @staticmethod
    def import_completed(
        entity: str,
        created: int,
        skipped: int,
        errors: int,
        correlation_id: Optional[UUID]
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_COMPLETED,
            severity=AuditSeverity.WARNING if errors else AuditSeverity.INFO,
            entity_type=entity,
            correlation_id=correlation_id,
            description=(
                f"Import completed: {created} created, {skipped} skipped, {errors} errors"
            ),
            details={
                "total_created": created,
                "total_skipped": skipped,
                "total_errors": errors,
            },
        )

    @staticmethod
    def structure_rejected(
        entity: str,
        reason: str,
        correlation_id: Optional[UUID]
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STRUCTURE_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type=entity,
            correlation_id=correlation_id,
            description=f"Sheet rejected: {reason}"[:500],
            details={"reason": reason},
        )

    @staticmethod
    def row_rejected(
        entity: str,
        line_number: int,
        field: str,
        message: str,
        correlation_id: Optional[UUID]
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ROW_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type=entity,
            line_number=line_number,
            correlation_id=correlation_id,
            description=message[:500],
            details={"field": field},
        )

    @staticmethod
    def record_created(
        entity: str,
        line_number: int,
        record_id: Optional[int],
        correlation_id: Optional[UUID]
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_CREATED,
            entity_type=entity,
            entity_id=record_id,
            line_number=line_number,
            correlation_id=correlation_id,
            description=f"Created {entity} from line {line_number}",
        )

    @staticmethod
    def duplicate_skipped(
        entity: str,
        line_number: int,
        existing_id: Optional[int],
        correlation_id: Optional[UUID]
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DUPLICATE_SKIPPED,
            entity_type=entity,
            entity_id=existing_id,
            line_number=line_number,
            correlation_id=correlation_id,
            description=f"Duplicate {entity} on line {line_number} skipped",
        )

    @staticmethod
    def create_failed(
        entity: str,
        line_number: int,
        error_message: str,
        correlation_id: Optional[UUID]
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CREATE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type=entity,
            line_number=line_number,
            correlation_id=correlation_id,
            description=f"Failed to create {entity} from line {line_number}",
            error_message=error_message,
        )

    @staticmethod
    def record_skipped(
        entity: str,
        record_id: Optional[int],
        reason: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_SKIPPED,
            severity=AuditSeverity.DEBUG,
            entity_type=entity,
            entity_id=record_id,
            correlation_id=correlation_id,
            description=f"{entity} left out of aggregation: {reason}",
            details={"reason": reason},
        )

    @staticmethod
    def fetch_degraded(
        credit_card_id: Optional[int],
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.FETCH_DEGRADED,
            severity=AuditSeverity.WARNING,
            entity_type="invoice",
            correlation_id=correlation_id,
            description=f"Invoices of card {credit_card_id} unavailable, using empty list",
            error_message=error_message,
            details={"credit_card_id": credit_card_id},
        )

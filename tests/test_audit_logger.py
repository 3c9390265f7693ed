"""Tests for the audit logger."""

from uuid import uuid4

import pytest

from truebalance.audit import AuditLogger, configure_logging, create_correlation_id
from truebalance.config import AppSettings
from truebalance.models.audit import AuditEventBuilder, AuditEventType, AuditSeverity


class TestAuditLogger:
    """Tests for AuditLogger."""

    def test_correlation_id_stamped_on_helper_events(self):
        correlation_id = uuid4()
        audit = AuditLogger(correlation_id)

        audit.log_record_skipped("bill", 3, "missing or invalid date")

        event = audit.events[0]
        assert event.correlation_id == correlation_id
        assert event.event_type == AuditEventType.RECORD_SKIPPED
        assert event.severity == AuditSeverity.DEBUG

    def test_counts_by_type(self):
        audit = AuditLogger()

        audit.log_row_rejected("bill", 2, "name", "Linha 2: Nome inválido")
        audit.log_row_rejected("bill", 5, "name", "Linha 5: Nome inválido")
        audit.log_fetch_degraded(2, "timeout")

        assert audit.count(AuditEventType.ROW_REJECTED) == 2
        assert audit.count(AuditEventType.FETCH_DEGRADED) == 1
        assert audit.count(AuditEventType.RECORD_CREATED) == 0

    def test_events_is_a_copy(self):
        audit = AuditLogger()
        audit.log(AuditEventBuilder.import_started("bill", 1, "SKIP", audit.correlation_id))
        audit.events.clear()
        assert len(audit.events) == 1

    def test_new_correlation_ids_are_unique(self):
        assert create_correlation_id() != create_correlation_id()
        assert AuditLogger().correlation_id != AuditLogger().correlation_id

    def test_configure_logging(self):
        configure_logging(AppSettings(log_level="DEBUG"))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

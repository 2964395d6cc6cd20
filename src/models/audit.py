"""
Audit Models for Spend to Save

Every workflow transition and every ledger mutation is logged.
This provides:
1. A trace of how each entry came to be recorded
2. Debugging information when stored data turns out to be corrupt
3. A record of destructive actions such as clearing all data

DESIGN DECISION: Audit events are append-only. We never delete or modify them.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator

from src.models.ledger import LedgerEntry, utc_now


MAX_DESCRIPTION_LENGTH = 500


class AuditEventType(str, Enum):
    """
    Types of events we audit.
    """
    # Guided workflow
    PURCHASE_TYPE_SELECTED = "purchase_type_selected"
    AMOUNT_REJECTED = "amount_rejected"
    SAVINGS_SUGGESTED = "savings_suggested"
    SAVINGS_CONFIRMED = "savings_confirmed"
    SAVINGS_DECLINED = "savings_declined"
    WORKFLOW_RESET = "workflow_reset"
    WORKFLOW_CANCELLED = "workflow_cancelled"

    # Manual entry
    MANUAL_ENTRY_ADDED = "manual_entry_added"
    MANUAL_ENTRY_REJECTED = "manual_entry_rejected"

    # Ledger
    ENTRY_RECORDED = "entry_recorded"
    LEDGER_LOADED = "ledger_loaded"
    LEDGER_CLEARED = "ledger_cleared"
    CLEAR_CANCELLED = "clear_cancelled"
    CLEAR_SUPPRESSED = "clear_suppressed"

    # Storage
    STORAGE_FIELD_CORRUPT = "storage_field_corrupt"
    STORAGE_WRITE_FAILED = "storage_write_failed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.
    """

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # What is this about? ('workflow', 'entry', 'ledger', 'storage')
    entity_type: Optional[str] = None

    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., all events of one purchase cycle)"
    )

    description: str = Field(
        ...,
        max_length=MAX_DESCRIPTION_LENGTH,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    @field_validator('description', mode='before')
    @classmethod
    def truncate_description(cls, v):
        """Shorten overlong descriptions so building an event never fails."""
        if isinstance(v, str) and len(v) > MAX_DESCRIPTION_LENGTH:
            return v[:MAX_DESCRIPTION_LENGTH - 3] + "..."
        return v

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
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.purchase_type_selected("Frivolous", correlation_id)
        event = AuditEventBuilder.entry_recorded(entry, correlation_id)
    """

    @staticmethod
    def purchase_type_selected(
        purchase_type: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PURCHASE_TYPE_SELECTED,
            entity_type="workflow",
            correlation_id=correlation_id,
            description=f"Purchase classified as {purchase_type}",
            details={"purchase_type": purchase_type},
            is_user_action=True,
        )

    @staticmethod
    def amount_rejected(
        raw_amount: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.AMOUNT_REJECTED,
            severity=AuditSeverity.DEBUG,
            entity_type="workflow",
            correlation_id=correlation_id,
            description="Amount ignored: not a positive number",
            details={"raw_amount": raw_amount},
            is_user_action=True,
        )

    @staticmethod
    def savings_suggested(
        amount: Decimal,
        suggested_savings: Decimal,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVINGS_SUGGESTED,
            entity_type="workflow",
            correlation_id=correlation_id,
            description=f"Suggested saving {suggested_savings} for a purchase of {amount}",
            details={
                "amount": str(amount),
                "suggested_savings": str(suggested_savings),
            },
        )

    @staticmethod
    def savings_answered(
        confirmed: bool,
        suggested_savings: Decimal,
        correlation_id: UUID,
    ) -> AuditEvent:
        if confirmed:
            event_type = AuditEventType.SAVINGS_CONFIRMED
            description = f"User set aside {suggested_savings}"
        else:
            event_type = AuditEventType.SAVINGS_DECLINED
            description = "User has not set aside the savings yet"
        return AuditEvent(
            event_type=event_type,
            entity_type="workflow",
            correlation_id=correlation_id,
            description=description,
            details={"suggested_savings": str(suggested_savings)},
            is_user_action=True,
        )

    @staticmethod
    def workflow_restarted(
        cancelled: bool,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=(
                AuditEventType.WORKFLOW_CANCELLED if cancelled
                else AuditEventType.WORKFLOW_RESET
            ),
            entity_type="workflow",
            correlation_id=correlation_id,
            description="Purchase cancelled" if cancelled else "Ready for another purchase",
            is_user_action=True,
        )

    @staticmethod
    def manual_entry_added(
        entry: LedgerEntry,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MANUAL_ENTRY_ADDED,
            entity_type="entry",
            correlation_id=correlation_id,
            description=f"Manually added {entry.amount} as {entry.category.value}",
            details=entry.to_storage_dict(),
            is_user_action=True,
        )

    @staticmethod
    def manual_entry_rejected(
        raw_category: str,
        raw_amount: str,
        issues: list[dict],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MANUAL_ENTRY_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="entry",
            description="Manual entry rejected",
            details={
                "category": raw_category,
                "amount": raw_amount,
                "issues": issues,
            },
            is_user_action=True,
        )

    @staticmethod
    def entry_recorded(
        entry: LedgerEntry,
        entry_count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_RECORDED,
            entity_type="ledger",
            description=f"Recorded {entry.category.value} entry of {entry.amount}",
            details={
                "entry": entry.to_storage_dict(),
                "entry_count": entry_count,
            },
        )

    @staticmethod
    def ledger_loaded(
        entry_count: int,
        corrupt_fields: list[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_LOADED,
            entity_type="ledger",
            description=f"Loaded ledger with {entry_count} entries",
            details={
                "entry_count": entry_count,
                "corrupt_fields": corrupt_fields,
            },
        )

    @staticmethod
    def storage_field_corrupt(
        key: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_FIELD_CORRUPT,
            severity=AuditSeverity.WARNING,
            entity_type="storage",
            description=f"Stored value for '{key}' could not be read, using zero",
            details={"key": key},
            error_message=error_message,
        )

    @staticmethod
    def storage_write_failed(
        operation: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_WRITE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="storage",
            description=f"Could not persist ledger after {operation}",
            details={"operation": operation},
            error_message=error_message,
        )

    @staticmethod
    def ledger_cleared(
        entries_removed: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_CLEARED,
            severity=AuditSeverity.WARNING,
            entity_type="ledger",
            description="All data has been cleared",
            details={"entries_removed": entries_removed},
            is_user_action=True,
        )

    @staticmethod
    def clear_cancelled() -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CLEAR_CANCELLED,
            entity_type="ledger",
            description="User declined to clear data",
            is_user_action=True,
        )

    @staticmethod
    def clear_suppressed(
        seconds_since_last: float,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CLEAR_SUPPRESSED,
            severity=AuditSeverity.DEBUG,
            entity_type="ledger",
            description="Repeated clear request ignored",
            details={"seconds_since_last": round(seconds_since_last, 3)},
            is_user_action=True,
        )

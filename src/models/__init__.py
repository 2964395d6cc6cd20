"""
Data Models Package

This package contains all Pydantic models used in Spend to Save.
All data flowing through the system must conform to these schemas.
"""

from src.models.ledger import (
    EntryCategory,
    LedgerEntry,
    LedgerSnapshot,
)
from src.models.workflow import (
    PurchaseType,
    WorkflowState,
    WorkflowStep,
)
from src.models.validation import (
    ValidationIssue,
    ValidationResult,
)
from src.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "EntryCategory",
    "LedgerEntry",
    "LedgerSnapshot",
    # Workflow models
    "PurchaseType",
    "WorkflowState",
    "WorkflowStep",
    # Validation models
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]

"""
Validation Models

Manual entry reports exactly what was wrong with the input instead of
dropping it, so its outcome is described by these models.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from src.models.ledger import EntryCategory, utc_now


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'not_a_number', 'not_positive')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """
    Result of validating a manual entry.

    When is_valid is True, category and amount hold the parsed values.
    """

    validated_at: datetime = Field(
        default_factory=utc_now
    )
    raw_category: str = Field(
        default="",
        description="Category exactly as it was submitted"
    )
    raw_amount: str = Field(
        default="",
        description="Amount exactly as it was submitted"
    )

    category: Optional[EntryCategory] = None
    amount: Optional[Decimal] = None

    is_valid: bool = Field(
        ...,
        description="Overall validation result"
    )
    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All validation issues found"
    )

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def message(self) -> str:
        """All error messages joined for display."""
        return " ".join(
            issue.message for issue in self.issues if issue.severity == "error"
        )

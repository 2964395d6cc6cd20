"""
Amount and Manual Entry Validation

Two entry points accept amounts, and they treat bad input differently:

GUIDED WORKFLOW:
- parse_amount() returns None for anything that is not a finite,
  positive number within MAX_AMOUNT and MAX_DECIMAL_PLACES
- The workflow just stays on the amount step; the user sees no error

MANUAL ENTRY:
- ManualEntryValidator reports every problem as a ValidationIssue
- The caller gets an explicit failure it can show to the user

Both use the same parsing rules, so an amount accepted by one is
accepted by the other.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from src.models.ledger import EntryCategory
from src.models.validation import ValidationIssue, ValidationResult


AmountInput = Union[str, int, float, Decimal, None]
CategoryInput = Union[EntryCategory, str, None]

# Largest single amount accepted, and the finest fraction kept.
# Totals built from amounts within these bounds stay well inside the
# default decimal context.
MAX_AMOUNT = Decimal("1000000000")
MAX_DECIMAL_PLACES = 6


# Normalized spellings accepted for a manual entry category.
# "savings" is what the manual-entry form has always offered.
_CATEGORY_ALIASES = {
    "frivolous": EntryCategory.FRIVOLOUS,
    "nonfrivolous": EntryCategory.NON_FRIVOLOUS,
    "manualsavings": EntryCategory.MANUAL_SAVINGS,
    "savings": EntryCategory.MANUAL_SAVINGS,
}


def _to_decimal(raw: AmountInput) -> Optional[Decimal]:
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, Decimal):
        return raw
    if isinstance(raw, (int, float)):
        # str() keeps 0.1 as 0.1 instead of its binary expansion
        return Decimal(str(raw))
    text = raw.strip()
    if not text:
        return None
    try:
        return Decimal(text)
    except InvalidOperation:
        return None


def _out_of_range(value: Decimal) -> Optional[str]:
    """Name the bound a finite, positive amount breaks, if any."""
    if value > MAX_AMOUNT:
        return "too_large"
    if value != round(value, MAX_DECIMAL_PLACES):
        return "too_precise"
    return None


def parse_amount(raw: AmountInput) -> Optional[Decimal]:
    """
    Parse user input as a finite, positive amount.

    Returns None instead of raising; the guided workflow treats None as
    "ignore this submission".
    """
    value = _to_decimal(raw)
    if value is None or not value.is_finite() or value <= 0:
        return None
    if _out_of_range(value):
        return None
    return value


def parse_category(raw: CategoryInput) -> Optional[EntryCategory]:
    """Map an EntryCategory, its value or a known alias to a category."""
    if isinstance(raw, EntryCategory):
        return raw
    if not raw:
        return None
    key = re.sub(r"[^a-z]", "", raw.lower())
    return _CATEGORY_ALIASES.get(key)


class ManualEntryValidator:
    """
    Validates a manual entry before it reaches the ledger.

    Unlike the guided workflow, nothing is dropped silently: every problem
    ends up in ValidationResult.issues.
    """

    def validate(
        self,
        category: CategoryInput,
        amount: AmountInput,
    ) -> ValidationResult:
        issues = self._validate_category(category) + self._validate_amount(amount)

        is_valid = not any(issue.severity == "error" for issue in issues)

        return ValidationResult(
            raw_category=category.value if isinstance(category, EntryCategory) else str(category or ""),
            raw_amount="" if amount is None else str(amount),
            category=parse_category(category) if is_valid else None,
            amount=parse_amount(amount) if is_valid else None,
            is_valid=is_valid,
            issues=issues,
        )

    def _validate_category(self, category: CategoryInput) -> list[ValidationIssue]:
        if category is None or category == "":
            return [ValidationIssue(
                field="category",
                issue_type="missing",
                message="Please select a type.",
                severity="error",
                suggested_fix="Choose Frivolous, Non-Frivolous or Savings",
            )]

        if parse_category(category) is None:
            return [ValidationIssue(
                field="category",
                issue_type="unknown_category",
                message=f"Unknown entry type: {category}.",
                severity="error",
                suggested_fix="Choose Frivolous, Non-Frivolous or Savings",
            )]

        return []

    def _validate_amount(self, amount: AmountInput) -> list[ValidationIssue]:
        value = _to_decimal(amount)

        if value is None:
            blank = amount is None or (isinstance(amount, str) and not amount.strip())
            return [ValidationIssue(
                field="amount",
                issue_type="missing" if blank else "not_a_number",
                message="Please enter a valid amount.",
                severity="error",
                suggested_fix="Enter a number such as 12.50",
            )]

        if not value.is_finite():
            return [ValidationIssue(
                field="amount",
                issue_type="not_finite",
                message="Please enter a valid amount.",
                severity="error",
            )]

        if value <= 0:
            return [ValidationIssue(
                field="amount",
                issue_type="not_positive",
                message="Please enter a valid amount.",
                severity="error",
                suggested_fix="Amounts must be greater than zero",
            )]

        bound = _out_of_range(value)
        if bound:
            return [ValidationIssue(
                field="amount",
                issue_type=bound,
                message="Please enter a valid amount.",
                severity="error",
                suggested_fix=(
                    f"Amounts can be at most {MAX_AMOUNT:,}"
                    if bound == "too_large"
                    else f"Use at most {MAX_DECIMAL_PLACES} decimal places"
                ),
            )]

        return []

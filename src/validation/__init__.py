"""Validation package."""

from src.validation.validator import (
    ManualEntryValidator,
    parse_amount,
    parse_category,
)

__all__ = ["ManualEntryValidator", "parse_amount", "parse_category"]

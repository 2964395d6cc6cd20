"""Tests for display formatting."""

from datetime import datetime, timezone
from decimal import Decimal

from src.models.ledger import EntryCategory, LedgerEntry, LedgerSnapshot
from src.models.workflow import WorkflowState, WorkflowStep
from src.reports import (
    NO_ENTRIES_MESSAGE,
    format_amount,
    format_history_entry,
    history_lines,
    manual_entry_message,
    savings_prompt,
    totals_lines,
)


def _entry(amount, category, savings="0"):
    return LedgerEntry(
        timestamp=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
        amount=Decimal(amount),
        category=category,
        savings_contribution=Decimal(savings),
    )


class TestFormatAmount:

    def test_rounds_to_cents(self):
        assert format_amount(Decimal("20")) == "$20.00"
        assert format_amount(Decimal("1.234")) == "$1.23"
        assert format_amount(Decimal("0.125")) == "$0.13"

    def test_thousands_separator_and_symbol(self):
        assert format_amount(Decimal("1234.5"), "€") == "€1,234.50"


class TestHistory:

    def test_empty_history(self):
        assert history_lines(LedgerSnapshot.empty()) == [NO_ENTRIES_MESSAGE]

    def test_entry_with_savings(self):
        line = format_history_entry(_entry("200", EntryCategory.FRIVOLOUS, "20"))
        assert line.endswith(": $200.00 (Frivolous) - Saved: $20.00")

    def test_entry_without_savings(self):
        line = format_history_entry(_entry("50", EntryCategory.NON_FRIVOLOUS))
        assert line.endswith(": $50.00 (Non-Frivolous)")
        assert "Saved" not in line

    def test_manual_savings_label(self):
        line = format_history_entry(_entry("30", EntryCategory.MANUAL_SAVINGS, "30"))
        assert "(Manual Savings) - Saved: $30.00" in line

    def test_history_in_insertion_order(self):
        snapshot = LedgerSnapshot.from_history([
            _entry("1", EntryCategory.NON_FRIVOLOUS),
            _entry("2", EntryCategory.NON_FRIVOLOUS),
        ])
        lines = history_lines(snapshot)
        assert "$1.00" in lines[0]
        assert "$2.00" in lines[1]


class TestSummary:

    def test_totals_lines(self):
        snapshot = LedgerSnapshot.from_history([
            _entry("200", EntryCategory.FRIVOLOUS, "20"),
            _entry("50", EntryCategory.NON_FRIVOLOUS),
        ])
        assert totals_lines(snapshot) == [
            ("Total Spending", "$250.00"),
            ("Frivolous Spending", "$200.00"),
            ("Non-Frivolous Spending", "$50.00"),
            ("Total Savings", "$20.00"),
        ]

    def test_savings_prompt(self):
        state = WorkflowState(
            step=WorkflowStep.SHOW_SAVINGS,
            amount_input="12.34",
            amount=Decimal("12.34"),
            suggested_savings=Decimal("1.234"),
        )
        assert savings_prompt(state) == (
            "Based on your frivolous purchase of $12.34, "
            "you should save at least: $1.23"
        )

    def test_savings_prompt_without_suggestion(self):
        assert savings_prompt(WorkflowState()) is None

    def test_manual_entry_message(self):
        entry = _entry("30", EntryCategory.MANUAL_SAVINGS, "30")
        assert manual_entry_message(entry, "Savings") == "Successfully added $30.00 to Savings."

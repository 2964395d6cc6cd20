"""
Display Formatting

Turns ledger values into the text the front end shows.

DESIGN DECISION: Amounts are stored at full precision. Rounding to cents
happens only at display time, so a suggested saving of 1.234 is recorded
as 1.234 and displayed as $1.23.
"""

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from src.models.ledger import LedgerEntry, LedgerSnapshot
from src.models.workflow import WorkflowState


CENTS = Decimal("0.01")

NO_ENTRIES_MESSAGE = "No entries recorded yet."
ENCOURAGEMENT_MESSAGE = (
    "Every bit of savings helps! Setting aside this amount now can make a big "
    "difference in the long run. Why not take a moment to transfer it to your "
    "savings account?"
)
COMPLETE_MESSAGE = "You're on your way to better financial health. 🎉"


def format_amount(value: Decimal, symbol: str = "$") -> str:
    """Round half-up to cents and prefix the currency symbol."""
    return f"{symbol}{Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP):,.2f}"


def format_date(timestamp: datetime) -> str:
    """Entry date in the viewer's local time zone."""
    return timestamp.astimezone().strftime("%Y-%m-%d")


def totals_lines(snapshot: LedgerSnapshot, symbol: str = "$") -> list[tuple[str, str]]:
    """(label, formatted amount) pairs for the totals summary."""
    return [
        ("Total Spending", format_amount(snapshot.total_spending, symbol)),
        ("Frivolous Spending", format_amount(snapshot.frivolous_spending, symbol)),
        ("Non-Frivolous Spending", format_amount(snapshot.non_frivolous_spending, symbol)),
        ("Total Savings", format_amount(snapshot.total_savings, symbol)),
    ]


def format_history_entry(entry: LedgerEntry, symbol: str = "$") -> str:
    """
    One history line, e.g.

        2024-05-01: $200.00 (Frivolous) - Saved: $20.00
    """
    line = (
        f"{format_date(entry.timestamp)}: "
        f"{format_amount(entry.amount, symbol)} ({entry.category.value})"
    )
    if entry.savings_contribution > 0:
        line += f" - Saved: {format_amount(entry.savings_contribution, symbol)}"
    return line


def history_lines(snapshot: LedgerSnapshot, symbol: str = "$") -> list[str]:
    """History oldest first, or a single placeholder line when empty."""
    if not snapshot.history:
        return [NO_ENTRIES_MESSAGE]
    return [format_history_entry(entry, symbol) for entry in snapshot.history]


def savings_prompt(state: WorkflowState, symbol: str = "$") -> Optional[str]:
    """The suggested-savings message for the SHOW_SAVINGS step."""
    if state.suggested_savings is None:
        return None
    return (
        f"Based on your frivolous purchase of {symbol}{state.amount_input.strip()}, "
        f"you should save at least: {format_amount(state.suggested_savings, symbol)}"
    )


def manual_entry_message(entry: LedgerEntry, label: str, symbol: str = "$") -> str:
    """Acknowledgment shown after a successful manual entry."""
    return f"Successfully added {format_amount(entry.amount, symbol)} to {label}."

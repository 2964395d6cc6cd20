"""Display formatting package."""

from src.reports.summary import (
    COMPLETE_MESSAGE,
    ENCOURAGEMENT_MESSAGE,
    NO_ENTRIES_MESSAGE,
    format_amount,
    format_history_entry,
    history_lines,
    manual_entry_message,
    savings_prompt,
    totals_lines,
)

__all__ = [
    "COMPLETE_MESSAGE",
    "ENCOURAGEMENT_MESSAGE",
    "NO_ENTRIES_MESSAGE",
    "format_amount",
    "format_history_entry",
    "history_lines",
    "manual_entry_message",
    "savings_prompt",
    "totals_lines",
]

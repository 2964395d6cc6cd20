"""Ledger package: the persisted totals and history, and clearing them."""

from src.ledger.store import (
    AGGREGATE_KEYS,
    HISTORY_KEY,
    STORAGE_KEYS,
    LedgerError,
    LedgerStore,
    PersistenceError,
)
from src.ledger.clear import (
    ACKNOWLEDGMENT,
    CONFIRMATION_PROMPT,
    ClearDataAction,
    ClearOutcome,
)

__all__ = [
    "AGGREGATE_KEYS",
    "HISTORY_KEY",
    "STORAGE_KEYS",
    "LedgerError",
    "LedgerStore",
    "PersistenceError",
    "ACKNOWLEDGMENT",
    "CONFIRMATION_PROMPT",
    "ClearDataAction",
    "ClearOutcome",
]

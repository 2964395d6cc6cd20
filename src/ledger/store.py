"""
Ledger Store

The store is the only owner of the ledger's aggregates and history, and
the only component that reads or writes the key-value storage.

STORAGE LAYOUT (one key per field, all string values):

    totalSpending          decimal string
    frivolousSpending      decimal string
    nonFrivolousSpending   decimal string
    totalSavings           decimal string
    spendingHistory        JSON array of entries, oldest first

DESIGN DECISION: Every key is loaded independently. A key that is missing
or does not parse falls back to zero (or an empty history) on its own,
so damage to one key never costs the user the others.

Writes happen after every mutation, synchronously. If a write fails the
in-memory state keeps the mutation and the caller gets a PersistenceError.
"""

import json
from decimal import Decimal, InvalidOperation
from typing import Optional

import structlog
from pydantic import TypeAdapter, ValidationError

from src.audit import AuditLogger
from src.models.audit import AuditEventBuilder
from src.models.ledger import ZERO, LedgerEntry, LedgerSnapshot
from src.services.storage import KeyValueStoreInterface, StorageWriteError


TOTAL_SPENDING_KEY = "totalSpending"
FRIVOLOUS_SPENDING_KEY = "frivolousSpending"
NON_FRIVOLOUS_SPENDING_KEY = "nonFrivolousSpending"
TOTAL_SAVINGS_KEY = "totalSavings"
HISTORY_KEY = "spendingHistory"

# Snapshot field -> storage key
AGGREGATE_KEYS = {
    "total_spending": TOTAL_SPENDING_KEY,
    "frivolous_spending": FRIVOLOUS_SPENDING_KEY,
    "non_frivolous_spending": NON_FRIVOLOUS_SPENDING_KEY,
    "total_savings": TOTAL_SAVINGS_KEY,
}

STORAGE_KEYS = (*AGGREGATE_KEYS.values(), HISTORY_KEY)

# reset() removes the history before the totals
_RESET_ORDER = (HISTORY_KEY, *AGGREGATE_KEYS.values())

_HISTORY_ADAPTER = TypeAdapter(list[LedgerEntry])


class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class PersistenceError(LedgerError):
    """
    The ledger changed in memory but could not be written to storage.

    The in-memory snapshot already reflects the operation.
    """

    def __init__(self, operation: str, cause: Exception):
        self.operation = operation
        self.cause = cause
        super().__init__(f"Could not save ledger after {operation}: {cause}")


class LedgerStore:
    """
    Holds the current LedgerSnapshot and keeps storage in step with it.

    Usage:
        store = LedgerStore(JsonFileKeyValueStore(path))
        store.load()
        store.record_entry(entry)
        store.snapshot().total_savings
    """

    def __init__(
        self,
        storage: KeyValueStoreInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger
        self._snapshot = LedgerSnapshot.empty()
        self._logger = structlog.get_logger(__name__)

    # -------------------------------------------------------------------------
    # Reading
    # -------------------------------------------------------------------------

    def snapshot(self) -> LedgerSnapshot:
        """Current aggregates and history. The value is immutable."""
        return self._snapshot

    def load(self) -> LedgerSnapshot:
        """
        Replace the in-memory ledger with what storage holds.

        Never raises for bad stored data; see the module docstring.
        """
        corrupt_fields: list[str] = []

        aggregates = {
            field: self._read_decimal(key, corrupt_fields)
            for field, key in AGGREGATE_KEYS.items()
        }
        history = self._read_history(corrupt_fields)

        self._snapshot = LedgerSnapshot(**aggregates, history=history)

        self._logger.info(
            "ledger_loaded",
            entry_count=len(history),
            corrupt_fields=corrupt_fields,
        )
        self._audit(AuditEventBuilder.ledger_loaded(len(history), corrupt_fields))
        return self._snapshot

    def _read_decimal(self, key: str, corrupt_fields: list[str]) -> Decimal:
        raw = self._storage.get(key)
        if raw is None:
            return ZERO

        try:
            value = Decimal(raw.strip())
        except InvalidOperation:
            self._field_corrupt(key, f"not a number: {raw[:40]!r}", corrupt_fields)
            return ZERO

        if not value.is_finite() or value < 0:
            self._field_corrupt(key, f"not a valid total: {raw[:40]!r}", corrupt_fields)
            return ZERO

        return value

    def _read_history(self, corrupt_fields: list[str]) -> tuple[LedgerEntry, ...]:
        raw = self._storage.get(HISTORY_KEY)
        if raw is None:
            return ()

        try:
            return tuple(_HISTORY_ADAPTER.validate_json(raw))
        except ValidationError as e:
            self._field_corrupt(
                HISTORY_KEY, f"{e.error_count()} validation error(s)", corrupt_fields
            )
            return ()

    def _field_corrupt(self, key: str, reason: str, corrupt_fields: list[str]) -> None:
        corrupt_fields.append(key)
        self._logger.warning("storage_field_corrupt", key=key, reason=reason)
        self._audit(AuditEventBuilder.storage_field_corrupt(key, reason))

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def record_entry(self, entry: LedgerEntry) -> LedgerSnapshot:
        """
        Append an entry, update the totals and persist.

        The new snapshot is swapped in as a single assignment, so no
        half-updated totals are ever visible.

        Raises:
            PersistenceError: If storage could not be written. The entry
                is still recorded in memory.
        """
        self._snapshot = self._snapshot.with_entry(entry)

        self._logger.info(
            "entry_recorded",
            category=entry.category.value,
            amount=str(entry.amount),
            savings_contribution=str(entry.savings_contribution),
        )
        self._audit(AuditEventBuilder.entry_recorded(entry, self._snapshot.entry_count))

        self._persist_or_raise("record_entry")
        return self._snapshot

    def reset(self) -> int:
        """
        Remove every ledger key from storage, then empty the in-memory ledger.

        No confirmation happens here; callers own that. A ledger with no
        keys in storage loads as all zeros, so removing the keys is how the
        cleared state is persisted.

        Returns:
            The number of history entries that were removed.

        Raises:
            PersistenceError: If storage could not be cleared. The in-memory
                ledger is left untouched, and the keys already removed are
                written back from it so storage does not hold a history
                without its totals.
        """
        removed = self._snapshot.entry_count

        try:
            self._storage.remove_many(_RESET_ORDER)
        except StorageWriteError as e:
            self._write_failed("reset", e)
            self._restore_after_failed_reset()
            raise PersistenceError("reset", e) from e

        self._snapshot = LedgerSnapshot.empty()

        self._logger.warning("ledger_reset", entries_removed=removed)
        return removed

    def _restore_after_failed_reset(self) -> None:
        try:
            self.persist()
        except StorageWriteError as e:
            self._logger.error("ledger_restore_failed", error=str(e))
        else:
            self._logger.info("ledger_restored_after_failed_reset")

    def persist(self) -> None:
        """
        Write every aggregate and the full history to storage in one
        set_many() call.

        Raises:
            StorageWriteError: If the provider fails.
        """
        snapshot = self._snapshot
        items = {
            key: str(getattr(snapshot, field))
            for field, key in AGGREGATE_KEYS.items()
        }
        items[HISTORY_KEY] = json.dumps(
            [entry.to_storage_dict() for entry in snapshot.history]
        )
        self._storage.set_many(items)

    def _persist_or_raise(self, operation: str) -> None:
        try:
            self.persist()
        except StorageWriteError as e:
            self._write_failed(operation, e)
            raise PersistenceError(operation, e) from e

    def _write_failed(self, operation: str, error: Exception) -> None:
        self._logger.error("ledger_persist_failed", operation=operation, error=str(error))
        self._audit(AuditEventBuilder.storage_write_failed(operation, str(error)))

    def _audit(self, event) -> None:
        if self._audit_logger:
            self._audit_logger.log(event)

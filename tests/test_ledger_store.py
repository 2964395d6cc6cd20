"""Tests for LedgerStore: aggregates, persistence and per-field recovery."""

import json
from decimal import Decimal

import pytest

from src.ledger import HISTORY_KEY, STORAGE_KEYS, LedgerStore, PersistenceError
from src.models.ledger import EntryCategory, LedgerEntry
from src.services.storage import InMemoryKeyValueStore, JsonFileKeyValueStore


def frivolous(amount: str, savings: str = "0") -> LedgerEntry:
    return LedgerEntry(
        amount=Decimal(amount),
        category=EntryCategory.FRIVOLOUS,
        savings_contribution=Decimal(savings),
    )


def non_frivolous(amount: str) -> LedgerEntry:
    return LedgerEntry(amount=Decimal(amount), category=EntryCategory.NON_FRIVOLOUS)


def manual_savings(amount: str) -> LedgerEntry:
    return LedgerEntry(
        amount=Decimal(amount),
        category=EntryCategory.MANUAL_SAVINGS,
        savings_contribution=Decimal(amount),
    )


def assert_invariants(snapshot):
    spend = sum(
        (e.amount for e in snapshot.history if e.category.is_spending), Decimal("0")
    )
    savings = sum((e.savings_contribution for e in snapshot.history), Decimal("0"))
    assert snapshot.total_spending == spend
    assert snapshot.total_savings == savings
    assert snapshot.frivolous_spending + snapshot.non_frivolous_spending == spend


class TestRecordEntry:
    """Tests for appending entries."""

    def test_record_updates_aggregates(self, store):
        store.record_entry(frivolous("200", "20"))
        store.record_entry(non_frivolous("50"))
        store.record_entry(manual_savings("30"))

        snapshot = store.snapshot()
        assert snapshot.total_spending == Decimal("250")
        assert snapshot.frivolous_spending == Decimal("200")
        assert snapshot.non_frivolous_spending == Decimal("50")
        assert snapshot.total_savings == Decimal("50")
        assert [e.category for e in snapshot.history] == [
            EntryCategory.FRIVOLOUS,
            EntryCategory.NON_FRIVOLOUS,
            EntryCategory.MANUAL_SAVINGS,
        ]
        assert_invariants(snapshot)

    def test_invariants_hold_after_every_entry(self, store):
        entries = [
            frivolous("19.99", "1.999"),
            non_frivolous("0.01"),
            manual_savings("1000"),
            frivolous("7"),
            non_frivolous("123.45"),
        ]
        for entry in entries:
            store.record_entry(entry)
            assert_invariants(store.snapshot())
            assert store.snapshot().is_consistent()

    def test_record_persists_every_key(self, store, storage):
        store.record_entry(frivolous("200", "20.00"))

        assert storage.get("totalSpending") == "200"
        assert storage.get("frivolousSpending") == "200"
        assert storage.get("nonFrivolousSpending") == "0"
        assert storage.get("totalSavings") == "20.00"

        history = json.loads(storage.get(HISTORY_KEY))
        assert len(history) == 1
        assert history[0]["amount"] == "200"
        assert history[0]["category"] == "Frivolous"
        assert history[0]["savingsContribution"] == "20.00"

    def test_record_writes_one_batch(self, store, storage):
        store.record_entry(non_frivolous("5"))

        assert len(storage.batches) == 1
        assert set(storage.batches[0]) == set(STORAGE_KEYS)

    def test_long_amount_is_persisted_and_audited(self, store, storage, sink):
        amount = "1" + "0" * 600
        store.record_entry(non_frivolous(amount))

        assert json.loads(storage.get(HISTORY_KEY))[0]["amount"] == amount
        recorded = [e for e in sink.events if e.event_type.value == "entry_recorded"]
        assert len(recorded) == 1
        assert len(recorded[0].description) <= 500

    def test_previous_snapshot_is_unchanged(self, store):
        before = store.snapshot()
        store.record_entry(non_frivolous("5"))
        assert before.history == ()
        assert store.snapshot().entry_count == 1

    def test_write_failure_keeps_in_memory_entry(self, store, storage, sink):
        storage.fail_writes = True

        with pytest.raises(PersistenceError) as exc_info:
            store.record_entry(non_frivolous("50"))

        assert exc_info.value.operation == "record_entry"
        assert store.snapshot().total_spending == Decimal("50")
        assert store.snapshot().entry_count == 1
        assert "storage_write_failed" in sink.types

    def test_next_write_catches_storage_up(self, store, storage):
        storage.fail_writes = True
        with pytest.raises(PersistenceError):
            store.record_entry(non_frivolous("50"))

        storage.fail_writes = False
        store.record_entry(non_frivolous("25"))

        reloaded = LedgerStore(storage)
        reloaded.load()
        assert reloaded.snapshot().total_spending == Decimal("75")
        assert reloaded.snapshot().entry_count == 2


class TestLoad:
    """Tests for loading from storage."""

    def test_empty_storage_loads_zeros(self, storage):
        snapshot = LedgerStore(storage).load()
        assert snapshot.total_spending == 0
        assert snapshot.total_savings == 0
        assert snapshot.history == ()

    def test_round_trip(self, store, storage):
        store.record_entry(frivolous("200", "20.00"))
        store.record_entry(non_frivolous("50"))
        store.record_entry(manual_savings("30.5"))

        reloaded = LedgerStore(storage)
        reloaded.load()

        assert reloaded.snapshot() == store.snapshot()

    def test_round_trip_through_json_file(self, tmp_path):
        path = tmp_path / "ledger.json"
        store = LedgerStore(JsonFileKeyValueStore(path))
        store.load()
        store.record_entry(frivolous("12.34", "1.234"))
        store.record_entry(manual_savings("5"))

        reloaded = LedgerStore(JsonFileKeyValueStore(path))
        reloaded.load()

        assert reloaded.snapshot() == store.snapshot()
        assert reloaded.snapshot().total_savings == Decimal("6.234")

    def test_corrupt_savings_keeps_history(self, store, storage, sink, audit_logger):
        store.record_entry(frivolous("200", "20"))
        history_before = store.snapshot().history
        storage.set("totalSavings", "not a number")

        reloaded = LedgerStore(storage, audit_logger=audit_logger)
        snapshot = reloaded.load()

        assert snapshot.total_savings == 0
        assert snapshot.total_spending == Decimal("200")
        assert snapshot.history == history_before
        assert "storage_field_corrupt" in sink.types

    def test_deleted_savings_keeps_history(self, store, storage):
        store.record_entry(frivolous("200", "20"))
        storage.remove("totalSavings")

        snapshot = LedgerStore(storage).load()

        assert snapshot.total_savings == 0
        assert snapshot.entry_count == 1

    @pytest.mark.parametrize("raw", ["NaN", "Infinity", "-3", ""])
    def test_invalid_totals_fall_back_to_zero(self, storage, raw):
        storage.set("totalSpending", raw)
        storage.set("totalSavings", "12.5")

        snapshot = LedgerStore(storage).load()

        assert snapshot.total_spending == 0
        assert snapshot.total_savings == Decimal("12.5")

    @pytest.mark.parametrize("raw", [
        "{broken",
        '{"not": "a list"}',
        '[{"amount": "-1", "category": "Frivolous"}]',
        '[{"amount": "5", "category": "Groceries"}]',
    ])
    def test_corrupt_history_keeps_totals(self, storage, raw):
        storage.set("totalSpending", "50")
        storage.set(HISTORY_KEY, raw)

        snapshot = LedgerStore(storage).load()

        assert snapshot.history == ()
        assert snapshot.total_spending == Decimal("50")

    def test_loads_legacy_browser_data(self):
        """Data written by the browser app: numbers and date/type/savings keys."""
        storage = InMemoryKeyValueStore({
            "totalSpending": "250",
            "frivolousSpending": "200",
            "nonFrivolousSpending": "50",
            "totalSavings": "20",
            HISTORY_KEY: json.dumps([
                {"date": "2024-05-01T10:00:00.000Z", "amount": 200,
                 "type": "Frivolous", "savings": 20},
                {"date": "2024-05-02T10:00:00.000Z", "amount": 50,
                 "type": "Non-Frivolous", "savings": 0},
            ]),
        })

        snapshot = LedgerStore(storage).load()

        assert snapshot.entry_count == 2
        assert snapshot.history[0].savings_contribution == Decimal("20")
        assert snapshot.is_consistent()


class TestReset:
    """Tests for clearing the ledger."""

    def test_reset_clears_everything(self, store, storage):
        store.record_entry(frivolous("200", "20"))
        store.record_entry(manual_savings("30"))

        removed = store.reset()

        snapshot = store.snapshot()
        assert removed == 2
        assert snapshot.total_spending == 0
        assert snapshot.frivolous_spending == 0
        assert snapshot.non_frivolous_spending == 0
        assert snapshot.total_savings == 0
        assert snapshot.history == ()
        for key in STORAGE_KEYS:
            assert storage.get(key) is None

    def test_reset_is_idempotent(self, store, storage):
        store.record_entry(non_frivolous("10"))

        store.reset()
        once = (store.snapshot(), sorted(storage.keys()))
        store.reset()
        twice = (store.snapshot(), sorted(storage.keys()))

        assert once == twice

    def test_reset_state_survives_reload(self, store, storage):
        store.record_entry(non_frivolous("10"))
        store.reset()

        snapshot = LedgerStore(storage).load()
        assert snapshot.entry_count == 0
        assert snapshot.total_spending == 0

    def test_reset_leaves_unrelated_keys(self, store, storage):
        storage.set("theme", "dark")
        store.record_entry(non_frivolous("10"))
        store.reset()
        assert storage.get("theme") == "dark"

    def test_reset_failure_keeps_memory(self, store, storage):
        store.record_entry(non_frivolous("10"))
        storage.fail_writes = True

        with pytest.raises(PersistenceError):
            store.reset()

        assert store.snapshot().total_spending == Decimal("10")

    @pytest.mark.parametrize("removals_allowed", [1, 2, 4])
    def test_interrupted_reset_restores_storage(self, store, storage, removals_allowed):
        store.record_entry(frivolous("200", "20"))
        store.record_entry(non_frivolous("50"))
        storage.removes_before_failure = removals_allowed

        with pytest.raises(PersistenceError):
            store.reset()

        assert store.snapshot().total_spending == Decimal("250")
        reloaded = LedgerStore(storage).load()
        assert reloaded.total_spending == Decimal("250")
        assert reloaded.total_savings == Decimal("20")
        assert reloaded.entry_count == 2
        assert reloaded.is_consistent()

    def test_history_is_removed_before_totals(self, store, storage):
        store.record_entry(non_frivolous("50"))
        removed = []
        original_remove = storage.remove

        def tracking_remove(key):
            removed.append(key)
            original_remove(key)

        storage.remove = tracking_remove
        store.reset()

        assert removed[0] == HISTORY_KEY
        assert sorted(removed) == sorted(STORAGE_KEYS)

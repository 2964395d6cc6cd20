"""
Shared fixtures.

Everything runs against in-memory storage unless a test asks for a
JSON file under tmp_path. No test touches the user's real data file.
"""

from decimal import Decimal
from typing import Optional

import pytest

from src.audit import AuditLogger
from src.config import get_settings
from src.ledger import LedgerStore
from src.models.audit import AuditEvent
from src.services.storage import InMemoryKeyValueStore, StorageWriteError
from src.workflow import PurchaseWorkflow


class FlakyKeyValueStore(InMemoryKeyValueStore):
    """
    In-memory store whose writes can be switched to fail.

    `removes_before_failure` lets that many removals through, then fails
    the next one, to interrupt a multi-key clear part way.
    """

    def __init__(self, initial: Optional[dict[str, str]] = None):
        super().__init__(initial)
        self.fail_writes = False
        self.removes_before_failure: Optional[int] = None
        self.batches: list[dict[str, str]] = []

    def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise StorageWriteError("disk full")
        super().set(key, value)

    def set_many(self, items: dict[str, str]) -> None:
        self.batches.append(dict(items))
        super().set_many(items)

    def remove(self, key: str) -> None:
        if self.fail_writes:
            raise StorageWriteError("disk full")
        if self.removes_before_failure is not None:
            if self.removes_before_failure == 0:
                raise StorageWriteError("disk full")
            self.removes_before_failure -= 1
        super().remove(key)


class RecordingSink:
    """Collects audit events passed to AuditLogger."""

    def __init__(self):
        self.events: list[AuditEvent] = []

    def __call__(self, event: AuditEvent) -> None:
        self.events.append(event)

    @property
    def types(self) -> list[str]:
        return [event.event_type.value for event in self.events]


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch, tmp_path):
    """Keep settings away from the real data file and any local .env."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("STORAGE_BACKEND", "memory")
    monkeypatch.setenv("STORAGE_DATA_PATH", str(tmp_path / "ledger.json"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def storage() -> FlakyKeyValueStore:
    return FlakyKeyValueStore()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def audit_logger(sink) -> AuditLogger:
    return AuditLogger(sink=sink)


@pytest.fixture
def store(storage, audit_logger) -> LedgerStore:
    ledger = LedgerStore(storage, audit_logger=audit_logger)
    ledger.load()
    return ledger


@pytest.fixture
def workflow(store, audit_logger) -> PurchaseWorkflow:
    return PurchaseWorkflow(
        commit=store.record_entry,
        savings_rate=Decimal("0.10"),
        audit_logger=audit_logger,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()

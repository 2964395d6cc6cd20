"""
Main Orchestrator for Spend to Save

This module ties together all the components:
1. Storage (JSON file or in-memory key-value store)
2. Ledger store (totals + history, loaded once at startup)
3. Purchase workflow (commits finished entries to the ledger store)
4. Clear-data action (confirmation-gated, debounced reset)
5. Audit logger shared by all of the above

DESIGN DECISION: The workflow and the ledger only meet through one
callable, LedgerStore.record_entry. The front end drives the workflow
with events and reads the ledger through snapshots.
"""

from typing import Callable, Optional

import structlog

from src.audit import AuditLogger, configure_logging
from src.config import Settings, get_settings
from src.ledger import ClearDataAction, ClearOutcome, LedgerStore
from src.models.ledger import LedgerEntry, LedgerSnapshot
from src.models.workflow import WorkflowState
from src.services.storage import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStoreInterface,
    StorageReadError,
)
from src.workflow import PurchaseWorkflow


logger = structlog.get_logger(__name__)


class SpendToSaveApp:
    """
    Everything one user session needs, already wired together.

    The front end calls the workflow methods for events and snapshot()
    for what to draw.
    """

    def __init__(
        self,
        store: LedgerStore,
        workflow: PurchaseWorkflow,
        clear_action: ClearDataAction,
        audit_logger: AuditLogger,
        storage: KeyValueStoreInterface,
        currency_symbol: str = "$",
    ):
        self.store = store
        self.workflow = workflow
        self.clear_action = clear_action
        self.audit_logger = audit_logger
        self.storage = storage
        self.currency_symbol = currency_symbol

    @property
    def state(self) -> WorkflowState:
        return self.workflow.state

    def snapshot(self) -> LedgerSnapshot:
        return self.store.snapshot()

    def manual_add(self, category, amount) -> LedgerEntry:
        return self.workflow.manual_add(category, amount)

    def clear_all_data(
        self,
        confirm: Optional[Callable[[str], bool]] = None,
    ) -> ClearOutcome:
        """
        Clear the ledger and restart any purchase in progress.

        The workflow is only restarted when the clear actually happened.
        """
        outcome = self.clear_action.request(confirm=confirm)
        if outcome is ClearOutcome.CLEARED:
            self.workflow.cancel()
        return outcome


def create_storage(
    settings: Settings,
    use_storage: bool = True,
) -> KeyValueStoreInterface:
    """
    Build the configured key-value store.

    Falls back to memory (with a warning) if the data file is unreadable,
    so the app still starts; the damaged file is left untouched.
    """
    storage_settings = settings.storage

    if not use_storage or storage_settings.backend == "memory":
        return InMemoryKeyValueStore()

    try:
        return JsonFileKeyValueStore(storage_settings.data_path)
    except StorageReadError as e:
        logger.warning(
            "storage_unavailable_using_memory",
            path=str(storage_settings.data_path),
            error=str(e),
        )
        return InMemoryKeyValueStore()


def create_app_components(
    use_storage: bool = True,
    storage: Optional[KeyValueStoreInterface] = None,
    settings: Optional[Settings] = None,
    confirm: Optional[Callable[[str], bool]] = None,
    notify: Optional[Callable[[str], None]] = None,
    clock: Optional[Callable[[], float]] = None,
    audit_sink=None,
) -> SpendToSaveApp:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to use the configured storage backend.
                    Set to False for an in-memory session.
        storage: Explicit key-value store; overrides use_storage.
        settings: Settings to use instead of get_settings().
        confirm: Confirmation callable for clearing data.
        notify: Receives the acknowledgment after data is cleared.
        clock: Monotonic clock for the clear debounce window.
        audit_sink: Receives every audit event.

    Returns:
        The wired application, with the ledger already loaded.
    """
    settings = settings or get_settings()
    app_settings = settings.app
    ledger_settings = settings.ledger

    configure_logging(app_settings.log_level, app_settings.log_json)

    if storage is None:
        storage = create_storage(settings, use_storage=use_storage)

    audit_logger = AuditLogger(sink=audit_sink)

    store = LedgerStore(storage, audit_logger=audit_logger)
    store.load()

    workflow = PurchaseWorkflow(
        commit=store.record_entry,
        savings_rate=ledger_settings.savings_rate,
        audit_logger=audit_logger,
    )

    clear_kwargs = {}
    if confirm is not None:
        clear_kwargs["confirm"] = confirm
    if notify is not None:
        clear_kwargs["notify"] = notify
    if clock is not None:
        clear_kwargs["clock"] = clock

    clear_action = ClearDataAction(
        store,
        debounce_seconds=ledger_settings.clear_debounce_seconds,
        audit_logger=audit_logger,
        **clear_kwargs,
    )

    return SpendToSaveApp(
        store=store,
        workflow=workflow,
        clear_action=clear_action,
        audit_logger=audit_logger,
        storage=storage,
        currency_symbol=ledger_settings.currency_symbol,
    )

"""
Clear All Data

Wipes the ledger after the user confirms. The steps always run in this
order:

    1. ask for confirmation
    2. clear storage
    3. clear the in-memory ledger
    4. deliver the acknowledgment

Steps 2 and 3 are LedgerStore.reset(). Once confirmed, a clear cannot be
cancelled.

Repeated requests within a short window are collapsed: only the first
one runs, the rest are ignored until the requests stop for at least the
window length. This protects against double clicks popping up the
confirmation twice.
"""

import time
from enum import Enum
from typing import Callable, Optional

import structlog

from src.audit import AuditLogger
from src.ledger.store import LedgerStore
from src.models.audit import AuditEventBuilder


CONFIRMATION_PROMPT = (
    "Are you sure you want to clear all your data? This action cannot be undone."
)
ACKNOWLEDGMENT = "All data has been cleared."


class ClearOutcome(str, Enum):
    CLEARED = "cleared"
    CANCELLED = "cancelled"
    SUPPRESSED = "suppressed"


def _decline(prompt: str) -> bool:
    return False


def _ignore(message: str) -> None:
    return None


class ClearDataAction:
    """
    Confirmation-gated, debounced bulk reset of a LedgerStore.

    Args:
        store: The ledger to clear.
        confirm: Called with the prompt; returns True to go ahead.
            Defaults to always declining.
        notify: Called with the acknowledgment after a clear.
        debounce_seconds: Collapse window for repeated requests.
        clock: Monotonic clock, injectable for tests.
    """

    def __init__(
        self,
        store: LedgerStore,
        confirm: Callable[[str], bool] = _decline,
        notify: Callable[[str], None] = _ignore,
        debounce_seconds: float = 0.3,
        clock: Callable[[], float] = time.monotonic,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._confirm = confirm
        self._notify = notify
        self._debounce_seconds = debounce_seconds
        self._clock = clock
        self._audit_logger = audit_logger
        self._last_request: Optional[float] = None
        self._logger = structlog.get_logger(__name__)

    def request(
        self,
        confirm: Optional[Callable[[str], bool]] = None,
    ) -> ClearOutcome:
        """
        Ask to clear everything.

        Args:
            confirm: Overrides the confirmation callable for this request.

        Raises:
            PersistenceError: If storage could not be cleared.
        """
        now = self._clock()
        last, self._last_request = self._last_request, now

        if last is not None and now - last < self._debounce_seconds:
            self._logger.debug("clear_request_suppressed", seconds_since_last=now - last)
            self._audit(AuditEventBuilder.clear_suppressed(now - last))
            return ClearOutcome.SUPPRESSED

        if not (confirm or self._confirm)(CONFIRMATION_PROMPT):
            self._audit(AuditEventBuilder.clear_cancelled())
            return ClearOutcome.CANCELLED

        removed = self._store.reset()
        self._audit(AuditEventBuilder.ledger_cleared(removed))

        self._notify(ACKNOWLEDGMENT)
        return ClearOutcome.CLEARED

    def _audit(self, event) -> None:
        if self._audit_logger:
            self._audit_logger.log(event)

"""
Purchase Workflow

Walks the user through logging one purchase:

    ASK_PURCHASE_TYPE --select_type--> ENTER_AMOUNT
    ENTER_AMOUNT --submit_amount (non-frivolous)--> COMPLETE
    ENTER_AMOUNT --submit_amount (frivolous)--> SHOW_SAVINGS
    SHOW_SAVINGS --confirm_savings(True)--> COMPLETE
    SHOW_SAVINGS --confirm_savings(False)--> SHOW_SAVINGS (encouragement shown)
    COMPLETE --reset--> ASK_PURCHASE_TYPE

Any other input in any step is ignored. The workflow never reads the
ledger; finished entries are handed to the `commit` callable, which is
normally LedgerStore.record_entry.

Manual entry is separate from the steps above. It can be used at any
time and never changes the workflow state.

IMPORTANT: An invalid amount in the guided workflow is ignored silently,
while an invalid manual entry raises InvalidAmountError. Both behaviours
are intentional and kept as they are.
"""

from decimal import Decimal
from typing import Callable, Optional, Union

import structlog

from src.audit import AuditLogger
from src.models.audit import AuditEventBuilder
from src.models.ledger import EntryCategory, LedgerEntry
from src.models.validation import ValidationResult
from src.models.workflow import PurchaseType, WorkflowState, WorkflowStep
from src.validation import ManualEntryValidator, parse_amount
from src.validation.validator import AmountInput, CategoryInput


DEFAULT_SAVINGS_RATE = Decimal("0.10")

EntrySink = Callable[[LedgerEntry], object]


class WorkflowError(Exception):
    """Base exception for workflow operations."""
    pass


class InvalidAmountError(WorkflowError):
    """A manual entry was rejected. `result` lists every issue found."""

    def __init__(self, result: ValidationResult):
        self.result = result
        super().__init__(result.message or "Invalid manual entry")


class PurchaseWorkflow:
    """
    The guided purchase state machine plus manual entry.

    Every transition method returns the (possibly unchanged) state.
    """

    def __init__(
        self,
        commit: EntrySink,
        savings_rate: Decimal = DEFAULT_SAVINGS_RATE,
        validator: Optional[ManualEntryValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._commit = commit
        self._savings_rate = Decimal(savings_rate)
        self._validator = validator or ManualEntryValidator()
        self._audit_logger = audit_logger
        self._state = WorkflowState()
        self._logger = structlog.get_logger(__name__)

    @property
    def state(self) -> WorkflowState:
        return self._state

    @property
    def savings_rate(self) -> Decimal:
        return self._savings_rate

    # -------------------------------------------------------------------------
    # Guided workflow
    # -------------------------------------------------------------------------

    def select_type(self, purchase_type: Union[PurchaseType, str]) -> WorkflowState:
        """Record the purchase type and move on to the amount."""
        if self._state.step is not WorkflowStep.ASK_PURCHASE_TYPE:
            return self._ignored("select_type")

        try:
            purchase_type = PurchaseType(purchase_type)
        except ValueError:
            return self._ignored("select_type")

        self._state = self._state.model_copy(update={
            "step": WorkflowStep.ENTER_AMOUNT,
            "purchase_type": purchase_type,
        })
        self._audit(AuditEventBuilder.purchase_type_selected(
            purchase_type.value, self._state.correlation_id,
        ))
        return self._state

    def submit_amount(self, raw: str) -> WorkflowState:
        """
        Accept the purchase amount.

        Anything that is not a finite positive number leaves the state
        exactly as it was.
        """
        if self._state.step is not WorkflowStep.ENTER_AMOUNT:
            return self._ignored("submit_amount")

        amount = parse_amount(raw)
        if amount is None:
            self._audit(AuditEventBuilder.amount_rejected(
                str(raw), self._state.correlation_id,
            ))
            return self._state

        if self._state.purchase_type is PurchaseType.NON_FRIVOLOUS:
            entry = LedgerEntry(amount=amount, category=self._state.purchase_type.category)
            self._complete(entry, amount_input=raw, amount=amount)
            return self._state

        suggested = amount * self._savings_rate
        self._state = self._state.model_copy(update={
            "step": WorkflowStep.SHOW_SAVINGS,
            "amount_input": raw,
            "amount": amount,
            "suggested_savings": suggested,
            "encouragement_visible": False,
        })
        self._audit(AuditEventBuilder.savings_suggested(
            amount, suggested, self._state.correlation_id,
        ))
        return self._state

    def confirm_savings(self, confirmed: bool) -> WorkflowState:
        """
        Answer "did you set the savings aside?".

        Saying no only shows the encouragement; the user can still say
        yes afterwards.
        """
        if self._state.step is not WorkflowStep.SHOW_SAVINGS:
            return self._ignored("confirm_savings")

        self._audit(AuditEventBuilder.savings_answered(
            bool(confirmed), self._state.suggested_savings, self._state.correlation_id,
        ))

        if not confirmed:
            self._state = self._state.model_copy(update={"encouragement_visible": True})
            return self._state

        entry = LedgerEntry(
            amount=self._state.amount,
            category=self._state.purchase_type.category,
            savings_contribution=self._state.suggested_savings,
        )
        self._complete(entry)
        return self._state

    def reset(self) -> WorkflowState:
        """Start a new purchase once the current one is complete."""
        if self._state.step is not WorkflowStep.COMPLETE:
            return self._ignored("reset")
        return self._restart(cancelled=False)

    def cancel(self) -> WorkflowState:
        """Abandon the current purchase from any step. Nothing is recorded."""
        if self._state == WorkflowState(correlation_id=self._state.correlation_id):
            return self._state
        return self._restart(cancelled=True)

    def _complete(self, entry: LedgerEntry, **updates) -> None:
        # The step advances before the entry is handed over, so a storage
        # failure during commit cannot lead to the same purchase twice.
        self._state = self._state.model_copy(update={
            **updates,
            "step": WorkflowStep.COMPLETE,
            "encouragement_visible": False,
        })
        self._commit(entry)

    def _restart(self, cancelled: bool) -> WorkflowState:
        previous = self._state.correlation_id
        self._state = WorkflowState()
        self._audit(AuditEventBuilder.workflow_restarted(cancelled, previous))
        return self._state

    def _ignored(self, operation: str) -> WorkflowState:
        self._logger.debug(
            "workflow_input_ignored",
            operation=operation,
            step=self._state.step.value,
        )
        return self._state

    # -------------------------------------------------------------------------
    # Manual entry
    # -------------------------------------------------------------------------

    def manual_add(self, category: CategoryInput, amount: AmountInput) -> LedgerEntry:
        """
        Record an entry directly, bypassing the guided steps.

        Manual savings contribute their whole amount to savings; manual
        purchases contribute nothing.

        Raises:
            InvalidAmountError: If the category or amount is invalid.
        """
        result = self._validator.validate(category, amount)
        if not result.is_valid:
            self._audit(AuditEventBuilder.manual_entry_rejected(
                result.raw_category,
                result.raw_amount,
                [issue.model_dump() for issue in result.issues],
            ))
            raise InvalidAmountError(result)

        savings = result.amount if result.category is EntryCategory.MANUAL_SAVINGS else Decimal("0")
        entry = LedgerEntry(
            amount=result.amount,
            category=result.category,
            savings_contribution=savings,
        )
        self._audit(AuditEventBuilder.manual_entry_added(entry))
        self._commit(entry)
        return entry

    def _audit(self, event) -> None:
        if self._audit_logger:
            self._audit_logger.log(event)

"""
Purchase Workflow State

The workflow walks the user through:

    ASK_PURCHASE_TYPE -> ENTER_AMOUNT -> SHOW_SAVINGS -> COMPLETE

Non-frivolous purchases skip SHOW_SAVINGS and complete straight from
ENTER_AMOUNT.

DESIGN DECISION: WorkflowState is never persisted. It lives only as
long as one purchase cycle and is replaced by a fresh value on reset.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from src.models.ledger import EntryCategory


class PurchaseType(str, Enum):
    """How the user classified the purchase they are about to log."""
    FRIVOLOUS = "Frivolous"
    NON_FRIVOLOUS = "Non-Frivolous"

    @property
    def category(self) -> EntryCategory:
        """Ledger category an entry of this purchase type is recorded under."""
        return EntryCategory(self.value)


class WorkflowStep(str, Enum):
    """Steps of the guided purchase workflow."""
    ASK_PURCHASE_TYPE = "ask_purchase_type"
    ENTER_AMOUNT = "enter_amount"
    SHOW_SAVINGS = "show_savings"
    COMPLETE = "complete"


class WorkflowState(BaseModel):
    """
    Ephemeral state of one purchase cycle.

    amount_input keeps the raw text the user typed, even when it did not
    parse. amount is only set once the text was accepted.
    """
    model_config = ConfigDict(frozen=True)

    step: WorkflowStep = WorkflowStep.ASK_PURCHASE_TYPE
    purchase_type: Optional[PurchaseType] = None
    amount_input: str = ""
    amount: Optional[Decimal] = None
    suggested_savings: Optional[Decimal] = None
    encouragement_visible: bool = False

    # Ties together the audit events of one cycle
    correlation_id: UUID = Field(default_factory=uuid4)

    @property
    def is_complete(self) -> bool:
        return self.step is WorkflowStep.COMPLETE

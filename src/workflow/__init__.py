"""Guided purchase workflow package."""

from src.workflow.purchase import (
    DEFAULT_SAVINGS_RATE,
    InvalidAmountError,
    PurchaseWorkflow,
    WorkflowError,
)

__all__ = [
    "DEFAULT_SAVINGS_RATE",
    "InvalidAmountError",
    "PurchaseWorkflow",
    "WorkflowError",
]

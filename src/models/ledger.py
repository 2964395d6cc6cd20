"""
Ledger Data Models for Spend to Save

These models define the strict schemas for everything the ledger persists.
They are designed to:
1. Enforce the entry rules at construction time (positive amounts,
   savings never larger than the purchase)
2. Keep aggregates and history in one immutable value
3. Be serializable to the string-valued key-value store

DESIGN DECISION: Amounts are Decimals, never floats.
Totals are sums of many entries and must compare exactly against the
history they are derived from.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Iterable

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
)


ZERO = Decimal("0")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# ENUMS
# =============================================================================

class EntryCategory(str, Enum):
    """
    Category recorded on every ledger entry.

    The values are the labels shown in the history list, so a manual
    savings deposit reads differently from a confirmed workflow saving.
    """
    FRIVOLOUS = "Frivolous"
    NON_FRIVOLOUS = "Non-Frivolous"
    MANUAL_SAVINGS = "Manual Savings"

    @property
    def is_spending(self) -> bool:
        """True for the categories that count towards total spending."""
        return self is not EntryCategory.MANUAL_SAVINGS


# =============================================================================
# LEDGER ENTRY
# =============================================================================

class LedgerEntry(BaseModel):
    """
    One recorded transaction: a purchase, a purchase plus the savings
    set aside for it, or a manual savings deposit.

    CRITICAL: Entries are immutable. The ledger only ever appends them
    or drops all of them at once.

    Older data written by the browser version of the app used the keys
    'date', 'type' and 'savings'; those are still accepted on load.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    timestamp: datetime = Field(
        default_factory=utc_now,
        validation_alias=AliasChoices("timestamp", "date"),
        description="When the entry was created"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="Purchase or deposit amount"
    )
    category: EntryCategory = Field(
        ...,
        validation_alias=AliasChoices("category", "type"),
    )
    savings_contribution: Decimal = Field(
        default=ZERO,
        ge=0,
        allow_inf_nan=False,
        validation_alias=AliasChoices(
            "savingsContribution", "savings_contribution", "savings"
        ),
        serialization_alias="savingsContribution",
        description="Amount moved to savings by this entry"
    )

    @model_validator(mode='after')
    def validate_savings(self) -> 'LedgerEntry':
        """Savings must fit inside the amount and match the category."""
        if self.savings_contribution > self.amount:
            raise ValueError("Savings contribution cannot exceed the amount")

        if self.category is EntryCategory.NON_FRIVOLOUS and self.savings_contribution:
            raise ValueError("Non-frivolous purchases carry no savings")

        if (
            self.category is EntryCategory.MANUAL_SAVINGS
            and self.savings_contribution != self.amount
        ):
            raise ValueError("Manual savings must contribute their full amount")

        return self

    def to_storage_dict(self) -> dict:
        """JSON-ready dict used inside the persisted history array."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# LEDGER SNAPSHOT
# =============================================================================

class LedgerSnapshot(BaseModel):
    """
    Aggregates plus the full history, as one read-only value.

    The aggregates are write-through caches of the history:

        total_spending == sum(amount of Frivolous and Non-Frivolous entries)
        total_savings == sum(savings_contribution of every entry)
        frivolous_spending + non_frivolous_spending == total_spending

    with_entry() is the only way a snapshot grows, and it keeps all
    three relations intact.
    """
    model_config = ConfigDict(frozen=True)

    total_spending: Decimal = ZERO
    frivolous_spending: Decimal = ZERO
    non_frivolous_spending: Decimal = ZERO
    total_savings: Decimal = ZERO
    history: tuple[LedgerEntry, ...] = ()

    @classmethod
    def empty(cls) -> 'LedgerSnapshot':
        return cls()

    @classmethod
    def from_history(cls, history: Iterable[LedgerEntry]) -> 'LedgerSnapshot':
        """Derive aggregates by replaying every entry in order."""
        snapshot = cls.empty()
        for entry in history:
            snapshot = snapshot.with_entry(entry)
        return snapshot

    def with_entry(self, entry: LedgerEntry) -> 'LedgerSnapshot':
        """Return a new snapshot with the entry appended and totals updated."""
        frivolous = self.frivolous_spending
        non_frivolous = self.non_frivolous_spending

        if entry.category is EntryCategory.FRIVOLOUS:
            frivolous += entry.amount
        elif entry.category is EntryCategory.NON_FRIVOLOUS:
            non_frivolous += entry.amount

        return LedgerSnapshot(
            total_spending=(
                self.total_spending + entry.amount
                if entry.category.is_spending
                else self.total_spending
            ),
            frivolous_spending=frivolous,
            non_frivolous_spending=non_frivolous,
            total_savings=self.total_savings + entry.savings_contribution,
            history=self.history + (entry,),
        )

    @property
    def entry_count(self) -> int:
        return len(self.history)

    def is_consistent(self) -> bool:
        """Check the aggregates against a fresh replay of the history."""
        expected = LedgerSnapshot.from_history(self.history)
        return (
            self.total_spending == expected.total_spending
            and self.frivolous_spending == expected.frivolous_spending
            and self.non_frivolous_spending == expected.non_frivolous_spending
            and self.total_savings == expected.total_savings
        )

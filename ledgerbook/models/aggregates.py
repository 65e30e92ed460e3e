"""
Aggregate Models

These are the DERIVED values the ledger layer computes from raw records.
They flow back to the UI and into the report composer.

CRITICAL: Nothing here is ever persisted. Every aggregate is recomputed
from the record snapshot it was built from.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_serializer

from ledgerbook.models.records import (
    ZERO,
    MonthKey,
    Person,
    PersonLedgerEntry,
    Transaction,
    TransactionKind,
)


class BalanceSide(str, Enum):
    """Which way a person's running balance points."""
    ADVANCE = "advance"   # balance >= 0, person holds an advance (asset)
    PAYABLE = "payable"   # balance < 0, business owes the person (liability)

    @property
    def label(self) -> str:
        if self is BalanceSide.ADVANCE:
            return "Advance / Asset held"
        return "Payable / Liability owed"

    @property
    def short_label(self) -> str:
        return "Advance" if self is BalanceSide.ADVANCE else "Payable"


class Direction(str, Enum):
    """Money direction of a statement row."""
    IN = "in"
    OUT = "out"


class _MonthAggregate(BaseModel):
    month: MonthKey

    @field_serializer("month")
    def serialize_month(self, month: MonthKey) -> str:
        return str(month)


class MonthlySummary(_MonthAggregate):
    """Income / expense totals for one month of cash-book transactions."""

    total_income: Decimal = ZERO
    total_expense: Decimal = ZERO
    net_balance: Decimal = ZERO
    transaction_count: int = Field(default=0, ge=0)


class CombinedMonthlySummary(_MonthAggregate):
    """
    Overview totals where staff ledger outflows are folded into expenses.

    total_expense = business_expense + staff_expense
    """

    total_income: Decimal = ZERO
    business_expense: Decimal = ZERO
    staff_expense: Decimal = ZERO
    total_expense: Decimal = ZERO
    net_balance: Decimal = ZERO


class MonthBalanceView(_MonthAggregate):
    """A month's net balance with its manual notes added on."""

    summary: MonthlySummary
    notes_total: Decimal = ZERO
    adjusted_balance: Decimal = ZERO
    note_count: int = Field(default=0, ge=0)


class DayBucket(BaseModel):
    """Total of same-kind transactions on one calendar day."""

    date: date
    total: Decimal = ZERO
    count: int = Field(default=0, ge=0)

    @property
    def is_empty(self) -> bool:
        return self.count == 0


class DailyLedger(_MonthAggregate):
    """Every day of a month with its bucket total, for one transaction kind."""

    kind: TransactionKind
    days: list[DayBucket] = Field(default_factory=list)
    total: Decimal = ZERO

    def bucket_for(self, day: date) -> Optional[DayBucket]:
        for bucket in self.days:
            if bucket.date == day:
                return bucket
        return None


class DayDetail(BaseModel):
    """All entries of one kind on one day, ordered by entry id."""

    date: date
    kind: TransactionKind
    entries: list[Transaction] = Field(default_factory=list)
    total: Decimal = ZERO


class StatementEntry(BaseModel):
    """One row of a merged monthly statement."""

    id: str
    date: date
    description: str
    label: str
    amount: Decimal
    direction: Direction
    person_id: Optional[str] = None


class PersonStanding(_MonthAggregate):
    """
    A person's lifetime running balance plus their standing in one month.

    current_balance = opening + payments - (expenses + receipts), all time
    monthly_remaining_limit = limit - (every entry of the month, any kind)
    """

    person: Person
    current_balance: Decimal = ZERO
    side: BalanceSide = BalanceSide.ADVANCE
    display_balance: Decimal = ZERO
    monthly_consumption: Decimal = ZERO
    monthly_remaining_limit: Decimal = ZERO
    over_limit: bool = False
    month_entries: list[PersonLedgerEntry] = Field(default_factory=list)

    @property
    def balance_text(self) -> str:
        return f"{self.side.short_label} {self.display_balance:,}"


class CommodityTotals(BaseModel):
    """Totals over a set of weight x price trade records."""

    total_quantity: Decimal = ZERO
    total_due: Decimal = ZERO
    total_paid: Decimal = ZERO
    remaining_balance: Decimal = ZERO
    record_count: int = Field(default=0, ge=0)

"""
Core Record Models for the Ledger Book

These models define the schemas for every record the business keeps:
cash-book transactions, staff (person) ledgers, commodity trade records
and monthly notes.

They are designed to:
1. Validate records at the storage boundary, before any arithmetic
2. Coerce sloppy numeric input instead of failing a whole collection
3. Be serializable for storage and logging

DESIGN DECISION: Amounts are stored NON-NEGATIVE. The sign of a movement is
always derived from its kind at aggregation time, never stored.
"""

from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, NamedTuple, Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
)


ZERO = Decimal("0")


def parse_amount(value: Any) -> Decimal:
    """
    Coerce a user/storage supplied numeric value to Decimal.

    Unparsable input (empty string, text, None) becomes zero so that a
    single bad cell never aborts a running total.
    """
    if isinstance(value, Decimal):
        return value if value.is_finite() else ZERO
    if isinstance(value, bool) or value is None:
        return ZERO
    if isinstance(value, (int, float)):
        try:
            result = Decimal(str(value))
        except InvalidOperation:
            return ZERO
        return result if result.is_finite() else ZERO
    text = str(value).strip().replace(",", "")
    if not text:
        return ZERO
    try:
        result = Decimal(text)
    except InvalidOperation:
        return ZERO
    return result if result.is_finite() else ZERO


def new_record_id() -> str:
    """Generate an id for a new record."""
    return str(uuid4())


# =============================================================================
# ENUMS
# =============================================================================

class TransactionKind(str, Enum):
    """
    Kinds of cash-book transaction.

    A TRANSFER is counted as an expense in every monthly and daily total.
    """
    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"

    @property
    def counts_as_expense(self) -> bool:
        return self in (TransactionKind.EXPENSE, TransactionKind.TRANSFER)

    @property
    def label(self) -> str:
        """Label used on statements."""
        if self is TransactionKind.INCOME:
            return "Received"
        if self is TransactionKind.TRANSFER:
            return "Transfer"
        return "Expense"


class EntryKind(str, Enum):
    """
    Kinds of person ledger entry.

    PAYMENT is cash given to the person (credit).
    EXPENSE and RECEIVED are amounts consumed by or taken from the person (debit).
    """
    PAYMENT = "payment"
    EXPENSE = "expense"
    RECEIVED = "received"

    @property
    def is_credit(self) -> bool:
        return self is EntryKind.PAYMENT


class EntityType(str, Enum):
    """Record collections held by the record store."""
    TRANSACTION = "transaction"
    PERSON = "person"
    PERSON_ENTRY = "person_entry"
    COMMODITY_RECORD = "commodity_record"
    MONTHLY_NOTE = "monthly_note"


# =============================================================================
# PERIOD KEY
# =============================================================================

class MonthKey(NamedTuple):
    """
    A calendar month, compared as an explicit (year, month) pair.

    Serializes as ``YYYY-MM``.
    """
    year: int
    month: int

    @classmethod
    def parse(cls, value: str) -> "MonthKey":
        text = str(value).strip()
        parts = text.split("-")
        if len(parts) != 2:
            raise ValueError(f"Invalid month key: {value!r} (expected YYYY-MM)")
        try:
            return cls.from_parts(int(parts[0]), int(parts[1]))
        except ValueError:
            raise ValueError(f"Invalid month key: {value!r} (expected YYYY-MM)")

    @classmethod
    def from_parts(cls, year: int, month: int) -> "MonthKey":
        """Build a key from numbers, rejecting months outside 1-12."""
        year, month = int(year), int(month)
        if not 1 <= month <= 12 or year < 1:
            raise ValueError(f"Invalid month key: ({year}, {month})")
        return cls(year, month)

    @classmethod
    def of(cls, day: date) -> "MonthKey":
        return cls(day.year, day.month)

    def contains(self, day: date) -> bool:
        return (day.year, day.month) == (self.year, self.month)

    def previous(self) -> "MonthKey":
        if self.month == 1:
            return MonthKey(self.year - 1, 12)
        return MonthKey(self.year, self.month - 1)

    def next(self) -> "MonthKey":
        if self.month == 12:
            return MonthKey(self.year + 1, 1)
        return MonthKey(self.year, self.month + 1)

    @property
    def label(self) -> str:
        """Human label, e.g. 'March 2024'."""
        return date(self.year, self.month, 1).strftime("%B %Y")

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


# =============================================================================
# SESSION
# =============================================================================

class AccountSession(BaseModel):
    """
    The signed-in account, passed explicitly into every store call.

    An empty account id means nobody is signed in.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    account_id: Optional[str] = None
    display_name: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.account_id)


# =============================================================================
# RECORDS
# =============================================================================

class _Record(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(
        default_factory=new_record_id,
        min_length=1,
        description="Unique record ID",
    )


class Transaction(_Record):
    """A dated cash-book movement: income, expense or transfer."""

    kind: TransactionKind
    date: date
    description: str = Field(default="", max_length=500)
    amount: Decimal = Field(default=ZERO, ge=0)
    remarks: Optional[str] = Field(default=None, max_length=1000)
    source: Optional[str] = Field(default=None, max_length=200)

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, v: Any) -> Decimal:
        return parse_amount(v)


class Person(_Record):
    """
    A staff member or counterparty with a running ledger.

    opening_balance > 0: the person holds an advance (asset).
    opening_balance < 0: the business owes the person (liability).
    """

    name: str = Field(..., min_length=1, max_length=200)
    opening_balance: Decimal = ZERO
    monthly_limit: Decimal = Field(default=ZERO, ge=0)

    @field_validator("opening_balance", "monthly_limit", mode="before")
    @classmethod
    def coerce_amounts(cls, v: Any) -> Decimal:
        return parse_amount(v)


class PersonLedgerEntry(_Record):
    """A single dated entry on a person's ledger."""

    person_id: str = Field(..., min_length=1)
    date: date
    description: str = Field(default="", max_length=500)
    amount: Decimal = Field(default=ZERO, ge=0)
    kind: EntryKind

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, v: Any) -> Decimal:
        return parse_amount(v)

    @property
    def signed_amount(self) -> Decimal:
        """Amount as it moves the person's running balance."""
        return self.amount if self.kind.is_credit else -self.amount


class CommodityRecord(_Record):
    """
    A weight-based trade record (e.g. bags bought at a price per bag).

    line_total is always recomputed, never stored.
    """

    date: date
    quantity: Decimal = Field(default=ZERO, ge=0)
    unit_price: Decimal = Field(default=ZERO, ge=0)
    payment_given: Decimal = Field(default=ZERO, ge=0)
    description: str = Field(default="", max_length=500)
    attachment_url: Optional[str] = None

    @field_validator("quantity", "unit_price", "payment_given", mode="before")
    @classmethod
    def coerce_amounts(cls, v: Any) -> Decimal:
        return parse_amount(v)

    @property
    def line_total(self) -> Decimal:
        return self.quantity * self.unit_price


class MonthlyNote(_Record):
    """A manual adjustment attached to a month's balance view."""

    month: MonthKey
    title: str = Field(default="", max_length=200)
    amount: Decimal = ZERO

    @field_validator("month", mode="before")
    @classmethod
    def parse_month(cls, v: Any) -> MonthKey:
        if isinstance(v, MonthKey):
            return v
        if isinstance(v, (tuple, list)) and len(v) == 2:
            return MonthKey.from_parts(v[0], v[1])
        return MonthKey.parse(v)

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, v: Any) -> Decimal:
        return parse_amount(v)

    @field_serializer("month")
    def serialize_month(self, month: MonthKey) -> str:
        return str(month)

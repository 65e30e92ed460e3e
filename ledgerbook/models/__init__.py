"""
Data Models Package

This package contains all Pydantic models used by the ledger book.
Raw records are validated here before any aggregation touches them.
"""

from ledgerbook.models.records import (
    ZERO,
    AccountSession,
    CommodityRecord,
    EntityType,
    EntryKind,
    MonthKey,
    MonthlyNote,
    Person,
    PersonLedgerEntry,
    Transaction,
    TransactionKind,
    new_record_id,
    parse_amount,
)
from ledgerbook.models.aggregates import (
    BalanceSide,
    CombinedMonthlySummary,
    CommodityTotals,
    DailyLedger,
    DayBucket,
    DayDetail,
    Direction,
    MonthBalanceView,
    MonthlySummary,
    PersonStanding,
    StatementEntry,
)
from ledgerbook.models.validation import ValidationIssue, ValidationResult

__all__ = [
    # Record models
    "ZERO",
    "AccountSession",
    "CommodityRecord",
    "EntityType",
    "EntryKind",
    "MonthKey",
    "MonthlyNote",
    "Person",
    "PersonLedgerEntry",
    "Transaction",
    "TransactionKind",
    "new_record_id",
    "parse_amount",
    # Aggregate models
    "BalanceSide",
    "CombinedMonthlySummary",
    "CommodityTotals",
    "DailyLedger",
    "DayBucket",
    "DayDetail",
    "Direction",
    "MonthBalanceView",
    "MonthlySummary",
    "PersonStanding",
    "StatementEntry",
    # Validation models
    "ValidationIssue",
    "ValidationResult",
]

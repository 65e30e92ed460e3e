"""
Ledger Aggregator

Pure functions turning a snapshot of cash-book transactions (and, for the
overview, staff ledger entries) into monthly totals, day buckets and
statement rows.

GUARANTEES:
- No side effects, no hidden state: same snapshot in, same result out
- Transfers count as expenses everywhere
- Every day of the month is enumerated, even with no transactions
"""

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from ledgerbook.ledger.periods import filter_month, month_dates
from ledgerbook.models.aggregates import (
    CombinedMonthlySummary,
    DailyLedger,
    DayBucket,
    DayDetail,
    Direction,
    MonthBalanceView,
    MonthlySummary,
    StatementEntry,
)
from ledgerbook.models.records import (
    ZERO,
    MonthKey,
    MonthlyNote,
    Person,
    PersonLedgerEntry,
    Transaction,
    TransactionKind,
)


def matches_kind(transaction: Transaction, kind: TransactionKind) -> bool:
    """
    Does the transaction belong in a ledger of the given kind?

    The expense ledger also holds transfers.
    """
    if kind is TransactionKind.INCOME:
        return transaction.kind is TransactionKind.INCOME
    if kind is TransactionKind.EXPENSE:
        return transaction.kind.counts_as_expense
    return transaction.kind is kind


def _total(amounts: Iterable[Decimal]) -> Decimal:
    return sum(amounts, ZERO)


def monthly_summary(
    transactions: Iterable[Transaction],
    month: MonthKey,
) -> MonthlySummary:
    """Income, expense and net balance for one month."""
    income = ZERO
    expense = ZERO
    count = 0
    for t in filter_month(transactions, month):
        count += 1
        if t.kind.counts_as_expense:
            expense += t.amount
        else:
            income += t.amount

    return MonthlySummary(
        month=month,
        total_income=income,
        total_expense=expense,
        net_balance=income - expense,
        transaction_count=count,
    )


def daily_buckets(
    transactions: Iterable[Transaction],
    month: MonthKey,
    kind: TransactionKind,
) -> list[DayBucket]:
    """
    One bucket per calendar day of the month, day 1 first.

    Days with no matching transactions carry a zero total.
    """
    totals: dict[date, Decimal] = defaultdict(lambda: ZERO)
    counts: dict[date, int] = defaultdict(int)
    for t in filter_month(transactions, month):
        if matches_kind(t, kind):
            totals[t.date] += t.amount
            counts[t.date] += 1

    return [
        DayBucket(date=day, total=totals.get(day, ZERO), count=counts.get(day, 0))
        for day in month_dates(month)
    ]


def daily_ledger(
    transactions: Iterable[Transaction],
    month: MonthKey,
    kind: TransactionKind,
) -> DailyLedger:
    days = daily_buckets(transactions, month, kind)
    return DailyLedger(
        month=month,
        kind=kind,
        days=days,
        total=_total(b.total for b in days),
    )


def day_entries(
    transactions: Iterable[Transaction],
    day: date,
    kind: TransactionKind,
) -> list[Transaction]:
    """Transactions of one kind on one day, ordered by id ascending."""
    return sorted(
        (t for t in transactions if t.date == day and matches_kind(t, kind)),
        key=lambda t: t.id,
    )


def day_detail(
    transactions: Iterable[Transaction],
    day: date,
    kind: TransactionKind,
) -> DayDetail:
    entries = day_entries(transactions, day, kind)
    return DayDetail(
        date=day,
        kind=kind,
        entries=entries,
        total=_total(t.amount for t in entries),
    )


def combined_monthly_summary(
    transactions: Iterable[Transaction],
    person_entries: Iterable[PersonLedgerEntry],
    month: MonthKey,
) -> CombinedMonthlySummary:
    """
    Overview totals with the month's staff ledger amounts counted as expenses.

    Every staff entry in the month adds to staff_expense, whatever its kind.
    """
    summary = monthly_summary(transactions, month)
    staff = _total(e.amount for e in filter_month(person_entries, month))
    total_expense = summary.total_expense + staff

    return CombinedMonthlySummary(
        month=month,
        total_income=summary.total_income,
        business_expense=summary.total_expense,
        staff_expense=staff,
        total_expense=total_expense,
        net_balance=summary.total_income - total_expense,
    )


def month_balance_view(
    transactions: Iterable[Transaction],
    notes: Iterable[MonthlyNote],
    month: MonthKey,
) -> MonthBalanceView:
    """The month's net balance with that month's notes added on."""
    summary = monthly_summary(transactions, month)
    month_notes = [n for n in notes if n.month == month]
    notes_total = _total(n.amount for n in month_notes)

    return MonthBalanceView(
        month=month,
        summary=summary,
        notes_total=notes_total,
        adjusted_balance=summary.net_balance + notes_total,
        note_count=len(month_notes),
    )


def statement_entries(
    transactions: Iterable[Transaction],
    month: MonthKey,
    person_entries: Iterable[PersonLedgerEntry] = (),
    persons: Optional[Iterable[Person]] = None,
) -> list[StatementEntry]:
    """
    Merged statement rows for the month, sorted by date then id.

    Staff entries appear as expenses, prefixed with the person's name
    when it can be resolved.
    """
    names = {p.id: p.name for p in (persons or [])}
    rows: list[StatementEntry] = []

    for t in filter_month(transactions, month):
        rows.append(StatementEntry(
            id=t.id,
            date=t.date,
            description=t.description,
            label=t.kind.label,
            amount=t.amount,
            direction=Direction.OUT if t.kind.counts_as_expense else Direction.IN,
        ))

    for e in filter_month(person_entries, month):
        name = names.get(e.person_id)
        description = f"{name}: {e.description}" if name else e.description
        rows.append(StatementEntry(
            id=e.id,
            date=e.date,
            description=description,
            label=TransactionKind.EXPENSE.label,
            amount=e.amount,
            direction=Direction.OUT,
            person_id=e.person_id,
        ))

    rows.sort(key=lambda r: (r.date, r.id))
    return rows

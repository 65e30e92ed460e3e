"""
Balance Engine

Computes a person's lifetime running balance and their standing against a
monthly limit.

Two different sums, deliberately kept apart:
- current_balance nets PAYMENTS against EXPENSES/RECEIPTS over all time,
  starting from the opening balance.
- monthly consumption adds up every entry of one month, whatever its kind,
  and is measured against the monthly limit.

Entries that belong to some other (or an unknown) person never contribute.
"""

from collections import defaultdict
from decimal import Decimal
from typing import Iterable

from ledgerbook.ledger.periods import filter_month
from ledgerbook.models.aggregates import BalanceSide, PersonStanding
from ledgerbook.models.records import (
    ZERO,
    MonthKey,
    Person,
    PersonLedgerEntry,
)


def entries_for(person: Person, entries: Iterable[PersonLedgerEntry]) -> list[PersonLedgerEntry]:
    return [e for e in entries if e.person_id == person.id]


def current_balance(person: Person, entries: Iterable[PersonLedgerEntry]) -> Decimal:
    """
    Opening balance plus payments minus expenses and receipts, all time.
    """
    return person.opening_balance + sum(
        (e.signed_amount for e in entries_for(person, entries)),
        ZERO,
    )


def balance_side(balance: Decimal) -> BalanceSide:
    return BalanceSide.ADVANCE if balance >= 0 else BalanceSide.PAYABLE


def monthly_consumption(
    person: Person,
    entries: Iterable[PersonLedgerEntry],
    month: MonthKey,
) -> Decimal:
    """Every entry recorded for the person in the month, whatever its kind."""
    return sum(
        (e.amount for e in filter_month(entries_for(person, entries), month)),
        ZERO,
    )


def monthly_remaining_limit(
    person: Person,
    entries: Iterable[PersonLedgerEntry],
    month: MonthKey,
) -> Decimal:
    """Negative when the person is over their limit for the month."""
    return person.monthly_limit - monthly_consumption(person, entries, month)


def person_standing(
    person: Person,
    entries: Iterable[PersonLedgerEntry],
    month: MonthKey,
) -> PersonStanding:
    """Everything the person ledger view shows, from one snapshot."""
    own = entries_for(person, entries)
    balance = current_balance(person, own)
    consumption = monthly_consumption(person, own, month)
    remaining = person.monthly_limit - consumption
    month_entries = sorted(filter_month(own, month), key=lambda e: (e.date, e.id))

    return PersonStanding(
        month=month,
        person=person,
        current_balance=balance,
        side=balance_side(balance),
        display_balance=abs(balance),
        monthly_consumption=consumption,
        monthly_remaining_limit=remaining,
        over_limit=remaining < 0,
        month_entries=month_entries,
    )


def standings_for_people(
    persons: Iterable[Person],
    entries: Iterable[PersonLedgerEntry],
    month: MonthKey,
) -> list[PersonStanding]:
    """
    Standings for every person from one flat entry list.

    Entries pointing at a person not in ``persons`` are ignored.
    """
    by_person: dict[str, list[PersonLedgerEntry]] = defaultdict(list)
    for e in entries:
        by_person[e.person_id].append(e)

    return [
        person_standing(p, by_person.get(p.id, []), month)
        for p in persons
    ]

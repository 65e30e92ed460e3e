"""
Tests for the balance engine and the commodity calculator.
"""

import random
from datetime import date
from decimal import Decimal

from ledgerbook.ledger import (
    balance_side,
    commodity_totals,
    current_balance,
    monthly_consumption,
    monthly_remaining_limit,
    person_standing,
    standings_for_people,
)
from ledgerbook.models import (
    BalanceSide,
    CommodityRecord,
    EntryKind,
    MonthKey,
    Person,
    PersonLedgerEntry,
)


def entry(person_id, kind, amount, day=date(2024, 3, 10), entry_id=None):
    kwargs = {"id": entry_id} if entry_id else {}
    return PersonLedgerEntry(
        person_id=person_id,
        date=day,
        description=f"{kind.value} {amount}",
        amount=amount,
        kind=kind,
        **kwargs,
    )


class TestCurrentBalance:
    """Running balance over a person's whole history."""

    def test_payable_person(self):
        """Opening -500, paid 300, spent 120 → payable 320."""
        person = Person(id="p1", name="Akram", opening_balance=-500)
        entries = [
            entry("p1", EntryKind.PAYMENT, 300),
            entry("p1", EntryKind.EXPENSE, 120),
        ]
        standing = person_standing(person, entries, MonthKey(2024, 3))

        assert current_balance(person, entries) == Decimal("-320")
        assert standing.side is BalanceSide.PAYABLE
        assert standing.display_balance == Decimal("320")
        assert standing.balance_text == "Payable 320"

    def test_received_entries_reduce_balance(self):
        person = Person(id="p1", name="Akram", opening_balance=100)
        entries = [entry("p1", EntryKind.RECEIVED, 40)]
        assert current_balance(person, entries) == Decimal("60")

    def test_balance_spans_all_months(self):
        person = Person(id="p1", name="Akram")
        entries = [
            entry("p1", EntryKind.PAYMENT, 1000, day=date(2023, 12, 1)),
            entry("p1", EntryKind.EXPENSE, 200, day=date(2024, 3, 2)),
        ]
        assert current_balance(person, entries) == Decimal("800")

    def test_other_persons_entries_are_ignored(self):
        person = Person(id="p1", name="Akram", opening_balance=10)
        entries = [entry("p2", EntryKind.PAYMENT, 999)]
        assert current_balance(person, entries) == Decimal("10")

    def test_zero_balance_is_advance(self):
        assert balance_side(Decimal("0")) is BalanceSide.ADVANCE
        assert balance_side(Decimal("-0.01")) is BalanceSide.PAYABLE


class TestMonthlyLimit:
    """Monthly consumption counts every entry of the month, whatever its kind."""

    def test_consumption_and_remaining(self):
        person = Person(id="p1", name="Akram", monthly_limit=1000)
        month = MonthKey(2024, 3)
        entries = [
            entry("p1", EntryKind.PAYMENT, 300),
            entry("p1", EntryKind.EXPENSE, 200),
            entry("p1", EntryKind.RECEIVED, 500),
            entry("p1", EntryKind.EXPENSE, 700, day=date(2024, 2, 28)),
        ]
        assert monthly_consumption(person, entries, month) == Decimal("1000")
        assert monthly_remaining_limit(person, entries, month) == Decimal("0")

    def test_received_entries_consume_the_limit(self):
        person = Person(id="p1", name="Akram", monthly_limit=1000)
        entries = [
            entry("p1", EntryKind.EXPENSE, 300),
            entry("p1", EntryKind.RECEIVED, 900),
        ]
        standing = person_standing(person, entries, MonthKey(2024, 3))

        assert standing.monthly_consumption == Decimal("1200")
        assert standing.monthly_remaining_limit == Decimal("-200")
        assert standing.over_limit

    def test_over_limit_is_flagged_not_blocked(self):
        person = Person(id="p1", name="Akram", monthly_limit=100)
        entries = [entry("p1", EntryKind.EXPENSE, 150)]
        standing = person_standing(person, entries, MonthKey(2024, 3))

        assert standing.over_limit
        assert standing.monthly_remaining_limit == Decimal("-50")
        assert len(standing.month_entries) == 1

    def test_month_entries_sorted(self):
        person = Person(id="p1", name="Akram")
        entries = [
            entry("p1", EntryKind.EXPENSE, 1, day=date(2024, 3, 9), entry_id="b"),
            entry("p1", EntryKind.EXPENSE, 1, day=date(2024, 3, 2), entry_id="z"),
            entry("p1", EntryKind.EXPENSE, 1, day=date(2024, 3, 9), entry_id="a"),
        ]
        standing = person_standing(person, entries, MonthKey(2024, 3))
        assert [e.id for e in standing.month_entries] == ["z", "a", "b"]


class TestStandingsForPeople:

    def test_groups_flat_entry_list(self):
        persons = [
            Person(id="p1", name="Akram", opening_balance=0),
            Person(id="p2", name="Bilal", opening_balance=50),
        ]
        entries = [
            entry("p1", EntryKind.PAYMENT, 100),
            entry("p2", EntryKind.EXPENSE, 20),
            entry("ghost", EntryKind.PAYMENT, 1000),
        ]
        standings = standings_for_people(persons, entries, MonthKey(2024, 3))

        assert [s.person.name for s in standings] == ["Akram", "Bilal"]
        assert standings[0].current_balance == Decimal("100")
        assert standings[1].current_balance == Decimal("30")


class TestBalanceProperties:
    """Results depend on the entries, not on their order or on repeat calls."""

    def mixed_entries(self):
        return [
            entry("p1", EntryKind.PAYMENT, 400, day=date(2024, 1, 3), entry_id="a"),
            entry("p1", EntryKind.EXPENSE, 125, day=date(2024, 3, 2), entry_id="b"),
            entry("p1", EntryKind.RECEIVED, 60, day=date(2024, 3, 18), entry_id="c"),
            entry("p1", EntryKind.PAYMENT, 210, day=date(2024, 3, 31), entry_id="d"),
            entry("p2", EntryKind.PAYMENT, 5000, day=date(2024, 3, 5), entry_id="e"),
            entry("p1", EntryKind.EXPENSE, 75, day=date(2024, 4, 1), entry_id="f"),
        ]

    def test_current_balance_ignores_order(self):
        person = Person(id="p1", name="Akram", opening_balance=-100)
        entries = self.mixed_entries()
        shuffled = list(entries)
        random.Random(11).shuffle(shuffled)

        expected = Decimal("-100") + 400 - 125 - 60 + 210 - 75
        assert current_balance(person, entries) == expected
        assert current_balance(person, shuffled) == expected
        assert current_balance(person, list(reversed(entries))) == expected

    def test_person_standing_repeat_runs_agree(self):
        person = Person(id="p1", name="Akram", opening_balance=-100, monthly_limit=300)
        entries = self.mixed_entries()
        month = MonthKey(2024, 3)

        first = person_standing(person, entries, month)
        assert person_standing(person, entries, month) == first
        assert person_standing(person, list(reversed(entries)), month) == first
        assert first.monthly_consumption == Decimal("395")
        assert first.over_limit



class TestCommodityTotals:

    def test_due_paid_and_remaining(self):
        records = [
            CommodityRecord(date=date(2024, 3, 1), quantity=10, unit_price=50, payment_given=400),
            CommodityRecord(date=date(2024, 3, 2), quantity=5, unit_price=60, payment_given=100),
        ]
        totals = commodity_totals(records)

        assert totals.total_quantity == Decimal("15")
        assert totals.total_due == Decimal("800")
        assert totals.total_paid == Decimal("500")
        assert totals.remaining_balance == Decimal("300")
        assert totals.record_count == 2

    def test_overpayment_keeps_its_sign(self):
        records = [
            CommodityRecord(date=date(2024, 3, 1), quantity=1, unit_price=100, payment_given=150),
        ]
        assert commodity_totals(records).remaining_balance == Decimal("-50")

    def test_empty_is_zero(self):
        totals = commodity_totals([])
        assert totals.total_due == 0
        assert totals.remaining_balance == 0
        assert totals.record_count == 0

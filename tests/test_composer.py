"""
Tests for the statement composer.

The composer only lays out numbers it is given; these tests check the
layout: header, summary block, pagination and footers.
"""

from datetime import date
from decimal import Decimal

from ledgerbook.ledger import (
    combined_monthly_summary,
    commodity_totals,
    daily_ledger,
    day_detail,
    person_standing,
    statement_entries,
)
from ledgerbook.models import (
    CommodityRecord,
    EntryKind,
    MonthKey,
    Person,
    PersonLedgerEntry,
    Transaction,
    TransactionKind,
)
from ledgerbook.reports import format_amount, paginate, render_text


class TestPaginate:

    def test_splits_rows_into_pages(self):
        rows = [[str(i)] for i in range(12)]
        pages = paginate(rows, 5)
        assert [len(p.rows) for p in pages] == [5, 5, 2]
        assert [p.footer for p in pages] == ["Page 1 of 3", "Page 2 of 3", "Page 3 of 3"]

    def test_empty_still_has_one_page(self):
        pages = paginate([], 5)
        assert len(pages) == 1
        assert pages[0].rows == []
        assert pages[0].footer == "Page 1 of 1"


class TestFormatAmount:

    def test_thousands_and_two_decimals(self):
        assert format_amount(Decimal("1500")) == "1,500.00"
        assert format_amount(Decimal("-12.5")) == "-12.50"


class TestMonthlyStatement:

    def test_summary_and_rows(self, composer, scenario_a_transactions, march):
        summary = combined_monthly_summary(scenario_a_transactions, [], march)
        document = composer.monthly_statement(
            summary, statement_entries(scenario_a_transactions, march)
        )

        assert document.business_name == "RDF"
        assert document.period == "March 2024"
        assert document.currency == "PKR"
        labels = {item.label: item.value for item in document.summary}
        assert labels["Total Received"] == "500.00"
        assert labels["Total Expenses"] == "300.00"
        assert labels["Net Balance"] == "200.00"
        assert document.row_count == 3
        assert document.pages[0].rows[0] == ["2024-03-05", "Milk sales", "Received", "500.00", "+"]

    def test_long_statement_is_paginated(self, composer, march):
        transactions = [
            Transaction(id=f"t{i:02d}", kind=TransactionKind.EXPENSE,
                        date=date(2024, 3, i + 1), description=f"Item {i}", amount=10)
            for i in range(12)
        ]
        summary = combined_monthly_summary(transactions, [], march)
        document = composer.monthly_statement(summary, statement_entries(transactions, march))

        assert document.page_count == 3
        text = render_text(document)
        assert "Page 1 of 3" in text
        assert "Page 3 of 3" in text
        # Summary block printed once
        assert text.count("Total Expenses") == 1

    def test_render_text_header(self, composer, march):
        summary = combined_monthly_summary([], [], march)
        text = render_text(composer.monthly_statement(summary, []))

        assert text.startswith("RDF\nExpenditure Management\n")
        assert "MONTHLY STATEMENT" in text
        assert "MARCH 2024" in text
        assert "GENERATED: 20 Mar 2024 10:30" in text
        assert "PKR 0.00" in text
        assert "(no entries)" in text
        assert "Page 1 of 1" in text


class TestOtherStatements:

    def test_daily_ledger_statement(self, composer, scenario_a_transactions, march):
        ledger = daily_ledger(scenario_a_transactions, march, TransactionKind.EXPENSE)
        document = composer.daily_ledger_statement(ledger)

        assert document.title == "Daily Expense Ledger"
        assert document.row_count == 31
        assert document.page_count == 7
        labels = {item.label: item.value for item in document.summary}
        assert labels["Month Total"] == "300.00"
        assert labels["Active Days"] == "2"

    def test_day_detail_statement(self, composer, scenario_a_transactions):
        detail = day_detail(scenario_a_transactions, date(2024, 3, 5), TransactionKind.INCOME)
        document = composer.day_detail_statement(detail)

        assert document.title == "Income Detail"
        assert document.period == "05 March 2024"
        assert document.pages[0].rows == [["Milk sales", "Received", "", "", "500.00"]]

    def test_person_statement(self, composer, march):
        person = Person(id="p1", name="Akram", opening_balance=-500, monthly_limit=100)
        entries = [
            PersonLedgerEntry(person_id="p1", date=date(2024, 3, 1), description="Cash",
                              amount=300, kind=EntryKind.PAYMENT),
            PersonLedgerEntry(person_id="p1", date=date(2024, 3, 2), description="Meals",
                              amount=120, kind=EntryKind.EXPENSE),
        ]
        document = composer.person_statement(person_standing(person, entries, march))

        assert document.title == "Staff Ledger: Akram"
        labels = {item.label: item.value for item in document.summary}
        assert labels["Payable / Liability owed"] == "320.00"
        assert labels["Status"] == "Over limit"
        assert [row[3] for row in document.pages[0].rows] == ["+300.00", "-120.00"]

    def test_commodity_statement(self, composer):
        records = [
            CommodityRecord(id="c2", date=date(2024, 3, 2), quantity=5, unit_price=60,
                            payment_given=100, description="Second"),
            CommodityRecord(id="c1", date=date(2024, 3, 1), quantity=10, unit_price=50,
                            payment_given=400, description="First"),
        ]
        document = composer.commodity_statement(records, commodity_totals(records))

        assert [row[1] for row in document.pages[0].rows] == ["First", "Second"]
        labels = {item.label: item.value for item in document.summary}
        assert labels["Total Due"] == "800.00"
        assert labels["Remaining Balance"] == "300.00"

    def test_month_label_used_as_period(self, composer):
        ledger = daily_ledger([], MonthKey(2024, 2), TransactionKind.INCOME)
        assert composer.daily_ledger_statement(ledger).period == "February 2024"


class TestRenderedSummary:
    """Only amounts carry the currency label in the rendered summary block."""

    def test_counts_print_without_currency(self, composer, scenario_a_transactions, march):
        ledger = daily_ledger(scenario_a_transactions, march, TransactionKind.EXPENSE)
        lines = render_text(composer.daily_ledger_statement(ledger)).splitlines()

        assert "Month Total  PKR 300.00 *" in lines
        assert "Active Days  2" in lines
        assert not any("PKR 2" in line for line in lines)

    def test_status_prints_without_currency(self, composer, march):
        person = Person(id="p1", name="Akram", monthly_limit=100)
        entries = [
            PersonLedgerEntry(person_id="p1", date=date(2024, 3, 2), description="Meals",
                              amount=120, kind=EntryKind.EXPENSE),
        ]
        document = composer.person_statement(person_standing(person, entries, march))
        text = render_text(document)

        assert "PKR Over limit" not in text
        assert "Over limit *" in text
        assert "PKR -20.00" in text
        assert [item.monetary for item in document.summary] == [True] * 5 + [False]

    def test_quantity_prints_without_currency(self, composer):
        records = [
            CommodityRecord(date=date(2024, 3, 1), quantity=15, unit_price=10),
        ]
        document = composer.commodity_statement(records, commodity_totals(records))
        lines = render_text(document).splitlines()

        assert "Total Quantity     15" in lines
        assert "Total Due          PKR 150.00" in lines

"""
Tests for the record stores.

The Google Sheets store runs against an in-process fake worksheet; no
network access.
"""

import asyncio
from datetime import date
from decimal import Decimal

import pytest

from ledgerbook.models import (
    CommodityRecord,
    EntityType,
    EntryKind,
    MonthKey,
    MonthlyNote,
    Person,
    PersonLedgerEntry,
    Transaction,
    TransactionKind,
)
from ledgerbook.services.storage import (
    GoogleSheetsRecordStore,
    InMemoryRecordStore,
    NotAuthenticatedError,
    StorageError,
    record_to_row,
    row_to_record,
)
from ledgerbook.services.storage.google_sheets import COLUMNS


class FakeWorksheet:
    """Just enough of gspread.Worksheet for the store."""

    def __init__(self, header):
        self.rows = [list(header)]

    def get_all_values(self):
        return [list(row) for row in self.rows]

    def append_row(self, row, value_input_option=None):
        self.rows.append([str(c) for c in row])

    def update(self, range_name=None, values=None, value_input_option=None):
        idx = int(range_name[1:]) - 1
        self.rows[idx] = [str(c) for c in values[0]]

    def delete_rows(self, start_index, end_index=None):
        del self.rows[start_index - 1]


class FakeSheetsClient:
    def __init__(self):
        self.sheets = {t: FakeWorksheet(COLUMNS[t]) for t in EntityType}

    def get_worksheet(self, entity_type):
        return self.sheets[entity_type]


class BrokenSheetsClient:
    def get_worksheet(self, entity_type):
        raise RuntimeError("quota exceeded")


@pytest.fixture(params=["memory", "sheets"])
def store(request):
    if request.param == "memory":
        return InMemoryRecordStore()
    return GoogleSheetsRecordStore(client=FakeSheetsClient())


def run(coro):
    return asyncio.run(coro)


class TestRecordStore:
    """Behaviour shared by every store implementation."""

    def test_upsert_then_list(self, store, session):
        t = Transaction(id="t1", kind=TransactionKind.INCOME, date=date(2024, 3, 5),
                        description="Milk", amount=500, source="Shop")
        run(store.upsert(session, EntityType.TRANSACTION, t))

        listed = run(store.list_transactions(session))
        assert len(listed) == 1
        assert listed[0].id == "t1"
        assert listed[0].amount == Decimal("500")
        assert listed[0].source == "Shop"

    def test_upsert_same_id_replaces(self, store, session):
        t = Transaction(id="t1", kind=TransactionKind.EXPENSE, date=date(2024, 3, 5), amount=10)
        run(store.upsert(session, EntityType.TRANSACTION, t))
        run(store.upsert(session, EntityType.TRANSACTION, t.model_copy(update={"amount": Decimal("25")})))

        listed = run(store.list_transactions(session))
        assert len(listed) == 1
        assert listed[0].amount == Decimal("25")

    def test_accounts_are_isolated(self, store, session, other_session):
        run(store.upsert(session, EntityType.PERSON, Person(id="p1", name="Akram")))
        assert run(store.list_persons(other_session)) == []
        assert run(store.get_person(other_session, "p1")) is None
        assert run(store.get_person(session, "p1")).name == "Akram"

    def test_unauthenticated_lists_are_empty(self, store, session, anonymous):
        run(store.upsert(session, EntityType.PERSON, Person(id="p1", name="Akram")))
        assert run(store.list_persons(anonymous)) == []
        assert run(store.list_transactions(anonymous)) == []

    def test_unauthenticated_writes_raise(self, store, anonymous):
        with pytest.raises(NotAuthenticatedError):
            run(store.upsert(anonymous, EntityType.PERSON, Person(name="Akram")))
        with pytest.raises(NotAuthenticatedError):
            run(store.delete(anonymous, EntityType.PERSON, "p1"))

    def test_wrong_record_type_rejected(self, store, session):
        with pytest.raises(TypeError):
            run(store.upsert(session, EntityType.PERSON,
                             Transaction(kind=TransactionKind.INCOME, date=date(2024, 3, 1))))

    def test_delete_person_cascades_to_entries(self, store, session):
        run(store.upsert(session, EntityType.PERSON, Person(id="p1", name="Akram")))
        run(store.upsert(session, EntityType.PERSON, Person(id="p2", name="Bilal")))
        for i, pid in enumerate(["p1", "p1", "p2"]):
            run(store.upsert(session, EntityType.PERSON_ENTRY, PersonLedgerEntry(
                id=f"e{i}", person_id=pid, date=date(2024, 3, 1),
                amount=10, kind=EntryKind.EXPENSE,
            )))

        assert run(store.delete(session, EntityType.PERSON, "p1")) is True
        remaining = run(store.list_all_person_entries(session))
        assert [e.person_id for e in remaining] == ["p2"]
        assert run(store.delete(session, EntityType.PERSON, "p1")) is False

    def test_person_entries_filtered_by_person(self, store, session):
        for i, pid in enumerate(["p1", "p2", "p1"]):
            run(store.upsert(session, EntityType.PERSON_ENTRY, PersonLedgerEntry(
                id=f"e{i}", person_id=pid, date=date(2024, 3, 1),
                amount=10, kind=EntryKind.PAYMENT,
            )))
        assert {e.id for e in run(store.list_person_entries(session, "p1"))} == {"e0", "e2"}

    def test_monthly_notes_filtered_by_month(self, store, session):
        run(store.upsert(session, EntityType.MONTHLY_NOTE,
                         MonthlyNote(id="n1", month="2024-03", title="Cash", amount=5)))
        run(store.upsert(session, EntityType.MONTHLY_NOTE,
                         MonthlyNote(id="n2", month="2024-04", title="Cash", amount=7)))
        notes = run(store.list_monthly_notes(session, MonthKey(2024, 3)))
        assert [n.id for n in notes] == ["n1"]
        assert len(run(store.list_monthly_notes(session))) == 2

    def test_commodity_records_round_trip(self, store, session):
        record = CommodityRecord(id="c1", date=date(2024, 3, 1), quantity="10.5",
                                 unit_price=50, payment_given=100, description="Bags")
        run(store.upsert(session, EntityType.COMMODITY_RECORD, record))
        stored = run(store.list_commodity_records(session))[0]
        assert stored.quantity == Decimal("10.5")
        assert stored.line_total == Decimal("525.0")


class TestInMemoryStore:

    def test_returned_records_are_copies(self, session):
        store = InMemoryRecordStore()
        run(store.upsert(session, EntityType.PERSON, Person(id="p1", name="Akram")))
        person = run(store.list_persons(session))[0]
        person.name = "Changed"
        assert run(store.list_persons(session))[0].name == "Akram"


class TestGoogleSheetsStore:
    """Row handling specific to the Sheets backend."""

    def test_rows_carry_account_id(self, session):
        client = FakeSheetsClient()
        store = GoogleSheetsRecordStore(client=client)
        run(store.upsert(session, EntityType.PERSON, Person(id="p1", name="Akram",
                                                            opening_balance=-500)))
        row = client.sheets[EntityType.PERSON].rows[1]
        assert row[:3] == ["p1", "acct-1", "Akram"]
        assert row[3] == "-500"

    def test_blank_entry_kind_reads_as_expense(self):
        row = ["e1", "acct-1", "p1", "2024-03-01", "Tea", "20", ""]
        entry = row_to_record(EntityType.PERSON_ENTRY, row)
        assert entry.kind is EntryKind.EXPENSE

    def test_short_rows_are_padded(self):
        row = ["t1", "acct-1", "INCOME", "2024-03-01", "Milk", "1,500"]
        t = row_to_record(EntityType.TRANSACTION, row)
        assert t.kind is TransactionKind.INCOME
        assert t.amount == Decimal("1500")
        assert t.remarks is None

    def test_row_conversion_keeps_fields(self):
        note = MonthlyNote(id="n1", month="2024-03", title="Cash", amount="-12.5")
        row = record_to_row(EntityType.MONTHLY_NOTE, note, "acct-1")
        assert row == ["n1", "acct-1", "2024-03", "Cash", "-12.5"]
        assert row_to_record(EntityType.MONTHLY_NOTE, row) == note

    def test_malformed_rows_are_skipped_individually(self, session):
        client = FakeSheetsClient()
        sheet = client.sheets[EntityType.TRANSACTION]
        sheet.rows.extend([
            ["t1", "acct-1", "income", "2024-03-01", "Good", "100", "", ""],
            ["t2", "acct-1", "income", "not-a-date", "Bad date", "100", "", ""],
            ["t3", "acct-1", "expense", "2024-03-02", "Negative", "-5", "", ""],
            ["", "", "", "", "", "", "", ""],
            ["t4", "acct-1", "expense", "2024-03-03", "Bad amount", "abc", "", ""],
        ])
        store = GoogleSheetsRecordStore(client=client)

        listed = run(store.list_transactions(session))
        assert [t.id for t in listed] == ["t1", "t4"]
        assert listed[1].amount == 0

    def test_update_happens_in_place(self, session):
        client = FakeSheetsClient()
        store = GoogleSheetsRecordStore(client=client)
        person = Person(id="p1", name="Akram")
        run(store.upsert(session, EntityType.PERSON, Person(id="p0", name="First")))
        run(store.upsert(session, EntityType.PERSON, person))
        run(store.upsert(session, EntityType.PERSON, person.model_copy(update={"name": "Akram Ali"})))

        rows = client.sheets[EntityType.PERSON].rows
        assert len(rows) == 3
        assert rows[2][2] == "Akram Ali"

    def test_backend_failure_raises_storage_error(self, session):
        store = GoogleSheetsRecordStore(client=BrokenSheetsClient())
        with pytest.raises(StorageError) as exc_info:
            run(store.list_transactions(session))
        assert isinstance(exc_info.value.__cause__, RuntimeError)

        with pytest.raises(StorageError):
            run(store.upsert(session, EntityType.PERSON, Person(name="Akram")))

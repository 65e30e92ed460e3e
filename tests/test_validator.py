"""
Tests for two-stage record validation.

Today is pinned to 2024-03-20 by the validator fixture.
"""

from datetime import date

from ledgerbook.models import (
    CommodityRecord,
    EntryKind,
    MonthlyNote,
    Person,
    PersonLedgerEntry,
    Transaction,
    TransactionKind,
)


def issue_types(result):
    return [i.issue_type for i in result.issues]


class TestTransactionValidation:

    def test_valid_transaction_passes(self, validator):
        t = Transaction(kind=TransactionKind.INCOME, date=date(2024, 3, 5),
                        description="Milk", amount=500)
        result = validator.validate_transaction(t)
        assert result.schema_valid
        assert result.semantic_valid
        assert result.can_save
        assert result.issues == []

    def test_missing_description_is_an_error(self, validator):
        t = Transaction(kind=TransactionKind.INCOME, date=date(2024, 3, 5), amount=500)
        result = validator.validate_transaction(t)
        assert not result.schema_valid
        assert not result.semantic_valid
        assert not result.can_save

    def test_zero_amount_is_a_warning(self, validator):
        t = Transaction(kind=TransactionKind.EXPENSE, date=date(2024, 3, 5),
                        description="Feed", amount="abc")
        result = validator.validate_transaction(t)
        assert result.can_save
        assert "zero_amount" in issue_types(result)
        assert result.warnings == ["Amount is zero"]

    def test_future_date_beyond_tolerance(self, validator):
        tomorrow = Transaction(kind=TransactionKind.EXPENSE, date=date(2024, 3, 21),
                               description="Feed", amount=10)
        later = tomorrow.model_copy(update={"date": date(2024, 3, 22)})
        assert "future_date" not in issue_types(validator.validate_transaction(tomorrow))
        assert "future_date" in issue_types(validator.validate_transaction(later))

    def test_unusually_high_amount(self, validator):
        t = Transaction(kind=TransactionKind.EXPENSE, date=date(2024, 3, 5),
                        description="Tractor", amount=250000)
        result = validator.validate_transaction(t)
        assert "suspicious_value" in issue_types(result)
        assert result.can_save


class TestPersonEntryValidation:

    def test_unknown_person_is_an_error(self, validator):
        entry = PersonLedgerEntry(person_id="ghost", date=date(2024, 3, 5),
                                  description="Tea", amount=10, kind=EntryKind.EXPENSE)
        result = validator.validate_person_entry(entry, None)
        assert not result.can_save
        assert result.errors[0].field == "person_id"

    def test_over_limit_warns_but_allows_save(self, validator):
        person = Person(id="p1", name="Akram", monthly_limit=100)
        existing = [PersonLedgerEntry(id="e1", person_id="p1", date=date(2024, 3, 1),
                                      description="Meals", amount=80, kind=EntryKind.EXPENSE)]
        entry = PersonLedgerEntry(id="e2", person_id="p1", date=date(2024, 3, 10),
                                  description="Advance", amount=50, kind=EntryKind.PAYMENT)

        result = validator.validate_person_entry(entry, person, existing)
        assert result.can_save
        assert "over_limit" in issue_types(result)
        assert result.warnings == ["Akram will be 30.00 over their monthly limit for March 2024"]

    def test_replacing_an_entry_does_not_double_count(self, validator):
        person = Person(id="p1", name="Akram", monthly_limit=100)
        existing = [PersonLedgerEntry(id="e1", person_id="p1", date=date(2024, 3, 1),
                                      description="Meals", amount=80, kind=EntryKind.EXPENSE)]
        edited = existing[0].model_copy(update={"amount": 90})

        result = validator.validate_person_entry(edited, person, existing)
        assert "over_limit" not in issue_types(result)

    def test_received_entries_consume_limit(self, validator):
        person = Person(id="p1", name="Akram", monthly_limit=10)
        entry = PersonLedgerEntry(person_id="p1", date=date(2024, 3, 10),
                                  description="Returned", amount=500, kind=EntryKind.RECEIVED)
        result = validator.validate_person_entry(entry, person)
        assert "over_limit" in issue_types(result)
        assert result.can_save

    def test_no_limit_means_no_limit_check(self, validator):
        person = Person(id="p1", name="Akram")
        entry = PersonLedgerEntry(person_id="p1", date=date(2024, 3, 10),
                                  description="Advance", amount=500, kind=EntryKind.PAYMENT)
        assert "over_limit" not in issue_types(validator.validate_person_entry(entry, person))


class TestOtherRecordValidation:

    def test_person_without_limit_gets_info(self, validator):
        result = validator.validate_person(Person(name="Akram"))
        assert result.can_save
        assert result.issues[0].severity == "info"
        assert result.warnings == []

    def test_commodity_record_zero_rate(self, validator):
        record = CommodityRecord(date=date(2024, 3, 1), quantity=10, unit_price=0)
        result = validator.validate_commodity_record(record)
        assert result.can_save
        assert "Rate is zero" in result.warnings

    def test_note_requires_title(self, validator):
        result = validator.validate_monthly_note(MonthlyNote(month="2024-03", amount=5))
        assert not result.can_save


class TestUserFriendlySummary:

    def test_all_clear(self, validator):
        t = Transaction(kind=TransactionKind.INCOME, date=date(2024, 3, 5),
                        description="Milk", amount=500)
        assert validator.get_user_friendly_summary(validator.validate_transaction(t)) == (
            "✅ All checks passed."
        )

    def test_errors_listed(self, validator):
        t = Transaction(kind=TransactionKind.INCOME, date=date(2024, 3, 5), amount=500)
        summary = validator.get_user_friendly_summary(validator.validate_transaction(t))
        assert "Description is required" in summary
        assert "Please fix" in summary

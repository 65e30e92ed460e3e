"""
Shared fixtures for the ledger book tests.

No test talks to Google Sheets or Gemini: storage is the in-memory store
or a fake worksheet, and the LLM is a stub.
"""

from datetime import date, datetime, timezone

import pytest

from ledgerbook.config import AppSettings
from ledgerbook.models import AccountSession, MonthKey, Transaction, TransactionKind
from ledgerbook.reports import StatementComposer
from ledgerbook.validation import RecordValidator


@pytest.fixture
def session():
    return AccountSession(account_id="acct-1", display_name="Owner")


@pytest.fixture
def other_session():
    return AccountSession(account_id="acct-2", display_name="Someone else")


@pytest.fixture
def anonymous():
    return AccountSession()


@pytest.fixture
def march():
    return MonthKey(2024, 3)


@pytest.fixture
def scenario_a_transactions():
    """Income 500 on the 5th, expenses 200 on the 5th and 100 on the 7th."""
    return [
        Transaction(id="t1", kind=TransactionKind.INCOME, date=date(2024, 3, 5),
                    description="Milk sales", amount=500),
        Transaction(id="t2", kind=TransactionKind.EXPENSE, date=date(2024, 3, 5),
                    description="Feed", amount=200),
        Transaction(id="t3", kind=TransactionKind.EXPENSE, date=date(2024, 3, 7),
                    description="Diesel", amount=100),
    ]


@pytest.fixture
def app_settings():
    return AppSettings(
        business_name="RDF",
        business_subtitle="Expenditure Management",
        currency_label="PKR",
        statement_rows_per_page=5,
        max_reasonable_amount=100000.0,
        future_date_tolerance_days=1,
    )


@pytest.fixture
def composer(app_settings):
    return StatementComposer(
        settings=app_settings,
        clock=lambda: datetime(2024, 3, 20, 10, 30, tzinfo=timezone.utc),
    )


@pytest.fixture
def validator(app_settings):
    return RecordValidator(settings=app_settings, today=lambda: date(2024, 3, 20))

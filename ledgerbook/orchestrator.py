"""
Main Orchestrator for the Ledger Book

This module ties together all the components and defines the
end-to-end flows:
1. Views (fetch snapshot → aggregate → return to the UI)
2. Saves (validate → upsert → log)
3. Statements (fetch → aggregate → compose)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Every store call carries the caller's AccountSession
- Aggregates are always recomputed from a fresh fetch, never cached
- A record with validation errors is never written; warnings are
  logged and returned to the caller
- Storage failures are logged and re-raised, never swallowed
"""

import asyncio
from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

from ledgerbook.activity import ActivityLogger, get_logger
from ledgerbook.agents import INSIGHTS_UNAVAILABLE, InsightsAgent
from ledgerbook.ledger import (
    combined_monthly_summary,
    commodity_totals,
    daily_ledger,
    day_detail,
    matches_kind,
    month_balance_view,
    monthly_summary,
    person_standing,
    standings_for_people,
    statement_entries,
)
from ledgerbook.ledger.periods import filter_month
from ledgerbook.models.aggregates import (
    CombinedMonthlySummary,
    CommodityTotals,
    DailyLedger,
    DayDetail,
    MonthBalanceView,
    MonthlySummary,
    PersonStanding,
)
from ledgerbook.models.records import (
    AccountSession,
    CommodityRecord,
    EntityType,
    MonthKey,
    MonthlyNote,
    Person,
    PersonLedgerEntry,
    Transaction,
    TransactionKind,
)
from ledgerbook.models.validation import ValidationResult
from ledgerbook.reports import StatementComposer, StatementDocument
from ledgerbook.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsRecordStore,
    InMemoryRecordStore,
    LedgerRecord,
    RecordStoreInterface,
    StorageError,
)
from ledgerbook.validation import RecordValidator


logger = get_logger(__name__)


class LedgerSnapshot(BaseModel):
    """Every record of one account, fetched together."""

    transactions: list[Transaction] = Field(default_factory=list)
    persons: list[Person] = Field(default_factory=list)
    person_entries: list[PersonLedgerEntry] = Field(default_factory=list)
    commodity_records: list[CommodityRecord] = Field(default_factory=list)
    notes: list[MonthlyNote] = Field(default_factory=list)


class DashboardView(BaseModel):
    """What the overview page shows for one month."""

    month: MonthKey
    summary: MonthlySummary
    combined: CombinedMonthlySummary
    balance: MonthBalanceView
    standings: list[PersonStanding] = Field(default_factory=list)
    commodity: CommodityTotals


class CommodityLedgerView(BaseModel):
    records: list[CommodityRecord] = Field(default_factory=list)
    totals: CommodityTotals


class LedgerFlows:
    """
    Orchestrates every view, save and statement for one signed-in account.

    Nothing here does arithmetic of its own; the ledger package does.
    """

    def __init__(
        self,
        store: RecordStoreInterface,
        session: AccountSession,
        composer: Optional[StatementComposer] = None,
        validator: Optional[RecordValidator] = None,
        activity_logger: Optional[ActivityLogger] = None,
        insights_agent: Optional[InsightsAgent] = None,
    ):
        self._store = store
        self._session = session
        self._composer = composer or StatementComposer()
        self._validator = validator or RecordValidator()
        self._activity = activity_logger or ActivityLogger(session)
        self._insights_agent = insights_agent

    @property
    def session(self) -> AccountSession:
        return self._session

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    async def load_snapshot(self) -> LedgerSnapshot:
        """Fetch all collections concurrently."""
        s = self._session
        try:
            transactions, persons, entries, commodity, notes = await asyncio.gather(
                self._store.list_transactions(s),
                self._store.list_persons(s),
                self._store.list_all_person_entries(s),
                self._store.list_commodity_records(s),
                self._store.list_monthly_notes(s),
            )
        except StorageError as e:
            self._activity.storage_failed("load_snapshot", e)
            raise

        self._activity.snapshot_loaded(
            transactions=len(transactions),
            persons=len(persons),
            person_entries=len(entries),
            commodity_records=len(commodity),
            notes=len(notes),
        )
        return LedgerSnapshot(
            transactions=transactions,
            persons=persons,
            person_entries=entries,
            commodity_records=commodity,
            notes=notes,
        )

    async def dashboard(self, month: MonthKey) -> DashboardView:
        snapshot = await self.load_snapshot()
        return DashboardView(
            month=month,
            summary=monthly_summary(snapshot.transactions, month),
            combined=combined_monthly_summary(
                snapshot.transactions, snapshot.person_entries, month
            ),
            balance=month_balance_view(snapshot.transactions, snapshot.notes, month),
            standings=standings_for_people(
                snapshot.persons, snapshot.person_entries, month
            ),
            commodity=commodity_totals(snapshot.commodity_records),
        )

    async def transactions_for_month(
        self,
        month: MonthKey,
        kind: Optional[TransactionKind] = None,
    ) -> list[Transaction]:
        """
        The month's transactions, newest first, optionally of one kind.

        An expense listing also holds transfers.
        """
        transactions = await self._store.list_transactions(self._session)
        rows = [
            t for t in filter_month(transactions, month)
            if kind is None or matches_kind(t, kind)
        ]
        return sorted(rows, key=lambda t: (t.date, t.id), reverse=True)

    async def daily_ledger(self, month: MonthKey, kind: TransactionKind) -> DailyLedger:
        transactions = await self._store.list_transactions(self._session)
        return daily_ledger(transactions, month, kind)

    async def day_detail(self, day: date, kind: TransactionKind) -> DayDetail:
        transactions = await self._store.list_transactions(self._session)
        return day_detail(transactions, day, kind)

    async def person_ledger(self, person_id: str, month: MonthKey) -> Optional[PersonStanding]:
        """None if the person does not resolve for this account."""
        person = await self._store.get_person(self._session, person_id)
        if person is None:
            return None
        entries = await self._store.list_person_entries(self._session, person_id)
        return person_standing(person, entries, month)

    async def commodity_ledger(self) -> CommodityLedgerView:
        records = await self._store.list_commodity_records(self._session)
        return CommodityLedgerView(
            records=sorted(records, key=lambda r: (r.date, r.id), reverse=True),
            totals=commodity_totals(records),
        )

    async def monthly_notes(self, month: MonthKey) -> list[MonthlyNote]:
        return await self._store.list_monthly_notes(self._session, month)

    async def insights(self, month: MonthKey) -> str:
        """Gemini advice on the month's transactions."""
        if self._insights_agent is None:
            return INSIGHTS_UNAVAILABLE
        transactions = await self.transactions_for_month(month)
        return await self._insights_agent.financial_insights(transactions)

    # -------------------------------------------------------------------------
    # Saves and deletes
    # -------------------------------------------------------------------------

    async def _save(
        self,
        entity_type: EntityType,
        record: LedgerRecord,
        result: ValidationResult,
        **details,
    ) -> ValidationResult:
        if result.warnings:
            self._activity.validation_warnings(entity_type, record.id, result.warnings)
        if not result.can_save:
            return result

        try:
            await self._store.upsert(self._session, entity_type, record)
        except StorageError as e:
            self._activity.storage_failed(f"upsert_{entity_type.value}", e)
            raise

        self._activity.record_saved(entity_type, record.id, **details)
        return result

    async def save_transaction(self, transaction: Transaction) -> ValidationResult:
        """
        Validate and save a cash-book transaction.

        Returns the validation result; the record is written only if
        result.can_save.
        """
        result = self._validator.validate_transaction(transaction)
        return await self._save(
            EntityType.TRANSACTION,
            transaction,
            result,
            kind=transaction.kind.value,
            amount=str(transaction.amount),
        )

    async def save_person(self, person: Person) -> ValidationResult:
        result = self._validator.validate_person(person)
        return await self._save(EntityType.PERSON, person, result, name=person.name)

    async def save_person_entry(self, entry: PersonLedgerEntry) -> ValidationResult:
        """Validate against the person's stored entries, then save."""
        person = await self._store.get_person(self._session, entry.person_id)
        existing = []
        if person is not None:
            existing = await self._store.list_person_entries(self._session, person.id)
        result = self._validator.validate_person_entry(entry, person, existing)
        return await self._save(
            EntityType.PERSON_ENTRY,
            entry,
            result,
            person_id=entry.person_id,
            kind=entry.kind.value,
            amount=str(entry.amount),
        )

    async def save_commodity_record(self, record: CommodityRecord) -> ValidationResult:
        result = self._validator.validate_commodity_record(record)
        return await self._save(
            EntityType.COMMODITY_RECORD,
            record,
            result,
            line_total=str(record.line_total),
        )

    async def save_monthly_note(self, note: MonthlyNote) -> ValidationResult:
        result = self._validator.validate_monthly_note(note)
        return await self._save(
            EntityType.MONTHLY_NOTE,
            note,
            result,
            month=str(note.month),
        )

    def validation_summary(self, result: ValidationResult) -> str:
        """Readable summary of a save attempt for the form to show."""
        return self._validator.get_user_friendly_summary(result)

    async def _delete(self, entity_type: EntityType, record_id: str) -> bool:
        try:
            deleted = await self._store.delete(self._session, entity_type, record_id)
        except StorageError as e:
            self._activity.storage_failed(f"delete_{entity_type.value}", e)
            raise
        if deleted:
            self._activity.record_deleted(entity_type, record_id)
        return deleted

    async def delete_transaction(self, record_id: str) -> bool:
        return await self._delete(EntityType.TRANSACTION, record_id)

    async def delete_person(self, record_id: str) -> bool:
        """Deletes the person and, through the store, all of their entries."""
        return await self._delete(EntityType.PERSON, record_id)

    async def delete_person_entry(self, record_id: str) -> bool:
        return await self._delete(EntityType.PERSON_ENTRY, record_id)

    async def delete_commodity_record(self, record_id: str) -> bool:
        return await self._delete(EntityType.COMMODITY_RECORD, record_id)

    async def delete_monthly_note(self, record_id: str) -> bool:
        return await self._delete(EntityType.MONTHLY_NOTE, record_id)

    # -------------------------------------------------------------------------
    # Statements
    # -------------------------------------------------------------------------

    def _generated(self, document: StatementDocument) -> StatementDocument:
        self._activity.statement_generated(
            document.title, document.period, document.page_count
        )
        return document

    async def monthly_statement(self, month: MonthKey) -> StatementDocument:
        snapshot = await self.load_snapshot()
        document = self._composer.monthly_statement(
            combined_monthly_summary(snapshot.transactions, snapshot.person_entries, month),
            statement_entries(
                snapshot.transactions, month, snapshot.person_entries, snapshot.persons
            ),
            balance=month_balance_view(snapshot.transactions, snapshot.notes, month),
        )
        return self._generated(document)

    async def daily_ledger_statement(
        self,
        month: MonthKey,
        kind: TransactionKind,
    ) -> StatementDocument:
        ledger = await self.daily_ledger(month, kind)
        return self._generated(self._composer.daily_ledger_statement(ledger))

    async def day_detail_statement(self, day: date, kind: TransactionKind) -> StatementDocument:
        detail = await self.day_detail(day, kind)
        return self._generated(self._composer.day_detail_statement(detail))

    async def person_statement(
        self,
        person_id: str,
        month: MonthKey,
    ) -> Optional[StatementDocument]:
        standing = await self.person_ledger(person_id, month)
        if standing is None:
            return None
        return self._generated(self._composer.person_statement(standing))

    async def commodity_statement(self) -> StatementDocument:
        view = await self.commodity_ledger()
        return self._generated(
            self._composer.commodity_statement(view.records, view.totals)
        )


def create_app_components(
    session: AccountSession,
    use_storage: bool = True,
) -> tuple[LedgerFlows, Optional[GoogleSheetsClient]]:
    """
    Factory function to create all application components.

    Args:
        session: The signed-in account
        use_storage: Whether to initialize Google Sheets storage.
                    Set to False to run on the in-memory store.

    Returns:
        (flows, sheets_client)
    """
    sheets_client = None
    store: RecordStoreInterface

    if use_storage:
        try:
            sheets_client = GoogleSheetsClient()
            store = GoogleSheetsRecordStore(sheets_client)
        except Exception as e:
            # Storage not configured - continue on the in-memory store
            logger.warning("storage_not_configured", error=str(e))
            sheets_client = None
            store = InMemoryRecordStore()
    else:
        store = InMemoryRecordStore()

    insights_agent = None
    try:
        insights_agent = InsightsAgent()
    except Exception as e:
        logger.warning("insights_not_configured", error=str(e))

    flows = LedgerFlows(
        store=store,
        session=session,
        activity_logger=ActivityLogger(session),
        insights_agent=insights_agent,
    )
    return flows, sheets_client

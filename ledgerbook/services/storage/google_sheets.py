"""
Google Sheets Record Store

DESIGN DECISION: Google Sheets is the hosted store because:
1. The owner can open and read the books directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- No transactions: upsert-by-id is last-write-wins
- Limited query capabilities: we filter in Python
- Every read pulls the whole worksheet; there is no cache

Each record collection lives in its own worksheet. Column 0 is the record
id and column 1 the owning account id; a list call only returns rows of
the session's account.
"""

from typing import Callable, Optional

import gspread
from google.oauth2.service_account import Credentials
from pydantic import ValidationError
from tenacity import retry, stop_after_attempt, wait_exponential

from ledgerbook.activity import get_logger
from ledgerbook.config import GoogleSheetsSettings, get_settings
from ledgerbook.models.records import (
    AccountSession,
    CommodityRecord,
    EntityType,
    EntryKind,
    MonthKey,
    MonthlyNote,
    Person,
    PersonLedgerEntry,
    Transaction,
)
from ledgerbook.services.storage.interface import (
    ConnectionError,
    LedgerRecord,
    NotAuthenticatedError,
    RecordStoreInterface,
    StorageError,
    check_record_type,
)


logger = get_logger(__name__)


# Column mappings, one per worksheet
COLUMNS: dict[EntityType, list[str]] = {
    EntityType.TRANSACTION: [
        "id", "account_id", "kind", "date", "description",
        "amount", "remarks", "source",
    ],
    EntityType.PERSON: [
        "id", "account_id", "name", "opening_balance", "monthly_limit",
    ],
    EntityType.PERSON_ENTRY: [
        "id", "account_id", "person_id", "date", "description",
        "amount", "kind",
    ],
    EntityType.COMMODITY_RECORD: [
        "id", "account_id", "date", "quantity", "unit_price",
        "payment_given", "description", "attachment_url",
    ],
    EntityType.MONTHLY_NOTE: [
        "id", "account_id", "month", "title", "amount",
    ],
}


def _sheet_name(settings: GoogleSheetsSettings, entity_type: EntityType) -> str:
    return {
        EntityType.TRANSACTION: settings.transactions_sheet_name,
        EntityType.PERSON: settings.persons_sheet_name,
        EntityType.PERSON_ENTRY: settings.person_entries_sheet_name,
        EntityType.COMMODITY_RECORD: settings.commodity_sheet_name,
        EntityType.MONTHLY_NOTE: settings.notes_sheet_name,
    }[entity_type]


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and worksheet lookup. Only the initial
    authorisation is retried; record reads and writes are not.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError as e:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                ) from e
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}") from e

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound as e:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                ) from e
        return self._spreadsheet

    def get_worksheet(self, entity_type: EntityType) -> gspread.Worksheet:
        """Get or create the worksheet holding one record collection."""
        spreadsheet = self.get_spreadsheet()
        title = _sheet_name(self._settings, entity_type)
        columns = COLUMNS[entity_type]
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=1000,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet


# =============================================================================
# ROW CONVERSION
# =============================================================================

def _amount_cell(value) -> str:
    return str(value)


def record_to_row(entity_type: EntityType, record: LedgerRecord, account_id: str) -> list:
    """Convert a record to a spreadsheet row."""
    if entity_type is EntityType.TRANSACTION:
        return [
            record.id,
            account_id,
            record.kind.value,
            record.date.isoformat(),
            record.description,
            _amount_cell(record.amount),
            record.remarks or "",
            record.source or "",
        ]
    if entity_type is EntityType.PERSON:
        return [
            record.id,
            account_id,
            record.name,
            _amount_cell(record.opening_balance),
            _amount_cell(record.monthly_limit),
        ]
    if entity_type is EntityType.PERSON_ENTRY:
        return [
            record.id,
            account_id,
            record.person_id,
            record.date.isoformat(),
            record.description,
            _amount_cell(record.amount),
            record.kind.value,
        ]
    if entity_type is EntityType.COMMODITY_RECORD:
        return [
            record.id,
            account_id,
            record.date.isoformat(),
            _amount_cell(record.quantity),
            _amount_cell(record.unit_price),
            _amount_cell(record.payment_given),
            record.description,
            record.attachment_url or "",
        ]
    return [
        record.id,
        account_id,
        str(record.month),
        record.title,
        _amount_cell(record.amount),
    ]


def _row_dict(entity_type: EntityType, row: list) -> dict[str, str]:
    """Map a row onto its column names, padding missing trailing cells."""
    columns = COLUMNS[entity_type]
    return {
        name: (row[i].strip() if i < len(row) and row[i] is not None else "")
        for i, name in enumerate(columns)
    }


def _transaction_from_cells(cells: dict[str, str]) -> Transaction:
    return Transaction(
        id=cells["id"],
        kind=cells["kind"].lower(),
        date=cells["date"],
        description=cells["description"],
        amount=cells["amount"],
        remarks=cells["remarks"] or None,
        source=cells["source"] or None,
    )


def _person_from_cells(cells: dict[str, str]) -> Person:
    return Person(
        id=cells["id"],
        name=cells["name"],
        opening_balance=cells["opening_balance"],
        monthly_limit=cells["monthly_limit"],
    )


def _entry_from_cells(cells: dict[str, str]) -> PersonLedgerEntry:
    # Rows written before entry kinds existed have no kind: they were expenses.
    kind = cells["kind"].lower() or EntryKind.EXPENSE.value
    return PersonLedgerEntry(
        id=cells["id"],
        person_id=cells["person_id"],
        date=cells["date"],
        description=cells["description"],
        amount=cells["amount"],
        kind=kind,
    )


def _commodity_from_cells(cells: dict[str, str]) -> CommodityRecord:
    return CommodityRecord(
        id=cells["id"],
        date=cells["date"],
        quantity=cells["quantity"],
        unit_price=cells["unit_price"],
        payment_given=cells["payment_given"],
        description=cells["description"],
        attachment_url=cells["attachment_url"] or None,
    )


def _note_from_cells(cells: dict[str, str]) -> MonthlyNote:
    return MonthlyNote(
        id=cells["id"],
        month=cells["month"],
        title=cells["title"],
        amount=cells["amount"],
    )


ROW_PARSERS: dict[EntityType, Callable[[dict[str, str]], LedgerRecord]] = {
    EntityType.TRANSACTION: _transaction_from_cells,
    EntityType.PERSON: _person_from_cells,
    EntityType.PERSON_ENTRY: _entry_from_cells,
    EntityType.COMMODITY_RECORD: _commodity_from_cells,
    EntityType.MONTHLY_NOTE: _note_from_cells,
}


def row_to_record(entity_type: EntityType, row: list) -> LedgerRecord:
    """
    Convert a spreadsheet row to a validated record.

    Raises:
        ValidationError / ValueError: If the row cannot form a valid record
    """
    return ROW_PARSERS[entity_type](_row_dict(entity_type, row))


# =============================================================================
# STORE
# =============================================================================

class GoogleSheetsRecordStore(RecordStoreInterface):
    """
    Google Sheets implementation of the record store.

    Records are stored as rows, one worksheet per collection.
    Malformed rows are skipped one by one and logged; they never
    hide the rest of the collection.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _data_rows(self, entity_type: EntityType) -> list[list]:
        """All rows below the header."""
        sheet = self._client.get_worksheet(entity_type)
        return sheet.get_all_values()[1:]

    def _list(self, session: AccountSession, entity_type: EntityType) -> list:
        if not session.is_authenticated:
            return []

        try:
            rows = self._data_rows(entity_type)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to list {entity_type.value} records: {e}") from e

        records = []
        for row_number, row in enumerate(rows, start=2):
            if not row or not row[0]:  # Skip empty rows
                continue
            if len(row) < 2 or row[1] != session.account_id:
                continue
            try:
                records.append(row_to_record(entity_type, row))
            except (ValidationError, ValueError) as e:
                logger.warning(
                    "skipped_malformed_row",
                    entity_type=entity_type.value,
                    row_number=row_number,
                    error=str(e),
                )
        return records

    async def list_transactions(self, session: AccountSession) -> list[Transaction]:
        return self._list(session, EntityType.TRANSACTION)

    async def list_persons(self, session: AccountSession) -> list[Person]:
        return self._list(session, EntityType.PERSON)

    async def list_person_entries(
        self,
        session: AccountSession,
        person_id: str,
    ) -> list[PersonLedgerEntry]:
        return [
            e for e in self._list(session, EntityType.PERSON_ENTRY)
            if e.person_id == person_id
        ]

    async def list_all_person_entries(self, session: AccountSession) -> list[PersonLedgerEntry]:
        return self._list(session, EntityType.PERSON_ENTRY)

    async def list_commodity_records(self, session: AccountSession) -> list[CommodityRecord]:
        return self._list(session, EntityType.COMMODITY_RECORD)

    async def list_monthly_notes(
        self,
        session: AccountSession,
        month: Optional[MonthKey] = None,
    ) -> list[MonthlyNote]:
        notes = self._list(session, EntityType.MONTHLY_NOTE)
        if month is not None:
            notes = [n for n in notes if n.month == month]
        return notes

    async def upsert(
        self,
        session: AccountSession,
        entity_type: EntityType,
        record: LedgerRecord,
    ) -> None:
        """Replace the row with the same id, or append a new row."""
        if not session.is_authenticated:
            raise NotAuthenticatedError("Sign in before saving records")
        check_record_type(entity_type, record)

        new_row = record_to_row(entity_type, record, session.account_id)
        try:
            sheet = self._client.get_worksheet(entity_type)
            all_rows = sheet.get_all_values()

            # Row 1 is the header
            for idx, row in enumerate(all_rows[1:], start=2):
                if len(row) > 1 and row[0] == record.id and row[1] == session.account_id:
                    sheet.update(
                        range_name=f"A{idx}",
                        values=[new_row],
                        value_input_option="RAW",
                    )
                    return

            sheet.append_row(new_row, value_input_option="RAW")
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to save {entity_type.value} {record.id}: {e}") from e

    async def delete(
        self,
        session: AccountSession,
        entity_type: EntityType,
        record_id: str,
    ) -> bool:
        """Delete matching rows; deleting a person also deletes their entries."""
        if not session.is_authenticated:
            raise NotAuthenticatedError("Sign in before deleting records")

        try:
            removed = self._delete_rows(
                entity_type,
                lambda row: row[0] == record_id and row[1] == session.account_id,
            )
            if entity_type is EntityType.PERSON:
                person_col = COLUMNS[EntityType.PERSON_ENTRY].index("person_id")
                self._delete_rows(
                    EntityType.PERSON_ENTRY,
                    lambda row: (
                        row[1] == session.account_id
                        and len(row) > person_col
                        and row[person_col] == record_id
                    ),
                )
            return removed > 0
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to delete {entity_type.value} {record_id}: {e}") from e

    def _delete_rows(self, entity_type: EntityType, matches: Callable[[list], bool]) -> int:
        sheet = self._client.get_worksheet(entity_type)
        all_rows = sheet.get_all_values()
        targets = [
            idx
            for idx, row in enumerate(all_rows[1:], start=2)
            if len(row) > 1 and matches(row)
        ]
        # Bottom-up so earlier indices stay valid
        for idx in reversed(targets):
            sheet.delete_rows(idx)
        return len(targets)

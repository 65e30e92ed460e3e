"""
In-Memory Record Store

Keeps records in process memory, partitioned by account id.
Used by the test-suite and when Google Sheets is not configured.
Records are copied in and out so callers never share state with the store.
"""

from collections import defaultdict
from typing import Optional

from ledgerbook.models.records import (
    AccountSession,
    CommodityRecord,
    EntityType,
    MonthKey,
    MonthlyNote,
    Person,
    PersonLedgerEntry,
    Transaction,
)
from ledgerbook.services.storage.interface import (
    LedgerRecord,
    NotAuthenticatedError,
    RecordStoreInterface,
    check_record_type,
)


class InMemoryRecordStore(RecordStoreInterface):
    """Dictionary-backed implementation of the record store."""

    def __init__(self):
        # account_id -> entity_type -> record_id -> record
        self._data: dict[str, dict[EntityType, dict[str, LedgerRecord]]] = defaultdict(
            lambda: defaultdict(dict)
        )

    def _records(self, session: AccountSession, entity_type: EntityType) -> list:
        if not session.is_authenticated:
            return []
        stored = self._data[session.account_id][entity_type]
        return [r.model_copy(deep=True) for r in stored.values()]

    async def list_transactions(self, session: AccountSession) -> list[Transaction]:
        return self._records(session, EntityType.TRANSACTION)

    async def list_persons(self, session: AccountSession) -> list[Person]:
        return self._records(session, EntityType.PERSON)

    async def list_person_entries(
        self,
        session: AccountSession,
        person_id: str,
    ) -> list[PersonLedgerEntry]:
        return [
            e for e in self._records(session, EntityType.PERSON_ENTRY)
            if e.person_id == person_id
        ]

    async def list_all_person_entries(self, session: AccountSession) -> list[PersonLedgerEntry]:
        return self._records(session, EntityType.PERSON_ENTRY)

    async def list_commodity_records(self, session: AccountSession) -> list[CommodityRecord]:
        return self._records(session, EntityType.COMMODITY_RECORD)

    async def list_monthly_notes(
        self,
        session: AccountSession,
        month: Optional[MonthKey] = None,
    ) -> list[MonthlyNote]:
        notes = self._records(session, EntityType.MONTHLY_NOTE)
        if month is not None:
            notes = [n for n in notes if n.month == month]
        return notes

    async def upsert(
        self,
        session: AccountSession,
        entity_type: EntityType,
        record: LedgerRecord,
    ) -> None:
        if not session.is_authenticated:
            raise NotAuthenticatedError("Sign in before saving records")
        check_record_type(entity_type, record)
        self._data[session.account_id][entity_type][record.id] = record.model_copy(deep=True)

    async def delete(
        self,
        session: AccountSession,
        entity_type: EntityType,
        record_id: str,
    ) -> bool:
        if not session.is_authenticated:
            raise NotAuthenticatedError("Sign in before deleting records")
        account = self._data[session.account_id]
        removed = account[entity_type].pop(record_id, None) is not None

        if entity_type is EntityType.PERSON:
            entries = account[EntityType.PERSON_ENTRY]
            for entry_id in [i for i, e in entries.items() if e.person_id == record_id]:
                del entries[entry_id]

        return removed

"""
Abstract Record Store Interface

DESIGN DECISION: The ledger layer only ever needs two things from storage:
"load every record of type X for this account" and "upsert / delete a
record by id". This interface is exactly that, so we can:
1. Back it with Google Sheets in production
2. Use in-memory storage for testing and offline use
3. Keep all business arithmetic out of the storage layer

Every call takes an explicit AccountSession. There is no global login
state anywhere in the package.
"""

from abc import ABC, abstractmethod
from typing import Optional, Union

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


LedgerRecord = Union[Transaction, Person, PersonLedgerEntry, CommodityRecord, MonthlyNote]

RECORD_TYPES: dict[EntityType, type] = {
    EntityType.TRANSACTION: Transaction,
    EntityType.PERSON: Person,
    EntityType.PERSON_ENTRY: PersonLedgerEntry,
    EntityType.COMMODITY_RECORD: CommodityRecord,
    EntityType.MONTHLY_NOTE: MonthlyNote,
}


class RecordStoreInterface(ABC):
    """
    Abstract interface for ledger record storage.

    List operations on an unauthenticated session return an empty list.
    Write operations on an unauthenticated session raise NotAuthenticatedError.
    Upserts are last-write-wins by record id.
    """

    @abstractmethod
    async def list_transactions(self, session: AccountSession) -> list[Transaction]:
        """All cash-book transactions of the account."""
        pass

    @abstractmethod
    async def list_persons(self, session: AccountSession) -> list[Person]:
        """All persons (staff / counterparties) of the account."""
        pass

    @abstractmethod
    async def list_person_entries(
        self,
        session: AccountSession,
        person_id: str,
    ) -> list[PersonLedgerEntry]:
        """Ledger entries of one person."""
        pass

    @abstractmethod
    async def list_all_person_entries(self, session: AccountSession) -> list[PersonLedgerEntry]:
        """Ledger entries of every person of the account."""
        pass

    @abstractmethod
    async def list_commodity_records(self, session: AccountSession) -> list[CommodityRecord]:
        """All weight x price trade records of the account."""
        pass

    @abstractmethod
    async def list_monthly_notes(
        self,
        session: AccountSession,
        month: Optional[MonthKey] = None,
    ) -> list[MonthlyNote]:
        """
        Monthly notes of the account.

        Args:
            session: The signed-in account
            month: Only notes of this month, if given
        """
        pass

    @abstractmethod
    async def upsert(
        self,
        session: AccountSession,
        entity_type: EntityType,
        record: LedgerRecord,
    ) -> None:
        """
        Insert the record, or replace the stored record with the same id.

        Raises:
            NotAuthenticatedError: If nobody is signed in
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def delete(
        self,
        session: AccountSession,
        entity_type: EntityType,
        record_id: str,
    ) -> bool:
        """
        Delete a record by id.

        Deleting a PERSON also deletes all of that person's ledger entries.

        Returns:
            True if a record was deleted, False if none matched
        """
        pass

    async def get_person(self, session: AccountSession, person_id: str) -> Optional[Person]:
        """Look up one person; None if it does not resolve."""
        for person in await self.list_persons(session):
            if person.id == person_id:
                return person
        return None


def check_record_type(entity_type: EntityType, record: LedgerRecord) -> None:
    """Reject a record handed in under the wrong entity type."""
    expected = RECORD_TYPES[entity_type]
    if not isinstance(record, expected):
        raise TypeError(
            f"Expected {expected.__name__} for {entity_type.value}, "
            f"got {type(record).__name__}"
        )


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotAuthenticatedError(StorageError):
    """A write was attempted without a signed-in account."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass

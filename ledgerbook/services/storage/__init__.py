"""
Storage Services Package

Provides the abstract record store interface and its implementations.
Google Sheets is the hosted backend; the in-memory store serves tests and
offline use.
"""

from ledgerbook.services.storage.interface import (
    RECORD_TYPES,
    ConnectionError,
    LedgerRecord,
    NotAuthenticatedError,
    RecordStoreInterface,
    StorageError,
)
from ledgerbook.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsRecordStore,
    record_to_row,
    row_to_record,
)
from ledgerbook.services.storage.memory import InMemoryRecordStore

__all__ = [
    # Interface
    "RECORD_TYPES",
    "LedgerRecord",
    "RecordStoreInterface",
    # Exceptions
    "ConnectionError",
    "NotAuthenticatedError",
    "StorageError",
    # Implementations
    "GoogleSheetsClient",
    "GoogleSheetsRecordStore",
    "InMemoryRecordStore",
    "record_to_row",
    "row_to_record",
]

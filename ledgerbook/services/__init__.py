"""Services package."""

from ledgerbook.services.storage import (
    ConnectionError,
    GoogleSheetsClient,
    GoogleSheetsRecordStore,
    InMemoryRecordStore,
    NotAuthenticatedError,
    RecordStoreInterface,
    StorageError,
)

__all__ = [
    "ConnectionError",
    "GoogleSheetsClient",
    "GoogleSheetsRecordStore",
    "InMemoryRecordStore",
    "NotAuthenticatedError",
    "RecordStoreInterface",
    "StorageError",
]

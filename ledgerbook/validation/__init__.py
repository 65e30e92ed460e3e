"""Record validation."""

from ledgerbook.validation.validator import RecordValidator

__all__ = ["RecordValidator"]

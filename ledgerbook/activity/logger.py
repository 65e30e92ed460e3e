"""
Activity Logger

Structured local logging for everything that changes or leaves the system:
record saves and deletes, statements generated, storage failures.

DESIGN DECISION: These events go to the process log only. The ledger keeps
no audit trail or version history of its records; last write wins.
"""

from typing import Any, Optional

import structlog

from ledgerbook.models.records import AccountSession, EntityType


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def get_logger(name: Optional[str] = None) -> Any:
    """Module-level structured logger."""
    return structlog.get_logger(name)


class ActivityLogger:
    """
    Logs ledger activity for one account session.

    The account id is bound onto every event so a shared log can be
    filtered per business.
    """

    def __init__(self, session: Optional[AccountSession] = None):
        self._logger = get_logger("ledgerbook.activity").bind(
            account_id=session.account_id if session else None,
        )

    def record_saved(self, entity_type: EntityType, record_id: str, **details: Any) -> None:
        self._logger.info(
            "record_saved",
            entity_type=entity_type.value,
            record_id=record_id,
            **details,
        )

    def record_deleted(self, entity_type: EntityType, record_id: str) -> None:
        self._logger.info(
            "record_deleted",
            entity_type=entity_type.value,
            record_id=record_id,
        )

    def validation_warnings(self, entity_type: EntityType, record_id: str, warnings: list[str]) -> None:
        self._logger.warning(
            "validation_warnings",
            entity_type=entity_type.value,
            record_id=record_id,
            warnings=warnings,
        )

    def snapshot_loaded(self, **counts: int) -> None:
        self._logger.debug("snapshot_loaded", **counts)

    def statement_generated(self, title: str, period: str, pages: int) -> None:
        self._logger.info(
            "statement_generated",
            title=title,
            period=period,
            pages=pages,
        )

    def storage_failed(self, operation: str, error: Exception) -> None:
        self._logger.error(
            "storage_failed",
            operation=operation,
            error=str(error),
            error_type=type(error).__name__,
        )

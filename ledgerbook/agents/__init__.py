"""AI agents."""

from ledgerbook.agents.insights import (
    INSIGHTS_UNAVAILABLE,
    NO_TRANSACTIONS,
    InsightsAgent,
)

__all__ = [
    "INSIGHTS_UNAVAILABLE",
    "NO_TRANSACTIONS",
    "InsightsAgent",
]

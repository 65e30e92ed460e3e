"""Ledger computation package: aggregation, balances, commodity totals."""

from ledgerbook.ledger.aggregator import (
    combined_monthly_summary,
    daily_buckets,
    daily_ledger,
    day_detail,
    day_entries,
    matches_kind,
    month_balance_view,
    monthly_summary,
    statement_entries,
)
from ledgerbook.ledger.balances import (
    balance_side,
    current_balance,
    monthly_consumption,
    monthly_remaining_limit,
    person_standing,
    standings_for_people,
)
from ledgerbook.ledger.commodity import commodity_totals, line_total
from ledgerbook.ledger.periods import (
    LOCAL_UTC_OFFSET,
    current_month,
    days_in_month,
    is_today,
    local_today,
    month_dates,
)

__all__ = [
    "combined_monthly_summary",
    "daily_buckets",
    "daily_ledger",
    "day_detail",
    "day_entries",
    "matches_kind",
    "month_balance_view",
    "monthly_summary",
    "statement_entries",
    "balance_side",
    "current_balance",
    "monthly_consumption",
    "monthly_remaining_limit",
    "person_standing",
    "standings_for_people",
    "commodity_totals",
    "line_total",
    "LOCAL_UTC_OFFSET",
    "current_month",
    "days_in_month",
    "is_today",
    "local_today",
    "month_dates",
]

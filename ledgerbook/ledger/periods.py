"""
Period and date bucketing helpers.

Month membership is an explicit (year, month) comparison on the record's
calendar date. No timezone conversion happens here: dates are already
account-local when they are recorded.

The one place a clock is read is "today", which is pinned to Pakistan
Standard Time (UTC+5) regardless of the host's timezone.
"""

import calendar
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, Iterator, Optional, Protocol, TypeVar

from ledgerbook.models.records import MonthKey


# Business-local clock for "today" highlighting and default months.
LOCAL_UTC_OFFSET = timezone(timedelta(hours=5), name="PKT")


class _Dated(Protocol):
    date: date


D = TypeVar("D", bound=_Dated)


def days_in_month(month: MonthKey) -> int:
    return calendar.monthrange(month.year, month.month)[1]


def month_dates(month: MonthKey) -> list[date]:
    """Every calendar date of the month, day 1 first."""
    return [
        date(month.year, month.month, day)
        for day in range(1, days_in_month(month) + 1)
    ]


def filter_month(records: Iterable[D], month: MonthKey) -> Iterator[D]:
    """Yield the records dated inside the month."""
    return (r for r in records if month.contains(r.date))


def local_now(now: Optional[datetime] = None, tz: timezone = LOCAL_UTC_OFFSET) -> datetime:
    """
    Current time on the business clock.

    A naive ``now`` is taken to be UTC.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(tz)


def local_today(now: Optional[datetime] = None, tz: timezone = LOCAL_UTC_OFFSET) -> date:
    return local_now(now, tz).date()


def is_today(day: date, now: Optional[datetime] = None, tz: timezone = LOCAL_UTC_OFFSET) -> bool:
    return day == local_today(now, tz)


def current_month(now: Optional[datetime] = None, tz: timezone = LOCAL_UTC_OFFSET) -> MonthKey:
    return MonthKey.of(local_today(now, tz))

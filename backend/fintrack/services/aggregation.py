"""Time-range filtering and daily income/expense aggregation.

This module is shared by the API (``GET /api/transactions``) and by the
client dashboard so that both sides compute the same cutoff and the same
day buckets.

All day arithmetic happens in UTC: naive datetimes are read as UTC, plain
dates as UTC midnight, and a transaction belongs to the UTC calendar day of
its timestamp.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from enum import Enum
from typing import Any

from dateutil.relativedelta import relativedelta

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
ZERO = Decimal("0")


class TimeRange(str, Enum):
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    ALL = "all"

    @classmethod
    def parse(cls, value: "TimeRange | str | None") -> "TimeRange":
        """Map a raw selector to a TimeRange; anything unknown means ALL."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls.ALL

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    TimeRange.WEEK: "Last 7 days",
    TimeRange.MONTH: "Last month",
    TimeRange.YEAR: "Last 12 months",
    TimeRange.ALL: "All time",
}


@dataclass(frozen=True)
class DailyBucket:
    date: date
    income: Decimal
    expenses: Decimal

    @property
    def label(self) -> str:
        """Short axis label, e.g. ``Jan 5``."""
        return f"{self.date:%b} {self.date.day}"


@dataclass(frozen=True)
class Summary:
    total_balance: Decimal
    total_income: Decimal
    total_expenses: Decimal


@dataclass(frozen=True)
class Aggregation:
    time_range: TimeRange
    cutoff: datetime
    transactions: tuple[Any, ...]
    buckets: tuple[DailyBucket, ...]
    summary: Summary


# ── Dates ─────────────────────────────────────────
def to_utc(value: date | datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)


def day_key(value: date | datetime) -> date:
    """UTC calendar day a timestamp falls on."""
    return to_utc(value).date()


def compute_cutoff(time_range: TimeRange | str | None, now: datetime) -> datetime:
    """Earliest instant included by ``time_range``, relative to ``now``.

    Months and years are calendar-aware: one month before March 31 is the
    last day of February, one year before Feb 29 is Feb 28.
    """
    now = to_utc(now)
    selector = TimeRange.parse(time_range)
    if selector is TimeRange.WEEK:
        return now - timedelta(days=7)
    if selector is TimeRange.MONTH:
        return now - relativedelta(months=1)
    if selector is TimeRange.YEAR:
        return now - relativedelta(years=1)
    return EPOCH


# ── Reductions ────────────────────────────────────
def as_decimal(value: Decimal | int | float | str) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def filter_by_time_range(
    transactions: Iterable[Any],
    time_range: TimeRange | str | None,
    now: datetime,
) -> list[Any]:
    """Keep the transactions dated on or after the cutoff."""
    cutoff = compute_cutoff(time_range, now)
    return [t for t in transactions if to_utc(t.date) >= cutoff]


def group_by_day(transactions: Iterable[Any]) -> tuple[DailyBucket, ...]:
    """One bucket per UTC day, ascending. Zero amounts count toward neither side."""
    grouped: dict[date, list[Decimal]] = {}
    for txn in transactions:
        totals = grouped.setdefault(day_key(txn.date), [ZERO, ZERO])
        amount = as_decimal(txn.amount)
        if amount > 0:
            totals[0] += amount
        elif amount < 0:
            totals[1] += abs(amount)

    return tuple(
        DailyBucket(date=day, income=income, expenses=expenses)
        for day, (income, expenses) in sorted(grouped.items())
    )


def summarize(transactions: Iterable[Any]) -> Summary:
    amounts = [as_decimal(t.amount) for t in transactions]
    return Summary(
        total_balance=sum(amounts, ZERO),
        total_income=sum((a for a in amounts if a > 0), ZERO),
        total_expenses=sum((abs(a) for a in amounts if a < 0), ZERO),
    )


def aggregate(
    transactions: Iterable[Any],
    time_range: TimeRange | str | None,
    now: datetime,
) -> Aggregation:
    """Filter by time range, then bucket by day and total the result."""
    selector = TimeRange.parse(time_range)
    filtered = filter_by_time_range(transactions, selector, now)
    return Aggregation(
        time_range=selector,
        cutoff=compute_cutoff(selector, now),
        transactions=tuple(filtered),
        buckets=group_by_day(filtered),
        summary=summarize(filtered),
    )

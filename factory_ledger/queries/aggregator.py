"""
Aggregation Engine

Pure filtering and summarization over a snapshot of the ledger.
Shared by the dashboard and the report generator.

DESIGN DECISION: Every function here is a pure function of its
arguments. "Now" is always passed in, never read from the clock, so the
dashboard numbers are deterministic under test. The one configured
value is the default length of the recent expenses list.

Ordering rules:
- Category groupings are sorted by descending total; ties keep the
  order in which the categories were first encountered.
- Detailed listings are sorted by descending date; records on the same
  date keep their ledger order.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Optional, Union

from factory_ledger.config import get_settings
from factory_ledger.models.expense import BOTH_FACTORIES, FACTORIES, Expense
from factory_ledger.models.report import CategoryStats, DashboardSnapshot


def _check_factory_filter(factory_filter: Optional[str]) -> str:
    factory_filter = factory_filter or BOTH_FACTORIES
    if factory_filter != BOTH_FACTORIES and factory_filter not in FACTORIES:
        raise ValueError(f"Unknown factory filter: {factory_filter}")
    return factory_filter


def factory_label(factory_filter: Optional[str], both_label: str = "Both Factories") -> str:
    """Display name for a factory filter value."""
    factory_filter = _check_factory_filter(factory_filter)
    if factory_filter == BOTH_FACTORIES:
        return both_label
    return FACTORIES[factory_filter].name


def filter_by_factory(records: Iterable[Expense], factory_filter: Optional[str]) -> list[Expense]:
    """Keep records of one factory; "both" (or None) keeps everything."""
    factory_filter = _check_factory_filter(factory_filter)
    if factory_filter == BOTH_FACTORIES:
        return list(records)
    return [r for r in records if r.factory_id == factory_filter]


def filter_by_period(
    records: Iterable[Expense],
    year: Optional[int] = None,
    month: Optional[int] = None,
) -> list[Expense]:
    """
    Keep records in a calendar year and/or month.

    A missing bound means "all": month alone matches that month in
    every year.

    Raises:
        ValueError: If month is outside 1-12
    """
    if month is not None and not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")

    result = []
    for record in records:
        if year is not None and record.date.year != year:
            continue
        if month is not None and record.date.month != month:
            continue
        result.append(record)
    return result


def sum_amount(records: Iterable[Expense]) -> Decimal:
    return sum((r.amount for r in records), Decimal("0"))


def group_by_category(records: Iterable[Expense]) -> dict[str, Decimal]:
    """Category -> total, ordered by descending total."""
    totals: dict[str, Decimal] = {}
    for record in records:
        totals[record.category] = totals.get(record.category, Decimal("0")) + record.amount

    return dict(sorted(totals.items(), key=lambda item: item[1], reverse=True))


def group_by_category_with_counts(records: Iterable[Expense]) -> dict[str, CategoryStats]:
    """Category -> (total, count), ordered by descending total."""
    stats: dict[str, CategoryStats] = {}
    for record in records:
        entry = stats.setdefault(record.category, CategoryStats())
        entry.total += record.amount
        entry.count += 1

    return dict(sorted(stats.items(), key=lambda item: item[1].total, reverse=True))


def sort_by_date_desc(records: Iterable[Expense]) -> list[Expense]:
    return sorted(records, key=lambda r: r.date, reverse=True)


def dashboard_snapshot(
    records: Iterable[Expense],
    factory_filter: Optional[str],
    now: Union[date, datetime],
) -> DashboardSnapshot:
    """
    Headline dashboard numbers relative to `now`.

    monthly_total and yearly_total cover the calendar month and year of
    `now`; transaction_count covers every record of the selected factory.
    """
    today = now.date() if isinstance(now, datetime) else now
    selected = filter_by_factory(records, factory_filter)

    return DashboardSnapshot(
        monthly_total=sum_amount(filter_by_period(selected, year=today.year, month=today.month)),
        yearly_total=sum_amount(filter_by_period(selected, year=today.year)),
        transaction_count=len(selected),
        factory_label=factory_label(factory_filter),
        as_of=today,
    )


def recent_expenses(
    records: Iterable[Expense],
    factory_filter: Optional[str],
    limit: Optional[int] = None,
) -> list[Expense]:
    """The first `limit` records of a factory, in ledger (newest-first) order."""
    if limit is None:
        limit = get_settings().app.recent_expenses_limit
    return filter_by_factory(records, factory_filter)[:limit]


def select_for_report(
    records: Iterable[Expense],
    factory_filter: Optional[str] = BOTH_FACTORIES,
    month: Optional[int] = None,
    year: Optional[int] = None,
) -> list[Expense]:
    """Filter by factory and period, then sort newest date first."""
    selected = filter_by_factory(records, factory_filter)
    selected = filter_by_period(selected, year=year, month=month)
    return sort_by_date_desc(selected)

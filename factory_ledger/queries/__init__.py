"""Filtering and aggregation package."""

from factory_ledger.queries.aggregator import (
    dashboard_snapshot,
    factory_label,
    filter_by_factory,
    filter_by_period,
    group_by_category,
    group_by_category_with_counts,
    recent_expenses,
    select_for_report,
    sort_by_date_desc,
    sum_amount,
)

__all__ = [
    "dashboard_snapshot",
    "factory_label",
    "filter_by_factory",
    "filter_by_period",
    "group_by_category",
    "group_by_category_with_counts",
    "recent_expenses",
    "select_for_report",
    "sort_by_date_desc",
    "sum_amount",
]

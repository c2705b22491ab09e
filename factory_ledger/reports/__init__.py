"""Report generation package."""

from factory_ledger.reports.formatting import (
    format_amount,
    format_category,
    format_date,
    format_file_size,
    month_name,
    period_label,
)
from factory_ledger.reports.generator import (
    FALLBACK_TAX_CATEGORY,
    TAX_CATEGORIES,
    ReportGenerator,
    apportion_percentages,
    build_receipt_summary,
    tax_category_for,
)

__all__ = [
    "ReportGenerator",
    "TAX_CATEGORIES",
    "FALLBACK_TAX_CATEGORY",
    "tax_category_for",
    "apportion_percentages",
    "build_receipt_summary",
    "format_amount",
    "format_category",
    "format_date",
    "format_file_size",
    "month_name",
    "period_label",
]

"""
Display formatting helpers shared by reports and the dashboard.
"""

import calendar
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from factory_ledger.config import get_settings


FILE_SIZE_UNITS = ["Bytes", "KB", "MB", "GB"]


def format_file_size(size_bytes: int) -> str:
    """
    Human readable size in 1024-based units.

    Examples:
        0       -> "0 Bytes"
        1536    -> "1.5 KB"
        5242880 -> "5 MB"
    """
    if size_bytes <= 0:
        return "0 Bytes"

    exponent = 0
    value = float(size_bytes)
    while value >= 1024 and exponent < len(FILE_SIZE_UNITS) - 1:
        value /= 1024
        exponent += 1
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {FILE_SIZE_UNITS[exponent]}"


def format_category(category: str) -> str:
    """raw-materials -> Raw Materials"""
    return " ".join(word[:1].upper() + word[1:] for word in category.split("-"))


def month_name(month: int) -> str:
    if 1 <= month <= 12:
        return calendar.month_name[month]
    return f"Month {month}"


def period_label(month: Optional[int], year: Optional[int], default_year: Optional[int] = None) -> str:
    """
    "<Month|All Months> <year|All Years>".

    default_year replaces "All Years" when no year was selected.
    """
    month_text = month_name(month) if month else "All Months"
    if year:
        year_text = str(year)
    elif default_year:
        year_text = str(default_year)
    else:
        year_text = "All Years"
    return f"{month_text} {year_text}"


def format_amount(amount: Decimal, symbol: Optional[str] = None) -> str:
    """E 1,234.50"""
    symbol = symbol if symbol is not None else get_settings().app.currency_symbol
    rounded = Decimal(amount).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{symbol} {rounded:,.2f}"


def format_date(value: date) -> str:
    """dd/mm/yyyy"""
    return value.strftime("%d/%m/%Y")

"""
Report Models

Structured, non-persisted projections of a filtered set of expenses.
A renderer or printer receives these objects verbatim; nothing in this
package knows about HTML, PDF or paper.

Amounts are Decimals in Emalangeni. Percentages are floats rounded to
one decimal place.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field


class ReportKind(str, Enum):
    """The three report variants."""
    STANDARD = "standard"
    BANK = "bank"
    REVENUE_OFFICE = "revenue-office"


# =============================================================================
# AGGREGATION RESULTS
# =============================================================================

class CategoryStats(BaseModel):
    """Total and record count for one category."""

    total: Decimal = Decimal("0")
    count: int = Field(default=0, ge=0)


class DashboardSnapshot(BaseModel):
    """Headline numbers for the dashboard, relative to a given day."""

    monthly_total: Decimal
    yearly_total: Decimal
    transaction_count: int = Field(ge=0)
    factory_label: str
    as_of: dt.date


# =============================================================================
# REPORT BUILDING BLOCKS
# =============================================================================

class ReportHeader(BaseModel):
    """Title block printed at the top of every report."""

    title: str
    subtitle: Optional[str] = None
    entity_name: str
    location_line: Optional[str] = None
    tax_registration: Optional[str] = None
    period_label: str
    generated_on: dt.date


class ReceiptSummary(BaseModel):
    """
    Receipt documentation footer shared by all report variants.

    documentation_rate is the share of records with at least one
    receipt, as a percentage.
    """

    total_receipts: int = Field(ge=0)
    documented_expenses: int = Field(ge=0)
    documentation_rate: float = Field(ge=0.0, le=100.0)
    total_storage_bytes: int = Field(ge=0)
    total_storage_label: str


class CategoryLine(BaseModel):
    """One row of a category breakdown."""

    category: str
    label: str
    total: Decimal
    count: int = Field(ge=0)
    percentage: Optional[float] = None


class ExpenseLine(BaseModel):
    """One row of the detailed listing in the standard report."""

    expense_id: str
    date: dt.date
    description: str
    category: str
    category_label: str
    factory_location: str
    vendor: str
    receipt_count: int = Field(ge=0)
    amount: Decimal


class TaxBucketLine(BaseModel):
    """One row of the revenue office report."""

    tax_category: str
    total: Decimal
    document_count: int = Field(ge=0)


class DeclarationBlock(BaseModel):
    """Signed declaration closing the revenue office report."""

    heading: str = "Declaration"
    text: str
    signature_lines: list[str] = Field(default_factory=list)


# =============================================================================
# REPORT VARIANTS
# =============================================================================

class StandardReport(BaseModel):
    """Full expense report with category percentages and every record."""

    kind: Literal[ReportKind.STANDARD] = ReportKind.STANDARD
    header: ReportHeader
    total: Decimal
    transaction_count: int = Field(ge=1)
    average_transaction: Decimal
    categories: list[CategoryLine]
    details: list[ExpenseLine]
    receipts: ReceiptSummary


class BankReport(BaseModel):
    """Financial statement for the bank: category totals, no detail rows."""

    kind: Literal[ReportKind.BANK] = ReportKind.BANK
    header: ReportHeader
    total: Decimal
    transaction_count: int = Field(ge=1)
    categories: list[CategoryLine]
    statement: str
    receipts: ReceiptSummary


class RevenueOfficeReport(BaseModel):
    """Business expense declaration grouped by tax category."""

    kind: Literal[ReportKind.REVENUE_OFFICE] = ReportKind.REVENUE_OFFICE
    header: ReportHeader
    total_deductible: Decimal
    tax_categories: list[TaxBucketLine]
    declaration: DeclarationBlock
    receipts: ReceiptSummary


class EmptyReport(BaseModel):
    """
    Terminal result when no records match the filters.

    This is a normal outcome, not an error.
    """

    kind: ReportKind
    message: str = "No expenses found for the selected criteria."
    hint: str = "Try adjusting your filters or add some expenses first."


Report = Union[StandardReport, BankReport, RevenueOfficeReport, EmptyReport]

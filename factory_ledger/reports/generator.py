"""
Report Generator

Builds the three report variants from the ledger:

STANDARD        - totals, average, category percentages, every record
BANK            - category totals and counts with a fixed statement
REVENUE_OFFICE  - totals per tax category with a signed declaration

All three share the same selection step (factory, then year, then
month, newest date first) and the same receipt documentation footer.

DESIGN DECISION: Reports are returned as pydantic models, never as
markup. Whatever prints or renders them gets structured data.

IMPORTANT: No matching records is a normal outcome. It yields an
EmptyReport for every variant instead of raising.
"""

from datetime import date
from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Union

from factory_ledger.config import get_settings
from factory_ledger.logs import get_logger
from factory_ledger.models.expense import BOTH_FACTORIES, Expense
from factory_ledger.models.report import (
    BankReport,
    CategoryLine,
    DeclarationBlock,
    EmptyReport,
    ExpenseLine,
    ReceiptSummary,
    Report,
    ReportHeader,
    ReportKind,
    RevenueOfficeReport,
    StandardReport,
    TaxBucketLine,
)
from factory_ledger.queries.aggregator import (
    factory_label,
    group_by_category,
    group_by_category_with_counts,
    select_for_report,
    sum_amount,
)
from factory_ledger.reports.formatting import format_category, format_file_size, period_label


# Expense category -> revenue office tax category
TAX_CATEGORIES = {
    "raw-materials": "Cost of Goods Sold",
    "labor": "Employee Costs",
    "utilities": "Utilities & Services",
    "rent": "Rent & Property Expenses",
    "equipment": "Depreciation & Equipment",
    "transportation": "Transport & Logistics",
    "maintenance": "Maintenance & Repairs",
    "insurance": "Insurance Premiums",
    "administrative": "Administrative Expenses",
    "taxes": "Taxes & Government Fees",
    "other": "Other Operating Expenses",
}
FALLBACK_TAX_CATEGORY = "Other Operating Expenses"

GROUP_LOCATION_LINE = "Matsapha & Matsanjeni, Eswatini"
TAX_REGISTRATION_PLACEHOLDER = "[To be filled]"

SIGNATURE_LINES = [
    "Signature: ___________________________ Date: _______________",
    "Name: _____________________________",
    "Position: __________________________",
]

_CENT = Decimal("0.01")
_TENTH = Decimal("0.1")


def tax_category_for(category: str) -> str:
    """Tax category of an expense category; unknown categories fall back to the catch-all."""
    return TAX_CATEGORIES.get(category, FALLBACK_TAX_CATEGORY)


def _percentage(part: Union[Decimal, int], whole: Union[Decimal, int]) -> float:
    value = Decimal(part) / Decimal(whole) * 100
    return float(value.quantize(_TENTH, rounding=ROUND_HALF_UP))


def apportion_percentages(parts: list[Decimal], whole: Decimal) -> list[float]:
    """
    One-decimal percentages of `whole` that add up to exactly 100.0.

    Every share is floored to a tenth, then the leftover tenths go to the
    shares with the largest remainders. Equal remainders favour the
    earlier share.
    """
    exact = [Decimal(part) * 1000 / Decimal(whole) for part in parts]
    tenths = [int(value.to_integral_value(rounding=ROUND_FLOOR)) for value in exact]
    leftover = 1000 - sum(tenths)

    by_remainder = sorted(range(len(parts)), key=lambda i: exact[i] - tenths[i], reverse=True)
    for i in by_remainder[:leftover]:
        tenths[i] += 1

    return [tenths_value / 10 for tenths_value in tenths]


def count_receipts(expenses: Iterable[Expense]) -> int:
    return sum(e.attachment_count for e in expenses)


def build_receipt_summary(expenses: list[Expense]) -> ReceiptSummary:
    """Receipt documentation footer for a non-empty list of records."""
    documented = sum(1 for e in expenses if e.has_attachments)
    storage = sum(e.attachment_bytes for e in expenses)

    return ReceiptSummary(
        total_receipts=count_receipts(expenses),
        documented_expenses=documented,
        documentation_rate=_percentage(documented, len(expenses)),
        total_storage_bytes=storage,
        total_storage_label=format_file_size(storage),
    )


class ReportGenerator:
    """
    Produces report models from a set of expenses.

    Usage:
        generator = ReportGenerator()
        report = generator.generate("bank", ledger.expenses, "investments", month=3, year=2024)
    """

    def __init__(self):
        self._settings = get_settings().app
        self._logger = get_logger(__name__)

    def generate(
        self,
        kind: Union[ReportKind, str],
        expenses: Iterable[Expense],
        factory_filter: Optional[str] = BOTH_FACTORIES,
        month: Optional[int] = None,
        year: Optional[int] = None,
        generated_on: Optional[date] = None,
    ) -> Report:
        """
        Select the matching records and build one report.

        Args:
            kind: standard, bank or revenue-office
            expenses: The ledger contents
            factory_filter: A factory id or "both"
            month: 1-12, or None for all months
            year: Calendar year, or None for all years
            generated_on: Date stamped on the report, defaults to today

        Returns:
            The report model, or EmptyReport when nothing matches

        Raises:
            ValueError: On an unknown kind, factory filter or month
        """
        kind = ReportKind(kind)
        generated_on = generated_on or date.today()
        factory_filter = factory_filter or BOTH_FACTORIES
        selected = select_for_report(expenses, factory_filter, month=month, year=year)

        if not selected:
            self._logger.info("report_empty", kind=kind.value, factory=factory_filter, month=month, year=year)
            return EmptyReport(kind=kind)

        if kind == ReportKind.STANDARD:
            report = self._standard(selected, factory_filter, month, year, generated_on)
        elif kind == ReportKind.BANK:
            report = self._bank(selected, factory_filter, month, year, generated_on)
        else:
            report = self._revenue_office(selected, factory_filter, month, year, generated_on)

        self._logger.info(
            "report_generated",
            kind=kind.value,
            factory=factory_filter,
            month=month,
            year=year,
            expense_count=len(selected),
        )
        return report

    # =========================================================================
    # VARIANTS
    # =========================================================================

    def _standard(
        self,
        expenses: list[Expense],
        factory_filter: str,
        month: Optional[int],
        year: Optional[int],
        generated_on: date,
    ) -> StandardReport:
        total = sum_amount(expenses)
        counts = group_by_category_with_counts(expenses)
        totals = group_by_category(expenses)
        percentages = apportion_percentages(list(totals.values()), total)

        categories = [
            CategoryLine(
                category=category,
                label=format_category(category),
                total=amount,
                count=counts[category].count,
                percentage=percentage,
            )
            for (category, amount), percentage in zip(totals.items(), percentages)
        ]

        details = [
            ExpenseLine(
                expense_id=e.id,
                date=e.date,
                description=e.description,
                category=e.category,
                category_label=format_category(e.category),
                factory_location=e.factory.location,
                vendor=e.vendor or "-",
                receipt_count=e.attachment_count,
                amount=e.amount,
            )
            for e in expenses
        ]

        header = ReportHeader(
            title="Expense Report",
            subtitle=self._settings.group_name,
            entity_name=factory_label(factory_filter),
            period_label=period_label(month, year),
            generated_on=generated_on,
        )

        return StandardReport(
            header=header,
            total=total,
            transaction_count=len(expenses),
            average_transaction=(total / len(expenses)).quantize(_CENT, rounding=ROUND_HALF_UP),
            categories=categories,
            details=details,
            receipts=build_receipt_summary(expenses),
        )

    def _bank(
        self,
        expenses: list[Expense],
        factory_filter: str,
        month: Optional[int],
        year: Optional[int],
        generated_on: date,
    ) -> BankReport:
        categories = [
            CategoryLine(
                category=category,
                label=format_category(category),
                total=stats.total,
                count=stats.count,
            )
            for category, stats in group_by_category_with_counts(expenses).items()
        ]

        statement = (
            f"This report has been generated by {self._settings.app_name} and represents "
            f"actual business expenses for the specified period. All amounts are in "
            f"Emalangeni ({self._settings.currency_symbol}). Supporting documentation "
            f"(receipts/invoices) is available for {count_receipts(expenses)} transactions."
        )

        header = ReportHeader(
            title="Bank Financial Statement",
            entity_name=factory_label(
                factory_filter, both_label=f"{self._settings.group_name} (Consolidated)"
            ),
            location_line=GROUP_LOCATION_LINE,
            period_label=period_label(month, year, default_year=generated_on.year),
            generated_on=generated_on,
        )

        return BankReport(
            header=header,
            total=sum_amount(expenses),
            transaction_count=len(expenses),
            categories=categories,
            statement=statement,
            receipts=build_receipt_summary(expenses),
        )

    def _revenue_office(
        self,
        expenses: list[Expense],
        factory_filter: str,
        month: Optional[int],
        year: Optional[int],
        generated_on: date,
    ) -> RevenueOfficeReport:
        buckets: dict[str, TaxBucketLine] = {}
        for e in expenses:
            name = tax_category_for(e.category)
            line = buckets.setdefault(name, TaxBucketLine(tax_category=name, total=Decimal("0"), document_count=0))
            line.total += e.amount
            line.document_count += 1

        entity = factory_label(factory_filter, both_label=self._settings.group_name)
        declaration = DeclarationBlock(
            text=(
                "I hereby declare that the information provided in this report is true and "
                "correct to the best of my knowledge. All expenses listed are legitimate business "
                f"expenses incurred in the ordinary course of business operations of {entity}. "
                "Supporting documentation (receipts and invoices) totaling "
                f"{count_receipts(expenses)} files is available for inspection upon request."
            ),
            signature_lines=list(SIGNATURE_LINES),
        )

        header = ReportHeader(
            title="Eswatini Revenue Service",
            subtitle="Business Expense Declaration",
            entity_name=entity,
            tax_registration=TAX_REGISTRATION_PLACEHOLDER,
            period_label=period_label(month, year, default_year=generated_on.year),
            generated_on=generated_on,
        )

        return RevenueOfficeReport(
            header=header,
            total_deductible=sum_amount(expenses),
            tax_categories=sorted(buckets.values(), key=lambda line: line.total, reverse=True),
            declaration=declaration,
            receipts=build_receipt_summary(expenses),
        )

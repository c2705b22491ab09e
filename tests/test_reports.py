"""
Tests for report generation and display formatting
"""

from datetime import date
from decimal import Decimal

import pytest

from factory_ledger.models import (
    BankReport,
    EmptyReport,
    ReportKind,
    RevenueOfficeReport,
    StandardReport,
)
from factory_ledger.reports import (
    FALLBACK_TAX_CATEGORY,
    TAX_CATEGORIES,
    ReportGenerator,
    apportion_percentages,
    build_receipt_summary,
    format_amount,
    format_category,
    format_date,
    format_file_size,
    period_label,
    tax_category_for,
)


TODAY = date(2024, 4, 2)


@pytest.fixture
def generator():
    return ReportGenerator()


@pytest.fixture
def two_expenses(make_expense, make_attachment):
    return [
        make_expense("100.00", "labor", "investments", date(2024, 3, 1), attachments=[make_attachment()]),
        make_expense("50.00", "raw-materials", "textiles", date(2024, 3, 9), vendor="Mill"),
    ]


class TestFormatting:
    """Tests for display helpers."""

    def test_file_size(self):
        """Test 1024-based sizes with trailing zeros dropped."""
        assert format_file_size(0) == "0 Bytes"
        assert format_file_size(500) == "500 Bytes"
        assert format_file_size(1536) == "1.5 KB"
        assert format_file_size(5 * 1024 * 1024) == "5 MB"
        assert format_file_size(1234567) == "1.18 MB"

    def test_category(self):
        """Test slugs become title case words."""
        assert format_category("raw-materials") == "Raw Materials"
        assert format_category("labor") == "Labor"

    def test_period_label(self):
        """Test month and year labels."""
        assert period_label(3, 2024) == "March 2024"
        assert period_label(None, None) == "All Months All Years"
        assert period_label(None, None, default_year=2024) == "All Months 2024"

    def test_amount_and_date(self):
        """Test currency and date formatting."""
        assert format_amount(Decimal("1234.5")) == "E 1,234.50"
        assert format_date(date(2024, 3, 9)) == "09/03/2024"


class TestStandardReport:
    """Tests for the full expense report."""

    def test_totals_and_average(self, generator, two_expenses):
        """Test 100 + 50 gives total 150 and average 75."""
        report = generator.generate("standard", two_expenses, "both", generated_on=TODAY)

        assert isinstance(report, StandardReport)
        assert report.total == Decimal("150.00")
        assert report.transaction_count == 2
        assert report.average_transaction == Decimal("75.00")
        assert report.header.entity_name == "Both Factories"
        assert report.header.period_label == "All Months All Years"

    def test_percentages_sum_to_hundred(self, generator, make_expense):
        """Test rounded category percentages add up to 100."""
        records = [
            make_expense("33.33", "labor"),
            make_expense("33.33", "rent"),
            make_expense("33.34", "taxes"),
        ]
        report = generator.generate(ReportKind.STANDARD, records, generated_on=TODAY)
        total = sum(line.percentage for line in report.categories)
        assert abs(total - 100.0) <= 0.1

    def test_percentages_sum_with_eleven_categories(self, generator, make_expense):
        """Test many half-tenth shares still add up to exactly 100.0."""
        categories = list(TAX_CATEGORIES)
        records = [make_expense("935.00", category) for category in categories[:10]]
        records.append(make_expense("650.00", categories[10]))

        report = generator.generate("standard", records, generated_on=TODAY)
        percentages = [line.percentage for line in report.categories]

        assert round(sum(percentages), 1) == 100.0
        assert percentages == [9.4] * 5 + [9.3] * 5 + [6.5]

    def test_apportion_equal_thirds(self):
        """Test the spare tenth goes to the first of equal shares."""
        parts = [Decimal("1"), Decimal("1"), Decimal("1")]
        assert apportion_percentages(parts, Decimal("3")) == [33.4, 33.3, 33.3]
        assert apportion_percentages([Decimal("5")], Decimal("5")) == [100.0]

    def test_categories_sorted_by_amount(self, generator, two_expenses):
        """Test the largest category comes first with its percentage."""
        report = generator.generate("standard", two_expenses, generated_on=TODAY)
        assert [(c.label, c.percentage) for c in report.categories] == [
            ("Labor", 66.7),
            ("Raw Materials", 33.3),
        ]

    def test_detail_rows(self, generator, two_expenses):
        """Test detail rows are newest first with location and vendor."""
        report = generator.generate("standard", two_expenses, generated_on=TODAY)
        first, second = report.details
        assert first.date == date(2024, 3, 9)
        assert first.factory_location == "Matsanjeni"
        assert first.vendor == "Mill"
        assert second.vendor == "-"
        assert second.receipt_count == 1

    def test_single_factory_filter(self, generator, two_expenses):
        """Test filtering to one factory."""
        report = generator.generate("standard", two_expenses, "investments", month=3, year=2024, generated_on=TODAY)
        assert report.total == Decimal("100.00")
        assert report.header.entity_name == "SS Mudyf Investments (PTY) ltd"
        assert report.header.period_label == "March 2024"


class TestBankReport:
    """Tests for the bank financial statement."""

    def test_consolidated_header(self, generator, two_expenses):
        """Test the both filter reads as the consolidated group."""
        report = generator.generate("bank", two_expenses, "both", generated_on=TODAY)

        assert isinstance(report, BankReport)
        assert report.header.entity_name == "SS Mudyf Group (Consolidated)"
        assert report.header.location_line == "Matsapha & Matsanjeni, Eswatini"
        assert report.header.period_label == "All Months 2024"

    def test_counts_and_statement(self, generator, two_expenses):
        """Test category counts and the receipt count in the statement."""
        report = generator.generate("bank", two_expenses, generated_on=TODAY)
        assert [(c.category, c.count) for c in report.categories] == [("labor", 1), ("raw-materials", 1)]
        assert report.statement.endswith("is available for 1 transactions.")
        assert "Emalangeni (E)" in report.statement


class TestRevenueOfficeReport:
    """Tests for the tax declaration."""

    def test_tax_buckets(self, generator, make_expense):
        """Test categories map to tax buckets with document counts."""
        records = [
            make_expense("40", "labor"),
            make_expense("60", "labor"),
            make_expense("20", "rent"),
        ]
        report = generator.generate("revenue-office", records, generated_on=TODAY)

        assert isinstance(report, RevenueOfficeReport)
        assert report.total_deductible == Decimal("120")
        assert [(b.tax_category, b.total, b.document_count) for b in report.tax_categories] == [
            ("Employee Costs", Decimal("100"), 2),
            ("Rent & Property Expenses", Decimal("20"), 1),
        ]

    def test_unknown_category_falls_back(self, generator, make_expense):
        """Test unmapped categories land in the catch-all bucket."""
        records = [make_expense("10", "marketing"), make_expense("5", "other")]
        report = generator.generate("revenue-office", records, generated_on=TODAY)
        assert len(report.tax_categories) == 1
        assert report.tax_categories[0].tax_category == FALLBACK_TAX_CATEGORY
        assert report.tax_categories[0].document_count == 2

    def test_tax_table(self):
        """Test the eleven mappings."""
        assert len(TAX_CATEGORIES) == 11
        assert tax_category_for("raw-materials") == "Cost of Goods Sold"
        assert tax_category_for("unknown") == "Other Operating Expenses"

    def test_declaration(self, generator, two_expenses):
        """Test the header and declaration block."""
        report = generator.generate("revenue-office", two_expenses, generated_on=TODAY)
        assert report.header.title == "Eswatini Revenue Service"
        assert report.header.subtitle == "Business Expense Declaration"
        assert report.header.tax_registration == "[To be filled]"
        assert "operations of SS Mudyf Group." in report.declaration.text
        assert "totaling 1 files" in report.declaration.text
        assert len(report.declaration.signature_lines) == 3


class TestEmptyAndReceipts:
    """Tests for empty results and the receipt footer."""

    @pytest.mark.parametrize("kind", list(ReportKind))
    def test_empty_input(self, generator, kind):
        """Test no records yields an EmptyReport for every kind."""
        report = generator.generate(kind, [], "both", generated_on=TODAY)
        assert isinstance(report, EmptyReport)
        assert report.kind == kind

    def test_filters_can_empty_the_report(self, generator, two_expenses):
        """Test a period with no records is empty, not an error."""
        report = generator.generate("bank", two_expenses, "both", month=7, year=2020, generated_on=TODAY)
        assert isinstance(report, EmptyReport)

    def test_unknown_kind(self, generator, two_expenses):
        """Test an unknown report kind is refused."""
        with pytest.raises(ValueError):
            generator.generate("weekly", two_expenses)

    def test_receipt_summary(self, two_expenses):
        """Test documentation rate and storage."""
        summary = build_receipt_summary(two_expenses)
        assert summary.total_receipts == 1
        assert summary.documented_expenses == 1
        assert summary.documentation_rate == 50.0
        assert summary.total_storage_bytes == two_expenses[0].attachment_bytes
        assert summary.total_storage_label.endswith("Bytes")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

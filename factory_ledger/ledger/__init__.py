"""Expense ledger package."""

from factory_ledger.ledger.ledger import (
    ExpenseLedger,
    parse_company_settings,
    parse_expense_records,
)
from factory_ledger.ledger.transfer import (
    DataTransferService,
    DialogResult,
    FileDialog,
    ImportSummary,
)

__all__ = [
    "DataTransferService",
    "DialogResult",
    "ExpenseLedger",
    "FileDialog",
    "ImportSummary",
    "parse_company_settings",
    "parse_expense_records",
]

"""
Data Models Package

This package contains all Pydantic models used in Factory Ledger.
All data flowing through the system must conform to these schemas.
"""

from factory_ledger.models.expense import (
    BOTH_FACTORIES,
    FACTORIES,
    MAX_ATTACHMENTS_PER_RECORD,
    CommitResult,
    CompanySettings,
    Expense,
    ExpenseCategory,
    ExpenseDraft,
    Factory,
    ValidationIssue,
    ValidationResult,
)
from factory_ledger.models.receipt import (
    Attachment,
    AttachmentBatchResult,
    ReceiptFile,
    ReceiptIssueType,
    ReceiptValidation,
)
from factory_ledger.models.report import (
    BankReport,
    CategoryLine,
    CategoryStats,
    DashboardSnapshot,
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

__all__ = [
    # Expense models
    "BOTH_FACTORIES",
    "FACTORIES",
    "MAX_ATTACHMENTS_PER_RECORD",
    "CommitResult",
    "CompanySettings",
    "Expense",
    "ExpenseCategory",
    "ExpenseDraft",
    "Factory",
    "ValidationIssue",
    "ValidationResult",
    # Receipt models
    "Attachment",
    "AttachmentBatchResult",
    "ReceiptFile",
    "ReceiptIssueType",
    "ReceiptValidation",
    # Report models
    "BankReport",
    "CategoryLine",
    "CategoryStats",
    "DashboardSnapshot",
    "DeclarationBlock",
    "EmptyReport",
    "ExpenseLine",
    "ReceiptSummary",
    "Report",
    "ReportHeader",
    "ReportKind",
    "RevenueOfficeReport",
    "StandardReport",
    "TaxBucketLine",
]

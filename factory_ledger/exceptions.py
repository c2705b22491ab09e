"""
Error Taxonomy for Factory Ledger

Every error raised by the ledger, the receipt subsystem and the import
path derives from LedgerError. None of them is fatal: callers catch them
at the operation boundary and show `message` to the user.

Each class carries a short `category` string so a UI can pick an icon
or colour without isinstance chains.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from factory_ledger.models.expense import CommitResult, ValidationIssue


class LedgerError(Exception):
    """Base exception for all ledger operations."""

    category = "ledger_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ExpenseValidationError(LedgerError):
    """An expense field failed validation. No state was changed."""

    category = "validation"

    def __init__(self, issues: list["ValidationIssue"]):
        self.issues = list(issues)
        summary = "; ".join(f"{i.field}: {i.message}" for i in self.issues)
        super().__init__(f"Invalid expense - {summary}" if summary else "Invalid expense")

    @property
    def fields(self) -> list[str]:
        """Names of the fields with errors, in report order."""
        return [issue.field for issue in self.issues]


class CapacityExceededError(LedgerError):
    """The attachment set is full."""

    category = "capacity_exceeded"

    def __init__(self, limit: int, filename: Optional[str] = None):
        self.limit = limit
        self.filename = filename
        super().__init__(f"Maximum {limit} receipts allowed per expense")


class ReceiptReadError(LedgerError):
    """A receipt file could not be read."""

    category = "read_error"

    def __init__(self, filename: str, reason: str):
        self.filename = filename
        self.reason = reason
        super().__init__(f"Failed to process {filename}: {reason}")


class ExpenseNotFoundError(LedgerError):
    """No expense with the requested id exists in the ledger."""

    category = "not_found"

    def __init__(self, expense_id: str):
        self.expense_id = expense_id
        super().__init__(f"Expense not found: {expense_id}")


class InvalidImportFormatError(LedgerError):
    """An import payload does not match the backup schema. Ledger untouched."""

    category = "invalid_import_format"

    def __init__(self, detail: str = ""):
        self.detail = detail
        message = "Invalid data format - not a valid SS Mudyf backup file"
        super().__init__(f"{message} ({detail})" if detail else message)


class PersistenceSyncError(LedgerError):
    """
    Writing the ledger to storage failed after an in-memory change.

    The in-memory change is NOT rolled back. Call ExpenseLedger.commit()
    again to retry.
    """

    category = "persistence_sync"

    def __init__(self, result: "CommitResult"):
        self.result = result
        super().__init__(f"Changes kept in memory but not saved: {result.error_message}")

"""
Two-Stage Expense Validation

STAGE 1 - REQUIRED FIELDS:
- date, factory, category, description and amount present
- amount greater than zero

STAGE 2 - SEMANTIC CHECKS:
- factory is one of the two known factories
- receipt count within the per-expense limit
- receipt names unique
- field lengths and formats (delegated to the Expense model)

Stage 2 only runs when stage 1 passes, so the user first sees the
plain "please fill in" messages before anything more specific.

IMPORTANT: Validation NEVER silently fixes issues.
It reports them, field by field, for the user to correct.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import ValidationError

from factory_ledger.models.expense import (
    FACTORIES,
    MAX_ATTACHMENTS_PER_RECORD,
    Expense,
    ExpenseDraft,
    ValidationIssue,
    ValidationResult,
)


REQUIRED_FIELDS = {
    "date": "Date",
    "factory_id": "Factory",
    "category": "Category",
    "description": "Description",
    "amount": "Amount",
}


def issues_from_pydantic(exc: ValidationError, prefix: str = "") -> list[ValidationIssue]:
    """Translate a pydantic ValidationError into ValidationIssue objects."""
    issues = []
    for error in exc.errors():
        loc = ".".join(str(part) for part in error.get("loc", ()))
        field = f"{prefix}{loc}" if loc else (prefix.rstrip(".") or "record")
        issues.append(ValidationIssue(
            field=field,
            issue_type=error.get("type", "invalid_value"),
            message=error.get("msg", "Invalid value"),
            severity="error",
        ))
    return issues


class ExpenseValidator:
    """Validates expense drafts before they enter the ledger."""

    def __init__(self, max_attachments: int = MAX_ATTACHMENTS_PER_RECORD):
        self._max_attachments = max_attachments

    def _validate_required(self, draft: ExpenseDraft) -> list[ValidationIssue]:
        """Stage 1: presence of required fields and a positive amount."""
        issues = []

        for field, label in REQUIRED_FIELDS.items():
            if getattr(draft, field) is None:
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="missing",
                    message=f"{label} is required",
                ))

        if draft.amount is not None and draft.amount <= Decimal("0"):
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be greater than 0",
            ))

        return issues

    def _validate_semantic(self, draft: ExpenseDraft) -> list[ValidationIssue]:
        """Stage 2: cross-field and reference data checks."""
        issues = []

        if draft.factory_id not in FACTORIES:
            issues.append(ValidationIssue(
                field="factory_id",
                issue_type="unknown_factory",
                message=f"Unknown factory: {draft.factory_id}",
            ))

        if len(draft.attachments) > self._max_attachments:
            issues.append(ValidationIssue(
                field="attachments",
                issue_type="too_many_receipts",
                message=f"Maximum {self._max_attachments} receipts allowed per expense",
            ))

        names = [a.name for a in draft.attachments]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            issues.append(ValidationIssue(
                field="attachments",
                issue_type="duplicate_receipt_name",
                message=f"Receipt names must be unique: {', '.join(duplicates)}",
            ))

        return issues

    def validate(
        self,
        draft: ExpenseDraft,
        expense_id: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> ValidationResult:
        """
        Run the validation pipeline and build the Expense if clean.

        Args:
            draft: The form input
            expense_id: Keep this id (used by in-place updates)
            created_at: Keep this creation time (used by in-place updates)

        Returns:
            ValidationResult; `expense` is set only when is_valid
        """
        issues = self._validate_required(draft)
        if issues:
            return ValidationResult(is_valid=False, issues=issues)

        issues = self._validate_semantic(draft)
        if issues:
            return ValidationResult(is_valid=False, issues=issues)

        fields = draft.model_dump(exclude_none=True)
        fields["attachments"] = list(draft.attachments)
        if expense_id is not None:
            fields["id"] = expense_id
        if created_at is not None:
            fields["created_at"] = created_at

        try:
            expense = Expense(**fields)
        except ValidationError as e:
            return ValidationResult(is_valid=False, issues=issues_from_pydantic(e))

        return ValidationResult(is_valid=True, expense=expense)

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """Summary of validation results suitable for a notification."""
        if result.is_valid:
            return "All checks passed."

        missing = [i for i in result.issues if i.issue_type == "missing"]
        if missing:
            return "Please fill in all required fields: " + ", ".join(
                REQUIRED_FIELDS.get(i.field, i.field) for i in missing
            )

        return "\n".join(f"• {issue.message}" for issue in result.issues)

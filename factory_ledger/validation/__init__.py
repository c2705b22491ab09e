"""Expense validation package."""

from factory_ledger.validation.validator import ExpenseValidator, issues_from_pydantic

__all__ = ["ExpenseValidator", "issues_from_pydantic"]

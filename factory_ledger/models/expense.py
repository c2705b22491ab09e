"""
Core Data Models for Factory Ledger

These models define the schemas for everything the ledger stores:
1. Factories (static reference data)
2. Expenses and their attachments
3. Company settings
4. Validation and commit results

DESIGN DECISION: Form input (ExpenseDraft) is permissive and the stored
record (Expense) is strict. The validator turns a draft into a list of
field-level issues, and only a clean draft becomes an Expense. Imported
records go straight through the strict model.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from factory_ledger.models.receipt import Attachment


MAX_ATTACHMENTS_PER_RECORD = 10

# Factory filter value meaning "do not filter"
BOTH_FACTORIES = "both"


# =============================================================================
# REFERENCE DATA
# =============================================================================

class Factory(BaseModel):
    """One of the two production sites an expense is attributed to."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    location: str


FACTORIES: dict[str, Factory] = {
    "investments": Factory(
        id="investments",
        name="SS Mudyf Investments (PTY) ltd",
        location="Matsapha",
    ),
    "textiles": Factory(
        id="textiles",
        name="SS Mudyf Textiles (PTY) ltd",
        location="Matsanjeni",
    ),
}


class ExpenseCategory(str, Enum):
    """
    Known expense categories.

    DESIGN DECISION: Expense.category stays a plain string so records
    imported from older backups with unknown categories still load.
    Reports map unknown values to a catch-all bucket.
    """
    RAW_MATERIALS = "raw-materials"
    LABOR = "labor"
    UTILITIES = "utilities"
    RENT = "rent"
    EQUIPMENT = "equipment"
    TRANSPORTATION = "transportation"
    MAINTENANCE = "maintenance"
    INSURANCE = "insurance"
    ADMINISTRATIVE = "administrative"
    TAXES = "taxes"
    OTHER = "other"


def _new_expense_id() -> str:
    return uuid4().hex


def _blank_to_none(v: Optional[str]) -> Optional[str]:
    if isinstance(v, str) and not v.strip():
        return None
    return v


# =============================================================================
# EXPENSE MODELS
# =============================================================================

class ExpenseDraft(BaseModel):
    """
    Expense form input, before validation.

    Every field is optional because a half-filled form is still a
    valid draft. ExpenseValidator decides whether it can be saved.
    """
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    date: Optional[dt.date] = None
    factory_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("factory_id", "factoryId", "factory"),
    )
    category: Optional[str] = None
    description: Optional[str] = None
    amount: Optional[Decimal] = None
    reference: Optional[str] = None
    vendor: Optional[str] = None
    attachments: list[Attachment] = Field(
        default_factory=list,
        validation_alias=AliasChoices("attachments", "receipts"),
    )

    @field_validator("factory_id", "category", "description", "reference", "vendor")
    @classmethod
    def blank_is_missing(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)


class Expense(BaseModel):
    """
    A stored expense record.

    CRITICAL: Every Expense in the ledger satisfies these invariants:
    - amount > 0
    - date, factory_id, category, description present
    - factory_id is one of FACTORIES
    - at most MAX_ATTACHMENTS_PER_RECORD attachments, names unique

    Accepts the key names used by backups of the original desktop app
    (factory, receipts, timestamp) as well as the field names.
    """
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    id: str = Field(
        default_factory=_new_expense_id,
        min_length=1,
        description="Unique expense ID"
    )
    date: dt.date = Field(
        ...,
        description="Date the expense was incurred"
    )
    factory_id: str = Field(
        ...,
        validation_alias=AliasChoices("factory_id", "factoryId", "factory"),
        description="Factory the expense is attributed to"
    )
    category: str = Field(
        ...,
        min_length=1,
        description="Expense category (usually an ExpenseCategory value)"
    )
    description: str = Field(
        ...,
        min_length=1,
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount in Emalangeni"
    )
    reference: Optional[str] = Field(
        default=None,
        description="Invoice or receipt number"
    )
    vendor: Optional[str] = Field(
        default=None,
    )
    attachments: list[Attachment] = Field(
        default_factory=list,
        validation_alias=AliasChoices("attachments", "receipts"),
    )
    created_at: dt.datetime = Field(
        default_factory=dt.datetime.now,
        validation_alias=AliasChoices("created_at", "createdAt", "timestamp"),
        description="When the record was first saved"
    )

    @field_validator("reference", "vendor", mode="before")
    @classmethod
    def blank_is_none(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)

    @field_validator("factory_id")
    @classmethod
    def validate_factory(cls, v: str) -> str:
        if v not in FACTORIES:
            raise ValueError(f"Unknown factory: {v}")
        return v

    @model_validator(mode="after")
    def validate_attachments(self) -> "Expense":
        if len(self.attachments) > MAX_ATTACHMENTS_PER_RECORD:
            raise ValueError(
                f"At most {MAX_ATTACHMENTS_PER_RECORD} receipts allowed per expense"
            )
        names = [a.name for a in self.attachments]
        if len(names) != len(set(names)):
            raise ValueError("Receipt names must be unique within an expense")
        return self

    @property
    def factory(self) -> Factory:
        return FACTORIES[self.factory_id]

    @property
    def attachment_count(self) -> int:
        return len(self.attachments)

    @property
    def has_attachments(self) -> bool:
        return bool(self.attachments)

    @property
    def attachment_bytes(self) -> int:
        return sum(a.size_bytes for a in self.attachments)


class CompanySettings(BaseModel):
    """Company details shown on reports. Persisted next to the expenses."""
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    company_name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("company_name", "companyName"),
    )
    company_address: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("company_address", "companyAddress"),
    )
    company_contact: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("company_contact", "companyContact"),
    )

    @property
    def is_empty(self) -> bool:
        return not any((self.company_name, self.company_address, self.company_contact))


# =============================================================================
# VALIDATION AND COMMIT RESULTS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'unknown_factory')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning|info)$",
    )


class ValidationResult(BaseModel):
    """Result of validating an expense draft."""

    is_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)
    expense: Optional[Expense] = Field(
        default=None,
        description="The validated record, present only when is_valid"
    )

    @property
    def has_errors(self) -> bool:
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == "error")


class CommitResult(BaseModel):
    """Outcome of writing the ledger to the document store."""

    success: bool
    committed_at: dt.datetime = Field(default_factory=dt.datetime.now)
    expense_count: int = Field(ge=0)
    error_message: Optional[str] = None

"""
Expense Ledger

The authoritative, ordered collection of expense records.

DESIGN DECISIONS:
1. The ledger is an explicitly owned object with a lifecycle
   (init -> mutations -> teardown), injected into whatever needs it.
2. Newest-first is the canonical order: add() prepends.
3. Edits happen in place via update(), keeping the id, the creation
   time and the position of the record.
4. Every mutation ends with commit(), which writes the expense
   collection and the settings document wholesale.

CRITICAL: A failed commit does NOT roll back the in-memory change.
The mutation raises PersistenceSyncError; the caller can retry with
commit() once storage is available again.
"""

from collections.abc import Mapping
from datetime import datetime
from typing import Any, Iterator, Optional, Union

from pydantic import ValidationError

from factory_ledger.config import get_settings
from factory_ledger.exceptions import (
    ExpenseNotFoundError,
    ExpenseValidationError,
    InvalidImportFormatError,
    PersistenceSyncError,
)
from factory_ledger.logs import get_logger
from factory_ledger.models.expense import (
    CommitResult,
    CompanySettings,
    Expense,
    ExpenseDraft,
)
from factory_ledger.services.storage import DocumentStore, StorageError
from factory_ledger.validation import ExpenseValidator, issues_from_pydantic


DraftInput = Union[ExpenseDraft, Mapping[str, Any]]


def parse_expense_records(records: Any) -> list[Expense]:
    """
    Schema-check a raw sequence of expense objects.

    Nothing is committed anywhere; this only turns JSON-shaped data into
    Expense models or explains why it cannot.

    Raises:
        InvalidImportFormatError: If `records` is not a list of valid,
                                  uniquely identified expense objects
    """
    if not isinstance(records, list):
        raise InvalidImportFormatError(
            f"expenses must be an array, got {type(records).__name__}"
        )

    parsed = []
    seen_ids = set()
    for index, raw in enumerate(records):
        if not isinstance(raw, Mapping):
            raise InvalidImportFormatError(f"expense #{index + 1} is not an object")
        try:
            expense = Expense.model_validate(raw)
        except ValidationError as e:
            first = issues_from_pydantic(e)[0]
            raise InvalidImportFormatError(
                f"expense #{index + 1}: {first.field}: {first.message}"
            )
        if expense.id in seen_ids:
            raise InvalidImportFormatError(f"duplicate expense id {expense.id}")
        seen_ids.add(expense.id)
        parsed.append(expense)

    return parsed


def parse_company_settings(raw: Any) -> CompanySettings:
    """
    Schema-check a raw settings document. None means "no settings".

    Raises:
        InvalidImportFormatError: If the document is not a settings object
    """
    if raw is None:
        return CompanySettings()
    if not isinstance(raw, Mapping):
        raise InvalidImportFormatError("settings must be an object")
    try:
        return CompanySettings.model_validate(raw)
    except ValidationError as e:
        first = issues_from_pydantic(e)[0]
        raise InvalidImportFormatError(f"settings: {first.field}: {first.message}")


class ExpenseLedger:
    """
    In-memory expense collection with write-through to a DocumentStore.

    Usage:
        ledger = ExpenseLedger(store).init()
        expense = ledger.add({"date": "2024-03-01", ...})
        ...
        ledger.teardown()
    """

    def __init__(
        self,
        store: DocumentStore,
        validator: Optional[ExpenseValidator] = None,
        expenses_key: Optional[str] = None,
        settings_key: Optional[str] = None,
    ):
        storage_settings = get_settings().storage
        self._store = store
        self._validator = validator or ExpenseValidator()
        self._expenses_key = expenses_key or storage_settings.expenses_key
        self._settings_key = settings_key or storage_settings.settings_key
        self._expenses: list[Expense] = []
        self._settings = CompanySettings()
        self._initialized = False
        self._logger = get_logger(__name__)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def init(self, loaded: Optional[Mapping[str, Any]] = None) -> "ExpenseLedger":
        """
        Load the ledger.

        Args:
            loaded: Optional pre-loaded state {"expenses": [...], "settings": {...}}.
                    When omitted both documents are read from the store.

        Returns:
            self, for chaining

        Raises:
            InvalidImportFormatError: If the stored documents do not match the schema
            StorageError: If the store cannot be read
        """
        if loaded is None:
            raw_expenses = self._store.load(self._expenses_key)
            raw_settings = self._store.load(self._settings_key)
        else:
            raw_expenses = loaded.get("expenses")
            raw_settings = loaded.get("settings")

        self._expenses = parse_expense_records(raw_expenses if raw_expenses is not None else [])
        self._settings = parse_company_settings(raw_settings)
        self._initialized = True

        self._logger.info("ledger_loaded", expense_count=len(self._expenses))
        return self

    def teardown(self) -> CommitResult:
        """Final sync before the ledger is discarded."""
        result = self.commit()
        self._logger.info("ledger_teardown", success=result.success)
        return result

    # =========================================================================
    # READ ACCESS
    # =========================================================================

    def __len__(self) -> int:
        return len(self._expenses)

    def __iter__(self) -> Iterator[Expense]:
        return iter(tuple(self._expenses))

    @property
    def expenses(self) -> tuple[Expense, ...]:
        """Snapshot of all records, newest first."""
        return tuple(self._expenses)

    @property
    def settings(self) -> CompanySettings:
        return self._settings

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def find_by_id(self, expense_id: str) -> Expense:
        """
        Look up one record.

        Raises:
            ExpenseNotFoundError: If no record has this id
        """
        for expense in self._expenses:
            if expense.id == expense_id:
                return expense
        raise ExpenseNotFoundError(expense_id)

    def _index_of(self, expense_id: str) -> int:
        for index, expense in enumerate(self._expenses):
            if expense.id == expense_id:
                return index
        raise ExpenseNotFoundError(expense_id)

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def _coerce_draft(self, draft: DraftInput) -> ExpenseDraft:
        if isinstance(draft, ExpenseDraft):
            return draft
        try:
            return ExpenseDraft.model_validate(draft)
        except ValidationError as e:
            raise ExpenseValidationError(issues_from_pydantic(e))

    def _validated(
        self,
        draft: DraftInput,
        expense_id: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> Expense:
        result = self._validator.validate(
            self._coerce_draft(draft),
            expense_id=expense_id,
            created_at=created_at,
        )
        if not result.is_valid:
            self._logger.info(
                "expense_rejected",
                fields=[issue.field for issue in result.issues],
            )
            raise ExpenseValidationError(result.issues)
        return result.expense

    def add(self, draft: DraftInput) -> Expense:
        """
        Validate a draft and prepend it as a new record.

        Raises:
            ExpenseValidationError: On any invalid field (ledger unchanged)
            PersistenceSyncError: If the record was added but not saved
        """
        expense = self._validated(draft)
        self._expenses.insert(0, expense)
        self._logger.info(
            "expense_added",
            expense_id=expense.id,
            factory=expense.factory_id,
            amount=str(expense.amount),
            receipts=expense.attachment_count,
        )
        self._commit_or_raise()
        return expense

    def update(self, expense_id: str, draft: DraftInput) -> Expense:
        """
        Replace the fields of an existing record in place.

        The id, creation time and position in the ledger are kept.

        Raises:
            ExpenseNotFoundError: If the id is unknown
            ExpenseValidationError: On any invalid field (ledger unchanged)
            PersistenceSyncError: If the change was made but not saved
        """
        index = self._index_of(expense_id)
        original = self._expenses[index]
        updated = self._validated(
            draft,
            expense_id=original.id,
            created_at=original.created_at,
        )
        self._expenses[index] = updated
        self._logger.info("expense_updated", expense_id=expense_id)
        self._commit_or_raise()
        return updated

    def remove(self, expense_id: str) -> Expense:
        """
        Delete a record together with its attachments.

        Raises:
            ExpenseNotFoundError: If the id is unknown
            PersistenceSyncError: If the record was removed but not saved
        """
        index = self._index_of(expense_id)
        removed = self._expenses.pop(index)
        self._logger.info(
            "expense_removed",
            expense_id=expense_id,
            receipts=removed.attachment_count,
        )
        self._commit_or_raise()
        return removed

    def replace_all(
        self,
        records: Any,
        settings: Optional[Any] = None,
    ) -> int:
        """
        Atomically replace every record (import / restore).

        The incoming data is fully schema-checked before anything
        changes. When `settings` is given the settings document is
        replaced too.

        Returns:
            Number of records now in the ledger

        Raises:
            InvalidImportFormatError: If the data does not match (ledger unchanged)
            PersistenceSyncError: If the data was replaced but not saved
        """
        parsed = parse_expense_records(records)
        new_settings = parse_company_settings(settings) if settings is not None else None

        previous = len(self._expenses)
        self._expenses = parsed
        if new_settings is not None:
            self._settings = new_settings

        self._logger.info(
            "ledger_replaced",
            previous_count=previous,
            expense_count=len(parsed),
            settings_replaced=new_settings is not None,
        )
        self._commit_or_raise()
        return len(parsed)

    def clear(self) -> int:
        """
        Remove every record and the company settings, as one reset.

        Both storage keys are deleted.

        Returns:
            Number of records deleted

        Raises:
            PersistenceSyncError: If memory was cleared but storage was not
        """
        removed = len(self._expenses)
        self._expenses = []
        self._settings = CompanySettings()

        try:
            self._store.delete(self._expenses_key)
            self._store.delete(self._settings_key)
        except StorageError as e:
            result = CommitResult(success=False, expense_count=0, error_message=str(e))
            self._logger.error("ledger_commit_failed", error=str(e), operation="clear")
            raise PersistenceSyncError(result)

        self._logger.info("ledger_cleared", removed_count=removed)
        return removed

    def update_settings(self, **fields: Any) -> CompanySettings:
        """
        Change company details (name, address, contact).

        Raises:
            ExpenseValidationError: If a value is invalid
            PersistenceSyncError: If the settings changed but were not saved
        """
        merged = {**self._settings.model_dump(), **fields}
        try:
            self._settings = CompanySettings.model_validate(merged)
        except ValidationError as e:
            raise ExpenseValidationError(issues_from_pydantic(e, prefix="settings."))
        self._logger.info("settings_updated", fields=sorted(fields))
        self._commit_or_raise()
        return self._settings

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    def snapshot(self) -> dict[str, Any]:
        """JSON-compatible copy of both documents."""
        return {
            "expenses": [e.model_dump(mode="json") for e in self._expenses],
            "settings": self._settings.model_dump(mode="json", exclude_none=True),
        }

    def commit(self) -> CommitResult:
        """
        Write both documents to the store, replacing what is there.

        Never raises for storage failures; check `success`.
        """
        state = self.snapshot()
        try:
            self._store.save(self._expenses_key, state["expenses"])
            self._store.save(self._settings_key, state["settings"])
        except StorageError as e:
            self._logger.error("ledger_commit_failed", error=str(e))
            return CommitResult(
                success=False,
                expense_count=len(self._expenses),
                error_message=str(e),
            )

        self._logger.debug("ledger_committed", expense_count=len(self._expenses))
        return CommitResult(success=True, expense_count=len(self._expenses))

    def _commit_or_raise(self) -> CommitResult:
        result = self.commit()
        if not result.success:
            raise PersistenceSyncError(result)
        return result

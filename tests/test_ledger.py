"""
Tests for the expense ledger and its validator

The ledger runs against InMemoryStore so commits can be inspected and
storage failures simulated.
"""

from datetime import date
from decimal import Decimal

import pytest

from factory_ledger.exceptions import (
    ExpenseNotFoundError,
    ExpenseValidationError,
    InvalidImportFormatError,
    PersistenceSyncError,
)
from factory_ledger.ledger import ExpenseLedger, parse_expense_records
from factory_ledger.models import ExpenseDraft
from factory_ledger.services.storage import InMemoryStore
from factory_ledger.validation import ExpenseValidator


class TestExpenseValidator:
    """Tests for two-stage draft validation."""

    def test_valid_draft_builds_expense(self, valid_draft):
        """Test a complete draft becomes an Expense."""
        result = ExpenseValidator().validate(ExpenseDraft.model_validate(valid_draft))
        assert result.is_valid
        assert result.expense.factory_id == "investments"
        assert result.expense.amount == Decimal("1250.50")

    def test_missing_fields_reported_together(self):
        """Test every missing required field is reported."""
        result = ExpenseValidator().validate(ExpenseDraft(description="Fuel"))
        assert not result.is_valid
        assert {i.field for i in result.issues} == {"date", "factory_id", "category", "amount"}
        assert all(i.issue_type == "missing" for i in result.issues)

    def test_zero_amount(self, valid_draft):
        """Test amount must be greater than zero."""
        result = ExpenseValidator().validate(ExpenseDraft.model_validate({**valid_draft, "amount": "0"}))
        assert [i.message for i in result.issues] == ["Amount must be greater than 0"]

    def test_unknown_factory_is_semantic(self, valid_draft):
        """Test an unknown factory is caught in stage two."""
        result = ExpenseValidator().validate(ExpenseDraft.model_validate({**valid_draft, "factory": "bakery"}))
        assert result.issues[0].issue_type == "unknown_factory"

    def test_keeps_given_id(self, valid_draft):
        """Test updates keep their id."""
        result = ExpenseValidator().validate(ExpenseDraft.model_validate(valid_draft), expense_id="abc")
        assert result.expense.id == "abc"

    def test_friendly_summary(self):
        """Test the summary names the missing fields."""
        validator = ExpenseValidator()
        result = validator.validate(ExpenseDraft(description="Fuel", category="other"))
        assert validator.get_user_friendly_summary(result) == (
            "Please fill in all required fields: Date, Factory, Amount"
        )


class TestLedgerMutations:
    """Tests for add, update, remove and find."""

    def test_add_then_find(self, ledger, valid_draft):
        """Test an added record can be found by id."""
        expense = ledger.add(valid_draft)
        assert ledger.find_by_id(expense.id) == expense
        assert len(ledger) == 1

    def test_add_prepends(self, ledger, valid_draft):
        """Test newest records come first."""
        first = ledger.add(valid_draft)
        second = ledger.add({**valid_draft, "description": "Thread"})
        assert [e.id for e in ledger] == [second.id, first.id]

    def test_add_invalid_leaves_ledger_unchanged(self, ledger, store, valid_draft):
        """Test a rejected draft changes nothing and saves nothing."""
        with pytest.raises(ExpenseValidationError) as exc_info:
            ledger.add({**valid_draft, "amount": "-5"})
        assert exc_info.value.fields == ["amount"]
        assert len(ledger) == 0
        assert store.save_count == 0

    def test_add_unparseable_date(self, ledger, valid_draft):
        """Test a malformed date is a field error, not a crash."""
        with pytest.raises(ExpenseValidationError) as exc_info:
            ledger.add({**valid_draft, "date": "not-a-date"})
        assert exc_info.value.fields == ["date"]

    def test_add_commits_both_keys(self, ledger, store, valid_draft):
        """Test a mutation writes the expenses and the settings."""
        ledger.add(valid_draft)
        assert len(store.load("ssMudyfExpenses")) == 1
        assert store.load("ssMudyfSettings") == {}

    def test_remove_then_find_raises(self, ledger, valid_draft):
        """Test a removed record is gone."""
        expense = ledger.add(valid_draft)
        removed = ledger.remove(expense.id)
        assert removed.id == expense.id
        with pytest.raises(ExpenseNotFoundError):
            ledger.find_by_id(expense.id)

    def test_remove_unknown(self, ledger):
        """Test removing an unknown id raises."""
        with pytest.raises(ExpenseNotFoundError):
            ledger.remove("missing")

    def test_update_keeps_identity_and_position(self, ledger, valid_draft):
        """Test an edit keeps id, creation time and position."""
        older = ledger.add(valid_draft)
        newer = ledger.add({**valid_draft, "description": "Buttons"})

        updated = ledger.update(older.id, {**valid_draft, "amount": "99.99"})

        assert updated.id == older.id
        assert updated.created_at == older.created_at
        assert updated.amount == Decimal("99.99")
        assert [e.id for e in ledger] == [newer.id, older.id]

    def test_update_invalid_keeps_original(self, ledger, valid_draft):
        """Test a failed edit does not touch the stored record."""
        expense = ledger.add(valid_draft)
        with pytest.raises(ExpenseValidationError):
            ledger.update(expense.id, {**valid_draft, "description": ""})
        assert ledger.find_by_id(expense.id).description == "Cotton fabric rolls"

    def test_expenses_snapshot_is_read_only(self, ledger, valid_draft):
        """Test callers cannot change the ledger through the snapshot."""
        ledger.add(valid_draft)
        snapshot = ledger.expenses
        assert isinstance(snapshot, tuple)


class TestLedgerPersistence:
    """Tests for load, commit and failure handling."""

    def test_init_loads_stored_documents(self, valid_draft):
        """Test a second ledger sees what the first one saved."""
        store = InMemoryStore()
        first = ExpenseLedger(store).init()
        expense = first.add(valid_draft)
        first.update_settings(company_name="SS Mudyf")

        second = ExpenseLedger(store).init()
        assert second.find_by_id(expense.id) == expense
        assert second.settings.company_name == "SS Mudyf"

    def test_init_from_preloaded_state(self):
        """Test state can be handed in directly."""
        ledger = ExpenseLedger(InMemoryStore()).init({"expenses": [], "settings": None})
        assert ledger.is_initialized
        assert len(ledger) == 0

    def test_init_rejects_corrupt_documents(self):
        """Test a stored collection that is not a list is refused."""
        store = InMemoryStore({"ssMudyfExpenses": {"oops": True}})
        with pytest.raises(InvalidImportFormatError):
            ExpenseLedger(store).init()

    def test_commit_failure_keeps_memory(self, ledger, store, valid_draft):
        """Test a failed write raises but keeps the in-memory change."""
        store.fail_writes = True
        with pytest.raises(PersistenceSyncError) as exc_info:
            ledger.add(valid_draft)

        assert not exc_info.value.result.success
        assert len(ledger) == 1

        store.fail_writes = False
        assert ledger.commit().success
        assert len(store.load("ssMudyfExpenses")) == 1

    def test_clear_removes_everything(self, ledger, store, valid_draft):
        """Test clear empties records and settings and deletes both keys."""
        ledger.add(valid_draft)
        ledger.update_settings(company_name="SS Mudyf")

        assert ledger.clear() == 1
        assert len(ledger) == 0
        assert ledger.settings.is_empty
        assert store.keys() == []

    def test_teardown_commits(self, ledger, store):
        """Test teardown performs a final write."""
        result = ledger.teardown()
        assert result.success
        assert store.load("ssMudyfExpenses") == []


class TestReplaceAll:
    """Tests for wholesale replacement (import and restore)."""

    def test_replace_all_validates_first(self, ledger, valid_draft):
        """Test a bad record anywhere leaves the ledger unchanged."""
        kept = ledger.add(valid_draft)
        good = {**kept.model_dump(mode="json"), "id": "new-1"}
        bad = {**good, "id": "new-2", "amount": -1}

        with pytest.raises(InvalidImportFormatError):
            ledger.replace_all([good, bad])

        assert [e.id for e in ledger] == [kept.id]

    def test_replace_all_swaps_contents(self, ledger, valid_draft, make_expense):
        """Test valid records replace the old ones."""
        ledger.add(valid_draft)
        records = [make_expense(on=date(2024, 1, d)).model_dump(mode="json") for d in (1, 2)]

        assert ledger.replace_all(records, settings={"companyName": "Imported"}) == 2
        assert len(ledger) == 2
        assert ledger.settings.company_name == "Imported"

    def test_long_text_fields_import(self, ledger, make_expense):
        """Test long descriptions and vendors from old backups are accepted."""
        record = make_expense(description="Bulk cotton order " * 100, vendor="V" * 400)
        payload = {**record.model_dump(mode="json"), "reference": "R" * 300}

        assert ledger.replace_all([payload]) == 1
        assert ledger.find_by_id(record.id).description == record.description

    def test_duplicate_ids_rejected(self, make_expense):
        """Test two records with one id are refused."""
        record = make_expense().model_dump(mode="json")
        with pytest.raises(InvalidImportFormatError, match="duplicate"):
            parse_expense_records([record, dict(record)])


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

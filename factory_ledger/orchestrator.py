"""
Main Orchestrator for Factory Ledger

Ties the components together and defines the end-to-end expense entry
flow:

    start_new / begin_edit -> attach_files / remove_attachment -> submit
                                                               -> cancel

DESIGN DECISION: The orchestrator enforces the boundaries:
- Receipts live in the entry session until the expense is submitted
- Nothing reaches the ledger without passing ExpenseValidator
- A submit either adds a new record or updates the one being edited,
  never both

This is the "glue" the host application drives; it holds no state of
its own beyond the current entry session.
"""

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Iterable, Optional, Union

from factory_ledger.config import get_settings
from factory_ledger.exceptions import PersistenceSyncError
from factory_ledger.ledger import DataTransferService, ExpenseLedger
from factory_ledger.logs import configure_logging, get_logger
from factory_ledger.models.expense import Expense, ExpenseDraft
from factory_ledger.models.receipt import Attachment, AttachmentBatchResult, ReceiptFile
from factory_ledger.reports import ReportGenerator
from factory_ledger.services.receipts import AttachmentSet, ReceiptCodec, ReceiptViewer
from factory_ledger.services.storage import DocumentStore, JsonFileStore


DraftInput = Union[ExpenseDraft, Mapping[str, Any]]


class ExpenseEntryFlow:
    """
    Orchestrates adding and editing one expense at a time.

    Flow:
    1. Start → start_new() for a blank form, or begin_edit(id) which
       loads the receipts of an existing record
    2. Receipts → attach_files() / remove_attachment()
    3. Save → submit(draft) validates and adds or updates the record
    4. Abandon → cancel() discards the session; the ledger is untouched

    Receipts gathered in the session always replace whatever the draft
    itself carries.
    """

    def __init__(
        self,
        ledger: ExpenseLedger,
        codec: Optional[ReceiptCodec] = None,
        attachment_set: Optional[AttachmentSet] = None,
    ):
        self._ledger = ledger
        self._codec = codec or ReceiptCodec()
        self._attachments = attachment_set or AttachmentSet()
        self._editing_id: Optional[str] = None
        self._logger = get_logger(__name__)

    @property
    def ledger(self) -> ExpenseLedger:
        return self._ledger

    @property
    def editing_id(self) -> Optional[str]:
        return self._editing_id

    @property
    def is_editing(self) -> bool:
        return self._editing_id is not None

    @property
    def attachments(self) -> list[Attachment]:
        return self._attachments.attachments

    def start_new(self) -> None:
        self._reset()

    def begin_edit(self, expense_id: str) -> Expense:
        """
        Open an existing record for editing.

        Raises:
            ExpenseNotFoundError: If the id is unknown
        """
        expense = self._ledger.find_by_id(expense_id)
        self._attachments.load(expense.attachments)
        self._editing_id = expense.id
        self._logger.info("expense_edit_started", expense_id=expense.id, receipts=expense.attachment_count)
        return expense

    async def attach_files(self, files: Iterable[ReceiptFile]) -> AttachmentBatchResult:
        """Validate, encode and attach files to the current session."""
        result = await self._attachments.add_files(files, self._codec)
        self._logger.info(
            "receipts_attached",
            attached=len(result.attached),
            rejected=len(result.rejected),
            capacity_signals=result.capacity_signals,
            total=len(self._attachments),
        )
        return result

    def remove_attachment(self, attachment_id: str) -> bool:
        return self._attachments.remove(attachment_id)

    def _with_session_attachments(self, draft: DraftInput) -> DraftInput:
        attachments = self._attachments.attachments
        if isinstance(draft, ExpenseDraft):
            return draft.model_copy(update={"attachments": attachments})

        fields = {k: v for k, v in draft.items() if k not in ("attachments", "receipts")}
        fields["attachments"] = attachments
        return fields

    def submit(self, draft: DraftInput) -> Expense:
        """
        Save the form as a new record, or as the edited record.

        The session ends when the record reaches the ledger, including
        the case where it could not be persisted.

        Raises:
            ExpenseValidationError: On any invalid field (session kept)
            ExpenseNotFoundError: If the edited record vanished meanwhile
            PersistenceSyncError: If the record changed but was not saved
        """
        full_draft = self._with_session_attachments(draft)

        try:
            if self._editing_id is None:
                expense = self._ledger.add(full_draft)
            else:
                expense = self._ledger.update(self._editing_id, full_draft)
        except PersistenceSyncError:
            self._reset()
            raise

        self._reset()
        return expense

    def cancel(self) -> None:
        """Discard the session. An edited record keeps its stored values."""
        if self._editing_id is not None:
            self._logger.info("expense_edit_cancelled", expense_id=self._editing_id)
        self._reset()

    def _reset(self) -> None:
        self._attachments.clear()
        self._editing_id = None


def create_app_components(
    data_dir: Optional[Path] = None,
    store: Optional[DocumentStore] = None,
) -> tuple[ExpenseLedger, ExpenseEntryFlow, DataTransferService, ReportGenerator, ReceiptViewer]:
    """
    Factory function to create all application components.

    Args:
        data_dir: Where the JSON documents live (defaults to STORAGE_DATA_DIR).
                  Ignored when `store` is given.
        store: A ready DocumentStore, e.g. InMemoryStore for testing

    Returns:
        (ledger, entry_flow, transfer_service, report_generator, receipt_viewer)
    """
    configure_logging()
    settings = get_settings()

    store = store or JsonFileStore(data_dir=data_dir)
    ledger = ExpenseLedger(store).init()
    codec = ReceiptCodec(settings.receipts)

    entry_flow = ExpenseEntryFlow(ledger, codec=codec)
    transfer = DataTransferService(ledger)
    generator = ReportGenerator()
    viewer = ReceiptViewer(codec=codec)

    return ledger, entry_flow, transfer, generator, viewer

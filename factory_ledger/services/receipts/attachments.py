"""
Attachment Set

The receipts gathered while one expense is being entered or edited.
The set is bounded (10 by default) and keeps insertion order. On save
its contents are copied into the expense and the set is cleared.
"""

from typing import Iterable, Iterator, Optional

from factory_ledger.config import get_settings
from factory_ledger.exceptions import CapacityExceededError, ReceiptReadError
from factory_ledger.logs import get_logger
from factory_ledger.models.receipt import (
    Attachment,
    AttachmentBatchResult,
    ReceiptFile,
    ReceiptIssueType,
    ReceiptValidation,
)
from factory_ledger.services.receipts.codec import ReceiptCodec


class AttachmentSet:
    """Bounded, ordered collection of attachments for one entry session."""

    def __init__(self, max_files: Optional[int] = None):
        self._max_files = max_files or get_settings().receipts.max_files
        self._items: list[Attachment] = []
        self._logger = get_logger(__name__)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Attachment]:
        return iter(list(self._items))

    def __contains__(self, attachment_id: object) -> bool:
        return any(a.id == attachment_id for a in self._items)

    @property
    def max_files(self) -> int:
        return self._max_files

    @property
    def attachments(self) -> list[Attachment]:
        """Snapshot of the current attachments, in insertion order."""
        return list(self._items)

    @property
    def names(self) -> set[str]:
        return {a.name for a in self._items}

    @property
    def is_full(self) -> bool:
        return len(self._items) >= self._max_files

    @property
    def remaining(self) -> int:
        return max(self._max_files - len(self._items), 0)

    def get(self, attachment_id: str) -> Optional[Attachment]:
        for attachment in self._items:
            if attachment.id == attachment_id:
                return attachment
        return None

    def add(self, attachment: Attachment) -> None:
        """
        Append an attachment.

        Raises:
            CapacityExceededError: If the set already holds max_files items
        """
        if self.is_full:
            raise CapacityExceededError(self._max_files, attachment.name)
        self._items.append(attachment)

    def remove(self, attachment_id: str) -> bool:
        """Remove by id. Returns False (and does nothing) if the id is absent."""
        before = len(self._items)
        self._items = [a for a in self._items if a.id != attachment_id]
        removed = len(self._items) != before
        if removed:
            self._logger.debug("receipt_removed", attachment_id=attachment_id)
        return removed

    def clear(self) -> None:
        self._items = []

    def load(self, existing: Iterable[Attachment]) -> None:
        """Replace the whole set, e.g. with the receipts of an expense being edited."""
        items = list(existing)
        if len(items) > self._max_files:
            raise CapacityExceededError(self._max_files)
        self._items = items

    async def add_files(
        self,
        files: Iterable[ReceiptFile],
        codec: ReceiptCodec,
    ) -> AttachmentBatchResult:
        """
        Validate, encode and add several files, one at a time.

        Each file finishes its validate+encode cycle before the next one
        starts. Rejections, read errors and capacity overflow are
        recorded per file; none of them stops the batch.
        """
        result = AttachmentBatchResult()

        for file in files:
            check = codec.validate(file, self)
            if not check.is_valid:
                result.rejected.append(check)
                self._logger.info("receipt_rejected", filename=file.name, reason=check.issue_type.value)
                continue

            if self.is_full:
                error = CapacityExceededError(self._max_files, file.name)
                result.rejected.append(ReceiptValidation.rejected(
                    file.name,
                    ReceiptIssueType.CAPACITY_EXCEEDED,
                    error.message,
                ))
                self._logger.info("receipt_rejected", filename=file.name, reason="capacity_exceeded")
                continue

            try:
                attachment = await codec.encode(file)
            except ReceiptReadError as e:
                result.rejected.append(ReceiptValidation.rejected(
                    file.name,
                    ReceiptIssueType.READ_ERROR,
                    e.message,
                ))
                continue

            self.add(attachment)
            result.attached.append(attachment)

        self._logger.info(
            "receipt_batch_processed",
            attached=len(result.attached),
            rejected=len(result.rejected),
            total=len(self._items),
        )
        return result

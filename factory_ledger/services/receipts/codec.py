"""
Receipt Codec

Turns a user-selected file into an Attachment:

1. validate() checks media type, size and name collisions. It never
   raises; it reports.
2. encode() reads the bytes and wraps them in a data URI together with
   a fresh id and timestamp.

CRITICAL: The file read is the only await point in the receipt
subsystem. It runs in a worker thread so the event loop stays free for
other UI work while a large PDF is read.
"""

import asyncio
import base64
import binascii
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from factory_ledger.config import ReceiptSettings, get_settings
from factory_ledger.exceptions import ReceiptReadError
from factory_ledger.logs import get_logger
from factory_ledger.models.receipt import (
    Attachment,
    ReceiptFile,
    ReceiptIssueType,
    ReceiptValidation,
)

if TYPE_CHECKING:
    from factory_ledger.services.receipts.attachments import AttachmentSet


def to_data_uri(mime_type: str, raw: bytes) -> str:
    """Build a base64 data URI for the given bytes."""
    payload = base64.b64encode(raw).decode("ascii")
    return f"data:{mime_type};base64,{payload}"


def from_data_uri(uri: str) -> tuple[str, bytes]:
    """
    Split a base64 data URI into (mime_type, bytes).

    Raises:
        ValueError: If the string is not a base64 data URI
    """
    if not uri.startswith("data:") or "," not in uri:
        raise ValueError("Not a data URI")

    header, payload = uri[len("data:"):].split(",", 1)
    if not header.endswith(";base64"):
        raise ValueError("Only base64 data URIs are supported")

    mime_type = header[: -len(";base64")]
    try:
        return mime_type, base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Corrupt base64 payload: {e}")


class ReceiptCodec:
    """
    Validates and encodes receipt files.

    Limits (accepted types, maximum size) come from ReceiptSettings.
    """

    def __init__(self, settings: Optional[ReceiptSettings] = None):
        self._settings = settings or get_settings().receipts
        self._logger = get_logger(__name__)

    @property
    def accepted_types(self) -> list[str]:
        return self._settings.accepted_types_list

    @property
    def max_file_size_bytes(self) -> int:
        return self._settings.max_file_size_bytes

    def validate(
        self,
        file: ReceiptFile,
        attachment_set: Optional["AttachmentSet"] = None,
    ) -> ReceiptValidation:
        """
        Check a file against the receipt rules.

        Args:
            file: The candidate file
            attachment_set: Set the file would join, used for the
                            duplicate name check

        Returns:
            ReceiptValidation; is_valid is False with a reason on rejection
        """
        if file.mime_type.lower() not in self.accepted_types:
            return ReceiptValidation.rejected(
                file.name,
                ReceiptIssueType.UNSUPPORTED_TYPE,
                f"{file.name}: Unsupported file type. Please use JPG, PNG, GIF, or PDF files.",
            )

        if file.size_bytes > self.max_file_size_bytes:
            return ReceiptValidation.rejected(
                file.name,
                ReceiptIssueType.FILE_TOO_LARGE,
                f"{file.name}: File too large. "
                f"Maximum size is {self._settings.max_file_size_mb}MB.",
            )

        if attachment_set is not None and file.name in attachment_set.names:
            return ReceiptValidation.rejected(
                file.name,
                ReceiptIssueType.DUPLICATE_NAME,
                f"{file.name}: File already attached.",
            )

        return ReceiptValidation.ok(file.name)

    async def encode(self, file: ReceiptFile) -> Attachment:
        """
        Read a file and produce an Attachment.

        Raises:
            ReceiptReadError: If the file cannot be read
        """
        if file.content is not None:
            raw = file.content
        else:
            try:
                raw = await asyncio.to_thread(file.path.read_bytes)
            except OSError as e:
                self._logger.warning("receipt_read_failed", filename=file.name, error=str(e))
                raise ReceiptReadError(file.name, "Failed to read file") from e

        attachment = Attachment(
            name=file.name,
            mime_type=file.mime_type.lower(),
            size_bytes=len(raw),
            encoded_data=to_data_uri(file.mime_type.lower(), raw),
            uploaded_at=datetime.now(),
        )
        self._logger.debug(
            "receipt_encoded",
            filename=file.name,
            attachment_id=attachment.id,
            size_bytes=attachment.size_bytes,
        )
        return attachment

    def decode(self, attachment: Attachment) -> bytes:
        """
        Recover the original file bytes from an attachment.

        Raises:
            ReceiptReadError: If the stored data URI is malformed
        """
        try:
            _, raw = from_data_uri(attachment.encoded_data)
        except ValueError as e:
            raise ReceiptReadError(attachment.name, str(e)) from e
        return raw

"""
Receipt Models

Models for receipt files on their way into the ledger:

    ReceiptFile  -> a file picked by the user, not yet read
    Attachment   -> an encoded receipt, embeddable in an expense

DESIGN DECISION: Attachments are self-contained. The file content is
stored as a data URI inside the record, so an exported backup carries
its receipts with it and needs no side-car files.
"""

import mimetypes
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional
from uuid import uuid4

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
)


def _new_attachment_id() -> str:
    return uuid4().hex


class Attachment(BaseModel):
    """
    An encoded receipt (image or PDF) linked to an expense.

    Accepts the key names used by backups of the original desktop app
    (type, size, data, uploadDate) as well as the field names.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(
        default_factory=_new_attachment_id,
        min_length=1,
        description="Attachment id, unique within its owning set"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Original file name"
    )
    mime_type: str = Field(
        ...,
        validation_alias=AliasChoices("mime_type", "mimeType", "type"),
        description="Declared media type"
    )
    size_bytes: int = Field(
        ...,
        ge=0,
        validation_alias=AliasChoices("size_bytes", "sizeBytes", "size"),
        description="Size of the original file in bytes"
    )
    encoded_data: str = Field(
        ...,
        validation_alias=AliasChoices("encoded_data", "encodedData", "data"),
        description="data:<mime>;base64,<payload> URI"
    )
    uploaded_at: datetime = Field(
        default_factory=datetime.now,
        validation_alias=AliasChoices("uploaded_at", "uploadedAt", "uploadDate"),
        description="When the file was encoded"
    )

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")

    @property
    def is_pdf(self) -> bool:
        return self.mime_type == "application/pdf"


class ReceiptFile(BaseModel):
    """
    A file selected for upload, before it has been read.

    Either `path` or `content` must be given. `size_bytes` is the
    declared size and is what validation checks, so oversize files are
    rejected without being read.
    """
    name: str = Field(..., min_length=1)
    mime_type: str
    size_bytes: int = Field(ge=0)
    path: Optional[Path] = None
    content: Optional[bytes] = None

    @model_validator(mode="after")
    def validate_source(self) -> "ReceiptFile":
        if self.path is None and self.content is None:
            raise ValueError("A receipt file needs a path or in-memory content")
        return self

    @classmethod
    def from_path(cls, path: Path, mime_type: Optional[str] = None) -> "ReceiptFile":
        """Describe a file on disk, guessing the media type from its name."""
        path = Path(path)
        guessed, _ = mimetypes.guess_type(path.name)
        return cls(
            name=path.name,
            mime_type=(mime_type or guessed or "application/octet-stream"),
            size_bytes=path.stat().st_size,
            path=path,
        )

    @classmethod
    def from_bytes(cls, name: str, mime_type: str, content: bytes) -> "ReceiptFile":
        """Describe an in-memory upload."""
        return cls(
            name=name,
            mime_type=mime_type,
            size_bytes=len(content),
            content=content,
        )


class ReceiptIssueType(str, Enum):
    """Why a receipt was not attached."""
    UNSUPPORTED_TYPE = "unsupported_type"
    FILE_TOO_LARGE = "file_too_large"
    DUPLICATE_NAME = "duplicate_name"
    CAPACITY_EXCEEDED = "capacity_exceeded"
    READ_ERROR = "read_error"


class ReceiptValidation(BaseModel):
    """Outcome of checking one file against the receipt rules."""

    filename: str
    is_valid: bool
    issue_type: Optional[ReceiptIssueType] = None
    reason: Optional[str] = None

    @classmethod
    def ok(cls, filename: str) -> "ReceiptValidation":
        return cls(filename=filename, is_valid=True)

    @classmethod
    def rejected(
        cls,
        filename: str,
        issue_type: ReceiptIssueType,
        reason: str,
    ) -> "ReceiptValidation":
        return cls(
            filename=filename,
            is_valid=False,
            issue_type=issue_type,
            reason=reason,
        )


class AttachmentBatchResult(BaseModel):
    """
    Result of processing several files in one upload.

    `attached` holds the new attachments in upload order; `rejected`
    holds one entry per file that did not make it, with the reason.
    """

    attached: list[Attachment] = Field(default_factory=list)
    rejected: list[ReceiptValidation] = Field(default_factory=list)

    @property
    def capacity_signals(self) -> int:
        """Number of files turned away because the set was full."""
        return sum(
            1 for r in self.rejected
            if r.issue_type == ReceiptIssueType.CAPACITY_EXCEEDED
        )

    @property
    def messages(self) -> list[str]:
        return [r.reason for r in self.rejected if r.reason]

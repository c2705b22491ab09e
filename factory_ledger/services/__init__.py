"""Services package."""

from factory_ledger.services.receipts import (
    AttachmentSet,
    ReceiptCodec,
    ReceiptViewer,
)
from factory_ledger.services.storage import (
    DocumentStore,
    InMemoryStore,
    JsonFileStore,
    StorageError,
)

__all__ = [
    # Receipt services
    "AttachmentSet",
    "ReceiptCodec",
    "ReceiptViewer",
    # Storage services
    "DocumentStore",
    "InMemoryStore",
    "JsonFileStore",
    "StorageError",
]

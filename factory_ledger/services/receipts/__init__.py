"""Receipt attachment services package."""

from factory_ledger.services.receipts.attachments import AttachmentSet
from factory_ledger.services.receipts.codec import (
    ReceiptCodec,
    from_data_uri,
    to_data_uri,
)
from factory_ledger.services.receipts.viewer import (
    CloseReason,
    KeyBindings,
    ReceiptViewer,
    ViewerState,
)

__all__ = [
    "AttachmentSet",
    "CloseReason",
    "KeyBindings",
    "ReceiptCodec",
    "ReceiptViewer",
    "ViewerState",
    "from_data_uri",
    "to_data_uri",
]

"""
Receipt Viewer

A carousel over the receipts of one expense.

States:
    CLOSED                       nothing shown, no key handler registered
    VIEWING(index, attachments)  one receipt shown, key handler registered

Transitions:
    open      CLOSED/VIEWING -> VIEWING
    next/prev VIEWING -> VIEWING (clamped at both ends, no wraparound)
    close     VIEWING -> CLOSED (explicit close, backdrop click or Escape)

CRITICAL: The keyboard handler is registered on entering VIEWING and
unregistered on every path back to CLOSED, so no handler outlives the
viewer.
"""

from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Sequence

from factory_ledger.logs import get_logger
from factory_ledger.models.receipt import Attachment
from factory_ledger.services.receipts.codec import ReceiptCodec


KeyHandler = Callable[[str], bool]


class ViewerState(str, Enum):
    CLOSED = "closed"
    VIEWING = "viewing"


class CloseReason(str, Enum):
    EXPLICIT = "explicit"
    BACKDROP = "backdrop"
    ESCAPE = "escape"


class KeyBindings:
    """
    Minimal keyboard hub standing in for the host window's key events.

    dispatch() offers a key to each registered handler until one
    reports it as handled.
    """

    def __init__(self):
        self._handlers: list[KeyHandler] = []

    @property
    def handlers(self) -> list[KeyHandler]:
        return list(self._handlers)

    def register(self, handler: KeyHandler) -> None:
        if handler not in self._handlers:
            self._handlers.append(handler)

    def unregister(self, handler: KeyHandler) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)

    def dispatch(self, key: str) -> bool:
        for handler in list(self._handlers):
            if handler(key):
                return True
        return False


class ReceiptViewer:
    """State machine behind the receipt viewer modal."""

    def __init__(
        self,
        key_bindings: Optional[KeyBindings] = None,
        codec: Optional[ReceiptCodec] = None,
    ):
        self._keys = key_bindings or KeyBindings()
        self._codec = codec or ReceiptCodec()
        self._attachments: list[Attachment] = []
        self._index = 0
        self._state = ViewerState.CLOSED
        self._logger = get_logger(__name__)

    @property
    def state(self) -> ViewerState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state == ViewerState.VIEWING

    @property
    def key_bindings(self) -> KeyBindings:
        return self._keys

    @property
    def index(self) -> Optional[int]:
        return self._index if self.is_open else None

    @property
    def attachments(self) -> list[Attachment]:
        return list(self._attachments)

    @property
    def current(self) -> Optional[Attachment]:
        if not self.is_open:
            return None
        return self._attachments[self._index]

    @property
    def title(self) -> str:
        if not self.is_open:
            return ""
        return f"Receipt Viewer ({self._index + 1} of {len(self._attachments)})"

    @property
    def has_navigation(self) -> bool:
        """Navigation buttons are only shown for more than one receipt."""
        return self.is_open and len(self._attachments) > 1

    def open(self, attachments: Sequence[Attachment], start_index: int = 0) -> None:
        """
        Show a list of receipts, starting at start_index (clamped).

        Raises:
            ValueError: If there is nothing to show
        """
        if not attachments:
            raise ValueError("No receipts found for this expense")

        if self.is_open:
            self._keys.unregister(self.handle_key)

        self._attachments = list(attachments)
        self._index = min(max(start_index, 0), len(self._attachments) - 1)
        self._state = ViewerState.VIEWING
        self._keys.register(self.handle_key)
        self._logger.debug("receipt_viewer_opened", count=len(self._attachments), index=self._index)

    def next(self) -> Optional[int]:
        if self.is_open and self._index < len(self._attachments) - 1:
            self._index += 1
        return self.index

    def prev(self) -> Optional[int]:
        if self.is_open and self._index > 0:
            self._index -= 1
        return self.index

    def go_to(self, index: int) -> Optional[int]:
        """Jump to a receipt by position. Out-of-range positions are ignored."""
        if self.is_open and 0 <= index < len(self._attachments):
            self._index = index
        return self.index

    def close(self, reason: CloseReason = CloseReason.EXPLICIT) -> None:
        if not self.is_open:
            return
        self._keys.unregister(self.handle_key)
        self._state = ViewerState.CLOSED
        self._attachments = []
        self._index = 0
        self._logger.debug("receipt_viewer_closed", reason=reason.value)

    def dismiss_backdrop(self) -> None:
        self.close(CloseReason.BACKDROP)

    def handle_key(self, key: str) -> bool:
        """Keyboard handler registered while VIEWING. Returns True if handled."""
        if not self.is_open:
            return False
        if key == "Escape":
            self.close(CloseReason.ESCAPE)
        elif key == "ArrowLeft":
            self.prev()
        elif key == "ArrowRight":
            self.next()
        else:
            return False
        return True

    def download(self, destination: Path) -> Path:
        """
        Write the current receipt to disk. Does not change state.

        Args:
            destination: An existing directory (the receipt's own name is
                         used) or a file path. A path that does not exist
                         yet is always a file path.

        Returns:
            The path written

        Raises:
            RuntimeError: If the viewer is closed
            FileNotFoundError: If a file path's parent directory does not exist
            ReceiptReadError: If the stored data is corrupt
        """
        attachment = self.current
        if attachment is None:
            raise RuntimeError("Receipt viewer is not open")

        destination = Path(destination)
        target = destination / attachment.name if destination.is_dir() else destination
        if not target.parent.is_dir():
            raise FileNotFoundError(f"Directory does not exist: {target.parent}")
        target.write_bytes(self._codec.decode(attachment))
        self._logger.info("receipt_downloaded", attachment_id=attachment.id, path=str(target))
        return target

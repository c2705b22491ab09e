"""
JSON File Storage Implementation

DESIGN DECISION: One JSON file per key, inside a data directory.
This mirrors the browser localStorage the original desktop app used:
a handful of keys, each holding a whole document.

TRADEOFFS:
- Every save rewrites the full document (fine for a small business ledger)
- No transactions across keys (the ledger commits keys one after another)
- Writes go to a temporary file first and are moved into place, so a
  crash mid-write never leaves a half-written document behind
"""

import json
import os
from pathlib import Path
from typing import Any, Optional

from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from factory_ledger.config import get_settings
from factory_ledger.logs import get_logger
from factory_ledger.services.storage.interface import (
    CorruptDocumentError,
    DocumentStore,
    StorageError,
)


class JsonFileStore(DocumentStore):
    """
    File-backed document store.

    Documents live at `<data_dir>/<key>.json`. Transient OS errors on
    write are retried with exponential backoff.
    """

    def __init__(
        self,
        data_dir: Optional[Path] = None,
        write_attempts: Optional[int] = None,
    ):
        settings = get_settings().storage
        self._data_dir = Path(data_dir) if data_dir is not None else settings.data_dir
        self._write_attempts = write_attempts or settings.write_attempts
        self._logger = get_logger(__name__)

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def _path_for(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key:
            raise StorageError(f"Invalid storage key: {key!r}")
        return self._data_dir / f"{key}.json"

    def load(self, key: str) -> Optional[Any]:
        path = self._path_for(key)
        if not path.exists():
            return None

        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to read {key}: {e}")

        if not text.strip():
            return None

        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise CorruptDocumentError(f"Stored document {key} is not valid JSON: {e}")

    def save(self, key: str, value: Any) -> None:
        path = self._path_for(key)
        try:
            payload = json.dumps(value, indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Document {key} is not JSON serializable: {e}")

        retrying = Retrying(
            stop=stop_after_attempt(self._write_attempts),
            wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
            retry=retry_if_exception_type(OSError),
            reraise=True,
        )
        try:
            for attempt in retrying:
                with attempt:
                    self._write_atomic(path, payload)
        except OSError as e:
            self._logger.error("document_write_failed", key=key, error=str(e))
            raise StorageError(f"Failed to save {key}: {e}")

        self._logger.debug("document_saved", key=key, bytes=len(payload))

    def _write_atomic(self, path: Path, payload: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(payload, encoding="utf-8")
        os.replace(tmp_path, path)

    def delete(self, key: str) -> None:
        path = self._path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to delete {key}: {e}")

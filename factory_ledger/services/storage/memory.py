"""
In-Memory Storage Implementation

Used by the tests and for throwaway sessions. Values are round-tripped
through JSON on save so that anything the file store would reject is
rejected here too, and callers never share mutable state with the store.
"""

import json
from typing import Any, Optional

from factory_ledger.services.storage.interface import DocumentStore, StorageError


class InMemoryStore(DocumentStore):
    """Dict-backed document store."""

    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self._documents: dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.save(key, value)

    def load(self, key: str) -> Optional[Any]:
        raw = self._documents.get(key)
        return None if raw is None else json.loads(raw)

    def save(self, key: str, value: Any) -> None:
        try:
            self._documents[key] = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Document {key} is not JSON serializable: {e}")

    def delete(self, key: str) -> None:
        self._documents.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._documents)

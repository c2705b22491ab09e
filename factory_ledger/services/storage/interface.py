"""
Abstract Storage Interface

DESIGN DECISION: The ledger talks to a key-value document store.
Each key holds one whole JSON document (the expense collection or the
company settings) and every write replaces the document wholesale.
There is no diffing and no partial update.

This allows us to:
1. Keep the ledger independent of where the bytes end up
2. Use in-memory storage for testing
3. Swap the JSON files for another local store later
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class DocumentStore(ABC):
    """
    Abstract interface for the persistence substrate.

    Values are JSON-compatible Python objects (dicts, lists, strings,
    numbers, booleans, None).
    """

    @abstractmethod
    def load(self, key: str) -> Optional[Any]:
        """
        Read the document stored under a key.

        Args:
            key: Document key

        Returns:
            The decoded document, or None if nothing is stored

        Raises:
            CorruptDocumentError: If the stored bytes are not valid JSON
            StorageError: If the read fails
        """
        pass

    @abstractmethod
    def save(self, key: str, value: Any) -> None:
        """
        Replace the document stored under a key.

        Args:
            key: Document key
            value: JSON-compatible value

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """
        Remove a document. Deleting a missing key is not an error.

        Raises:
            StorageError: If the delete fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class CorruptDocumentError(StorageError):
    """A stored document could not be decoded."""
    pass

"""
Storage Services Package

Provides the abstract document store interface and concrete implementations.
JsonFileStore is the on-disk backend; InMemoryStore backs the tests.
"""

from factory_ledger.services.storage.interface import (
    CorruptDocumentError,
    DocumentStore,
    StorageError,
)
from factory_ledger.services.storage.json_store import JsonFileStore
from factory_ledger.services.storage.memory import InMemoryStore

__all__ = [
    # Interface
    "DocumentStore",
    # Exceptions
    "CorruptDocumentError",
    "StorageError",
    # Implementations
    "InMemoryStore",
    "JsonFileStore",
]

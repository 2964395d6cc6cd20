"""
Storage Services Package

Provides the abstract key-value interface and its implementations.
The JSON file store is the default backend; the in-memory store is used
for tests and throwaway sessions.
"""

from src.services.storage.interface import (
    KeyValueStoreInterface,
    StorageError,
    StorageReadError,
    StorageWriteError,
)
from src.services.storage.memory import InMemoryKeyValueStore
from src.services.storage.json_file import JsonFileKeyValueStore

__all__ = [
    # Interfaces
    "KeyValueStoreInterface",
    # Exceptions
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    # Implementations
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
]

"""
Abstract Key-Value Storage Interface

DESIGN DECISION: The ledger talks to storage through a tiny string-valued
key-value contract (get / set / remove), the same shape as browser
local storage. This allows us to:
1. Use in-memory storage for testing
2. Keep the ledger's data on disk as a plain JSON file
3. Swap in any other backend without touching ledger logic

Encoding and decoding of values is the ledger's job, not the provider's.
A provider only ever sees strings.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Optional


class KeyValueStoreInterface(ABC):
    """
    Abstract interface for a synchronous string key-value store.

    Writes must be visible to get() as soon as set()/remove() returns.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read a value.

        Args:
            key: The key to read

        Returns:
            The stored string, or None if the key is absent
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Write a value, replacing any previous one.

        Raises:
            StorageWriteError: If the value could not be stored
        """
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """
        Remove a key. Removing an absent key is not an error.

        Raises:
            StorageWriteError: If the removal could not be stored
        """
        pass

    @abstractmethod
    def keys(self) -> list[str]:
        """List the keys currently stored."""
        pass

    def set_many(self, items: dict[str, str]) -> None:
        """
        Write several values together.

        Providers that can store them in one atomic write should override
        this. The default writes them one at a time.

        Raises:
            StorageWriteError: If any value could not be stored
        """
        for key, value in items.items():
            self.set(key, value)

    def remove_many(self, keys: Iterable[str]) -> None:
        """
        Remove several keys together. Same contract as set_many().

        Raises:
            StorageWriteError: If any removal could not be stored
        """
        for key in keys:
            self.remove(key)


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageReadError(StorageError):
    """The backing medium exists but could not be read."""
    pass


class StorageWriteError(StorageError):
    """A value could not be written to the backing medium."""
    pass

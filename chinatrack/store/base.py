"""
ChinaTrack Store - Whole-value key-value storage backends.

Every value is read and written as one JSON-serializable whole under a
stable key. There are no partial updates and no transactions: two writers
on the same backing file or row race, last write wins.
"""

import copy
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class KeyValueStore(ABC):
    """
    Abstract base class for store backends.

    All backends must implement these methods.
    """

    async def initialize(self) -> None:
        """Prepare the backend (open files, create tables). Optional."""
        pass

    async def close(self) -> None:
        """Release backend resources. Optional."""
        pass

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """
        Read the value stored under key.

        Returns:
            The deserialized value or None if the key is absent
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Replace the whole value stored under key."""
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """
        Remove key.

        Returns:
            True if the key existed
        """
        pass


class MemoryStore(KeyValueStore):
    """In-process store for tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = copy.deepcopy(initial) if initial else {}

    async def get(self, key: str) -> Optional[Any]:
        # Deep copies keep callers from mutating stored state in place
        value = self._data.get(key)
        return copy.deepcopy(value) if value is not None else None

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    async def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def snapshot(self) -> Dict[str, Any]:
        return copy.deepcopy(self._data)

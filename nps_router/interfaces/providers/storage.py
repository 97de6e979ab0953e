from abc import ABC, abstractmethod
from typing import Any


class StorageProvider(ABC):
    """Interface for synchronous key-value persistence."""

    @abstractmethod
    def get(self, key: str, fallback: Any) -> Any:
        """Read a value, returning ``fallback`` when missing or unreadable."""
        pass

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Write a JSON-serializable value."""
        pass

from abc import ABC, abstractmethod


class Navigator(ABC):
    """Interface for replacing the current location."""

    @abstractmethod
    def replace(self, url: str) -> None:
        """Navigate to ``url``, replacing the current location."""
        pass

from abc import ABC, abstractmethod
from typing import Any, Dict


class WebhookProvider(ABC):
    """Interface for outbound webhook notifications."""

    @abstractmethod
    async def post_json(self, url: str, payload: Dict[str, Any]) -> None:
        """POST a JSON payload to ``url``. Failures must not raise."""
        pass

"""
Webhook adapters for the NPS router.

These adapters implement the WebhookProvider interface. Notifications are
best-effort: every failure is logged and swallowed here.
"""
import asyncio
import logging
from typing import Any, Dict

import requests

from nps_router.interfaces.providers.webhook import WebhookProvider

logger = logging.getLogger(__name__)


class RequestsWebhookAdapter(WebhookProvider):
    """POSTs JSON payloads with requests on a worker thread."""

    def __init__(self, timeout: float = 10.0, session: requests.Session = None):
        self.timeout = timeout
        self.session = session or requests.Session()

    def _post(self, url: str, payload: Dict[str, Any]) -> None:
        response = self.session.post(
            url,
            json=payload,
            headers={"Content-Type": "application/json"},
            timeout=self.timeout,
        )
        if not response.ok:
            logger.warning(
                f"Webhook {url} answered with status {response.status_code}"
            )

    async def post_json(self, url: str, payload: Dict[str, Any]) -> None:
        try:
            await asyncio.to_thread(self._post, url, payload)
        except Exception as e:
            logger.warning(f"Webhook notification to {url} failed: {e}")


class NullWebhookProvider(WebhookProvider):
    """Null implementation of the WebhookProvider interface.

    This provider satisfies the interface but doesn't send anything.
    It's useful when webhooks are disabled or when running tests.
    """

    async def post_json(self, url: str, payload: Dict[str, Any]) -> None:
        logger.debug(f"Webhook disabled, not notifying {url}")

"""
Navigation adapter for the NPS router.
"""
import logging
from typing import List, Optional

from nps_router.interfaces.providers.navigation import Navigator

logger = logging.getLogger(__name__)


class RecordingNavigator(Navigator):
    """Keeps the location instead of driving a browser."""

    def __init__(self):
        self.history: List[str] = []

    @property
    def location(self) -> Optional[str]:
        """Most recent location, if any."""
        return self.history[-1] if self.history else None

    def replace(self, url: str) -> None:
        logger.info(f"Navigating to {url}")
        self.history.append(url)

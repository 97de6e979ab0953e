"""
Factory for creating and wiring components of the NPS router.

This module handles the creation and dependency injection for all
services and components used in the system.
"""
import logging
from typing import Any, Dict, Optional

# Adapter imports
from nps_router.adapters.navigation_adapter import RecordingNavigator
from nps_router.adapters.storage_adapter import JsonFileStorageAdapter, MemoryStorageAdapter
from nps_router.adapters.webhook_adapter import NullWebhookProvider, RequestsWebhookAdapter

# Repository imports
from nps_router.repositories.store import CampaignResponseStore

# Service imports
from nps_router.services.nps import NPSService
from nps_router.services.portable import DEFAULT_TOKEN_KEY
from nps_router.services.submission import SurveyService

# Interface imports
from nps_router.interfaces.providers.navigation import Navigator

logger = logging.getLogger(__name__)

DEFAULT_ORIGIN = "http://localhost"


class NPSComponents:
    """Wired components of one NPS router instance."""

    def __init__(
        self,
        store: CampaignResponseStore,
        survey_service: SurveyService,
        nps_service: NPSService,
        base_url: str,
        token_key: str,
    ):
        self.store = store
        self.survey_service = survey_service
        self.nps_service = nps_service
        self.base_url = base_url
        self.token_key = token_key


class NPSRouterFactory:
    """Factory for creating and wiring components of the NPS router."""

    @staticmethod
    def create_from_config(
        config: Dict[str, Any], navigator: Optional[Navigator] = None
    ) -> NPSComponents:
        """Create the NPS router from configuration.

        Args:
            config: Configuration dictionary
            navigator: Optional navigator; a RecordingNavigator by default

        Returns:
            Configured components
        """
        # Create adapters
        storage_config = config.get("storage", {})
        if storage_config.get("path"):
            storage = JsonFileStorageAdapter(storage_config["path"])
            logger.info(f"Using JSON file storage at {storage_config['path']}")
        else:
            storage = MemoryStorageAdapter()
            logger.info("Using in-memory storage")

        webhook_config = config.get("webhook", {})
        if webhook_config.get("enabled", True):
            timeout = webhook_config.get("timeout", 10)
            if not isinstance(timeout, (int, float)) or timeout <= 0:
                raise ValueError("Webhook timeout must be a positive number.")
            webhook = RequestsWebhookAdapter(timeout=timeout)
        else:
            webhook = NullWebhookProvider()
            logger.info("Webhook notifications disabled")

        app_config = config.get("app", {})
        origin = app_config.get("origin", DEFAULT_ORIGIN).rstrip("/")
        base_url = app_config.get("base_url") or origin + "/"

        token_key = config.get("portable", {}).get("token_key", DEFAULT_TOKEN_KEY)
        if not token_key:
            raise ValueError("Portable token key cannot be empty.")

        # Create repositories
        store = CampaignResponseStore(storage)

        # Create services
        survey_service = SurveyService(
            repository=store,
            webhook=webhook,
            navigator=navigator or RecordingNavigator(),
            app_base_url=base_url,
            token_key=token_key,
        )
        nps_service = NPSService(repository=store)

        return NPSComponents(
            store=store,
            survey_service=survey_service,
            nps_service=nps_service,
            base_url=base_url,
            token_key=token_key,
        )
